# i8080_core/core/cpu.py
"""
Core Layer (抽象CPU)

1命令ごとのサイクル（フェッチ、デコード、PC更新、実行）と、その結果をSnapshotとして
取り出す手順を定義します。命令ごとの意味はアーキテクチャ側の命令表が持ちます。
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Optional

from i8080_core.transport.memory import Memory
from i8080_core.core.snapshot import Snapshot, Operation, Metadata
from i8080_core.core.state import CpuState

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    64KBメモリ上で命令を1つずつ実行し、その都度Snapshotを返すCPUの基底クラス。
    メモリは外部から受け取り、CPUは参照のみを保持します。
    """
    # @intent:responsibility CPUの状態とメモリへの参照を初期化します。
    def __init__(self, memory: Optional[Memory] = None):
        self._memory = memory if memory is not None else Memory()
        self._state: CpuState = self._create_initial_state()
        self._instruction_count: int = 0

    @property
    def memory(self) -> Memory:
        return self._memory

    @property
    def instruction_count(self) -> int:
        return self._instruction_count

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        リセット直後の状態を返します。サブクラスはレジスタを追加したCpuStateを返し、
        必要であれば自身のメモリへの参照を持たせます。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。メモリの内容は保持されます。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._instruction_count = 0

    # @intent:responsibility 現在のCPUの状態を返します。コピーではなく実体です。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 保存しておいた状態をCPUに書き戻します。
    def restore_state(self, state: CpuState) -> None:
        self._state = replace(state)

    # @intent:responsibility メモリから次の命令（オペコード）をフェッチします。
    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCからメモリの次の命令（オペコード）をフェッチし、その値を返します。
        PCの更新は命令長が分かった後、stepの中で行います。
        """
        pass

    # @intent:responsibility フェッチしたオペコードを解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー（ログクリア→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        """
        CPUを1命令サイクル進め、その時点でのCPUの状態とメモリアクセスを含むSnapshotオブジェクトを返します。
        デコードで例外が発生した場合、状態は変更されずに例外が呼び出し元へ伝搬します。
        """
        # 1. 前処理: 前サイクルまでの残存ログを破棄
        self._memory.get_and_clear_activity_log()
        initial_pc = self._state.pc

        # 2. フェッチ
        opcode = self._fetch()

        # 3. デコード
        operation = self._decode(opcode)

        # 4. PC更新 (Hook)
        self._update_pc(operation)

        # 5. 実行
        self._execute(operation)

        # 6. 後処理 & Snapshot生成
        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility `initial_pc`の命令を実行せずに読み飛ばし、1命令として数えます。
    # @intent:post-condition PCは`operation.length`だけ進み、それ以外の状態は変化しません。
    def skip_instruction(self, initial_pc: int, operation: Operation) -> Snapshot:
        self._state.pc = initial_pc
        self._update_pc(operation)
        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility 命令実行前にPCを更新します。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 実行後の状態のコピーと、この命令で発生したメモリアクセスをまとめます。
    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        memory_activity = self._memory.get_and_clear_activity_log()
        self._instruction_count += 1
        return Snapshot(
            state=replace(self._state), # 実行後の状態のコピー
            operation=operation,
            metadata=Metadata(instruction_count=self._instruction_count, initial_pc=initial_pc),
            memory_activity=memory_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        トレース出力がCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグの各ビットの状態を辞書形式で返す。
        """
        pass
