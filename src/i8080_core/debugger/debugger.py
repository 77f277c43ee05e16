# i8080_core/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）や
未実装命令のトラップで実行を中断させる責務を負います。
"""
import logging
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Deque, List, Optional

from i8080_core.core.cpu import AbstractCpu
from i8080_core.core.errors import UnimplementedOpcodeError
from i8080_core.core.snapshot import Snapshot, Operation
from i8080_core.transport.memory import MemoryAccessType

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1024

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True                  # 有効/無効状態

# @intent:responsibility 未実装命令に到達した際のホストの振る舞いを定義します。
class TrapPolicy(Enum):
    HALT = "halt"   # 実行を停止し、結果にフォルトを記録する
    SKIP = "skip"   # 1バイトのNOPとして読み飛ばし、実行を続ける
    RAISE = "raise" # 例外をそのまま呼び出し元へ伝搬させる

# @intent:responsibility 実行停止の理由を定義します。
class StopReason(Enum):
    BREAKPOINT = "BREAKPOINT"
    TRAP = "TRAP"
    MAX_STEPS = "MAX_STEPS"
    STOPPED = "STOPPED"

# @intent:responsibility run()の結果を記録します。
@dataclass(frozen=True)
class RunResult:
    reason: StopReason
    steps: int
    pc: int
    fault: Optional[UnimplementedOpcodeError] = None

    @property
    def exit_status(self) -> int:
        """プロセス終了コードとして使える値。トラップで停止した場合のみ非0です。"""
        return 1 if self.reason is StopReason.TRAP else 0

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    def __init__(self, cpu: AbstractCpu, trap_policy: TrapPolicy = TrapPolicy.HALT,
                 history_size: int = DEFAULT_HISTORY_SIZE, max_steps: Optional[int] = None):
        self._cpu = cpu
        self._trap_policy = trap_policy
        # @intent:responsibility run()にmax_stepsが渡されなかった場合の上限です。Noneなら無制限です。
        self._max_steps = max_steps
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_state = replace(self._cpu.get_state())
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 直近の実行履歴を保持します。古いものから捨てられます。
        self._history: Deque[Snapshot] = deque(maxlen=history_size)

    @property
    def trap_policy(self) -> TrapPolicy:
        return self._trap_policy

    @property
    def max_steps(self) -> Optional[int]:
        return self._max_steps

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        """
        ブレークポイント条件を追加します。重複は無視されます。
        """
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def _is_pc_breakpoint(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        """
        Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        current_state = snapshot.state

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.memory_activity:
                    if access.access_type == MemoryAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.memory_activity:
                    if access.access_type == MemoryAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name and hasattr(current_state, bp.register_name):
                    if getattr(current_state, bp.register_name) == bp.value:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name and hasattr(current_state, bp.register_name):
                    if getattr(current_state, bp.register_name) != getattr(self._previous_state, bp.register_name):
                        return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        未実装命令ではトラップポリシーに関係なく例外が伝搬します。
        """
        self._previous_state = replace(self._cpu.get_state())
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    # @intent:responsibility 未実装命令を1バイトのNOPとして読み飛ばします。
    def _skip_trapped_instruction(self, fault: UnimplementedOpcodeError) -> Snapshot:
        operation = Operation(opcode_hex=f"{fault.opcode:02X}", mnemonic=f"*SKIP {fault.mnemonic}".rstrip())
        snapshot = self._cpu.skip_instruction(fault.pc, operation)
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    def run(self, max_steps: Optional[int] = None,
            on_step: Optional[Callable[[Snapshot], None]] = None) -> RunResult:
        """
        停止条件（ブレークポイント、トラップ、最大ステップ数、stop()）に達するまでCPUを実行します。
        `on_step`は各命令の実行後にSnapshotとともに呼ばれ、その中からstop()を呼ぶこともできます。
        開始時点のPCに置かれたPC_MATCHブレークポイントでは停止せず、1命令実行してから評価します。
        `max_steps`を省略した場合はコンストラクタで指定した上限を使います。
        """
        if max_steps is None:
            max_steps = self._max_steps
        self._running = True
        steps = 0
        first = True

        while self._running:
            pc = self._cpu.get_state().pc
            if not first and self._is_pc_breakpoint(pc):
                logger.info("Breakpoint hit at PC: %#06x", pc)
                return self._finish(StopReason.BREAKPOINT, steps)
            first = False

            if max_steps is not None and steps >= max_steps:
                return self._finish(StopReason.MAX_STEPS, steps)

            try:
                snapshot = self.step_instruction()
            except UnimplementedOpcodeError as e:
                if self._trap_policy is TrapPolicy.RAISE:
                    self._running = False
                    raise
                if self._trap_policy is TrapPolicy.HALT:
                    logger.error("Unimplemented instruction 0x%02X at PC %#06x", e.opcode, e.pc)
                    return self._finish(StopReason.TRAP, steps, fault=e)
                logger.warning("Skipping unimplemented instruction 0x%02X at PC %#06x", e.opcode, e.pc)
                snapshot = self._skip_trapped_instruction(e)
            steps += 1
            if on_step is not None:
                on_step(snapshot)

            if self._check_other_breakpoints(snapshot):
                logger.info("Breakpoint hit at PC: %#06x", snapshot.state.pc)
                return self._finish(StopReason.BREAKPOINT, steps)

        return self._finish(StopReason.STOPPED, steps)

    def _finish(self, reason: StopReason, steps: int,
                fault: Optional[UnimplementedOpcodeError] = None) -> RunResult:
        self._running = False
        return RunResult(reason=reason, steps=steps, pc=self._cpu.get_state().pc, fault=fault)

    def stop(self) -> None:
        self._running = False
