# i8080_core/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令の実行結果（命令、実行後の状態、メモリアクセス）を記録した
不変のデータ構造を定義します。ホストのトレースやデバッガでの状態記録に用います。
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from i8080_core.core.state import CpuState
from i8080_core.transport.memory import MemoryAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド、長さ、影響フラグ）を記録するデータクラス。
    """
    opcode_hex: str # 例: "01"
    mnemonic: str # 例: "LXI B,D16"
    operands: List[str] = field(default_factory=list) # 例: ["$1234"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    length: int = 1 # 命令のバイト長
    affected: Optional[Any] = None # この命令が変更してよいフラグ (AffectedFlags)

    @property
    def opcode(self) -> int:
        return int(self.opcode_hex, 16)

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計命令数、命令のアドレス）を記録するデータクラス。
    """
    instruction_count: int
    initial_pc: int = 0x0000

# @intent:responsibility ある一時点におけるCPUの完全な状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    ある一時点における、CPUの状態と直前の命令によるメモリアクセスを記録した不変のデータ構造。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    memory_activity: List[MemoryAccess] = field(default_factory=list)
