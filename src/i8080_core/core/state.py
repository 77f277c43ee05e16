# i8080_core/core/state.py
"""
Core Layer (CPU状態)

全アーキテクチャ共通のレジスタ（PC, SP）と、その定義域の検証を提供します。
"""
from dataclasses import dataclass

from i8080_core.core.errors import InvariantViolationError

WORD_MASK = 0xFFFF

# @intent:responsibility 16bitのPCとSPを保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    pc: int = 0x0000  # Program Counter
    sp: int = 0x0000  # Stack Pointer

    # @intent:post-condition PC/SPが16bitの範囲外であればInvariantViolationErrorを送出します。
    def validate(self) -> None:
        for name in ("pc", "sp"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= WORD_MASK:
                raise InvariantViolationError(f"Register {name.upper()} out of range: {value!r}")
