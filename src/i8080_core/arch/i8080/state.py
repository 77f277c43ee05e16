# i8080_core/arch/i8080/state.py
"""
8080 CPU固有の状態定義。

このモジュールは、8080 CPUのレジスタ、フラグ、およびメモリ参照を保持するデータ構造を定義します。
"""
from dataclasses import dataclass, field, replace

from i8080_core.core.errors import InvariantViolationError
from i8080_core.core.state import CpuState
from i8080_core.transport.memory import Memory
from .pairs import pack, unpack

# 8080フラグバイトのビット位置
# @intent:constant 外部のトレースツールが直接参照するため、このビット順を維持します。
Z_FLAG = 0b00000001  # Zero (ゼロ)
S_FLAG = 0b00000010  # Sign (符号)
P_FLAG = 0b00000100  # Parity (パリティ)
CY_FLAG = 0b00001000 # Carry (キャリー)
AC_FLAG = 0b00010000 # Auxiliary Carry (補助キャリー)
# 0b11100000 # Unused (パディング)

FLAG_BITS = (("z", Z_FLAG), ("s", S_FLAG), ("p", P_FLAG), ("cy", CY_FLAG), ("ac", AC_FLAG))


# @intent:responsibility 5つのコンディションコードを不変の値として保持します。
# @intent:rationale フラグは参照渡しで書き換えるのではなく、ALUの純粋関数が新しい値を返し、
#                  状態のフィールドを丸ごと置き換えます。
@dataclass(frozen=True)
class ConditionCodes:
    z: int = 0
    s: int = 0
    p: int = 0
    cy: int = 0
    ac: int = 0

    def to_byte(self) -> int:
        """フラグバイト (bit0=Z, bit1=S, bit2=P, bit3=CY, bit4=AC) に変換します。"""
        value = 0
        for name, mask in FLAG_BITS:
            if getattr(self, name):
                value |= mask
        return value

    @classmethod
    def from_byte(cls, value: int) -> "ConditionCodes":
        """フラグバイトからConditionCodesを生成します。パディングビットは無視されます。"""
        return cls(**{name: 1 if value & mask else 0 for name, mask in FLAG_BITS})

    def replace(self, **changes) -> "ConditionCodes":
        return replace(self, **changes)


# @intent:responsibility 8080 CPUの全てのレジスタとフラグ、メモリへの参照を保持します。
@dataclass
class I8080CpuState(CpuState):
    """
    8080 CPUのレジスタ状態を保持するデータクラス。
    CpuStateを拡張し、8080固有のレジスタを含みます。
    `memory`は呼び出し元が所有するバッファへの参照であり、比較や表示の対象外です。
    """
    a: int = 0x00
    b: int = 0x00
    c: int = 0x00
    d: int = 0x00
    e: int = 0x00
    h: int = 0x00
    l: int = 0x00
    cc: ConditionCodes = field(default_factory=ConditionCodes)
    int_enable: int = 0
    memory: Memory = field(default_factory=Memory, repr=False, compare=False)

    # @intent:accessor 各フラグへのアクセスをブール値のプロパティとして提供します。
    # @intent:rationale ccは不変値のため、セッターは新しいConditionCodesに置き換えます。

    @property
    def flag_z(self) -> bool:
        return self.cc.z == 1

    @flag_z.setter
    def flag_z(self, value: bool) -> None:
        self.cc = self.cc.replace(z=1 if value else 0)

    @property
    def flag_s(self) -> bool:
        return self.cc.s == 1

    @flag_s.setter
    def flag_s(self, value: bool) -> None:
        self.cc = self.cc.replace(s=1 if value else 0)

    @property
    def flag_p(self) -> bool:
        return self.cc.p == 1

    @flag_p.setter
    def flag_p(self, value: bool) -> None:
        self.cc = self.cc.replace(p=1 if value else 0)

    @property
    def flag_cy(self) -> bool:
        return self.cc.cy == 1

    @flag_cy.setter
    def flag_cy(self, value: bool) -> None:
        self.cc = self.cc.replace(cy=1 if value else 0)

    @property
    def flag_ac(self) -> bool:
        return self.cc.ac == 1

    @flag_ac.setter
    def flag_ac(self, value: bool) -> None:
        self.cc = self.cc.replace(ac=1 if value else 0)

    @property
    def flags(self) -> int:
        return self.cc.to_byte()

    @flags.setter
    def flags(self, value: int) -> None:
        self.cc = ConditionCodes.from_byte(value)

    # 16-bit register pairs
    @property
    def bc(self) -> int:
        return pack(self.b, self.c)

    @bc.setter
    def bc(self, value: int) -> None:
        self.b, self.c = unpack(value)

    @property
    def de(self) -> int:
        return pack(self.d, self.e)

    @de.setter
    def de(self, value: int) -> None:
        self.d, self.e = unpack(value)

    @property
    def hl(self) -> int:
        return pack(self.h, self.l)

    @hl.setter
    def hl(self, value: int) -> None:
        self.h, self.l = unpack(value)

    # @intent:responsibility 全てのレジスタとフラグが定義域内にあることを検証します。
    # @intent:post-condition 違反があればInvariantViolationErrorを送出します。
    def validate(self) -> None:
        for name in ("a", "b", "c", "d", "e", "h", "l"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise InvariantViolationError(f"Register {name.upper()} out of range: {value!r}")
        super().validate()
        for name, _ in FLAG_BITS:
            if getattr(self.cc, name) not in (0, 1):
                raise InvariantViolationError(f"Flag {name.upper()} is not a single bit: {getattr(self.cc, name)!r}")
        if self.int_enable not in (0, 1):
            raise InvariantViolationError(f"Interrupt enable is not a single bit: {self.int_enable!r}")
