"""
8080 ALU (算術論理演算ユニット) およびフラグ操作ユーティリティ。

ビット直列（リップルキャリー）加算器と、命令ごとの影響フラグマスクに基づく
フラグ（Z, S, P, CY, AC）の計算を担当します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .state import ConditionCodes

WIDTH_MASKS = {8: 0xFF, 16: 0xFFFF}

# @intent:constant 補助キャリーを観測するビット境界 (bit3 -> bit4)。
AUX_CARRY_BIT = 4


# @intent:responsibility 命令が変更を許されたフラグの集合を表します。
@dataclass(frozen=True)
class AffectedFlags:
    z: bool = False
    s: bool = False
    p: bool = False
    cy: bool = False
    ac: bool = False


NO_FLAGS = AffectedFlags()
CARRY_ONLY = AffectedFlags(cy=True)
INC_DEC_FLAGS = AffectedFlags(z=True, s=True, p=True, ac=True)
ALL_FLAGS = AffectedFlags(z=True, s=True, p=True, cy=True, ac=True)


# @intent:responsibility 影響を受けないフラグの扱いを定義します。
class FlagPolicy(Enum):
    PRESERVE = "preserve" # 実機どおり、前の値を保持する
    CLEAR = "clear"       # 影響を受けないフラグを全てクリアする (旧実装互換)


# @intent:responsibility 1ビットの半加算を行います。
def _half_add(bit1: int, bit2: int) -> Tuple[int, int]:
    return bit1 ^ bit2, bit1 & bit2


# @intent:responsibility 1ビットの全加算を行います。2つの半加算器の組み合わせです。
def _full_add(bit1: int, bit2: int, carry: int) -> Tuple[int, int]:
    partial, carry1 = _half_add(bit1, bit2)
    total, carry2 = _half_add(partial, carry)
    return total, carry1 | carry2


# @intent:responsibility 指定ビット幅でa + b (+ carry_in) を計算し、結果・キャリー・補助キャリーを返します。
# @intent:rationale 実機のキャリー伝搬をビット単位で模倣します。補助キャリーはbit3からbit4への
#                  キャリーをその場で捕捉し、全体のオーバーフロー判定からは導出しません。
def add_with_carry(a: int, b: int, width: int, carry_in: int = 0) -> Tuple[int, int, int]:
    """
    ビット直列のリップルキャリー加算器。

    減算は2の補数の加算として表現します。この場合、キャリー=1は「ボローなし」を意味します。

    Returns:
        (result, carry_out, aux_carry_out)
    """
    if width not in WIDTH_MASKS:
        raise ValueError(f"Unsupported adder width: {width}")
    mask = WIDTH_MASKS[width]
    a &= mask
    b &= mask

    result = 0
    carry = carry_in & 1
    aux_carry = 0
    for i in range(width):
        if i == AUX_CARRY_BIT:
            aux_carry = carry
        bit, carry = _full_add((a >> i) & 1, (b >> i) & 1, carry)
        result |= bit << i
    return result, carry, aux_carry


# @intent:responsibility 値のパリティ（ビット1の数が偶数ならTrue）を計算します。
# @intent:pre-condition 値は16bitまでの非負整数です。8bit結果はゼロ拡張して渡します。
def calculate_parity(val: int) -> bool:
    val &= 0xFFFF
    val ^= val >> 8
    val ^= val >> 4
    val ^= val >> 2
    val ^= val >> 1
    return (val & 1) == 0


# @intent:responsibility 影響フラグマスクと結果値から新しいコンディションコードを計算します。
def apply_flags(
    cc: ConditionCodes,
    affected: AffectedFlags,
    value: int,
    carry: int = 0,
    aux_carry: int = 0,
    policy: FlagPolicy = FlagPolicy.PRESERVE,
) -> ConditionCodes:
    """
    影響を受けるフラグは結果から再計算し、それ以外は`policy`に従って保持またはクリアします。
    元の`cc`は変更せず、新しいConditionCodesを返します。
    """
    base = cc if policy is FlagPolicy.PRESERVE else ConditionCodes()
    changes = {}
    if affected.z:
        changes["z"] = 1 if value == 0 else 0
    if affected.s:
        changes["s"] = 1 if value >= 0x80 else 0
    if affected.p:
        changes["p"] = 1 if calculate_parity(value) else 0
    if affected.cy:
        changes["cy"] = carry & 1
    if affected.ac:
        changes["ac"] = aux_carry & 1
    return base.replace(**changes)


# --- Rotate ---
# 各関数は (新しいA, 新しいCY) を返します。

def rotate_left(a: int) -> Tuple[int, int]:
    """RLC: bit7をbit0とCYの両方へ回します。"""
    bit7 = (a >> 7) & 1
    return ((a << 1) | bit7) & 0xFF, bit7


def rotate_right(a: int) -> Tuple[int, int]:
    """RRC: bit0をbit7とCYの両方へ回します。"""
    bit0 = a & 1
    return (a >> 1) | (bit0 << 7), bit0


def rotate_left_through_carry(a: int, carry: int) -> Tuple[int, int]:
    """RAL: 旧CYがbit0に入り、旧bit7が新しいCYになります。"""
    return ((a << 1) | (carry & 1)) & 0xFF, (a >> 7) & 1


def rotate_right_through_carry(a: int, carry: int) -> Tuple[int, int]:
    """RAR: 旧CYがbit7に入り、旧bit0が新しいCYになります。"""
    return (a >> 1) | ((carry & 1) << 7), a & 1
