"""
8080 レジスタペアのコーデック。

2つの8bitレジスタを16bitのビッグエンディアン値として結合・分解します。
BC/DE/HL/SPのアドレッシングと16bit演算はすべてこのモジュールを経由します。
"""
from typing import Tuple

from i8080_core.core.state import CpuState

# @intent:constant 命令の rp フィールド (ビット5-4) とレジスタペア名の対応。
REGISTER_PAIRS = {0b00: "B", 0b01: "D", 0b10: "H", 0b11: "SP"}

# @intent:constant レジスタペア名と (上位, 下位) レジスタ名の対応。SPは16bitレジスタとして別扱い。
PAIR_REGISTERS = {"B": ("b", "c"), "D": ("d", "e"), "H": ("h", "l")}


# @intent:responsibility 上位・下位バイトを16bit値に結合します。
def pack(high: int, low: int) -> int:
    return ((high & 0xFF) << 8) | (low & 0xFF)


# @intent:responsibility 16bit値を (上位, 下位) バイトに分解します。
def unpack(value: int) -> Tuple[int, int]:
    return (value >> 8) & 0xFF, value & 0xFF


# @intent:utility_function rpフィールドからレジスタペア名を返します。
def get_pair_name(code: int) -> str:
    return REGISTER_PAIRS[code & 0b11]


# @intent:utility_function レジスタペアの16bit値を取得します。
def get_pair(state: CpuState, name: str) -> int:
    if name == "SP":
        return state.sp
    high, low = PAIR_REGISTERS[name]
    return pack(getattr(state, high), getattr(state, low))


# @intent:utility_function レジスタペアに16bit値を設定します。値は16bitに折り返されます。
def set_pair(state: CpuState, name: str, value: int) -> None:
    if name == "SP":
        state.sp = value & 0xFFFF
        return
    high_name, low_name = PAIR_REGISTERS[name]
    high, low = unpack(value)
    setattr(state, high_name, high)
    setattr(state, low_name, low)
