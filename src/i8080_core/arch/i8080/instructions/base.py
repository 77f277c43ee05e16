"""
8080命令セット実装のための共通ヘルパー関数と定数。
"""
from typing import List

from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.transport.memory import Memory

# Helper functions for register mapping
REGISTER_CODES = {
    0b000: "B", 0b001: "C", 0b010: "D", 0b011: "E",
    0b100: "H", 0b101: "L", 0b110: "M", 0b111: "A"
}

# @intent:utility_function 指定されたコードに対応するレジスタ名を返します。"M"は(HL)が指すメモリです。
def get_register_name(code: int) -> str:
    return REGISTER_CODES[code & 0b111]

# @intent:utility_function レジスタ名（またはM）に基づいて現在の値を取得します。
def get_register_value(state: I8080CpuState, reg_name: str) -> int:
    if reg_name == "M":
        return state.memory.read(state.hl)
    return getattr(state, reg_name.lower())

# @intent:utility_function レジスタ名（またはM）に値を設定します。
def set_register_value(state: I8080CpuState, reg_name: str, value: int) -> None:
    if reg_name == "M":
        state.memory.write(state.hl, value & 0xFF)
    else:
        setattr(state, reg_name.lower(), value & 0xFF)

# @intent:utility_function 命令に続くオペランドバイトを読み出します。アドレスは16bitで折り返します。
def read_operand_bytes(memory: Memory, pc: int, count: int) -> List[int]:
    return [memory.read((pc + offset) & 0xFFFF) for offset in range(1, count + 1)]

# @intent:utility_function リトルエンディアンの2バイトオペランドを16bit値にします。
def word_from_bytes(operand_bytes: List[int]) -> int:
    return (operand_bytes[1] << 8) | operand_bytes[0]
