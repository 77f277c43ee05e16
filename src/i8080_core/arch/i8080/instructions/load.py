"""
8080 データ転送命令の実装。

MOV, MVI, LXI, STAX, LDAX, STA, LDA, SHLD, LHLD。いずれもフラグに影響しません。
"""
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import FlagPolicy, NO_FLAGS
from i8080_core.arch.i8080.pairs import get_pair_name, get_pair, set_pair, unpack
from i8080_core.core.snapshot import Operation
from i8080_core.transport.memory import Memory
from .base import (
    get_register_name, get_register_value, set_register_value,
    read_operand_bytes, word_from_bytes
)

# @intent:constant 直接アドレス指定命令のニーモニック。
DIRECT_MNEMONICS = {0x22: "SHLD", 0x2A: "LHLD", 0x32: "STA", 0x3A: "LDA"}

# --- Decoding Functions ---

# @intent:responsibility MOV r1,r2 形式の命令をデコードします。
def decode_mov(opcode: int, memory: Memory, pc: int) -> Operation:
    """MOV r1,r2命令をデコードします。0x76 (HLT) はここには来ません。"""
    dest_reg_name = get_register_name(opcode >> 3)
    src_reg_name = get_register_name(opcode)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"MOV {dest_reg_name},{src_reg_name}",
        length=1,
        affected=NO_FLAGS
    )

# @intent:responsibility MVI r,D8 形式の命令をデコードします。
def decode_mvi(opcode: int, memory: Memory, pc: int) -> Operation:
    """MVI r,D8命令をデコードします。"""
    reg_name = get_register_name(opcode >> 3)
    operand_bytes = read_operand_bytes(memory, pc, 1)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"MVI {reg_name},D8",
        operands=[f"${operand_bytes[0]:02X}"],
        operand_bytes=operand_bytes,
        length=2,
        affected=NO_FLAGS
    )

# @intent:responsibility LXI rp,D16 形式の命令をデコードします。
def decode_lxi(opcode: int, memory: Memory, pc: int) -> Operation:
    """LXI rp,D16命令をデコードします。"""
    rp_name = get_pair_name(opcode >> 4)
    operand_bytes = read_operand_bytes(memory, pc, 2)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"LXI {rp_name},D16",
        operands=[f"${word_from_bytes(operand_bytes):04X}"],
        operand_bytes=operand_bytes,
        length=3,
        affected=NO_FLAGS
    )

# @intent:responsibility STAX/LDAX rp 形式の命令をデコードします。
def decode_stax_ldax(opcode: int, memory: Memory, pc: int) -> Operation:
    rp_name = get_pair_name(opcode >> 4)
    is_load = (opcode & 0x08) != 0
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'LDAX' if is_load else 'STAX'} {rp_name}",
        length=1,
        affected=NO_FLAGS
    )

# @intent:responsibility 16bit直接アドレスを伴う命令 (STA/LDA/SHLD/LHLD) をデコードします。
def decode_direct(opcode: int, memory: Memory, pc: int) -> Operation:
    operand_bytes = read_operand_bytes(memory, pc, 2)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{DIRECT_MNEMONICS[opcode]} adr",
        operands=[f"${word_from_bytes(operand_bytes):04X}"],
        operand_bytes=operand_bytes,
        length=3,
        affected=NO_FLAGS
    )

# --- Execution Functions ---

def execute_mov(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    opcode = operation.opcode
    value = get_register_value(state, get_register_name(opcode))
    set_register_value(state, get_register_name(opcode >> 3), value)

def execute_mvi(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    set_register_value(state, get_register_name(operation.opcode >> 3), operation.operand_bytes[0])

def execute_lxi(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    # 2バイト目が下位レジスタ、3バイト目が上位レジスタに入る
    set_pair(state, get_pair_name(operation.opcode >> 4), word_from_bytes(operation.operand_bytes))

def execute_stax_ldax(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    address = get_pair(state, get_pair_name(operation.opcode >> 4))
    if operation.opcode & 0x08:
        state.a = state.memory.read(address)
    else:
        state.memory.write(address, state.a)

def execute_sta(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.memory.write(word_from_bytes(operation.operand_bytes), state.a)

def execute_lda(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a = state.memory.read(word_from_bytes(operation.operand_bytes))

def execute_shld(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    address = word_from_bytes(operation.operand_bytes)
    high, low = unpack(state.hl)
    state.memory.write(address, low)
    state.memory.write((address + 1) & 0xFFFF, high)

def execute_lhld(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    address = word_from_bytes(operation.operand_bytes)
    state.l = state.memory.read(address)
    state.h = state.memory.read((address + 1) & 0xFFFF)
