"""
8080 算術演算命令の実装。

INR, DCR, INX, DCX, DAD, ADD, ADC。減算は2の補数の加算として実行します。
"""
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import (
    add_with_carry, apply_flags, FlagPolicy,
    ALL_FLAGS, CARRY_ONLY, INC_DEC_FLAGS, NO_FLAGS
)
from i8080_core.arch.i8080.pairs import get_pair_name, get_pair, set_pair, pack, unpack
from i8080_core.core.snapshot import Operation
from i8080_core.transport.memory import Memory
from .base import get_register_name, get_register_value, set_register_value

# @intent:constant 8bit/16bitの「-1」（1の2の補数）。
MINUS_ONE_8 = (~1 + 1) & 0xFF
MINUS_ONE_16 = (~1 + 1) & 0xFFFF

# --- Decoding Functions ---

# @intent:responsibility INR r / DCR r 形式の命令をデコードします。
def decode_inr_dcr(opcode: int, memory: Memory, pc: int) -> Operation:
    """8ビットのINR/DCR命令をデコードします。"""
    reg_name = get_register_name(opcode >> 3)
    is_inc = (opcode & 1) == 0
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'INR' if is_inc else 'DCR'} {reg_name}",
        length=1,
        affected=INC_DEC_FLAGS
    )

# @intent:responsibility INX rp / DCX rp 形式の命令をデコードします。
def decode_inx_dcx(opcode: int, memory: Memory, pc: int) -> Operation:
    rp_name = get_pair_name(opcode >> 4)
    is_inc = (opcode & 0x08) == 0
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'INX' if is_inc else 'DCX'} {rp_name}",
        length=1,
        affected=NO_FLAGS
    )

# @intent:responsibility DAD rp 形式の命令をデコードします。
def decode_dad(opcode: int, memory: Memory, pc: int) -> Operation:
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"DAD {get_pair_name(opcode >> 4)}",
        length=1,
        affected=CARRY_ONLY
    )

# @intent:responsibility ADD r / ADC r 形式の命令をデコードします。
def decode_add_adc(opcode: int, memory: Memory, pc: int) -> Operation:
    src_reg_name = get_register_name(opcode)
    with_carry = (opcode & 0x08) != 0
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'ADC' if with_carry else 'ADD'} {src_reg_name}",
        length=1,
        affected=ALL_FLAGS
    )

# --- Execution Functions ---

def execute_inr_dcr(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    opcode = operation.opcode
    reg_name = get_register_name(opcode >> 3)
    is_inc = (opcode & 1) == 0
    val = get_register_value(state, reg_name)
    # CYはマスクに含まれないため、加算器のキャリー出力は捨てる
    result, _, aux_carry = add_with_carry(val, 1 if is_inc else MINUS_ONE_8, 8)
    set_register_value(state, reg_name, result)
    state.cc = apply_flags(state.cc, operation.affected, result, aux_carry=aux_carry, policy=policy)

def execute_inx(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    rp_name = get_pair_name(operation.opcode >> 4)
    high, low = unpack(get_pair(state, rp_name))
    # 下位バイトのキャリーを上位バイトへ伝搬させる。フラグには反映しない。
    low, carry, _ = add_with_carry(low, 1, 8)
    high, _, _ = add_with_carry(high, 0, 8, carry_in=carry)
    set_pair(state, rp_name, pack(high, low))

def execute_dcx(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    rp_name = get_pair_name(operation.opcode >> 4)
    result, _, _ = add_with_carry(get_pair(state, rp_name), MINUS_ONE_16, 16)
    set_pair(state, rp_name, result)

def execute_dad(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    val = get_pair(state, get_pair_name(operation.opcode >> 4))
    result, carry, _ = add_with_carry(state.hl, val, 16)
    state.hl = result
    state.cc = apply_flags(state.cc, operation.affected, result, carry=carry, policy=policy)

def execute_add_adc(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    opcode = operation.opcode
    val = get_register_value(state, get_register_name(opcode))
    carry_in = state.cc.cy if opcode & 0x08 else 0
    result, carry, aux_carry = add_with_carry(state.a, val, 8, carry_in=carry_in)
    state.a = result
    state.cc = apply_flags(
        state.cc, operation.affected, result, carry=carry, aux_carry=aux_carry, policy=policy
    )
