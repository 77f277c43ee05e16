"""
8080 単一オペランドのローテート／論理命令の実装。

RLC, RRC, RAL, RAR, CMA, STC, CMC。ローテートとSTC/CMCはCYのみを変更し、CMAはフラグを変更しません。
"""
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import (
    FlagPolicy, CARRY_ONLY, NO_FLAGS,
    rotate_left, rotate_right, rotate_left_through_carry, rotate_right_through_carry
)
from i8080_core.core.snapshot import Operation
from i8080_core.transport.memory import Memory

SINGLE_MNEMONICS = {
    0x07: "RLC", 0x0F: "RRC", 0x17: "RAL", 0x1F: "RAR",
    0x2F: "CMA", 0x37: "STC", 0x3F: "CMC",
}

# @intent:responsibility オペランドを持たないローテート／論理命令をデコードします。
def decode_single(opcode: int, memory: Memory, pc: int) -> Operation:
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=SINGLE_MNEMONICS[opcode],
        length=1,
        affected=NO_FLAGS if opcode == 0x2F else CARRY_ONLY
    )

# @intent:rationale CYの書き換えは影響フラグポリシーを経由せず、CYだけを直接置き換えます。
#                  これらの命令が他のフラグに触れることはありません。

def execute_rlc(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a, carry = rotate_left(state.a)
    state.cc = state.cc.replace(cy=carry)

def execute_rrc(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a, carry = rotate_right(state.a)
    state.cc = state.cc.replace(cy=carry)

def execute_ral(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a, carry = rotate_left_through_carry(state.a, state.cc.cy)
    state.cc = state.cc.replace(cy=carry)

def execute_rar(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a, carry = rotate_right_through_carry(state.a, state.cc.cy)
    state.cc = state.cc.replace(cy=carry)

def execute_cma(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.a = ~state.a & 0xFF

def execute_stc(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.cc = state.cc.replace(cy=1)

def execute_cmc(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    state.cc = state.cc.replace(cy=state.cc.cy ^ 1)
