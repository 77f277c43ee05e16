"""
8080命令セット実装パッケージ。
"""
from i8080_core.transport.memory import Memory
from i8080_core.core.snapshot import Operation
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import FlagPolicy
from .maps import OPCODE_TABLE, IMPLEMENTED_OPCODES, UNIMPLEMENTED_OPCODES

# @intent:responsibility 与えられたオペコードを8080の命令としてデコードします。
# @intent:pre-condition `pc`はデコードするオペコードの先頭アドレスを指している必要があります。
def decode_opcode(opcode: int, memory: Memory, pc: int) -> Operation:
    """
    8080のオペコードをデコードし、Operationオブジェクトを返します。
    未実装のオペコードの場合はUnimplementedOpcodeErrorを送出します。
    """
    return OPCODE_TABLE[opcode & 0xFF].decoder(opcode & 0xFF, memory, pc)

# @intent:responsibility デコードされた8080命令を実行し、CPUの状態を変更します。
def execute_instruction(operation: Operation, state: I8080CpuState,
                        policy: FlagPolicy = FlagPolicy.PRESERVE) -> None:
    OPCODE_TABLE[operation.opcode].executor(state, operation, policy)
