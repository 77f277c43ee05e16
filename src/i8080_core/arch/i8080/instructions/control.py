"""
8080 制御命令の実装。

NOP（および未定義オペコードのNOP別名）と、未実装命令のトラップを扱います。
"""
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import FlagPolicy, NO_FLAGS
from i8080_core.core.errors import UnimplementedOpcodeError
from i8080_core.core.snapshot import Operation
from i8080_core.transport.memory import Memory
from .base import get_register_name

# @intent:constant 実機でNOPとして動作する未定義オペコード。
NOP_ALIASES = (0x08, 0x10, 0x18, 0x28, 0x38)

_ALU_GROUP = ("SUB", "SBB", "ANA", "XRA", "ORA", "CMP")

_HIGH_PAGE = (
    "RNZ", "POP B", "JNZ adr", "JMP adr", "CNZ adr", "PUSH B", "ADI D8", "RST 0",
    "RZ", "RET", "JZ adr", "*JMP adr", "CZ adr", "CALL adr", "ACI D8", "RST 1",
    "RNC", "POP D", "JNC adr", "OUT D8", "CNC adr", "PUSH D", "SUI D8", "RST 2",
    "RC", "*RET", "JC adr", "IN D8", "CC adr", "*CALL adr", "SBI D8", "RST 3",
    "RPO", "POP H", "JPO adr", "XTHL", "CPO adr", "PUSH H", "ANI D8", "RST 4",
    "RPE", "PCHL", "JPE adr", "XCHG", "CPE adr", "*CALL adr", "XRI D8", "RST 5",
    "RP", "POP PSW", "JP adr", "DI", "CP adr", "PUSH PSW", "ORI D8", "RST 6",
    "RM", "SPHL", "JM adr", "EI", "CM adr", "*CALL adr", "CPI D8", "RST 7",
)

# @intent:constant このコアで未実装の命令のニーモニック。診断メッセージにのみ使用します。
UNIMPLEMENTED_MNEMONICS = {
    0x20: "RIM",
    0x27: "DAA",
    0x30: "SIM",
    0x76: "HLT",
    **{op: f"{_ALU_GROUP[(op - 0x90) >> 3]} {get_register_name(op)}" for op in range(0x90, 0xC0)},
    **{op: _HIGH_PAGE[op - 0xC0] for op in range(0xC0, 0x100)},
}

# @intent:responsibility NOP (および別名) をデコードします。
def decode_nop(opcode: int, memory: Memory, pc: int) -> Operation:
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic="NOP" if opcode == 0x00 else "*NOP",
        length=1,
        affected=NO_FLAGS
    )

def execute_nop(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    # Intentional: NOP does nothing but advance PC, which the dispatcher already did.
    pass

# @intent:responsibility 未実装命令のデコード時にトラップを発生させます。
# @intent:post-condition 状態は一切変更されません（PCも進みません）。
def decode_unimplemented(opcode: int, memory: Memory, pc: int) -> Operation:
    raise UnimplementedOpcodeError(opcode, pc, UNIMPLEMENTED_MNEMONICS.get(opcode, ""))

def execute_unimplemented(state: I8080CpuState, operation: Operation, policy: FlagPolicy) -> None:
    # デコードを経ずに直接実行された場合もトラップとして扱う
    raise UnimplementedOpcodeError(operation.opcode, state.pc, operation.mnemonic)
