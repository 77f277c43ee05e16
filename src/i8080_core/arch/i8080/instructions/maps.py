"""
8080 命令マッピング定義。
各命令モジュールから関数をインポートし、256エントリ全てを持つオペコード表を構築します。
"""
from typing import Callable, Dict, NamedTuple

from .alu import (
    decode_inr_dcr, decode_inx_dcx, decode_dad, decode_add_adc,
    execute_inr_dcr, execute_inx, execute_dcx, execute_dad, execute_add_adc
)
from .load import (
    decode_mov, decode_mvi, decode_lxi, decode_stax_ldax, decode_direct,
    execute_mov, execute_mvi, execute_lxi, execute_stax_ldax,
    execute_sta, execute_lda, execute_shld, execute_lhld
)
from .logic import (
    decode_single,
    execute_rlc, execute_rrc, execute_ral, execute_rar, execute_cma, execute_stc, execute_cmc
)
from .control import (
    NOP_ALIASES, decode_nop, decode_unimplemented, execute_nop, execute_unimplemented
)


# @intent:data_structure 1つのオペコードに対応するデコーダと実行関数の組。
class InstructionDef(NamedTuple):
    decoder: Callable
    executor: Callable


UNIMPLEMENTED = InstructionDef(decode_unimplemented, execute_unimplemented)

_IMPLEMENTED: Dict[int, InstructionDef] = {
    0x00: InstructionDef(decode_nop, execute_nop),
    **{op: InstructionDef(decode_nop, execute_nop) for op in NOP_ALIASES},
    **{op: InstructionDef(decode_lxi, execute_lxi) for op in range(0x01, 0x40, 0x10)},  # LXI B/D/H/SP
    0x02: InstructionDef(decode_stax_ldax, execute_stax_ldax),  # STAX B
    0x12: InstructionDef(decode_stax_ldax, execute_stax_ldax),  # STAX D
    0x0A: InstructionDef(decode_stax_ldax, execute_stax_ldax),  # LDAX B
    0x1A: InstructionDef(decode_stax_ldax, execute_stax_ldax),  # LDAX D
    0x22: InstructionDef(decode_direct, execute_shld),
    0x2A: InstructionDef(decode_direct, execute_lhld),
    0x32: InstructionDef(decode_direct, execute_sta),
    0x3A: InstructionDef(decode_direct, execute_lda),
    **{op: InstructionDef(decode_inx_dcx, execute_inx) for op in range(0x03, 0x40, 0x10)},  # INX
    **{op: InstructionDef(decode_inx_dcx, execute_dcx) for op in range(0x0B, 0x40, 0x10)},  # DCX
    **{op: InstructionDef(decode_dad, execute_dad) for op in range(0x09, 0x40, 0x10)},  # DAD
    **{op: InstructionDef(decode_inr_dcr, execute_inr_dcr) for op in range(0x04, 0x40, 0x08)},  # INR r
    **{op: InstructionDef(decode_inr_dcr, execute_inr_dcr) for op in range(0x05, 0x40, 0x08)},  # DCR r
    **{op: InstructionDef(decode_mvi, execute_mvi) for op in range(0x06, 0x40, 0x08)},  # MVI r
    0x07: InstructionDef(decode_single, execute_rlc),
    0x0F: InstructionDef(decode_single, execute_rrc),
    0x17: InstructionDef(decode_single, execute_ral),
    0x1F: InstructionDef(decode_single, execute_rar),
    0x2F: InstructionDef(decode_single, execute_cma),
    0x37: InstructionDef(decode_single, execute_stc),
    0x3F: InstructionDef(decode_single, execute_cmc),
    **{op: InstructionDef(decode_mov, execute_mov) for op in range(0x40, 0x80) if op != 0x76},
    **{op: InstructionDef(decode_add_adc, execute_add_adc) for op in range(0x80, 0x90)},  # ADD/ADC r
}

# @intent:responsibility 256個全てのオペコードに対応を持たせ、未実装の集合を明示します。
OPCODE_TABLE: Dict[int, InstructionDef] = {
    op: _IMPLEMENTED.get(op, UNIMPLEMENTED) for op in range(0x100)
}

IMPLEMENTED_OPCODES = frozenset(_IMPLEMENTED)
UNIMPLEMENTED_OPCODES = frozenset(op for op in range(0x100) if op not in _IMPLEMENTED)
