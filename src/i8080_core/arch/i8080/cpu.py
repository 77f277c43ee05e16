# i8080_core/arch/i8080/cpu.py
"""
8080 CPUエミュレーションの中心モジュール。

ホストループが必要とする唯一の入口 `step(state)` と、
スナップショットを返す `I8080Cpu`（AbstractCpuの実装）を提供します。
"""
from typing import Dict, Optional

from i8080_core.core.cpu import AbstractCpu
from i8080_core.core.snapshot import Operation
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.arch.i8080.alu import FlagPolicy
from i8080_core.arch.i8080.instructions import decode_opcode, execute_instruction
from i8080_core.transport.memory import Memory


# @intent:responsibility 1命令のフェッチ・デコード・実行・PC更新を行います。
# @intent:post-condition 正常終了時、状態は全て定義域内にあります。未実装命令では状態を変更せずに例外を送出します。
def step(state: I8080CpuState, policy: FlagPolicy = FlagPolicy.PRESERVE) -> Operation:
    """
    `state.memory[state.pc]`の命令を1つ実行し、デコードされたOperationを返します。
    メモリのアクセスログは命令の開始時に破棄されるため、呼び出し後のログにはこの命令のアクセスだけが残ります。

    Raises:
        UnimplementedOpcodeError: 未実装のオペコードをフェッチした場合。
        InvariantViolationError: 実行後の状態が定義域を外れた場合（内部バグ）。
    """
    state.memory.get_and_clear_activity_log()
    pc = state.pc
    opcode = state.memory.read(pc)
    operation = decode_opcode(opcode, state.memory, pc)
    state.pc = (pc + operation.length) & 0xFFFF
    execute_instruction(operation, state, policy)
    state.validate()
    return operation


# @intent:responsibility 8080 CPUの具体的なエミュレーションロジックを提供します。
class I8080Cpu(AbstractCpu):
    """
    8080 CPUをエミュレートするクラス。
    AbstractCpuを継承し、1命令ごとにSnapshotを生成します。
    """
    def __init__(self, memory: Optional[Memory] = None,
                 flag_policy: FlagPolicy = FlagPolicy.PRESERVE):
        self._flag_policy = flag_policy
        super().__init__(memory)

    @property
    def flag_policy(self) -> FlagPolicy:
        return self._flag_policy

    # @intent:responsibility 8080 CPUの初期状態（全レジスタ0）を生成します。メモリは共有します。
    def _create_initial_state(self) -> I8080CpuState:
        return I8080CpuState(memory=self._memory)

    # @intent:responsibility 保存しておいた状態を書き戻します。メモリ参照はこのCPUのものに揃えます。
    def restore_state(self, state: I8080CpuState) -> None:
        super().restore_state(state)
        self._state.memory = self._memory

    def _fetch(self) -> int:
        return self._memory.read(self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        # pcをdecode_opcodeに渡すのは、マルチバイト命令のオペランド読み込みのため
        return decode_opcode(opcode, self._memory, self._state.pc)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._flag_policy)
        self._state.validate()

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        return {
            "A": s.a, "B": s.b, "C": s.c, "D": s.d, "E": s.e, "H": s.h, "L": s.l,
            "SP": s.sp, "PC": s.pc,
            "BC": s.bc, "DE": s.de, "HL": s.hl,
            "FLAGS": s.flags,
        }

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {
            "Z": s.flag_z,
            "S": s.flag_s,
            "P": s.flag_p,
            "CY": s.flag_cy,
            "AC": s.flag_ac,
        }
