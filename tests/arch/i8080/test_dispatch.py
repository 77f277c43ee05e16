# tests/arch/i8080/test_dispatch.py
"""
8080 オペコード表と step() のディスパッチのテスト。
"""
from dataclasses import replace

import pytest

from i8080_core.arch.i8080.cpu import step
from i8080_core.arch.i8080.instructions import (
    OPCODE_TABLE, IMPLEMENTED_OPCODES, UNIMPLEMENTED_OPCODES, decode_opcode
)
from i8080_core.arch.i8080.instructions.control import execute_unimplemented
from i8080_core.arch.i8080.state import I8080CpuState
from i8080_core.core.errors import UnimplementedOpcodeError, InvariantViolationError
from i8080_core.core.snapshot import Operation
from i8080_core.transport.memory import MemoryAccessType

# @intent:test_suite オペコード表の網羅性、未実装命令のトラップ、PC更新規則の検証。


class TestOpcodeTable:
    """
    OPCODE_TABLEの構成テスト。
    """
    # @intent:test_case_total 256個全てのオペコードがエントリを持つことを検証します。
    def test_covers_every_opcode(self):
        assert sorted(OPCODE_TABLE) == list(range(0x100))
        assert IMPLEMENTED_OPCODES.isdisjoint(UNIMPLEMENTED_OPCODES)
        assert IMPLEMENTED_OPCODES | UNIMPLEMENTED_OPCODES == frozenset(range(0x100))
        assert len(IMPLEMENTED_OPCODES) == 140

    # @intent:test_case_unimplemented_set 未実装命令の集合を検証します。
    def test_unimplemented_set(self):
        expected = {0x20, 0x27, 0x30, 0x76} | set(range(0x90, 0xC0)) | set(range(0xC0, 0x100))
        assert UNIMPLEMENTED_OPCODES == frozenset(expected)

    # @intent:test_case_decode_lengths 実装済み命令のデコード結果が長さと影響フラグを持つことを検証します。
    def test_implemented_decode_metadata(self):
        state = I8080CpuState()
        for opcode in sorted(IMPLEMENTED_OPCODES):
            op = decode_opcode(opcode, state.memory, 0x0000)
            assert op.opcode == opcode
            assert op.length in (1, 2, 3)
            assert len(op.operand_bytes) == op.length - 1
            assert op.affected is not None


class TestTrap:
    """
    未実装命令のトラップテスト。
    """
    @pytest.fixture
    def state(self):
        state = I8080CpuState(a=0x12, b=0x34, pc=0x0100, sp=0xF000)
        state.flags = 0x0B
        return state

    # @intent:test_case_trap_leaves_state 未実装命令で例外が送出され、状態が一切変化しないことを検証します。
    def test_trap_leaves_state_unchanged(self, state):
        for opcode in sorted(UNIMPLEMENTED_OPCODES):
            state.memory.load(0x0100, [opcode, 0x00, 0x00])
            before = replace(state)
            with pytest.raises(UnimplementedOpcodeError) as excinfo:
                step(state)
            assert excinfo.value.opcode == opcode
            assert excinfo.value.pc == 0x0100
            assert state == before

    # @intent:test_case_trap_message 診断メッセージにオペコード、PC、ニーモニックが含まれることを検証します。
    def test_trap_message(self, state):
        state.memory.load(0x0100, [0x76])
        with pytest.raises(UnimplementedOpcodeError) as excinfo:
            step(state)
        message = str(excinfo.value)
        assert "0x76" in message
        assert "0x0100" in message
        assert "HLT" in message
        assert excinfo.value.mnemonic == "HLT"

    # @intent:test_case_trap_mnemonics 代表的な未実装命令のニーモニックを検証します。
    @pytest.mark.parametrize("opcode, mnemonic", [
        (0x27, "DAA"), (0x90, "SUB B"), (0xBE, "CMP M"), (0xC3, "JMP adr"), (0xFB, "EI"),
    ])
    def test_trap_mnemonics(self, state, opcode, mnemonic):
        state.memory.load(0x0100, [opcode])
        with pytest.raises(UnimplementedOpcodeError) as excinfo:
            step(state)
        assert excinfo.value.mnemonic == mnemonic

    # @intent:test_case_execute_direct デコードを経ずに実行された場合もトラップすることを検証します。
    def test_execute_unimplemented_raises(self, state):
        op = Operation(opcode_hex="76", mnemonic="HLT")
        with pytest.raises(UnimplementedOpcodeError):
            execute_unimplemented(state, op, None)


class TestStep:
    """
    step() のPC更新と不変条件のテスト。
    """
    @pytest.fixture
    def state(self):
        return I8080CpuState()

    # @intent:test_case_nop NOPはPCを1進める以外に何も変更しないことを検証します。
    def test_nop_only_advances_pc(self, state):
        state.a = 0x55
        state.flags = 0x1F
        memory_before = bytes(state.memory.buffer)
        before = replace(state)
        op = step(state)
        assert op.mnemonic == "NOP"
        assert state == replace(before, pc=0x0001)
        assert bytes(state.memory.buffer) == memory_before

    # @intent:test_case_nop_aliases 未定義のNOP別名が1バイトのNOPとして実行されることを検証します。
    @pytest.mark.parametrize("opcode", [0x08, 0x10, 0x18, 0x28, 0x38])
    def test_nop_aliases(self, state, opcode):
        state.memory.load(0x0000, [opcode])
        op = step(state)
        assert op.mnemonic == "*NOP"
        assert state.pc == 0x0001

    # @intent:test_case_pc_wrap 0xFFFFの命令実行後にPCが0x0000へ折り返すことを検証します。
    def test_pc_wraps(self, state):
        state.pc = 0xFFFF
        step(state)
        assert state.pc == 0x0000

    # @intent:test_case_self_modifying 実行中にメモリへ書き込んだ命令が次に実行されることを検証します。
    def test_self_modifying_code(self, state):
        program = [
            0x3E, 0x3C,        # MVI A,3C  (3C = INR A)
            0x32, 0x05, 0x00,  # STA 0005
        ]
        state.memory.load(0x0000, program)
        step(state)
        step(state)
        assert state.memory.peek(0x0005) == 0x3C
        op = step(state)
        assert op.mnemonic == "INR A"
        assert state.a == 0x3D
        assert state.pc == 0x0006

    # @intent:test_case_activity_log_bounded step()を繰り返してもアクセスログが直前の1命令分に留まることを検証します。
    def test_activity_log_stays_bounded(self, state):
        for _ in range(10000):
            step(state)
        assert [a.address for a in state.memory.get_and_clear_activity_log()] == [9999]

    # @intent:test_case_activity_log_last_instruction 呼び出し後のログにはその命令のアクセスだけが残ることを検証します。
    def test_activity_log_holds_last_instruction(self, state):
        state.a = 0x42
        state.memory.load(0x0000, [0x00, 0x32, 0x00, 0x40])  # NOP; STA 4000
        step(state)
        step(state)
        log = state.memory.get_and_clear_activity_log()
        assert [(a.address, a.access_type) for a in log] == [
            (0x0001, MemoryAccessType.READ),
            (0x0002, MemoryAccessType.READ),
            (0x0003, MemoryAccessType.READ),
            (0x4000, MemoryAccessType.WRITE),
        ]

    # @intent:test_case_invariant 定義域外の状態で実行した場合にInvariantViolationErrorとなることを検証します。
    def test_invariant_violation(self, state):
        state.a = 0x100
        with pytest.raises(InvariantViolationError):
            step(state)
