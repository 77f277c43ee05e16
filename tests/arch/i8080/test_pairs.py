# tests/arch/i8080/test_pairs.py
"""
i8080_core.arch.i8080.pairsモジュールの単体テスト。
"""
from i8080_core.arch.i8080.pairs import (
    REGISTER_PAIRS, pack, unpack, get_pair_name, get_pair, set_pair
)
from i8080_core.arch.i8080.state import I8080CpuState

# @intent:test_suite レジスタペアの合成・分解とアクセサの検証。


class TestPackUnpack:
    """
    pack/unpack関数の単体テスト。
    """
    # @intent:test_case_pack 上位・下位バイトから16bit値を合成することを検証します。
    def test_pack(self):
        assert pack(0x12, 0x34) == 0x1234
        assert pack(0x00, 0xFF) == 0x00FF
        assert pack(0xFF, 0x00) == 0xFF00

    # @intent:test_case_unpack 16bit値を (上位, 下位) に分解することを検証します。
    def test_unpack(self):
        assert unpack(0x1234) == (0x12, 0x34)
        assert unpack(0xFFFF) == (0xFF, 0xFF)

    # @intent:test_case_inverse 全ての16bit値でpackとunpackが逆関数であることを検証します。
    def test_inverse_for_all_words(self):
        for value in range(0x10000):
            assert pack(*unpack(value)) == value


class TestPairAccess:
    """
    get_pair/set_pairの単体テスト。
    """
    # @intent:test_case_codes ペアコードと名前の対応を検証します。
    def test_pair_codes(self):
        assert REGISTER_PAIRS == {0: "B", 1: "D", 2: "H", 3: "SP"}
        assert get_pair_name(0b00) == "B"
        assert get_pair_name(0b11) == "SP"
        # 上位ビットは無視される
        assert get_pair_name(0b110) == "H"

    # @intent:test_case_get_set 各ペアの読み書きが対応するレジスタに反映されることを検証します。
    def test_get_and_set(self):
        state = I8080CpuState()
        set_pair(state, "B", 0x0102)
        set_pair(state, "D", 0x0304)
        set_pair(state, "H", 0x0506)
        set_pair(state, "SP", 0xFFFE)
        assert (state.b, state.c, state.d, state.e, state.h, state.l) == (1, 2, 3, 4, 5, 6)
        assert state.sp == 0xFFFE
        assert get_pair(state, "B") == 0x0102
        assert get_pair(state, "D") == 0x0304
        assert get_pair(state, "H") == 0x0506
        assert get_pair(state, "SP") == 0xFFFE
