# tests/loader/test_loader.py
"""
i8080_core.loader.loaderモジュールの単体テスト。
生バイナリとIntel HEXファイルのロード機能を検証します。
"""
import pytest

from i8080_core.core.errors import ConfigError
from i8080_core.loader.loader import BinaryLoader, IntelHexLoader
from i8080_core.transport.memory import Memory, MEMORY_SIZE

# @intent:test_suite プログラムイメージローダー機能の検証。

class TestBinaryLoader:
    """
    BinaryLoaderの単体テスト。
    """
    @pytest.fixture
    def setup_loader(self, tmp_path):
        return BinaryLoader(), Memory(), tmp_path

    def test_load_at_address(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        image = tmp_path / "prog.com"
        image.write_bytes(bytes([0x3E, 0x42, 0x76]))

        count = loader.load_binary(str(image), memory, 0x0100)

        assert count == 3
        assert memory.peek(0x0100) == 0x3E
        assert memory.peek(0x0101) == 0x42
        assert memory.peek(0x0102) == 0x76
        assert memory.peek(0x00FF) == 0x00
        # ローダーはアクセスログに記録しない
        assert memory.get_and_clear_activity_log() == []

    def test_load_wraps_at_end(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        image = tmp_path / "wrap.bin"
        image.write_bytes(bytes([1, 2, 3, 4]))

        loader.load_binary(str(image), memory, 0xFFFE)

        assert memory.peek(0xFFFF) == 2
        assert memory.peek(0x0000) == 3
        assert memory.peek(0x0001) == 4

    def test_load_too_large(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        image = tmp_path / "huge.bin"
        image.write_bytes(bytes(MEMORY_SIZE + 1))

        with pytest.raises(ConfigError, match="larger than the 64KB"):
            loader.load_binary(str(image), memory)

    def test_load_missing_file(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        with pytest.raises(FileNotFoundError):
            loader.load_binary(str(tmp_path / "missing.bin"), memory)

class TestIntelHexLoader:
    """
    IntelHexLoaderの単体テスト。
    """

    @pytest.fixture
    def setup_loader(self, tmp_path):
        return IntelHexLoader(), Memory(), tmp_path

    def test_load_simple_hex_data(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :020000001234B8
        :02000200ABCD84
        :00000001FF
        """
        hex_file = tmp_path / "simple.hex"
        hex_file.write_text(hex_content)

        total = loader.load_intel_hex(str(hex_file), memory)

        assert total == 4
        assert memory.peek(0x0000) == 0x12
        assert memory.peek(0x0001) == 0x34
        assert memory.peek(0x0002) == 0xAB
        assert memory.peek(0x0003) == 0xCD

    def test_load_multiple_records(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :03000000AABBCCCC
        :02000300DDEE30
        :00000001FF
        """
        hex_file = tmp_path / "multiple.hex"
        hex_file.write_text(hex_content)

        loader.load_intel_hex(str(hex_file), memory)

        assert [memory.peek(a) for a in range(5)] == [0xAA, 0xBB, 0xCC, 0xDD, 0xEE]

    # @intent:test_case_segment 拡張セグメントアドレスレコードがベースアドレスを設定することを検証します。
    def test_load_extended_segment_address(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :020000020100FB
        :020000007788FF
        :00000001FF
        """
        hex_file = tmp_path / "esa.hex"
        hex_file.write_text(hex_content)

        loader.load_intel_hex(str(hex_file), memory)

        assert memory.peek(0x1000) == 0x77
        assert memory.peek(0x1001) == 0x88

    # @intent:test_case_linear 16bitを超える拡張リニアアドレスは64KB空間へ折り返すことを検証します。
    def test_load_extended_linear_address_wraps(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :020000040001F9 ; Set ELA to 0x0001xxxx
        :021000001234A8
        :00000001FF
        """
        hex_file = tmp_path / "ela.hex"
        hex_file.write_text(hex_content)

        loader.load_intel_hex(str(hex_file), memory)

        assert memory.peek(0x1000) == 0x12
        assert memory.peek(0x1001) == 0x34

    # @intent:test_case_eof EOFレコード以降の行は読まれないことを検証します。
    def test_stops_at_eof_record(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :00000001FF
        :020000001234B8
        """
        hex_file = tmp_path / "eof.hex"
        hex_file.write_text(hex_content)

        assert loader.load_intel_hex(str(hex_file), memory) == 0
        assert memory.peek(0x0000) == 0x00

    def test_load_invalid_checksum(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :020000001234B9 ; Checksum should be B8, but it's B9
        :00000001FF
        """
        hex_file = tmp_path / "invalid_checksum.hex"
        hex_file.write_text(hex_content)

        with pytest.raises(ConfigError, match="Checksum mismatch on line 2: Calculated B8, Expected B9"):
            loader.load_intel_hex(str(hex_file), memory)

    def test_load_unknown_record_type(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_content = """
        :020000061234B2 ; Record type 0x06 is unknown
        :00000001FF
        """
        hex_file = tmp_path / "unknown_record.hex"
        hex_file.write_text(hex_content)

        with pytest.raises(ConfigError, match="Unknown Intel HEX record type 06 on line 2"):
            loader.load_intel_hex(str(hex_file), memory)

    def test_load_length_mismatch(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_file = tmp_path / "length.hex"
        hex_file.write_text(":030000001234B8\n")

        with pytest.raises(ConfigError, match="Data length mismatch on line 1"):
            loader.load_intel_hex(str(hex_file), memory)

    def test_load_short_record(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_file = tmp_path / "short.hex"
        hex_file.write_text(":0000\n")

        with pytest.raises(ConfigError, match="Too short"):
            loader.load_intel_hex(str(hex_file), memory)

    def test_load_non_hex_digits(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_file = tmp_path / "garbage.hex"
        hex_file.write_text(":02000000ZZ34B8\n")

        with pytest.raises(ConfigError, match="Error parsing Intel HEX line 1"):
            loader.load_intel_hex(str(hex_file), memory)

    # @intent:test_case_bad_address_record データ長が2でない拡張アドレスレコードが行番号付きのConfigErrorになることを検証します。
    @pytest.mark.parametrize("record", [
        ":00000004FC",         # 拡張リニアアドレス、データなし
        ":00000002FE",         # 拡張セグメントアドレス、データなし
        ":03000002000000FB",   # 拡張セグメントアドレス、3バイト
    ])
    def test_load_bad_extended_address_record(self, setup_loader, record):
        loader, memory, tmp_path = setup_loader
        hex_file = tmp_path / "address.hex"
        hex_file.write_text(record + "\n")

        with pytest.raises(ConfigError, match="Extended address record on line 1"):
            loader.load_intel_hex(str(hex_file), memory)

    def test_load_empty_hex_file(self, setup_loader):
        loader, memory, tmp_path = setup_loader
        hex_file = tmp_path / "empty.hex"
        hex_file.write_text("") # 空ファイル

        assert loader.load_intel_hex(str(hex_file), memory) == 0
        assert memory.peek(0x0000) == 0x00
