# i8080_core/loader/loader.py
"""
プログラムイメージローダーモジュール。
生バイナリ（CP/M .COM 形式など）および Intel HEX 形式のロードをサポートします。
"""
import logging

from i8080_core.core.errors import ConfigError
from i8080_core.transport.memory import Memory

logger = logging.getLogger(__name__)


class BinaryLoader:
    """
    生のバイナリイメージを指定アドレスから配置するローダー。
    """
    def load_binary(self, file_path: str, memory: Memory, address: int = 0x0000) -> int:
        with open(file_path, 'rb') as f:
            data = f.read()
        if len(data) > len(memory):
            raise ConfigError(f"Image {file_path} is larger than the 64KB address space ({len(data)} bytes).")
        count = memory.load(address, data)
        logger.debug("Loaded %d bytes from %s at %#06x", count, file_path, address & 0xFFFF)
        return count


class IntelHexLoader:
    """
    Intel HEX形式のファイルを解析し、データをメモリにロードするローダー。
    """
    def load_intel_hex(self, file_path: str, memory: Memory) -> int:
        current_base_address = 0x0000
        total = 0

        with open(file_path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or not line.startswith(':'):
                    continue

                comment_start = line.find(';')
                if comment_start != -1:
                    line = line[:comment_start].strip()

                if len(line) < 11:
                    raise ConfigError(f"Invalid Intel HEX record format on line {line_num}: Too short - {line}")

                try:
                    data_length = int(line[1:3], 16)
                    address_field = int(line[3:7], 16)
                    record_type = int(line[7:9], 16)
                    data_part_str = line[9:-2]
                    checksum_field = int(line[-2:], 16)
                    data_bytes = bytes.fromhex(data_part_str)
                except ValueError as e:
                    raise ConfigError(f"Error parsing Intel HEX line {line_num}: {line} - {e}") from e

                if len(data_bytes) != data_length:
                    raise ConfigError(f"Data length mismatch on line {line_num}")

                checksum_sum = data_length + (address_field >> 8) + (address_field & 0xFF) + record_type + sum(data_bytes)
                calculated_checksum = (~checksum_sum + 1) & 0xFF
                if calculated_checksum != checksum_field:
                    raise ConfigError(
                        f"Checksum mismatch on line {line_num}: Calculated {calculated_checksum:02X}, Expected {checksum_field:02X}"
                    )

                if record_type == 0x00:
                    # 8080のアドレス空間は16bitのため、拡張アドレスを加えた結果も折り返す
                    total += memory.load((current_base_address + address_field) & 0xFFFF, data_bytes)
                elif record_type == 0x01:
                    break
                elif record_type in (0x02, 0x04):
                    # 拡張アドレスレコードのデータは常に2バイト
                    if data_length != 2:
                        raise ConfigError(
                            f"Extended address record on line {line_num} must carry 2 data bytes, got {data_length}"
                        )
                    shift = 4 if record_type == 0x02 else 16
                    current_base_address = int.from_bytes(data_bytes, "big") << shift
                elif record_type in (0x03, 0x05):
                    # 開始アドレスレコードはPCの初期値として扱わない
                    pass
                else:
                    raise ConfigError(f"Unknown Intel HEX record type {record_type:02X} on line {line_num}")

        logger.debug("Loaded %d bytes from Intel HEX file %s", total, file_path)
        return total
