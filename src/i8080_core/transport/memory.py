# i8080_core/transport/memory.py
"""
Transport Layer (メモリ)

このモジュールは、8080の64KBフラットアドレス空間を表すメモリバッファと、
命令実行中のアクセス記録を提供します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from i8080_core.core.errors import MemoryAccessFault

MEMORY_SIZE = 0x10000
ADDRESS_MASK = 0xFFFF

# @intent:responsibility メモリアクセスを記録するためのタイプを定義します。
class MemoryAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class MemoryAccess:
    """
    メモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: MemoryAccessType
    previous_data: Optional[int] = None # 書き込み前の値 (WRITEのみ)

# @intent:responsibility 64KBのアドレス空間を管理し、全てのアクセスを記録します。
# @intent:rationale アドレスは常に16bitにマスクされます。8080のアドレス計算は
#                  0xFFFFを超えると0x0000に戻るため、範囲外アクセスは例外ではなく折り返しとして扱います。
class Memory:
    """
    8080のメモリ空間。バッファは呼び出し元が所有し、このクラスは参照のみを保持します。
    バッファの再確保やサイズ変更は行いません。
    """
    # @intent:pre-condition `buffer`を渡す場合、長さはちょうど65536バイトである必要があります。
    def __init__(self, buffer: Optional[bytearray] = None):
        if buffer is None:
            buffer = bytearray(MEMORY_SIZE)
        if not isinstance(buffer, bytearray):
            raise MemoryAccessFault("Memory buffer must be a bytearray.")
        if len(buffer) != MEMORY_SIZE:
            raise MemoryAccessFault(
                f"Memory buffer must be exactly {MEMORY_SIZE} bytes, got {len(buffer)}."
            )
        self._buffer = buffer
        self._activity_log: List[MemoryAccess] = []

    @property
    def buffer(self) -> bytearray:
        return self._buffer

    def __len__(self) -> int:
        return MEMORY_SIZE

    def __getitem__(self, address: int) -> int:
        return self.peek(address)

    def __setitem__(self, address: int, data: int) -> None:
        self.load(address, [data])

    # @intent:utility_function アドレスを検証し、16bitに折り返します。
    @staticmethod
    def _mask(address: int) -> int:
        if not isinstance(address, int):
            raise MemoryAccessFault(f"Address {address!r} is not an integer.")
        return address & ADDRESS_MASK

    # @intent:responsibility 記録されたアクセスログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[MemoryAccess]:
        log = self._activity_log
        self._activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。アクセスはログに記録されます。
    def read(self, address: int) -> int:
        address = self._mask(address)
        data = self._buffer[address]
        self._activity_log.append(MemoryAccess(address, data, MemoryAccessType.READ))
        return data

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。アクセスはログに記録されます。
    # @intent:pre-condition データは8bit値である必要があります。
    def write(self, address: int, data: int) -> None:
        address = self._mask(address)
        if not isinstance(data, int) or not 0 <= data <= 0xFF:
            raise MemoryAccessFault(f"Data {data} is not an 8-bit value.")
        previous = self._buffer[address]
        self._buffer[address] = data
        self._activity_log.append(
            MemoryAccess(address, data, MemoryAccessType.WRITE, previous_data=previous)
        )

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        return self._buffer[self._mask(address)]

    # @intent:responsibility ログを記録せずにデータ列を書き込みます。ローダーやテスト用の入口です。
    def load(self, address: int, data: Iterable[int]) -> int:
        """
        `address`から順にデータを配置し、書き込んだバイト数を返します。
        0xFFFFを超えた分は0x0000へ折り返します。
        """
        address = self._mask(address)
        count = 0
        for value in data:
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise MemoryAccessFault(f"Data {value} is not an 8-bit value.")
            self._buffer[(address + count) & ADDRESS_MASK] = value
            count += 1
        return count
