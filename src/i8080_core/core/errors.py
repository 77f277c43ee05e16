# i8080_core/core/errors.py
"""
Core Layer (例外定義)

エミュレータ全体で使用される例外階層を定義します。
算術演算は固定幅で常に定義されるため、ここに現れるのはデコード不能な命令、
不正なメモリアクセス、内部不整合、設定エラーのみです。
"""


# @intent:responsibility エミュレータが送出する全ての例外の基底クラスです。
class EmulatorError(Exception):
    pass


# @intent:responsibility 未実装オペコードに到達したことを示します。
# @intent:rationale プロセスを終了させる代わりに型付きの例外として送出し、ホスト側が
#                  停止・スキップ・置換のいずれを選ぶかを決められるようにします。
class UnimplementedOpcodeError(EmulatorError):
    """
    未実装の命令をフェッチした際に送出されます。
    `opcode` と `pc`（フェッチ時のプログラムカウンタ）、分かる場合はニーモニックを保持します。
    """
    def __init__(self, opcode: int, pc: int, mnemonic: str = ""):
        self.opcode = opcode
        self.pc = pc
        self.mnemonic = mnemonic
        message = f"Unimplemented instruction 0x{opcode:02X} at PC {pc:#06x}"
        if mnemonic:
            message += f" ({mnemonic})"
        super().__init__(message)


# @intent:responsibility メモリバッファへの不正なアクセスを示します。
class MemoryAccessFault(EmulatorError, ValueError):
    """
    8bitに収まらないデータの書き込み、64KB以外のバッファ、整数でないアドレスなど。
    範囲外の整数アドレスはマスクされるため、この例外にはなりません。
    """
    pass


# @intent:responsibility 命令実行後にレジスタやフラグが定義域を外れたことを示します。
class InvariantViolationError(EmulatorError):
    """ALUまたはディスパッチャの内部バグを示します。ゲストプログラムの誤りではありません。"""
    pass


# @intent:responsibility 設定ファイルやプログラムイメージの不正を示します。
class ConfigError(EmulatorError, ValueError):
    pass
