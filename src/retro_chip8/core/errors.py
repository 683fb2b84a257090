# retro_chip8/core/errors.py
"""
Core Layer (例外定義)

エミュレーション中に発生する致命的なエラーを定義します。
いずれの例外も内部で再試行されることはなく、ホスト側へそのまま伝播します。
"""
from typing import Optional


# @intent:responsibility エミュレーションに関する全ての例外の基底クラス。
class EmulationError(Exception):
    """
    ホストが一括で捕捉できるようにするための基底例外。
    """


# @intent:responsibility 不正なプログラムイメージ（空、容量超過、バイト列以外）を表します。
class InvalidProgram(EmulationError, ValueError):
    """
    ローダーがプログラムイメージを受け付けられない場合に送出されます。
    送出時点でマシンの状態は変更されていません。
    """


# @intent:responsibility 定義されていない命令ワードを表します。
class UnknownOpcode(EmulationError):
    def __init__(self, address: int, word: int):
        self.address = address
        self.word = word
        super().__init__(f"Unknown opcode {word:04X} at {address:#05x}")


# @intent:responsibility PCがロード済みプログラムの範囲外を指したことを表します。
class ProgramCounterOutOfBounds(EmulationError, IndexError):
    def __init__(self, pc: int, lower: int, upper: int):
        self.pc = pc
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"Program counter {pc:#05x} outside program bounds [{lower:#05x}, {upper:#05x})"
        )


# @intent:responsibility コールスタックの深さ上限を超えたCALLを表します。
class StackOverflow(EmulationError):
    def __init__(self, pc: int, depth: int):
        self.pc = pc
        self.depth = depth
        super().__init__(f"Call stack overflow (depth {depth}) at {pc:#05x}")


# @intent:responsibility 空のコールスタックからのRETを表します。
class StackUnderflow(EmulationError):
    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"Return with empty call stack at {pc:#05x}")


# @intent:responsibility ブロッキング中のキー待ちがホストによって中断されたことを表します。
class KeyWaitInterrupted(EmulationError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Key wait interrupted")


# @intent:responsibility キーボードが0-F以外のキー番号を返したことを表します。
class InvalidKey(EmulationError, ValueError):
    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Keyboard reported key {key} outside 0-F")
