# src/retro_chip8/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通ユーティリティ。
"""
import random
from dataclasses import dataclass, field
from typing import Dict

from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import ADDRESS_MASK
from retro_chip8.platform.interfaces import Display, Keyboard, Audio
from retro_chip8.platform.null import NullDisplay, NullKeyboard, NullAudio

# @intent:data_structure 命令実行時に参照されるホスト側コラボレータと乱数源をまとめます。
@dataclass
class Peripherals:
    display: Display = field(default_factory=NullDisplay)
    keyboard: Keyboard = field(default_factory=NullKeyboard)
    audio: Audio = field(default_factory=NullAudio)
    rng: random.Random = field(default_factory=random.Random)


# --- Operand fields ---
# 命令ワード: [family:4][x:4][y:4][n:4]

def field_x(word: int) -> int:
    return (word >> 8) & 0xF

def field_y(word: int) -> int:
    return (word >> 4) & 0xF

def field_n(word: int) -> int:
    return word & 0xF

def field_nn(word: int) -> int:
    return word & 0xFF

def field_nnn(word: int) -> int:
    return word & 0xFFF

# @intent:utility_function オペランド表記のフォーマットに使うフィールド辞書を返します。
def operand_fields(word: int) -> Dict[str, int]:
    return {
        "x": field_x(word),
        "y": field_y(word),
        "n": field_n(word),
        "nn": field_nn(word),
        "nnn": field_nnn(word),
    }

# @intent:utility_function インデックスレジスタ相対のアドレスを12bitアドレス空間内に折り返します。
def wrap_address(address: int) -> int:
    return address & ADDRESS_MASK

# @intent:utility_function バスからビッグエンディアンの16bitワードを読み込みます。
def read_word(bus: Bus, addr: int) -> int:
    """Big-endian 16-bit read."""
    return (bus.read(addr) << 8) | bus.read(wrap_address(addr + 1))
