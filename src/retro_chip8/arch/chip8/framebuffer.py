# src/retro_chip8/arch/chip8/framebuffer.py
"""
CHIP-8 モノクロフレームバッファ。
"""
from typing import List

from retro_chip8.arch.chip8.constants import SCREEN_WIDTH, SCREEN_HEIGHT

# @intent:responsibility 幅x高さのピクセル状態を保持し、トーラス状（端で折り返す）のアクセスを提供します。
class Framebuffer:
    """
    ピクセルをTrue(点灯)/False(消灯)で保持するフレームバッファ。
    座標は常に幅・高さでの剰余として扱われます。
    """
    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        if width <= 0 or height <= 0:
            raise ValueError("Framebuffer dimensions must be positive.")
        self.width = width
        self.height = height
        self._pixels = [False] * (width * height)

    def _index(self, x: int, y: int) -> int:
        return (y % self.height) * self.width + (x % self.width)

    def clear(self) -> None:
        self._pixels = [False] * (self.width * self.height)

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[self._index(x, y)]

    def set_pixel(self, x: int, y: int, value: bool) -> None:
        self._pixels[self._index(x, y)] = bool(value)

    # @intent:responsibility 1ピクセルを反転させ、点灯→消灯になった場合にTrueを返します。
    def xor_pixel(self, x: int, y: int) -> bool:
        index = self._index(x, y)
        was_set = self._pixels[index]
        self._pixels[index] = not was_set
        return was_set

    def is_blank(self) -> bool:
        return not any(self._pixels)

    def rows(self) -> List[List[bool]]:
        w = self.width
        return [self._pixels[row * w:(row + 1) * w] for row in range(self.height)]

    # @intent:responsibility テキスト表現を返します。コンソール表示とテストで使用されます。
    def to_text(self, on: str = "█", off: str = " ") -> str:
        return "\n".join("".join(on if p else off for p in row) for row in self.rows())

    def copy(self) -> "Framebuffer":
        clone = Framebuffer(self.width, self.height)
        clone._pixels = list(self._pixels)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Framebuffer):
            return NotImplemented
        return (self.width, self.height, self._pixels) == (other.width, other.height, other._pixels)

    def __repr__(self) -> str:
        lit = sum(self._pixels)
        return f"Framebuffer({self.width}x{self.height}, lit={lit})"
