# src/retro_chip8/arch/chip8/constants.py
"""
CHIP-8 仮想マシンの固定パラメータとフォントデータ。
"""

MEMORY_SIZE = 4096        # アドレス空間 0x000-0xFFF
ADDRESS_MASK = 0x0FFF
PROGRAM_BASE = 0x200      # プログラムのロード先、PCの初期値
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_BASE

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF       # VF: キャリー/ボロー/シフトアウト/衝突フラグ
STACK_DEPTH = 16
KEY_COUNT = 16

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

FONT_BASE = 0x000
FONT_GLYPH_SIZE = 5       # 1文字 = 5バイト (8x5ピクセル)

# @intent:constant 0-Fの16進数字フォント。リセット時にFONT_BASEから書き込まれます。
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
