# src/retro_chip8/arch/chip8/instructions/display.py
"""
画面命令（CLS, DRW）の実装。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import FLAG_REGISTER
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import Peripherals, field_x, field_y, field_n, wrap_address


# --- CLS (00E0) ---
# @intent:responsibility フレームバッファを消去し、表示先に消去と再描画を通知します。
def execute_cls(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.framebuffer.clear()
    io.display.clear()
    io.display.render(state.framebuffer)

# --- DRW Vx, Vy, n (DXYN) ---
# @intent:responsibility Iから読み出したn行のスプライトをXORで合成し、衝突の有無をVFに設定します。
# @intent:rationale 原点は(Vx mod 幅, Vy mod 高さ)で、各ピクセルも両軸で折り返します。
#                  x, yのどちらかがVFを指していても原点はフラグ書き込み前の値から求めます。
def execute_drw(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    fb = state.framebuffer
    origin_x = state.v[field_x(op.word)] % fb.width
    origin_y = state.v[field_y(op.word)] % fb.height
    height = field_n(op.word)

    state.v[FLAG_REGISTER] = 0
    for row in range(height):
        sprite = bus.read(wrap_address(state.i + row))
        for col in range(8):
            if sprite & (0x80 >> col):
                if fb.xor_pixel(origin_x + col, origin_y + row):
                    state.v[FLAG_REGISTER] = 1

    io.display.render(fb)
