# src/retro_chip8/arch/chip8/instructions/load.py
"""
転送命令（レジスタ、インデックス、タイマー、メモリ）の実装。
"""
from retro_chip8.core.errors import InvalidKey, KeyWaitInterrupted
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import ADDRESS_MASK, FONT_BASE, FONT_GLYPH_SIZE, KEY_COUNT
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import Peripherals, field_x, field_nn, field_nnn, wrap_address


# --- LD Vx, byte (6XNN) ---
def execute_ld_imm(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.v[field_x(op.word)] = field_nn(op.word)

# --- LD I, addr (ANNN) ---
def execute_ld_i(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.i = field_nnn(op.word)

# --- LD Vx, DT (FX07) ---
def execute_ld_vx_dt(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.v[field_x(op.word)] = state.delay_timer

# --- LD Vx, K (FX0A) ---
# @intent:responsibility キーが押されるまでブロックし、押されたキー番号をVxに格納します。
# @intent:rationale 待機中は命令サイクル全体が停止し、ホストはタイマーを進められません。
#                  待機が中断された場合はPCをこの命令に戻し、再開時に再度キー待ちを行います。
def execute_ld_vx_k(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    try:
        key = io.keyboard.wait_key()
    except KeyWaitInterrupted:
        state.pc = (state.pc - op.length) & 0xFFFF
        raise
    if not 0 <= key < KEY_COUNT:
        raise InvalidKey(key)
    state.v[field_x(op.word)] = key

# --- LD DT, Vx (FX15) ---
def execute_ld_dt(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.delay_timer = state.v[field_x(op.word)]

# --- LD ST, Vx (FX18) ---
def execute_ld_st(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.sound_timer = state.v[field_x(op.word)]

# --- ADD I, Vx (FX1E) ---
def execute_add_i(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.i = (state.i + state.v[field_x(op.word)]) & ADDRESS_MASK

# --- LD F, Vx (FX29) ---
# @intent:responsibility Vxに対応するフォントグリフ（5バイト）のアドレスをIに設定します。
def execute_ld_font(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.i = FONT_BASE + state.v[field_x(op.word)] * FONT_GLYPH_SIZE

# --- LD B, Vx (FX33) ---
# @intent:responsibility Vxを10進3桁（百、十、一）に分解し、I, I+1, I+2に格納します。
def execute_ld_bcd(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    value = state.v[field_x(op.word)]
    bus.write(wrap_address(state.i), value // 100)
    bus.write(wrap_address(state.i + 1), (value // 10) % 10)
    bus.write(wrap_address(state.i + 2), value % 10)

# --- LD [I], Vx (FX55) ---
def execute_store_regs(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    for k in range(field_x(op.word) + 1):
        bus.write(wrap_address(state.i + k), state.v[k])

# --- LD Vx, [I] (FX65) ---
def execute_load_regs(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    for k in range(field_x(op.word) + 1):
        state.v[k] = bus.read(wrap_address(state.i + k))
