# src/retro_chip8/arch/chip8/instructions/alu.py
"""
算術論理演算命令の実装。

VFを書き換える命令は、必ずフラグを先に書き込み、その後に演算結果を書き込みます。
転送先がVF自身の場合は演算結果が最終値になります。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import FLAG_REGISTER
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import Peripherals, field_x, field_y, field_nn


# @intent:utility_function フラグ→結果の順で書き込みます。
def _write_flag_then_result(state: Chip8CpuState, x: int, flag: int, result: int) -> None:
    state.v[FLAG_REGISTER] = flag
    state.v[x] = result & 0xFF


# --- ADD Vx, byte (7XNN) ---
# @intent:responsibility 即値を加算します。フラグには影響しません。
def execute_add_imm(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x = field_x(op.word)
    state.v[x] = (state.v[x] + field_nn(op.word)) & 0xFF

# --- LD Vx, Vy (8XY0) ---
def execute_ld_reg(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.v[field_x(op.word)] = state.v[field_y(op.word)]

# --- OR / AND / XOR (8XY1-8XY3) ---
# @intent:rationale 論理演算もVFを0にリセットします（COSMAC VIP互換）。
def execute_or(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    result = state.v[x] | state.v[y]
    _write_flag_then_result(state, x, 0, result)

def execute_and(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    result = state.v[x] & state.v[y]
    _write_flag_then_result(state, x, 0, result)

def execute_xor(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    result = state.v[x] ^ state.v[y]
    _write_flag_then_result(state, x, 0, result)

# --- ADD Vx, Vy (8XY4) ---
# @intent:responsibility 加算し、255を超えた場合はVF=1（キャリー）とします。
def execute_add_reg(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    total = state.v[x] + state.v[y]
    _write_flag_then_result(state, x, 1 if total > 0xFF else 0, total)

# --- SUB Vx, Vy (8XY5) ---
# @intent:responsibility Vx - Vy。ボローが発生しない（Vx >= Vy）場合にVF=1とします。
def execute_sub(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    vx, vy = state.v[x], state.v[y]
    _write_flag_then_result(state, x, 1 if vx >= vy else 0, vx - vy)

# --- SHR Vx (8XY6) ---
def execute_shr(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x = field_x(op.word)
    vx = state.v[x]
    _write_flag_then_result(state, x, vx & 0x01, vx >> 1)

# --- SUBN Vx, Vy (8XY7) ---
# @intent:responsibility Vy - Vx。Vy >= Vx の場合にVF=1とします。
def execute_subn(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x, y = field_x(op.word), field_y(op.word)
    vx, vy = state.v[x], state.v[y]
    _write_flag_then_result(state, x, 1 if vy >= vx else 0, vy - vx)

# --- SHL Vx (8XYE) ---
def execute_shl(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    x = field_x(op.word)
    vx = state.v[x]
    _write_flag_then_result(state, x, (vx >> 7) & 0x01, vx << 1)

# --- RND Vx, byte (CXNN) ---
# @intent:responsibility 注入された乱数源から1バイトを得て、即値とのANDを格納します。
def execute_rnd(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.v[field_x(op.word)] = io.rng.randrange(256) & field_nn(op.word)
