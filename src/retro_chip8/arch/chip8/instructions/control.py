# src/retro_chip8/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。
"""
from retro_chip8.core.errors import StackOverflow, StackUnderflow
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import STACK_DEPTH, ADDRESS_MASK
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import Peripherals, field_x, field_y, field_nn, field_nnn


# @intent:utility_function 次の命令を読み飛ばします。stateのPCは既に次の命令を指しています。
def _skip(state: Chip8CpuState) -> None:
    state.pc = (state.pc + 2) & 0xFFFF


# --- RET (00EE) ---
# @intent:responsibility スタックから戻りアドレスをポップしてPCに設定します。
def execute_ret(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.sp == 0:
        raise StackUnderflow(state.pc - 2)
    state.sp -= 1
    state.pc = state.stack[state.sp]

# --- JP addr (1NNN) ---
def execute_jp(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.pc = field_nnn(op.word)

# --- CALL addr (2NNN) ---
# @intent:responsibility 戻りアドレス（次の命令）をプッシュしてからジャンプします。
def execute_call(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.sp >= STACK_DEPTH:
        raise StackOverflow(state.pc - 2, state.sp)
    # state.pc はCPU.stepで既に次の命令を指している
    state.stack[state.sp] = state.pc
    state.sp += 1
    state.pc = field_nnn(op.word)

# --- SE Vx, byte (3XNN) ---
def execute_se_imm(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.v[field_x(op.word)] == field_nn(op.word):
        _skip(state)

# --- SNE Vx, byte (4XNN) ---
def execute_sne_imm(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.v[field_x(op.word)] != field_nn(op.word):
        _skip(state)

# --- SE Vx, Vy (5XY0) ---
def execute_se_reg(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.v[field_x(op.word)] == state.v[field_y(op.word)]:
        _skip(state)

# --- SNE Vx, Vy (9XY0) ---
def execute_sne_reg(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if state.v[field_x(op.word)] != state.v[field_y(op.word)]:
        _skip(state)

# --- JP V0, addr (BNNN) ---
def execute_jp_offset(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    state.pc = (state.v[0] + field_nnn(op.word)) & ADDRESS_MASK

# --- SKP Vx (EX9E) ---
# @intent:responsibility VxのキーがON（押下中）なら次の命令をスキップします。
def execute_skp(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if io.keyboard.is_pressed(state.v[field_x(op.word)] & 0xF):
        _skip(state)

# --- SKNP Vx (EXA1) ---
def execute_sknp(state: Chip8CpuState, bus: Bus, io: Peripherals, op: Operation) -> None:
    if not io.keyboard.is_pressed(state.v[field_x(op.word)] & 0xF):
        _skip(state)
