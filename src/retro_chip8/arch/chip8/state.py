# src/retro_chip8/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List

from retro_chip8.core.state import CpuState
from retro_chip8.arch.chip8.constants import (
    PROGRAM_BASE, REGISTER_COUNT, STACK_DEPTH, FLAG_REGISTER,
)
from retro_chip8.arch.chip8.framebuffer import Framebuffer

# @intent:responsibility CHIP-8の全てのレジスタ（V0-VF, I, PC, SP）、スタック、タイマー、プログラム境界、フレームバッファを保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 マシン状態を保持するデータクラス。
    メモリ本体はBus上のRAMデバイスが保持します。
    """
    pc: int = PROGRAM_BASE
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    i: int = 0x000                 # Index Register
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    delay_timer: int = 0
    sound_timer: int = 0
    program_end: int = PROGRAM_BASE # 実行可能範囲の上限（この値を含まない）
    framebuffer: Framebuffer = field(default_factory=Framebuffer)

    # @intent:accessor フラグレジスタVFへのアクセスを提供します。
    # @intent:rationale VFは汎用レジスタでもあるため、値そのものはvリストに保持します。
    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF

    @property
    def is_loaded(self) -> bool:
        return self.program_end > PROGRAM_BASE

    # @intent:responsibility 可変フィールドを含めた完全なコピーを返します。
    def copy(self) -> "Chip8CpuState":
        return Chip8CpuState(
            pc=self.pc,
            sp=self.sp,
            v=list(self.v),
            i=self.i,
            stack=list(self.stack),
            delay_timer=self.delay_timer,
            sound_timer=self.sound_timer,
            program_end=self.program_end,
            framebuffer=self.framebuffer.copy(),
        )
