# src/retro_chip8/arch/chip8/cpu.py
"""
CHIP-8 仮想マシンの中心モジュール。

AbstractCpuの命令サイクルに、プログラムのロード、実行範囲の検査、
60Hzタイマーの更新を加えます。
"""
import random
from typing import Dict, List, Optional, Tuple

from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.errors import InvalidProgram, ProgramCounterOutOfBounds
from retro_chip8.core.snapshot import Operation
from retro_chip8.common.types import RegisterLayoutInfo, RegisterInfo
from retro_chip8.transport.bus import Bus
from retro_chip8.platform.interfaces import Display, Keyboard, Audio
from retro_chip8.arch.chip8.constants import (
    MEMORY_SIZE, PROGRAM_BASE, MAX_PROGRAM_SIZE, FONT_BASE, FONT_SET, REGISTER_COUNT,
)
from retro_chip8.arch.chip8.framebuffer import Framebuffer
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.instructions import decode_opcode, execute_instruction
from retro_chip8.arch.chip8.instructions.base import Peripherals, read_word
from retro_chip8.arch.chip8 import disassembler

# @intent:responsibility CHIP-8の具体的なエミュレーションロジック（フェッチ、デコード、実行）とタイマーを提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 仮想マシンをエミュレートするクラス。

    表示、キーボード、音声、乱数源は生成時に注入されます。
    省略した場合は何もしない実装（キー待ちは即座に中断）が使われます。
    """
    # @intent:pre-condition `bus`には0x000-0xFFFの4KBをカバーするRAMが登録されている必要があります。
    def __init__(self, bus: Bus,
                 display: Optional[Display] = None,
                 keyboard: Optional[Keyboard] = None,
                 audio: Optional[Audio] = None,
                 rng: Optional[random.Random] = None):
        super().__init__(bus)
        self._io = Peripherals()
        if display is not None:
            self._io.display = display
        if keyboard is not None:
            self._io.keyboard = keyboard
        if audio is not None:
            self._io.audio = audio
        if rng is not None:
            self._io.rng = rng

    # @intent:responsibility CHIP-8の初期状態を生成します。
    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    @property
    def peripherals(self) -> Peripherals:
        return self._io

    @property
    def framebuffer(self) -> Framebuffer:
        return self._state.framebuffer

    # @intent:responsibility マシンを電源投入直後の状態に戻します。
    # @intent:post-condition メモリは全て0、フォントがFONT_BASEに配置され、プログラムは未ロードになります。
    def reset(self) -> None:
        super().reset()
        self._bus.load_block(0, bytes(MEMORY_SIZE))
        self._bus.load_block(FONT_BASE, FONT_SET)
        self._bus.get_and_clear_activity_log()

    # @intent:responsibility プログラムイメージをPROGRAM_BASEに配置し、実行可能範囲を設定します。
    # @intent:pre-condition 呼び出し前にreset()されていることを想定します。以前のプログラムの残りは消去されません。
    def load_program(self, data) -> None:
        """
        プログラムイメージ（bytes互換のバイト列）をロードします。
        空、または容量（3584バイト）を超えるイメージはInvalidProgramとして拒否され、
        その場合マシンの状態は変更されません。
        """
        # bytes(6)はゼロ6バイトになるため、整数と文字列は変換前に拒否する
        if isinstance(data, (int, str)):
            raise InvalidProgram(f"Program image must be a sequence of bytes, not {type(data).__name__}.")
        try:
            image = bytes(data)
        except (TypeError, ValueError) as e:
            raise InvalidProgram(f"Program image must be a sequence of bytes: {e}") from e
        if not image:
            raise InvalidProgram("Program image is empty.")
        if len(image) > MAX_PROGRAM_SIZE:
            raise InvalidProgram(
                f"Program image is {len(image)} bytes; at most {MAX_PROGRAM_SIZE} bytes fit above {PROGRAM_BASE:#05x}."
            )

        self._bus.load_block(PROGRAM_BASE, image)
        self._state.pc = PROGRAM_BASE
        self._state.program_end = PROGRAM_BASE + len(image)

    # @intent:responsibility 60Hzのタイマーティックを1回処理します。
    # @intent:rationale サウンドタイマーが動作していたティックでのみ音声出力を更新し、0到達時に停止を通知します。
    def tick_timers(self) -> None:
        s = self._state
        if s.delay_timer > 0:
            s.delay_timer -= 1
        if s.sound_timer > 0:
            s.sound_timer -= 1
            self._io.audio.set_tone(s.sound_timer != 0)

    # @intent:responsibility プログラムがロードされている場合のみ命令を実行できます。
    def _is_ready(self) -> bool:
        return self._state.is_loaded

    # @intent:responsibility 命令ワード全体がロード済みプログラムの範囲内にあるかを検査します。
    def _check_fetch(self, pc: int) -> None:
        end = self._state.program_end
        if pc < PROGRAM_BASE or pc + 1 >= end:
            raise ProgramCounterOutOfBounds(pc, PROGRAM_BASE, end)

    # @intent:responsibility メモリから次の命令ワード（ビッグエンディアン16bit）をフェッチします。
    def _fetch(self) -> int:
        return read_word(self._bus, self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus, self._io)

    # @intent:responsibility 保存しておいた状態を復元します。フレームバッファも含めてコピーします。
    def restore_state(self, state: Chip8CpuState) -> None:
        self._state = state.copy()

    # @intent:responsibility UI表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{k:X}": s.v[k] for k in range(REGISTER_COUNT)}
        registers.update({
            "I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer,
        })
        return registers

    # @intent:responsibility UIのレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{k:X}", 8) for k in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Index/Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [
                RegisterInfo("DT", 8), RegisterInfo("ST", 8)
            ]),
        ]

    # @intent:responsibility 指定範囲のメモリを逆アセンブルします。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
