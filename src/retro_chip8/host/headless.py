# retro_chip8/host/headless.py
"""
GUIを使わずにプログラムを一定フレーム実行し、最終画面をテキストで出力します。
"""
import sys
from typing import Optional, TextIO

from retro_chip8.core.errors import EmulationError
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.config.models import SystemConfig
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.loader.loader import load_program_file
from retro_chip8.platform.console import ConsoleDisplay
from retro_chip8.platform.null import NullKeyboard, NullAudio

# @intent:responsibility プログラムを読み込み、指定フレーム数だけ実行して結果を出力します。
def run_headless(path: str, frames: int, config: Optional[SystemConfig] = None,
                 stream: Optional[TextIO] = None) -> Chip8Cpu:
    """
    実行中のエラー（EmulationError）はサマリーを出力した後、呼び出し元に伝播します。
    """
    out = stream if stream is not None else sys.stdout
    config = config or SystemConfig()

    builder = SystemBuilder()
    display = ConsoleDisplay(stream=out, use_escape=False, live=False)
    cpu, _ = builder.build_system(config, display=display, keyboard=NullKeyboard(), audio=NullAudio())
    load_program_file(path, cpu)
    scheduler = builder.build_scheduler(cpu, config)

    try:
        scheduler.run_frames(frames)
    except EmulationError as e:
        print(f"Stopped after {scheduler.frame_count} frames: {e}", file=out)
        raise

    state = cpu.get_state()
    print(cpu.framebuffer.to_text(), file=out)
    print(
        f"Ran {scheduler.frame_count} frames, {cpu.cycle_count} instructions; "
        f"PC={state.pc:#05x} I={state.i:#05x} DT={state.delay_timer} ST={state.sound_timer}",
        file=out,
    )
    return cpu
