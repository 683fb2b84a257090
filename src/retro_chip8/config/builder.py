import random
import time
from typing import Callable, Optional, Tuple
from retro_chip8.transport.bus import Bus, RAM
from retro_chip8.arch.chip8.constants import MEMORY_SIZE
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.host.scheduler import FrameScheduler
from retro_chip8.platform.interfaces import Display, Keyboard, Audio
from .models import SystemConfig

# @intent:responsibility システム構成（Config）に基づいて、Bus、RAM、CPUを生成・接続し、リセット済みの状態で返します。
class SystemBuilder:
    def build_system(self, config: SystemConfig,
                     display: Optional[Display] = None,
                     keyboard: Optional[Keyboard] = None,
                     audio: Optional[Audio] = None) -> Tuple[Chip8Cpu, Bus]:
        bus = Bus()
        bus.register_device(0x000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))

        # seedがNoneの場合はOSの乱数で初期化される
        rng = random.Random(config.machine.seed)
        cpu = Chip8Cpu(bus, display=display, keyboard=keyboard, audio=audio, rng=rng)
        cpu.reset()

        return cpu, bus

    # @intent:responsibility Configのタイミング設定でFrameSchedulerを生成します。
    def build_scheduler(self, cpu: Chip8Cpu, config: SystemConfig,
                        clock: Callable[[], float] = time.monotonic) -> FrameScheduler:
        return FrameScheduler(
            cpu,
            instructions_per_frame=config.machine.instructions_per_frame,
            timer_hz=config.machine.timer_hz,
            clock=clock,
        )
