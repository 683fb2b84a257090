# retro_chip8/host/scheduler.py
"""
Host Layer (フレームスケジューラ)

1フレーム（既定1/60秒）ごとに一定数の命令を実行し、タイマーを1回更新します。
時計は注入可能で、テストでは偽の時計を渡して決定的に動かせます。
"""
import time
from typing import Callable, Optional

from retro_chip8.core.snapshot import Snapshot
from retro_chip8.arch.chip8.cpu import Chip8Cpu

# @intent:responsibility 命令実行とタイマー更新の比率を管理し、実時間に合わせてフレームを進めます。
class FrameScheduler:
    """
    - run_frame(): instructions_per_frame命令を実行した後、タイマーを1回更新します。
    - advance(): 時計を参照し、経過時間ぶんのフレームをまとめて実行します。
      追いつけないほど遅れた場合はmax_catch_upフレームで打ち切り、残りの遅れは破棄します。
    """
    def __init__(self, cpu: Chip8Cpu,
                 instructions_per_frame: int = 12,
                 timer_hz: int = 60,
                 clock: Callable[[], float] = time.monotonic,
                 max_catch_up: int = 5):
        if instructions_per_frame <= 0:
            raise ValueError("instructions_per_frame must be positive.")
        if timer_hz <= 0:
            raise ValueError("timer_hz must be positive.")
        if max_catch_up <= 0:
            raise ValueError("max_catch_up must be positive.")
        self._cpu = cpu
        self.instructions_per_frame = instructions_per_frame
        self.timer_hz = timer_hz
        self._clock = clock
        self._max_catch_up = max_catch_up
        self._frame_count = 0
        self._next_frame_time: Optional[float] = None

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.timer_hz

    @property
    def frame_count(self) -> int:
        return self._frame_count

    # @intent:responsibility 1フレーム分の命令を実行し、タイマーを1回更新します。
    # @intent:rationale 命令の実行中に例外が発生した場合はタイマーを更新せずに伝播します。
    def run_frame(self) -> Optional[Snapshot]:
        snapshot = self._cpu.step(self.instructions_per_frame)
        self._cpu.tick_timers()
        self._frame_count += 1
        return snapshot

    def run_frames(self, count: int) -> Optional[Snapshot]:
        snapshot = None
        for _ in range(count):
            snapshot = self.run_frame()
        return snapshot

    # @intent:responsibility 時計に基づいて実行すべきフレームを実行し、実行したフレーム数を返します。
    def advance(self) -> int:
        now = self._clock()
        if self._next_frame_time is None:
            self._next_frame_time = now

        frames = 0
        while now >= self._next_frame_time and frames < self._max_catch_up:
            self.run_frame()
            self._next_frame_time += self.frame_interval
            frames += 1

        if now >= self._next_frame_time:
            # 遅れを破棄して次のフレームを現在時刻基準にする
            self._next_frame_time = now + self.frame_interval
        return frames

    # @intent:responsibility 次のフレームまでの待ち時間（秒）を返します。
    def time_until_next_frame(self) -> float:
        if self._next_frame_time is None:
            return 0.0
        return max(0.0, self._next_frame_time - self._clock())

    # @intent:responsibility 実時間との対応をリセットします。一時停止からの再開時に使用します。
    def resync(self) -> None:
        self._next_frame_time = None
