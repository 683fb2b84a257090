# tests/host/test_scheduler.py
"""
FrameSchedulerのテスト。偽の時計を注入して決定的に検証します。
"""
import pytest

from conftest import RecordingAudio
from retro_chip8.host.scheduler import FrameScheduler


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _counting_machine(make_machine, **kwargs):
    # ADD V0, #1 を繰り返した後、先頭に戻るプログラム
    program = bytes([0x70, 0x01] * 31 + [0x12, 0x00])
    return make_machine(program=program, **kwargs)


class TestFrameScheduler:
    def test_invalid_arguments(self, make_machine):
        cpu, _ = make_machine()
        with pytest.raises(ValueError):
            FrameScheduler(cpu, instructions_per_frame=0)
        with pytest.raises(ValueError):
            FrameScheduler(cpu, timer_hz=0)
        with pytest.raises(ValueError):
            FrameScheduler(cpu, max_catch_up=0)

    def test_run_frame_steps_then_ticks(self, make_machine):
        cpu, _ = _counting_machine(make_machine)
        cpu.get_state().delay_timer = 10
        scheduler = FrameScheduler(cpu, instructions_per_frame=4)

        scheduler.run_frame()

        assert cpu.get_state().v[0] == 4
        assert cpu.get_state().delay_timer == 9
        assert scheduler.frame_count == 1

    def test_sound_timer_drives_audio(self, make_machine):
        audio = RecordingAudio()
        cpu, _ = _counting_machine(make_machine, audio=audio)
        cpu.get_state().sound_timer = 2
        scheduler = FrameScheduler(cpu, instructions_per_frame=1)

        scheduler.run_frames(4)

        assert cpu.get_state().sound_timer == 0
        assert audio.calls == [True, False]

    def test_timers_tick_without_program(self, make_machine):
        cpu, _ = make_machine()
        cpu.get_state().delay_timer = 3
        FrameScheduler(cpu).run_frames(2)
        assert cpu.get_state().delay_timer == 1

    # @intent:test_case 時計の経過に応じたフレーム数だけ実行されることを検証します。
    def test_advance_follows_clock(self, make_machine):
        cpu, _ = _counting_machine(make_machine)
        clock = FakeClock(100.0)
        scheduler = FrameScheduler(cpu, instructions_per_frame=1, timer_hz=10, clock=clock)

        assert scheduler.advance() == 1
        assert scheduler.advance() == 0
        assert scheduler.time_until_next_frame() == pytest.approx(0.1)

        clock.now += 0.25
        assert scheduler.advance() == 2
        assert scheduler.frame_count == 3

    def test_advance_caps_catch_up(self, make_machine):
        cpu, _ = _counting_machine(make_machine)
        clock = FakeClock(0.0)
        scheduler = FrameScheduler(cpu, instructions_per_frame=1, timer_hz=10, clock=clock, max_catch_up=3)
        scheduler.advance()

        clock.now = 10.0
        assert scheduler.advance() == 3
        # 遅れは破棄され、次のフレームは現在時刻から1間隔後
        assert scheduler.advance() == 0
        assert scheduler.time_until_next_frame() == pytest.approx(0.1)

    def test_resync(self, make_machine):
        cpu, _ = _counting_machine(make_machine)
        clock = FakeClock(0.0)
        scheduler = FrameScheduler(cpu, instructions_per_frame=1, timer_hz=10, clock=clock)
        scheduler.advance()
        scheduler.resync()
        assert scheduler.time_until_next_frame() == 0.0
        clock.now = 50.0
        assert scheduler.advance() == 1
