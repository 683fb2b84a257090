# tests/arch/chip8/test_lifecycle.py
"""
Chip8Cpuのリセット、プログラムロード、タイマー更新の単体テスト。
"""
import pytest

from retro_chip8.core.errors import InvalidProgram
from retro_chip8.arch.chip8.constants import FONT_SET
from conftest import RecordingAudio, RecordingDisplay

# @intent:test_suite マシンのライフサイクル操作を検証します。

class TestReset:
    # @intent:test_case_reset リセット後はフォント以外のメモリが0で、プログラム未ロードであることを検証します。
    def test_reset_installs_font_and_clears_memory(self, make_machine):
        cpu, bus = make_machine(program=bytes([0x12, 0x00]))
        bus.write(0x800, 0xAB)
        cpu.get_state().v[2] = 5
        cpu.get_state().framebuffer.set_pixel(1, 1, True)

        cpu.reset()

        state = cpu.get_state()
        assert bytes(bus.peek(a) for a in range(80)) == FONT_SET
        assert bus.peek(0x800) == 0
        assert bus.peek(0x200) == 0
        assert state.pc == 0x200
        assert state.v[2] == 0
        assert state.framebuffer.is_blank()
        assert not state.is_loaded
        assert bus.get_and_clear_activity_log() == []

    def test_reset_does_not_notify_display(self, make_machine):
        display = RecordingDisplay()
        cpu, _ = make_machine(display=display)
        cpu.reset()
        assert display.calls == []


class TestLoadProgram:
    def test_load_sets_bounds(self, make_machine):
        cpu, bus = make_machine()
        cpu.load_program(bytes([0x60, 0x05, 0x12, 0x00]))
        state = cpu.get_state()
        assert state.pc == 0x200
        assert state.program_end == 0x204
        assert [bus.peek(a) for a in range(0x200, 0x204)] == [0x60, 0x05, 0x12, 0x00]

    def test_load_accepts_maximum_size(self, make_machine):
        cpu, bus = make_machine()
        cpu.load_program(bytes([0xAA]) * 3584)
        assert cpu.get_state().program_end == 0x1000
        assert bus.peek(0xFFF) == 0xAA

    # @intent:test_case_reject 空・容量超過・バイト列以外のイメージは状態を変えずに拒否されることを検証します。
    @pytest.mark.parametrize("image", [b"", bytes(3585), "not bytes", [0x100], 6, True])
    def test_invalid_images_rejected(self, make_machine, image):
        cpu, bus = make_machine()
        with pytest.raises(InvalidProgram):
            cpu.load_program(image)
        assert not cpu.get_state().is_loaded
        assert bus.peek(0x200) == 0

    # @intent:test_case_reload 再ロードはプログラムとPCだけを置き換え、レジスタ・タイマー・スタックは保持することを検証します。
    def test_reload_replaces_program_but_keeps_registers(self, make_machine):
        # 0x200: CALL $204 / 0x202: LD V0,#$05 / 0x204: LD V1,#$07 / 0x206: JP $206
        cpu, bus = make_machine(program=bytes([0x22, 0x04, 0x60, 0x05, 0x61, 0x07, 0x12, 0x06]))
        cpu.step()
        cpu.step()
        state = cpu.get_state()
        state.delay_timer = 7
        state.sound_timer = 3

        cpu.load_program(bytes([0x00, 0xE0]))

        assert state.pc == 0x200
        assert state.program_end == 0x202
        assert [bus.peek(0x200), bus.peek(0x201)] == [0x00, 0xE0]
        assert state.v[1] == 0x07
        assert state.sp == 1
        assert state.stack[0] == 0x202
        assert state.delay_timer == 7
        assert state.sound_timer == 3

    # @intent:test_case_reject ロード済みのマシンでも、拒否されたロードは以前のプログラムを変更しないことを検証します。
    @pytest.mark.parametrize("image", [b"", bytes([0xFF]) * 3585])
    def test_rejected_reload_keeps_loaded_program(self, make_machine, image):
        program = bytes([0x60, 0x05, 0x12, 0x02])
        cpu, bus = make_machine(program=program)
        cpu.step()
        state = cpu.get_state()

        with pytest.raises(InvalidProgram):
            cpu.load_program(image)

        assert state.pc == 0x202
        assert state.program_end == 0x204
        assert bytes(bus.peek(a) for a in range(0x200, 0x204)) == program
        assert bus.peek(0x204) == 0

    def test_invalid_program_is_value_error(self, make_machine):
        cpu, _ = make_machine()
        with pytest.raises(ValueError):
            cpu.load_program(b"")


class TestTimers:
    def test_timers_count_down_to_zero(self, make_machine):
        cpu, _ = make_machine()
        state = cpu.get_state()
        state.delay_timer = 2
        cpu.tick_timers()
        assert state.delay_timer == 1
        cpu.tick_timers()
        cpu.tick_timers()
        assert state.delay_timer == 0

    # @intent:test_case_tone サウンドタイマー動作中のティックでのみ音声が更新されることを検証します。
    def test_sound_timer_drives_tone(self, make_machine):
        audio = RecordingAudio()
        cpu, _ = make_machine(audio=audio)
        state = cpu.get_state()
        state.sound_timer = 2

        cpu.tick_timers()
        cpu.tick_timers()
        cpu.tick_timers()

        assert state.sound_timer == 0
        assert audio.calls == [True, False]

    def test_sixty_ticks_drain_delay_timer(self, make_machine):
        cpu, _ = make_machine()
        cpu.get_state().delay_timer = 30
        for _ in range(60):
            cpu.tick_timers()
        assert cpu.get_state().delay_timer == 0
