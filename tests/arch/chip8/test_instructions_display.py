# tests/arch/chip8/test_instructions_display.py
"""
画面命令（CLS, DRW）の単体テスト。
"""
from conftest import RecordingDisplay
from retro_chip8.arch.chip8.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def _program(*words):
    return b"".join(bytes([w >> 8, w & 0xFF]) for w in words)


def _lit(framebuffer):
    return {(x, y) for y, row in enumerate(framebuffer.rows()) for x, p in enumerate(row) if p}


class TestClear:
    def test_cls_clears_and_notifies(self, make_machine):
        display = RecordingDisplay()
        cpu, _ = make_machine(program=_program(0x00E0), display=display)
        cpu.framebuffer.set_pixel(3, 3, True)
        cpu.step()
        assert cpu.framebuffer.is_blank()
        assert display.calls == ["clear", "render"]
        assert display.frames[-1].is_blank()


class TestDraw:
    # @intent:test_case フォント"0"のグリフを描画し、ピクセル配置と通知を検証します。
    def test_draw_font_glyph(self, make_machine):
        display = RecordingDisplay()
        # V0=0, V1=0, I=font(0), DRW V0, V1, 5
        cpu, _ = make_machine(program=_program(0x6000, 0x6100, 0xF029, 0xD015), display=display)
        cpu.step(4)
        rows = cpu.framebuffer.rows()
        assert rows[0][:4] == [True, True, True, True]
        assert rows[1][:4] == [True, False, False, True]
        assert rows[4][:4] == [True, True, True, True]
        assert cpu.get_state().vf == 0
        assert display.calls == ["render"]
        assert display.frames[-1] == cpu.framebuffer

    def test_redraw_erases_and_sets_collision(self, make_machine):
        cpu, _ = make_machine(program=_program(0xF029, 0xD015, 0xD015))
        cpu.step(2)
        assert not cpu.framebuffer.is_blank()
        cpu.step()
        assert cpu.framebuffer.is_blank()
        assert cpu.get_state().vf == 1

    def test_sprite_wraps_around_edges(self, make_machine):
        # 1行スプライト 0b11000001 を (62, 31) に描画
        cpu, bus = make_machine(program=_program(0x603E, 0x611F, 0xA300, 0xD011))
        bus.write(0x300, 0xC1)
        cpu.step(4)
        assert _lit(cpu.framebuffer) == {(62, 31), (63, 31), (5, 31)}

    def test_origin_is_taken_modulo_screen(self, make_machine):
        cpu, bus = make_machine(program=_program(0x6000 | (SCREEN_WIDTH + 2), 0x6100 | (SCREEN_HEIGHT + 1), 0xA300, 0xD011))
        bus.write(0x300, 0x80)
        cpu.step(4)
        assert _lit(cpu.framebuffer) == {(2, 1)}

    def test_coordinates_read_before_flag_reset(self, make_machine):
        # VFを座標として使う: DRW VF, VF, 1
        cpu, bus = make_machine(program=_program(0x6F05, 0xA300, 0xDFF1))
        bus.write(0x300, 0x80)
        cpu.step(3)
        assert _lit(cpu.framebuffer) == {(5, 5)}
        assert cpu.get_state().vf == 0

    def test_zero_height_draws_nothing(self, make_machine):
        display = RecordingDisplay()
        cpu, _ = make_machine(program=_program(0xD010), display=display)
        cpu.get_state().vf = 1
        cpu.step()
        assert cpu.framebuffer.is_blank()
        assert cpu.get_state().vf == 0
        assert display.calls == ["render"]
