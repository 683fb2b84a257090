# tests/arch/chip8/test_state.py
"""
Chip8CpuStateの単体テスト。
"""
from retro_chip8.arch.chip8.state import Chip8CpuState

# @intent:test_suite 初期値、VFアクセサ、完全コピーを検証します。

class TestChip8CpuState:
    def test_defaults(self):
        state = Chip8CpuState()
        assert state.pc == 0x200
        assert state.sp == 0
        assert state.v == [0] * 16
        assert state.stack == [0] * 16
        assert state.i == 0
        assert (state.delay_timer, state.sound_timer) == (0, 0)
        assert not state.is_loaded

    def test_vf_accessor(self):
        state = Chip8CpuState()
        state.vf = 0x101
        assert state.v[15] == 0x01
        assert state.vf == 0x01

    # @intent:test_case_copy コピーが可変フィールド（レジスタ、スタック、画面）を共有しないことを検証します。
    def test_copy_is_deep(self):
        state = Chip8CpuState()
        state.v[3] = 7
        state.stack[0] = 0x204
        state.framebuffer.set_pixel(0, 0, True)
        clone = state.copy()

        clone.v[3] = 9
        clone.stack[0] = 0x300
        clone.framebuffer.set_pixel(0, 0, False)

        assert state.v[3] == 7
        assert state.stack[0] == 0x204
        assert state.framebuffer.get_pixel(0, 0)
