# tests/arch/chip8/test_instructions_alu.py
"""
算術論理演算命令（7XNN, 8XY_, CXNN）の単体テスト。
"""
import pytest


def _run(make_machine, words, setup=None, steps=None, seed=0):
    program = b"".join(bytes([w >> 8, w & 0xFF]) for w in words)
    cpu, bus = make_machine(program=program, seed=seed)
    if setup:
        setup(cpu.get_state())
    cpu.step(steps or len(words))
    return cpu.get_state()


def _regs(**values):
    def setup(state):
        for name, value in values.items():
            state.v[int(name[1:], 16)] = value
    return setup


class TestAddImmediate:
    def test_add_wraps_without_flag(self, make_machine):
        state = _run(make_machine, [0x70FF], _regs(V0=0x02, VF=0x55))
        assert state.v[0] == 0x01
        assert state.vf == 0x55


class TestLogic:
    def test_ld_reg(self, make_machine):
        state = _run(make_machine, [0x8120], _regs(V2=0x99))
        assert state.v[1] == 0x99

    # @intent:test_case 論理演算がVFを0にすることを検証します。
    @pytest.mark.parametrize("word, expected", [
        (0x8121, 0xF0 | 0x3C),
        (0x8122, 0xF0 & 0x3C),
        (0x8123, 0xF0 ^ 0x3C),
    ])
    def test_logic_resets_flag(self, make_machine, word, expected):
        state = _run(make_machine, [word], _regs(V1=0xF0, V2=0x3C, VF=1))
        assert state.v[1] == expected
        assert state.vf == 0


class TestArithmetic:
    def test_add_with_carry(self, make_machine):
        state = _run(make_machine, [0x8124], _regs(V1=0xF0, V2=0x20))
        assert state.v[1] == 0x10
        assert state.vf == 1

    def test_add_without_carry(self, make_machine):
        state = _run(make_machine, [0x8124], _regs(V1=0x10, V2=0x20, VF=1))
        assert state.v[1] == 0x30
        assert state.vf == 0

    def test_sub_no_borrow_sets_flag(self, make_machine):
        state = _run(make_machine, [0x8125], _regs(V1=0x30, V2=0x10))
        assert state.v[1] == 0x20
        assert state.vf == 1

    def test_sub_equal_sets_flag(self, make_machine):
        state = _run(make_machine, [0x8125], _regs(V1=0x30, V2=0x30))
        assert state.v[1] == 0
        assert state.vf == 1

    def test_sub_borrow_clears_flag(self, make_machine):
        state = _run(make_machine, [0x8125], _regs(V1=0x10, V2=0x30, VF=1))
        assert state.v[1] == 0xE0
        assert state.vf == 0

    def test_subn(self, make_machine):
        state = _run(make_machine, [0x8127], _regs(V1=0x10, V2=0x30))
        assert state.v[1] == 0x20
        assert state.vf == 1

        state = _run(make_machine, [0x8127], _regs(V1=0x30, V2=0x10))
        assert state.v[1] == 0xE0
        assert state.vf == 0

    def test_shr_uses_vx(self, make_machine):
        state = _run(make_machine, [0x8126], _regs(V1=0x05, V2=0xFF))
        assert state.v[1] == 0x02
        assert state.vf == 1
        assert state.v[2] == 0xFF

    def test_shl_uses_vx(self, make_machine):
        state = _run(make_machine, [0x812E], _regs(V1=0x81))
        assert state.v[1] == 0x02
        assert state.vf == 1

        state = _run(make_machine, [0x812E], _regs(V1=0x41, VF=1))
        assert state.v[1] == 0x82
        assert state.vf == 0

    # @intent:test_case 転送先がVFの場合は演算結果がフラグより優先されることを検証します。
    def test_result_wins_when_target_is_vf(self, make_machine):
        state = _run(make_machine, [0x8F14], _regs(VF=0xF0, V1=0x20))
        assert state.vf == 0x10

        state = _run(make_machine, [0x8F06], _regs(VF=0x03))
        assert state.vf == 0x01

        state = _run(make_machine, [0x8F15], _regs(VF=0x30, V1=0x10))
        assert state.vf == 0x20


class TestRandom:
    def test_rnd_is_masked(self, make_machine):
        state = _run(make_machine, [0xC00F, 0xC100, 0xC2FF], seed=1234)
        assert 0 <= state.v[0] <= 0x0F
        assert state.v[1] == 0

    def test_rnd_is_reproducible_with_seed(self, make_machine):
        words = [0xC0FF, 0xC1FF, 0xC2FF, 0xC3FF]
        first = _run(make_machine, words, seed=42)
        second = _run(make_machine, words, seed=42)
        assert first.v[:4] == second.v[:4]


class TestShiftEdges:
    @pytest.mark.parametrize("word, value", [(0x8016, 0x01), (0x801E, 0x80)])
    def test_shift_out_last_bit(self, make_machine, word, value):
        state = _run(make_machine, [word], _regs(V0=value))
        assert state.v[0] == 0
        assert state.vf == 1
