# tests/conftest.py
"""
テスト全体の共通設定。
GUIテストがディスプレイのない環境でも動作するよう、Qtのプラットフォームをoffscreenに固定します。
"""
import os
import random

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from retro_chip8.transport.bus import Bus, RAM
from retro_chip8.arch.chip8.cpu import Chip8Cpu


class RecordingDisplay:
    """clear/renderの呼び出しを記録するフェイク。"""
    def __init__(self):
        self.calls = []
        self.frames = []

    def clear(self):
        self.calls.append("clear")

    def render(self, framebuffer):
        self.calls.append("render")
        self.frames.append(framebuffer.copy())


class FakeKeyboard:
    """押下状態と、wait_keyで返すキーの列を指定できるフェイク。"""
    def __init__(self, pressed=(), queued=()):
        self.pressed = set(pressed)
        self.queued = list(queued)
        self.wait_calls = 0

    def is_pressed(self, key):
        return key in self.pressed

    def wait_key(self):
        self.wait_calls += 1
        return self.queued.pop(0)


class RecordingAudio:
    def __init__(self):
        self.calls = []

    def set_tone(self, active):
        self.calls.append(active)


@pytest.fixture
def make_machine():
    """
    4KB RAMを接続したリセット済みのChip8Cpuを生成するファクトリ。
    programを渡すとロードまで行います。
    """
    def _make(program=None, display=None, keyboard=None, audio=None, seed=0):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        cpu = Chip8Cpu(bus, display=display, keyboard=keyboard, audio=audio, rng=random.Random(seed))
        cpu.reset()
        if program is not None:
            cpu.load_program(program)
        return cpu, bus
    return _make
