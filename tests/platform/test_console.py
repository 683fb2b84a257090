# tests/platform/test_console.py
"""
テキスト端末向けコラボレータとNull実装のテスト。
"""
import io

import pytest

from retro_chip8.core.errors import KeyWaitInterrupted
from retro_chip8.arch.chip8.framebuffer import Framebuffer
from retro_chip8.platform.console import ConsoleDisplay, TitleAudio
from retro_chip8.platform.interfaces import Display, Audio
from retro_chip8.platform.null import NullDisplay, NullKeyboard, NullAudio


def _framebuffer():
    fb = Framebuffer(4, 2)
    fb.set_pixel(0, 0, True)
    fb.set_pixel(3, 1, True)
    return fb


class TestConsoleDisplay:
    def test_render_writes_frame(self):
        stream = io.StringIO()
        display = ConsoleDisplay(stream=stream, on="#", off=".", use_escape=False)
        display.render(_framebuffer())
        assert stream.getvalue() == "#...\n...#\n"
        assert display.last_frame == "#...\n...#"

    def test_escape_sequences(self):
        stream = io.StringIO()
        display = ConsoleDisplay(stream=stream, on="#", off=".")
        display.clear()
        display.render(_framebuffer())
        assert stream.getvalue() == "\x1b[2J\x1b[H#...\n...#\n"

    def test_not_live_only_keeps_frame(self):
        stream = io.StringIO()
        display = ConsoleDisplay(stream=stream, on="#", off=".", live=False)
        display.render(_framebuffer())
        display.clear()
        assert stream.getvalue() == ""
        assert display.last_frame is None

    def test_satisfies_protocol(self):
        assert isinstance(ConsoleDisplay(stream=io.StringIO()), Display)


class TestTitleAudio:
    def test_callback(self):
        titles = []
        audio = TitleAudio(title="Game", callback=titles.append)
        audio.set_tone(True)
        audio.set_tone(False)
        assert titles == ["Game: BEEPING", "Game"]
        assert not audio.active

    def test_osc_title(self):
        stream = io.StringIO()
        audio = TitleAudio(stream=stream)
        audio.set_tone(True)
        assert stream.getvalue() == "\x1b]0;CHIP-8: BEEPING\x07"
        assert audio.active
        assert isinstance(audio, Audio)


class TestNullCollaborators:
    def test_null_keyboard(self):
        keyboard = NullKeyboard()
        assert not keyboard.is_pressed(0)
        with pytest.raises(KeyWaitInterrupted):
            keyboard.wait_key()

    def test_null_display_and_audio(self):
        NullDisplay().clear()
        NullDisplay().render(Framebuffer())
        NullAudio().set_tone(True)
        assert isinstance(NullDisplay(), Display)
        assert isinstance(NullAudio(), Audio)
