# retro_chip8/platform/console.py
"""
テキスト端末向けのホストコラボレータ。
フレームバッファをブロック文字で描画し、ブザー状態を端末タイトルに表示します。
"""
import sys
from typing import Callable, Optional, TextIO

# カーソルをホームへ移動 / 画面消去
_CURSOR_HOME = "\x1b[H"
_CLEAR_SCREEN = "\x1b[2J"


# @intent:responsibility フレームバッファをテキストストリームへ描画します。
class ConsoleDisplay:
    def __init__(self, stream: Optional[TextIO] = None, on: str = "█", off: str = " ",
                 use_escape: bool = True, live: bool = True):
        self._stream = stream if stream is not None else sys.stdout
        self._on = on
        self._off = off
        self._use_escape = use_escape
        self._live = live  # Falseの場合は描画内容を保持するだけで出力しない
        self.last_frame: Optional[str] = None

    def clear(self) -> None:
        self.last_frame = None
        if self._live and self._use_escape:
            self._stream.write(_CLEAR_SCREEN)
            self._stream.flush()

    def render(self, framebuffer) -> None:
        text = framebuffer.to_text(self._on, self._off)
        self.last_frame = text
        if not self._live:
            return
        if self._use_escape:
            self._stream.write(_CURSOR_HOME)
        self._stream.write(text + "\n")
        self._stream.flush()


# @intent:responsibility ブザー状態をコールバックまたは端末タイトルで通知します。
class TitleAudio:
    """
    実際の音は鳴らさず、トーンの有無をタイトル文字列として報告します。
    """
    def __init__(self, title: str = "CHIP-8", stream: Optional[TextIO] = None,
                 callback: Optional[Callable[[str], None]] = None):
        self._title = title
        self._stream = stream
        self._callback = callback
        self.active = False

    def set_tone(self, active: bool) -> None:
        self.active = bool(active)
        text = f"{self._title}: BEEPING" if self.active else self._title
        if self._callback is not None:
            self._callback(text)
        elif self._stream is not None:
            # OSC 0: ウィンドウタイトル設定
            self._stream.write(f"\x1b]0;{text}\x07")
            self._stream.flush()
