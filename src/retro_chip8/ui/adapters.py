# src/retro_chip8/ui/adapters.py
"""
インタプリタのホストコラボレータ（表示、キー入力、音声）をQtのシグナルに接続するアダプタ。

インタプリタはEmulationThread上で動作するため、各アダプタはシグナルを発行するだけで
ウィジェットを直接操作しません（受信側へはQueuedConnectionで配送されます）。
"""
from typing import Dict, Optional

from PySide6.QtCore import QObject, Signal

from retro_chip8.arch.chip8.framebuffer import Framebuffer
from retro_chip8.config.models import DEFAULT_KEYMAP
from retro_chip8.platform.keyboard import BufferedKeyboard

# @intent:responsibility 描画要求をフレームバッファのコピーとともにシグナルで通知します。
class QtDisplay(QObject):
    frame_ready = Signal(object)

    def clear(self) -> None:
        # 消去直後に必ずrenderが続くため、ここでは何もしない
        pass

    # @intent:rationale インタプリタ側のフレームバッファは実行中に変化し続けるため、コピーを渡します。
    def render(self, framebuffer: Framebuffer) -> None:
        self.frame_ready.emit(framebuffer.copy())


# @intent:responsibility ホストのキー文字をキーマップでCHIP-8キーに変換してBufferedKeyboardに反映します。
class QtKeyboard(BufferedKeyboard):
    def __init__(self, keymap: Optional[Dict[str, int]] = None):
        super().__init__()
        self.set_keymap(keymap if keymap is not None else DEFAULT_KEYMAP)

    def set_keymap(self, keymap: Dict[str, int]) -> None:
        self._keymap = {str(k).upper(): v for k, v in keymap.items()}

    def key_for_text(self, text: str) -> Optional[int]:
        if not text:
            return None
        return self._keymap.get(text.upper())

    # @intent:responsibility キーマップに含まれるキーであれば押下として扱い、Trueを返します。
    def press_host_key(self, text: str) -> bool:
        key = self.key_for_text(text)
        if key is None:
            return False
        self.press(key)
        return True

    def release_host_key(self, text: str) -> bool:
        key = self.key_for_text(text)
        if key is None:
            return False
        self.release(key)
        return True


# @intent:responsibility ブザーのON/OFFが切り替わったときだけシグナルを発行します。
class QtAudio(QObject):
    tone_changed = Signal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.active = False

    def set_tone(self, active: bool) -> None:
        active = bool(active)
        if active != self.active:
            self.active = active
            self.tone_changed.emit(active)
