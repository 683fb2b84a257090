# src/retro_chip8/ui/screen_view.py
"""
CHIP-8の画面（64x32）を拡大表示するウィジェット。
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtGui import QColor, QImage, QPainter
from PySide6.QtCore import Qt, QSize, Slot

from retro_chip8.arch.chip8.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from retro_chip8.arch.chip8.framebuffer import Framebuffer

# @intent:responsibility フレームバッファを設定された倍率と色で描画します。
class ScreenView(QWidget):
    """
    受け取ったフレームバッファを1ピクセル=1画素のQImageに変換し、
    ウィジェットの大きさに合わせて整数倍で拡大して描画します。
    """
    def __init__(self, scale: int = 10, foreground: str = "#33FF66",
                 background: str = "#101010", parent=None):
        super().__init__(parent)
        self._scale = scale
        self._foreground = QColor(foreground)
        self._background = QColor(background)
        self._frame: Framebuffer = Framebuffer()
        self._image: QImage = self.render_image()
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setFocusPolicy(Qt.StrongFocus)

    @property
    def frame(self) -> Framebuffer:
        return self._frame

    def set_colors(self, foreground: str, background: str) -> None:
        self._foreground = QColor(foreground)
        self._background = QColor(background)
        self._image = self.render_image()
        self.update()

    def set_scale(self, scale: int) -> None:
        self._scale = max(1, scale)
        self.updateGeometry()
        self.update()

    # @intent:responsibility 表示するフレームを更新します。QtDisplay.frame_readyに接続されます。
    @Slot(object)
    def set_frame(self, framebuffer: Framebuffer) -> None:
        self._frame = framebuffer
        self._image = self.render_image()
        self.update()

    # @intent:responsibility 現在のフレームを等倍のQImageに変換します。
    def render_image(self) -> QImage:
        fb = self._frame
        image = QImage(fb.width, fb.height, QImage.Format_RGB32)
        image.fill(self._background)
        fg = self._foreground.rgb()
        for y, row in enumerate(fb.rows()):
            for x, lit in enumerate(row):
                if lit:
                    image.setPixel(x, y, fg)
        return image

    def sizeHint(self) -> QSize:
        return QSize(SCREEN_WIDTH * self._scale, SCREEN_HEIGHT * self._scale)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._background)

        # 縦横比を保ったまま整数倍で拡大し、中央に配置する
        fb = self._frame
        scale = max(1, min(self.width() // fb.width, self.height() // fb.height))
        w, h = fb.width * scale, fb.height * scale
        x = (self.width() - w) // 2
        y = (self.height() - h) // 2
        painter.drawImage(x, y, self._image.scaled(w, h))
        painter.end()
