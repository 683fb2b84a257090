# src/retro_chip8/ui/stack_view.py
"""
コールスタック（戻りアドレス）の内容を表示するウィジェット。
"""
from typing import Dict, List, Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QPlainTextEdit
from PySide6.QtGui import QTextOption

from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.ui.fonts import get_monospace_font

# @intent:responsibility スタックの使用中エントリを、新しいものを先頭にして表示します。
class StackView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.editor = QPlainTextEdit(self)
        self.editor.setFont(get_monospace_font(10))
        self.editor.setReadOnly(True)
        self.editor.setWordWrapMode(QTextOption.NoWrap)
        self.editor.setStyleSheet("background-color: #101010; color: #BBBBBB;")
        self.layout.addWidget(self.editor)

    # @intent:utility_function 表示用の行を生成します。戻り先にラベルがあれば併記します。
    @staticmethod
    def format_entries(state: Chip8CpuState, symbols: Optional[Dict[int, str]] = None) -> List[str]:
        symbols = symbols or {}
        lines = []
        for depth in range(state.sp - 1, -1, -1):
            addr = state.stack[depth]
            label = symbols.get(addr)
            line = f"{depth:02d}: ${addr:03X}"
            if label:
                line += f"  ({label})"
            if depth == state.sp - 1:
                line += "  <- top"
            lines.append(line)
        return lines or ["(empty)"]

    def update_stack(self, state: Chip8CpuState, symbols: Optional[Dict[int, str]] = None):
        self.editor.setPlainText("\n".join(self.format_entries(state, symbols)))
