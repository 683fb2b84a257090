"""
逆アセンブルコードを表示するウィジェット。
"""
from typing import List, Tuple

from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView
from PySide6.QtGui import QColor

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.ui.fonts import get_monospace_font

# @intent:responsibility 逆アセンブルされたコードを表形式で表示し、現在のPCをハイライトするUIウィジェットを提供します。
class CodeView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(4)
        self.table.setHorizontalHeaderLabels(["Address", "Label", "Bytes", "Mnemonic"])
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(1, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(3, QHeaderView.Stretch)

        self.table.setFont(get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setShowGrid(False)
        self.table.setStyleSheet("background-color: #101010; color: #BBBBBB; gridline-color: #303030;")

        self.layout.addWidget(self.table)

        # 現在表示している逆アセンブルデータ [(addr, hex, mnemonic), ...]
        self.disassembled_data: List[Tuple[int, str, str]] = []
        self.highlighted_row = -1

    # @intent:responsibility PCを含むプログラム範囲を逆アセンブルして表示を更新します。
    def update_code(self, cpu: Chip8Cpu, pc: int):
        """
        PCが現在の表示範囲内の命令境界にあれば、再描画せずにハイライト移動のみ行います。
        範囲外（データ領域へのジャンプや奇数アドレス）の場合はPCから逆アセンブルし直します。
        """
        row_index = self._row_of(pc)
        if row_index == -1:
            state = cpu.get_state()
            start_addr = pc
            length = max(state.program_end - start_addr, 2)
            self.disassembled_data = cpu.disassemble(start_addr, length)
            labels = {addr: name for name, addr in cpu.get_symbol_map().items()}

            self.table.setRowCount(len(self.disassembled_data))
            for row, (addr, hex_dump, mnemonic) in enumerate(self.disassembled_data):
                self.table.setItem(row, 0, QTableWidgetItem(f"{addr:03X}"))
                self.table.setItem(row, 1, QTableWidgetItem(labels.get(addr, "")))
                self.table.setItem(row, 2, QTableWidgetItem(hex_dump))
                self.table.setItem(row, 3, QTableWidgetItem(mnemonic))
            row_index = self._row_of(pc)

        self._highlight(row_index)

    def _row_of(self, pc: int) -> int:
        for i, (addr, _, _) in enumerate(self.disassembled_data):
            if addr == pc:
                return i
        return -1

    def _highlight(self, row_index: int):
        bg_color_highlight = QColor("#404000")
        bg_color_normal = QColor("#101010")

        for row in range(self.table.rowCount()):
            color = bg_color_highlight if row == row_index else bg_color_normal
            for col in range(self.table.columnCount()):
                item = self.table.item(row, col)
                if item is not None:
                    item.setBackground(color)
        self.highlighted_row = row_index

        if row_index != -1:
            # ハイライト行の先も数行見えるようにスクロールする
            scroll_margin = 5
            self.table.scrollToItem(self.table.item(row_index, 0), QTableWidget.EnsureVisible)
            look_ahead_index = min(row_index + scroll_margin, self.table.rowCount() - 1)
            if look_ahead_index > row_index:
                self.table.scrollToItem(self.table.item(look_ahead_index, 0), QTableWidget.EnsureVisible)

    # @intent:responsibility 内部キャッシュをクリアします。プログラムのロード後に呼び出してください。
    def reset_cache(self):
        self.disassembled_data = []
        self.highlighted_row = -1
        self.table.setRowCount(0)
