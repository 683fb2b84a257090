# src/retro_chip8/ui/main_window.py
"""
メインウィンドウの実装。
画面表示を中央に、逆アセンブルとレジスタ/スタックをドックに配置し、
実行制御（Run/Stop/Step/Step Back/Reset）とファイル操作を提供します。
"""
import sys
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QApplication, QDockWidget, QTabWidget, QToolBar, QFileDialog, QMessageBox
)
from PySide6.QtGui import QPalette, QColor, QAction, QCloseEvent, QKeyEvent
from PySide6.QtCore import Qt, QThread, Signal, Slot

from retro_chip8.core.errors import EmulationError, KeyWaitInterrupted
from retro_chip8.config.models import SystemConfig
from retro_chip8.config.loader import ConfigLoader
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.loader.loader import load_program_file
from retro_chip8.host.scheduler import FrameScheduler
from retro_chip8.debugger.debugger import Debugger
from .adapters import QtDisplay, QtKeyboard, QtAudio
from .screen_view import ScreenView
from .register_view import RegisterView
from .stack_view import StackView
from .code_view import CodeView
from .fonts import get_monospace_font_family

WINDOW_TITLE = "Retro CHIP-8"

# @intent:responsibility インタプリタをバックグラウンドで実行します。
class EmulationThread(QThread):
    """
    mode="run"ではFrameScheduler.advance()を停止要求まで繰り返し、
    mode="step"ではデバッガで1命令だけ実行します。
    LD Vx, K のキー待ちでブロックしてもGUIスレッドは停止しません。
    """
    error_occurred = Signal(str)
    step_finished = Signal(object)

    def __init__(self, scheduler: FrameScheduler, debugger: Debugger, keyboard: QtKeyboard, mode: str = "run"):
        super().__init__()
        self.scheduler = scheduler
        self.debugger = debugger
        self.keyboard = keyboard
        self.mode = mode
        self._stop_requested = False

    def run(self):
        try:
            if self.mode == "step":
                self.step_finished.emit(self.debugger.step_instruction())
                return

            self.scheduler.resync()
            while not self._stop_requested:
                self.scheduler.advance()
                wait = self.scheduler.time_until_next_frame()
                if wait > 0:
                    self.msleep(max(1, int(wait * 1000)))
        except KeyWaitInterrupted:
            # 停止要求によるキー待ちの中断。PCはキー待ち命令に戻っている
            pass
        except EmulationError as e:
            self.error_occurred.emit(str(e))

    def request_stop(self):
        self._stop_requested = True
        self.keyboard.interrupt()


# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, config: Optional[SystemConfig] = None, parent=None):
        super(MainWindow, self).__init__(parent)
        self.setWindowTitle(WINDOW_TITLE)
        self.setGeometry(100, 100, 1200, 700)

        self.config = config or SystemConfig()
        self.rom_path: Optional[str] = None
        self.emulation_thread: Optional[EmulationThread] = None

        self.screen_view = ScreenView(
            self.config.display.scale, self.config.display.foreground, self.config.display.background
        )
        self.setCentralWidget(self.screen_view)

        self._set_dark_theme()
        self._create_toolbar()
        self._create_menus()
        self._create_navigation_pane()
        self._create_status_inspector()
        self._setup_backend()

        self._update_ui_state(False)
        self._refresh_inspectors()

    # @intent:responsibility 構成に従ってCPU、スケジューラ、デバッガとQtアダプタを生成し、接続します。
    def _setup_backend(self):
        self.display = QtDisplay()
        self.keyboard = QtKeyboard(self.config.keymap)
        self.audio = QtAudio()
        self.display.frame_ready.connect(self.screen_view.set_frame)
        self.audio.tone_changed.connect(self._on_tone_changed)

        builder = SystemBuilder()
        self.cpu, self.bus = builder.build_system(
            self.config, display=self.display, keyboard=self.keyboard, audio=self.audio
        )
        self.scheduler = builder.build_scheduler(self.cpu, self.config)
        self.debugger = Debugger(self.cpu)

        self.screen_view.set_colors(self.config.display.foreground, self.config.display.background)
        self.screen_view.set_scale(self.config.display.scale)
        self.register_view.set_cpu(self.cpu)
        self.code_view.reset_cache()

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_rom_action = QAction("Load ROM...", self)
        self.load_rom_action.setShortcut("Ctrl+O")
        self.load_rom_action.triggered.connect(self._open_rom_dialog)
        file_menu.addAction(self.load_rom_action)

        self.load_config_action = QAction("Load Config...", self)
        self.load_config_action.triggered.connect(self._open_config_dialog)
        file_menu.addAction(self.load_config_action)

    # @intent:responsibility 実行制御用のツールバーを作成します。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        toolbar.setFocusPolicy(Qt.NoFocus)
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self._run)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self._stop)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step)
        toolbar.addAction(self.step_action)

        self.step_back_action = QAction("Step Back", self)
        self.step_back_action.triggered.connect(self._step_back)
        toolbar.addAction(self.step_back_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self._reset)
        toolbar.addAction(self.reset_action)

    def _create_navigation_pane(self):
        nav_dock = QDockWidget("Code", self)
        nav_dock.setAllowedAreas(Qt.LeftDockWidgetArea)
        self.code_view = CodeView()
        nav_dock.setWidget(self.code_view)
        self.addDockWidget(Qt.LeftDockWidgetArea, nav_dock)

    def _create_status_inspector(self):
        status_dock = QDockWidget("Status Inspector", self)
        status_dock.setAllowedAreas(Qt.RightDockWidgetArea)
        tab_widget = QTabWidget()
        self.register_view = RegisterView()
        tab_widget.addTab(self.register_view, "Registers")
        self.stack_view = StackView()
        tab_widget.addTab(self.stack_view, "Stack")
        status_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.RightDockWidgetArea, status_dock)

    # @intent:responsibility 実行状態に応じてUIコンポーネントの有効/無効を切り替えます。
    def _update_ui_state(self, is_running: bool):
        loaded = self.cpu.get_state().is_loaded
        self.load_rom_action.setEnabled(not is_running)
        self.load_config_action.setEnabled(not is_running)
        self.run_action.setEnabled(not is_running and loaded)
        self.step_action.setEnabled(not is_running and loaded)
        self.step_back_action.setEnabled(not is_running and bool(self.debugger.get_history()))
        self.reset_action.setEnabled(not is_running)
        self.stop_action.setEnabled(is_running)

    @property
    def is_running(self) -> bool:
        return self.emulation_thread is not None and self.emulation_thread.isRunning()

    # @intent:responsibility 現在のマシン状態でインスペクタと画面を更新します。
    def _refresh_inspectors(self):
        state = self.cpu.get_state()
        labels = {addr: name for name, addr in self.cpu.get_symbol_map().items()}
        self.register_view.update_registers()
        self.stack_view.update_stack(state, labels)
        self.code_view.update_code(self.cpu, state.pc)
        self.screen_view.set_frame(self.cpu.framebuffer.copy())

    def _start_thread(self, mode: str):
        self.emulation_thread = EmulationThread(self.scheduler, self.debugger, self.keyboard, mode)
        self.emulation_thread.error_occurred.connect(self._on_emulation_error)
        self.emulation_thread.step_finished.connect(self._on_step_finished)
        self.emulation_thread.finished.connect(self._on_thread_finished)
        self._update_ui_state(True)
        self.emulation_thread.start()

    @Slot()
    def _run(self):
        # 連続実行はデバッガを経由しないため、ステップバック用の履歴は無効になる
        self.debugger.clear_history()
        self.statusBar().showMessage("Running...")
        self._start_thread("run")

    @Slot()
    def _step(self):
        self._start_thread("step")

    # @intent:responsibility 実行スレッドを停止させ、終了を待ちます。
    @Slot()
    def _stop(self):
        thread = self.emulation_thread
        if thread is None:
            return
        self.statusBar().showMessage("Stopping...")
        thread.request_stop()
        # キー待ちに入る直前に中断要求が届いた場合に備え、終了するまで中断を繰り返す
        while not thread.wait(50):
            self.keyboard.interrupt()

    @Slot()
    def _step_back(self):
        self.debugger.step_back()
        self._refresh_inspectors()
        self._update_ui_state(False)

    # @intent:responsibility マシンをリセットし、ロード済みのROMがあれば再ロードします。
    @Slot()
    def _reset(self):
        self.keyboard.release_all()
        self.cpu.reset()
        self.debugger.clear_history()
        self.audio.set_tone(False)
        if self.rom_path:
            self._load_program(self.rom_path)
        self.code_view.reset_cache()
        self._refresh_inspectors()
        self._update_ui_state(False)
        self.statusBar().showMessage("Reset")

    @Slot(object)
    def _on_step_finished(self, snapshot):
        if snapshot is not None:
            self.statusBar().showMessage(snapshot.metadata.symbol_info or "")

    @Slot(str)
    def _on_emulation_error(self, message: str):
        QMessageBox.critical(self, "Emulation Error", message)

    @Slot()
    def _on_thread_finished(self):
        self._refresh_inspectors()
        self._update_ui_state(False)
        if self.statusBar().currentMessage() in ("Running...", "Stopping..."):
            self.statusBar().showMessage("Stopped")

    @Slot(bool)
    def _on_tone_changed(self, active: bool):
        self.setWindowTitle(f"{WINDOW_TITLE} - BEEP" if active else WINDOW_TITLE)

    def _load_program(self, file_path: str):
        load_program_file(file_path, self.cpu)

    # @intent:responsibility ROMファイルをロードし、表示を初期化します。
    def load_rom(self, file_path: str) -> None:
        """
        失敗した場合は例外をそのまま送出します。マシンはリセットされた状態になります。
        """
        self.cpu.reset()
        self.debugger.clear_history()
        self.code_view.reset_cache()
        try:
            self._load_program(file_path)
        finally:
            self._refresh_inspectors()
            self._update_ui_state(False)
        self.rom_path = file_path
        self.statusBar().showMessage(f"Loaded {file_path}")

    # @intent:responsibility 構成を適用し、バックエンドを作り直します。
    def apply_config(self, config: SystemConfig) -> None:
        self.config = config
        self._setup_backend()
        if self.rom_path:
            self._load_program(self.rom_path)
        self._refresh_inspectors()
        self._update_ui_state(False)

    @Slot()
    def _open_rom_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open CHIP-8 Program", "",
            "CHIP-8 Programs (*.ch8 *.c8 *.hex *.asm *.s);;All Files (*)"
        )
        if file_name:
            try:
                self.load_rom(file_name)
            except (EmulationError, OSError, ValueError) as e:
                self.rom_path = None
                QMessageBox.critical(self, "Error", f"Failed to load program: {e}")

    @Slot()
    def _open_config_dialog(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open Config", "", "YAML Files (*.yaml *.yml);;All Files (*)"
        )
        if file_name:
            try:
                self.apply_config(ConfigLoader().load_from_file(file_name))
                self.statusBar().showMessage(f"Loaded config {file_name}")
            except (EmulationError, OSError, ValueError) as e:
                QMessageBox.critical(self, "Error", f"Failed to load config: {e}")

    # @intent:responsibility ホストのキー入力をキーパッドへ転送します。キーリピートは無視します。
    def keyPressEvent(self, event: QKeyEvent):
        if not event.isAutoRepeat() and self.keyboard.press_host_key(event.text()):
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent):
        if not event.isAutoRepeat() and self.keyboard.release_host_key(event.text()):
            event.accept()
            return
        super().keyReleaseEvent(event)

    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
            QTabWidget::pane {{ border-top: 2px solid #2A82DA; }}
            QTabBar::tab {{ background: #1E1E1E; padding: 8px 12px; min-width: 80px; }}
            QTabBar::tab:selected {{ background: #101010; border: 1px solid #2A82DA; }}
        """)

    # @intent:responsibility アプリケーション終了時に呼ばれ、バックグラウンドスレッドを安全に停止します。
    def closeEvent(self, event: QCloseEvent):
        if self.is_running:
            # UI更新シグナルを切断してから停止を待つ
            try:
                self.emulation_thread.finished.disconnect(self._on_thread_finished)
            except RuntimeError:
                pass
            self._stop()
        event.accept()


if __name__ == '__main__':
    app = QApplication(sys.argv)
    main_win = MainWindow()
    main_win.show()
    sys.exit(app.exec())
