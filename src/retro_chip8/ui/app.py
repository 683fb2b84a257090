# src/retro_chip8/ui/app.py
"""
アプリケーションのエントリポイント。
コマンドライン引数を解釈し、GUI（メインウィンドウ）またはヘッドレス実行を起動します。
"""
import argparse
import sys
from typing import List, Optional

from retro_chip8.core.errors import EmulationError
from retro_chip8.config.models import SystemConfig
from retro_chip8.config.loader import ConfigLoader


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retro-chip8", description="CHIP-8 virtual machine and tracer")
    parser.add_argument("rom", nargs="?", help="program to load (.ch8, .hex, .asm)")
    parser.add_argument("--config", help="YAML system configuration")
    parser.add_argument("--headless", action="store_true", help="run without a window and print the final screen")
    parser.add_argument("--frames", type=int, default=60, help="frames to run in headless mode (default: 60)")
    return parser


# @intent:responsibility 引数に従ってアプリケーションを起動し、終了コードを返します。
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()

    if args.headless:
        if not args.rom:
            parser.error("--headless requires a program to run")
        # GUI依存を読み込まずに実行できるよう、ここで遅延インポートする
        from retro_chip8.host.headless import run_headless
        try:
            run_headless(args.rom, args.frames, config)
        except EmulationError:
            return 1
        return 0

    from PySide6.QtWidgets import QApplication
    from .main_window import MainWindow

    app = QApplication(sys.argv if argv is None else [sys.argv[0]] + list(argv))
    main_win = MainWindow(config)
    if args.rom:
        main_win.load_rom(args.rom)
    main_win.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
