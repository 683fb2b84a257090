# retro_chip8/platform/null.py
"""
何も出力しない（入力のない）ホストコラボレータ。
コラボレータを指定せずにCPUを生成した場合の既定値として使用されます。
"""
from retro_chip8.core.errors import KeyWaitInterrupted


class NullDisplay:
    def clear(self) -> None:
        pass

    def render(self, framebuffer) -> None:
        pass


# @intent:responsibility 常に全キーが離されているキーボード。
class NullKeyboard:
    def is_pressed(self, key: int) -> bool:
        return False

    # @intent:rationale 入力源が存在しないため、永久にブロックする代わりに中断として扱います。
    def wait_key(self) -> int:
        raise KeyWaitInterrupted("No key input source attached")


class NullAudio:
    def set_tone(self, active: bool) -> None:
        pass
