# retro_chip8/platform/keyboard.py
"""
スレッドセーフなキーパッド状態の実装。

ホスト（GUIスレッドなど）がpress/releaseで状態を更新し、
インタプリタ側のスレッドがis_pressed/wait_keyで参照します。
"""
import threading
from collections import deque
from typing import Deque, List, Optional

from retro_chip8.arch.chip8.constants import KEY_COUNT
from retro_chip8.core.errors import KeyWaitInterrupted


def _check_key(key: int) -> int:
    if not 0 <= key < KEY_COUNT:
        raise ValueError(f"Key {key} is outside the keypad range 0-{KEY_COUNT - 1}.")
    return key


# @intent:responsibility 16キーの押下状態と、新たに押されたキーの待ち行列を保持します。
class BufferedKeyboard:
    """
    Keyboardプロトコルの実装。

    wait_keyは呼び出し後に新しく押されたキーを返します。呼び出し前から押されていたキーは
    対象になりません。interrupt()により、待機中のwait_keyをKeyWaitInterruptedで中断できます。
    """
    def __init__(self):
        self._state: List[bool] = [False] * KEY_COUNT
        self._pending: Deque[int] = deque()
        self._condition = threading.Condition()
        # @intent:rationale 待機中の呼び出しだけを中断するため、世代番号で中断要求を区別します。
        self._interrupt_generation = 0

    def press(self, key: int) -> None:
        _check_key(key)
        with self._condition:
            if not self._state[key]:
                self._state[key] = True
                self._pending.append(key)
                self._condition.notify_all()

    def release(self, key: int) -> None:
        _check_key(key)
        with self._condition:
            self._state[key] = False

    def release_all(self) -> None:
        with self._condition:
            self._state = [False] * KEY_COUNT
            self._pending.clear()

    def is_pressed(self, key: int) -> bool:
        with self._condition:
            return self._state[key & 0xF]

    def pressed_keys(self) -> List[int]:
        with self._condition:
            return [k for k, down in enumerate(self._state) if down]

    # @intent:responsibility キーが押されるまで呼び出し元スレッドをブロックします。
    def wait_key(self, timeout: Optional[float] = None) -> int:
        with self._condition:
            self._pending.clear()
            generation = self._interrupt_generation
            notified = self._condition.wait_for(
                lambda: self._pending or self._interrupt_generation != generation,
                timeout=timeout,
            )
            if not notified:
                raise KeyWaitInterrupted("Key wait timed out")
            if self._interrupt_generation != generation:
                raise KeyWaitInterrupted()
            return self._pending.popleft()

    # @intent:responsibility 現在待機中のwait_keyを中断させます。待機者がいなければ何も起きません。
    def interrupt(self) -> None:
        with self._condition:
            self._interrupt_generation += 1
            self._condition.notify_all()
