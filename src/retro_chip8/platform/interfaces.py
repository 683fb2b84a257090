# retro_chip8/platform/interfaces.py
"""
Platform Layer (ホスト連携インターフェース)

インタプリタが参照する3つのホスト側コラボレータ（表示、キー入力、音声）の契約を定義します。
継承を必要としない構造的な型（Protocol）として定義し、テストでは任意のフェイクを注入できます。
"""
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from retro_chip8.arch.chip8.framebuffer import Framebuffer


# @intent:responsibility フレームバッファの出力先を表します。
@runtime_checkable
class Display(Protocol):
    def clear(self) -> None:
        """外部で保持している描画内容を消去します。"""
        ...

    def render(self, framebuffer: "Framebuffer") -> None:
        """現在のフレームバッファ全体を出力先へ送ります。"""
        ...


# @intent:responsibility 16キーのキーパッド状態を提供します。インタプリタは参照のみ行います。
@runtime_checkable
class Keyboard(Protocol):
    def is_pressed(self, key: int) -> bool:
        ...

    def wait_key(self) -> int:
        """0-15のいずれかのキーが押されるまでブロックし、そのキー番号を返します。"""
        ...


# @intent:responsibility ブザー音の出力先を表します。
@runtime_checkable
class Audio(Protocol):
    def set_tone(self, active: bool) -> None:
        ...
