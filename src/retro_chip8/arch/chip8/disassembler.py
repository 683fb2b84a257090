# src/retro_chip8/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータを2バイト単位で解析し、CHIP-8のニーモニックに変換します。
Instruction Layerのデコードロジックを再利用しますが、バスアクセスログを汚さないように
PeekBusラッパーを経由して読み込みます。
"""
from typing import List, Tuple

from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.constants import MEMORY_SIZE
from retro_chip8.arch.chip8.instructions import decode_opcode

# @intent:utility_class バスへのアクセスをPeek（ログなし読み込み）に変換するラッパーです。
class PeekBus:
    """
    Busのラッパー。readメソッドをpeek（ログなし読み込み）にリダイレクトします。
    """
    def __init__(self, bus: Bus):
        self._bus = bus

    def read(self, address: int) -> int:
        return self._bus.peek(address)

# @intent:responsibility 1命令分を表示用テキストに変換します。未定義の命令ワードはデータとして表示します。
def format_word(word: int) -> str:
    operation = decode_opcode(word)
    if operation.is_unknown:
        return f"DW ${word:04X}"
    return operation.to_text()

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    指定された範囲のメモリを逆アセンブルします。
    奇数アドレスから開始した場合もそのまま2バイト単位で読み進めます。

    Returns:
        List of (address, hex_bytes, mnemonic) tuples.
    """
    result = []
    peek_bus = PeekBus(bus)
    current_addr = start_addr
    end_addr = min(start_addr + length, MEMORY_SIZE)

    # 命令は2バイト固定のため、末尾に1バイトだけ残る場合は表示しない
    while current_addr + 1 < end_addr:
        high = peek_bus.read(current_addr)
        low = peek_bus.read(current_addr + 1)
        word = (high << 8) | low
        result.append((current_addr, f"{high:02X} {low:02X}", format_word(word)))
        current_addr += 2

    return result
