# retro_chip8/loader/loader.py
"""
プログラムローダーモジュール。
生のROMイメージ（.ch8）、Intel HEX、アセンブリソースのロードをサポートします。

いずれのローダーもプログラムイメージを組み立ててからChip8Cpu.load_programに渡すため、
プログラム範囲（PROGRAM_BASEから）の検査はCPU側で一括して行われます。
"""
import os
from typing import Iterable, List, Tuple

from retro_chip8.common.types import SymbolMap
from retro_chip8.core.errors import InvalidProgram
from retro_chip8.arch.chip8.constants import MAX_PROGRAM_SIZE, MEMORY_SIZE, PROGRAM_BASE
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.loader.assembler import Chip8Assembler


# @intent:utility_function (アドレス, バイト)の列を、baseから始まる連続したプログラムイメージに変換します。
def to_program_image(binary_data: Iterable[Tuple[int, int]], base: int = PROGRAM_BASE) -> bytes:
    """
    アドレスの隙間は0で埋められます。base未満のアドレスを含む場合はInvalidProgramを送出します。
    アドレス空間（0xFFF）を超えるデータも、イメージを確保する前にInvalidProgramとして拒否します。
    """
    entries = list(binary_data)
    if not entries:
        return b""

    lowest = min(addr for addr, _ in entries)
    if lowest < base:
        raise InvalidProgram(f"Program data at {lowest:#05x} lies below the load address {base:#05x}.")

    highest = max(addr for addr, _ in entries)
    if highest >= MEMORY_SIZE or highest - base + 1 > MAX_PROGRAM_SIZE:
        raise InvalidProgram(f"Program data at {highest:#x} lies outside the {MEMORY_SIZE}-byte address space.")

    image = bytearray(highest - base + 1)
    for addr, value in entries:
        image[addr - base] = value & 0xFF
    return bytes(image)


class RomLoader:
    """
    生のバイナリROM（.ch8）を読み込むローダー。
    """
    def load_rom(self, file_path: str, cpu: Chip8Cpu) -> None:
        with open(file_path, 'rb') as f:
            data = f.read()
        cpu.load_program(data)


class IntelHexLoader:
    """
    Intel HEX形式のファイルを解析し、プログラムイメージとしてロードするローダー。
    """
    def load_intel_hex(self, file_path: str, cpu: Chip8Cpu) -> None:
        binary_data = self.parse_intel_hex(file_path)
        cpu.load_program(to_program_image(binary_data))

    # @intent:responsibility Intel HEXファイルを(アドレス, バイト)のリストに変換します。
    def parse_intel_hex(self, file_path: str) -> List[Tuple[int, int]]:
        binary_data: List[Tuple[int, int]] = []
        extended_address = 0x0000

        with open(file_path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or not line.startswith(':'):
                    continue

                comment_start = line.find(';')
                if comment_start != -1:
                    line = line[:comment_start].strip()

                if len(line) < 11:
                    raise ValueError(f"Invalid Intel HEX record format on line {line_num}: Too short - {line}")

                try:
                    data_length = int(line[1:3], 16)
                    address_field = int(line[3:7], 16)
                    record_type = int(line[7:9], 16)
                    data_part_str = line[9:-2]
                    checksum_field = int(line[-2:], 16)

                    if len(data_part_str) != data_length * 2:
                        raise ValueError(f"Data length mismatch on line {line_num}")

                    data_bytes = [int(data_part_str[i * 2:i * 2 + 2], 16) for i in range(data_length)]
                except ValueError as e:
                    raise ValueError(f"Error parsing Intel HEX line {line_num}: {line} - {e}") from e

                checksum_sum = data_length + (address_field >> 8) + (address_field & 0xFF) + record_type + sum(data_bytes)
                calculated_checksum = (-checksum_sum) & 0xFF
                if calculated_checksum != checksum_field:
                    raise ValueError(
                        f"Checksum mismatch on line {line_num}: Calculated {calculated_checksum:02X}, Expected {checksum_field:02X}"
                    )

                if record_type == 0x00:
                    load_address = extended_address + address_field
                    for i, byte_data in enumerate(data_bytes):
                        binary_data.append((load_address + i, byte_data))
                elif record_type == 0x01:
                    break
                elif record_type == 0x02:
                    extended_address = int(data_part_str, 16) << 4
                elif record_type == 0x04:
                    extended_address = int(data_part_str, 16) << 16
                elif record_type in (0x03, 0x05):
                    # 開始アドレス指定。CHIP-8は常に0x200から実行するため無視する
                    pass
                else:
                    raise ValueError(f"Unknown Intel HEX record type {record_type:02X} on line {line_num}")

        return binary_data


class AssemblyLoader:
    """
    アセンブリソースコードをアセンブルし、シンボル情報とともにロードするローダー。
    """
    def __init__(self):
        self._assembler = Chip8Assembler()

    def load_assembly(self, file_path: str, cpu: Chip8Cpu) -> SymbolMap:
        with open(file_path, 'r', encoding="utf-8") as f:
            lines = f.readlines()

        symbol_map, binary_data = self._assembler.assemble(lines)
        cpu.load_program(to_program_image(binary_data))
        cpu.set_symbol_map(symbol_map)
        return symbol_map


# @intent:responsibility 拡張子からローダーを選択してプログラムファイルをロードします。
def load_program_file(file_path: str, cpu: Chip8Cpu) -> SymbolMap:
    """
    .hexはIntel HEX、.asm/.sはアセンブリソース、それ以外は生のROMとして扱います。
    戻り値はシンボルマップ（バイナリの場合は空）です。
    """
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".hex":
        IntelHexLoader().load_intel_hex(file_path, cpu)
        cpu.set_symbol_map({})
        return {}
    if ext in (".asm", ".s"):
        return AssemblyLoader().load_assembly(file_path, cpu)
    RomLoader().load_rom(file_path, cpu)
    cpu.set_symbol_map({})
    return {}
