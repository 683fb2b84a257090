# retro_chip8/loader/assembler.py
"""
CHIP-8用のアセンブラ実装。
AssemblyLoaderから利用されます。

命令の符号化はInstruction Layerのデコード表（DECODE_MAP）を逆引きして行うため、
逆アセンブラが出力する書式をそのまま再アセンブルできます。
"""
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from retro_chip8.common.types import SymbolMap
from retro_chip8.arch.chip8.constants import PROGRAM_BASE
from retro_chip8.arch.chip8.instructions.maps import DECODE_MAP

# @intent:responsibility アセンブラの共通インターフェースを定義します。
class BaseAssembler(ABC):
    @abstractmethod
    def assemble(self, lines: List[str]) -> Tuple[SymbolMap, List[Tuple[int, int]]]:
        """
        アセンブリソースを行単位で解析し、シンボルマップとバイナリデータを返します。
        """
        pass

    def _parse_line(self, line: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        line = line.split(';')[0].strip()
        if not line:
            return None, None, None

        label = None
        if ':' in line:
            label, rest = line.split(':', 1)
            label = label.strip()
            line = rest.strip()

        if not line:
            return label, None, None

        parts = re.split(r'\s+', line, maxsplit=1)
        mnemonic = parts[0].upper()
        operands = parts[1] if len(parts) > 1 else ""

        return label, mnemonic, operands

    # @intent:utility_function 多様な数値表現（$, 0x, 末尾h, 10進）およびラベル名を数値に変換します。
    def _parse_val(self, val_str: str, symbol_map: SymbolMap) -> int:
        val_str = val_str.strip()
        if val_str.startswith('$'):
            return int(val_str[1:], 16)
        if val_str.lower().startswith('0x'):
            return int(val_str, 16)
        if re.fullmatch(r'[0-9][0-9A-Fa-f]*[hH]', val_str):
            return int(val_str[:-1], 16)
        if re.fullmatch(r'[0-9]+', val_str):
            return int(val_str)
        if val_str in symbol_map:
            return symbol_map[val_str]
        raise ValueError(f"Undefined symbol or invalid value: {val_str}")


# @intent:constant 単独で書かれるオペランドキーワード。
_KEYWORDS = {"I", "DT", "ST", "K", "F", "B", "[I]"}

# @intent:constant パターン中のフィールド名と、そのビット位置・最大値。
_FIELD_LAYOUT = {
    "x": (8, 0xF),
    "y": (4, 0xF),
    "n": (0, 0xF),
    "nn": (0, 0xFF),
    "nnn": (0, 0xFFF),
}


# @intent:responsibility オペランド書式（例: "V{x:X}", "#${nn:02X}"）を(種別, 値)に分類します。
def _classify_template(template: str) -> Tuple[str, str]:
    match = re.fullmatch(r'(V|#\$|\$)\{(\w+):\w+\}', template)
    if match is None:
        return "LITERAL", template
    prefix, field_name = match.groups()
    kind = {"V": "REG", "#$": "IMM", "$": "ADDR"}[prefix]
    return kind, field_name


# @intent:utility_function DECODE_MAPからニーモニックごとの符号化候補を作ります。
def _build_encoding_table() -> Dict[str, List[Tuple[int, List[Tuple[str, str]]]]]:
    table: Dict[str, List[Tuple[int, List[Tuple[str, str]]]]] = {}
    for pattern, (mnemonic, templates) in DECODE_MAP.items():
        base_word = int(re.sub(r'[XYN]', '0', pattern), 16)
        slots = [_classify_template(t) for t in templates]
        table.setdefault(mnemonic, []).append((base_word, slots))
    return table


# @intent:responsibility CHIP-8用のアセンブラ実装。
class Chip8Assembler(BaseAssembler):
    """
    2パスのCHIP-8アセンブラ。

    - ラベル: `name:`
    - 疑似命令: ORG（省略時は0x200から配置）, DB（バイト列）, DW（ビッグエンディアンのワード列）
    - オペランド: V0-VF, #即値, アドレス（数値またはラベル）, I DT ST K F B [I]
    """
    def __init__(self):
        self._encodings = _build_encoding_table()

    def assemble(self, lines: List[str]) -> Tuple[SymbolMap, List[Tuple[int, int]]]:
        symbol_map: SymbolMap = {}
        binary_data: List[Tuple[int, int]] = []
        parsed_lines = [self._parse_line(line) for line in lines]

        # First pass: Build symbol map
        temp_pc = PROGRAM_BASE
        for line_num, (label, mnemonic, operands) in enumerate(parsed_lines, 1):
            if label:
                if label in symbol_map:
                    raise ValueError(f"Line {line_num}: duplicate label '{label}'")
                symbol_map[label] = temp_pc
            if not mnemonic:
                continue

            if mnemonic == "ORG":
                temp_pc = self._evaluate(operands, {}, line_num)
                continue
            temp_pc += self._length_of(mnemonic, operands)

        # Second pass: Generate binary
        current_pc = PROGRAM_BASE
        for line_num, (label, mnemonic, operands) in enumerate(parsed_lines, 1):
            if not mnemonic:
                continue

            if mnemonic == "ORG":
                current_pc = self._evaluate(operands, {}, line_num)
                continue

            if mnemonic == "DB":
                for val_str in self._split_operands(operands):
                    val = self._evaluate(val_str, symbol_map, line_num)
                    binary_data.append((current_pc, val & 0xFF))
                    current_pc += 1
                continue

            if mnemonic == "DW":
                for val_str in self._split_operands(operands):
                    val = self._evaluate(val_str, symbol_map, line_num)
                    binary_data.append((current_pc, (val >> 8) & 0xFF))
                    binary_data.append((current_pc + 1, val & 0xFF))
                    current_pc += 2
                continue

            word = self._encode(mnemonic, operands, symbol_map, line_num)
            binary_data.append((current_pc, (word >> 8) & 0xFF))
            binary_data.append((current_pc + 1, word & 0xFF))
            current_pc += 2

        return symbol_map, binary_data

    def _split_operands(self, operands: str) -> List[str]:
        if not operands.strip():
            return []
        return [op.strip() for op in operands.split(',')]

    def _length_of(self, mnemonic: str, operands: str) -> int:
        if mnemonic == "DB":
            return len(self._split_operands(operands))
        if mnemonic == "DW":
            return 2 * len(self._split_operands(operands))
        return 2

    def _evaluate(self, val_str: str, symbol_map: SymbolMap, line_num: int) -> int:
        try:
            return self._parse_val(val_str, symbol_map)
        except ValueError as e:
            raise ValueError(f"Line {line_num}: {e}") from e

    # @intent:responsibility ソース上のオペランドを(種別, 文字列)に分類します。
    def _classify_operand(self, operand: str) -> Tuple[str, str]:
        upper = operand.upper()
        if re.fullmatch(r'V[0-9A-F]', upper):
            return "REG", upper[1]
        if upper in _KEYWORDS:
            return "LITERAL", upper
        if operand.startswith('#'):
            return "IMM", operand[1:]
        return "ADDR", operand

    # @intent:responsibility 1命令を16bitワードに符号化します。
    def _encode(self, mnemonic: str, operands: str, symbol_map: SymbolMap, line_num: int) -> int:
        candidates = self._encodings.get(mnemonic)
        if candidates is None:
            raise ValueError(f"Line {line_num}: unknown mnemonic '{mnemonic}'")

        sources = [self._classify_operand(op) for op in self._split_operands(operands)]
        for base_word, slots in candidates:
            fields = self._match(slots, sources)
            if fields is None:
                continue
            word = base_word
            for name, text in fields.items():
                shift, limit = _FIELD_LAYOUT[name]
                if name in ("x", "y"):
                    value = int(text, 16)
                else:
                    value = self._evaluate(text, symbol_map, line_num)
                if not 0 <= value <= limit:
                    raise ValueError(f"Line {line_num}: operand value {value:#x} out of range for {mnemonic}")
                word |= value << shift
            return word

        raise ValueError(f"Line {line_num}: invalid operands for {mnemonic}: '{operands}'")

    # @intent:utility_function オペランド列が書式列に一致すれば、フィールド名→ソース文字列の辞書を返します。
    def _match(self, slots: List[Tuple[str, str]], sources: List[Tuple[str, str]]) -> Optional[Dict[str, str]]:
        if len(slots) != len(sources):
            return None
        fields: Dict[str, str] = {}
        for (slot_kind, slot_value), (src_kind, src_value) in zip(slots, sources):
            if slot_kind == "LITERAL":
                # "JP V0, addr" の V0 は固定のオペランド
                if slot_value == "V0":
                    if (src_kind, src_value) != ("REG", "0"):
                        return None
                elif (src_kind, src_value) != ("LITERAL", slot_value):
                    return None
            elif slot_kind == "REG":
                if src_kind != "REG":
                    return None
                fields[slot_value] = src_value
            elif slot_kind == "IMM":
                # 即値は # を省略しても受け付ける
                if src_kind not in ("IMM", "ADDR"):
                    return None
                fields[slot_value] = src_value
            else:  # ADDR
                if src_kind != "ADDR":
                    return None
                fields[slot_value] = src_value
        return fields
