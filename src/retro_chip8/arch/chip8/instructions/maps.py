# src/retro_chip8/arch/chip8/instructions/maps.py
"""
命令パターンと命令実装のマッピング定義。

パターンは命令ワードの16進表記で、オペランド部分をX, Y, N, NN, NNNで置き換えたものです。
"""
from typing import Optional

from . import load
from . import alu
from . import control
from . import display

# @intent:map パターンから（ニーモニック, オペランド書式）へのマッピングテーブル。
# 書式中の {x} {y} {n} {nn} {nnn} は命令ワードのフィールド値で置き換えられます。
DECODE_MAP = {
    # Display / Control
    "00E0": ("CLS", []),
    "00EE": ("RET", []),
    "1NNN": ("JP", ["${nnn:03X}"]),
    "2NNN": ("CALL", ["${nnn:03X}"]),
    "3XNN": ("SE", ["V{x:X}", "#${nn:02X}"]),
    "4XNN": ("SNE", ["V{x:X}", "#${nn:02X}"]),
    "5XY0": ("SE", ["V{x:X}", "V{y:X}"]),
    "6XNN": ("LD", ["V{x:X}", "#${nn:02X}"]),
    "7XNN": ("ADD", ["V{x:X}", "#${nn:02X}"]),

    # ALU (8XY_)
    "8XY0": ("LD", ["V{x:X}", "V{y:X}"]),
    "8XY1": ("OR", ["V{x:X}", "V{y:X}"]),
    "8XY2": ("AND", ["V{x:X}", "V{y:X}"]),
    "8XY3": ("XOR", ["V{x:X}", "V{y:X}"]),
    "8XY4": ("ADD", ["V{x:X}", "V{y:X}"]),
    "8XY5": ("SUB", ["V{x:X}", "V{y:X}"]),
    "8XY6": ("SHR", ["V{x:X}", "V{y:X}"]),
    "8XY7": ("SUBN", ["V{x:X}", "V{y:X}"]),
    "8XYE": ("SHL", ["V{x:X}", "V{y:X}"]),

    "9XY0": ("SNE", ["V{x:X}", "V{y:X}"]),
    "ANNN": ("LD", ["I", "${nnn:03X}"]),
    "BNNN": ("JP", ["V0", "${nnn:03X}"]),
    "CXNN": ("RND", ["V{x:X}", "#${nn:02X}"]),
    "DXYN": ("DRW", ["V{x:X}", "V{y:X}", "#${n:X}"]),
    "EX9E": ("SKP", ["V{x:X}"]),
    "EXA1": ("SKNP", ["V{x:X}"]),

    # Timers / Index / Memory
    "FX07": ("LD", ["V{x:X}", "DT"]),
    "FX0A": ("LD", ["V{x:X}", "K"]),
    "FX15": ("LD", ["DT", "V{x:X}"]),
    "FX18": ("LD", ["ST", "V{x:X}"]),
    "FX1E": ("ADD", ["I", "V{x:X}"]),
    "FX29": ("LD", ["F", "V{x:X}"]),
    "FX33": ("LD", ["B", "V{x:X}"]),
    "FX55": ("LD", ["[I]", "V{x:X}"]),
    "FX65": ("LD", ["V{x:X}", "[I]"]),
}

# @intent:map パターンから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    "00E0": display.execute_cls,
    "00EE": control.execute_ret,
    "1NNN": control.execute_jp,
    "2NNN": control.execute_call,
    "3XNN": control.execute_se_imm,
    "4XNN": control.execute_sne_imm,
    "5XY0": control.execute_se_reg,
    "6XNN": load.execute_ld_imm,
    "7XNN": alu.execute_add_imm,

    "8XY0": alu.execute_ld_reg,
    "8XY1": alu.execute_or,
    "8XY2": alu.execute_and,
    "8XY3": alu.execute_xor,
    "8XY4": alu.execute_add_reg,
    "8XY5": alu.execute_sub,
    "8XY6": alu.execute_shr,
    "8XY7": alu.execute_subn,
    "8XYE": alu.execute_shl,

    "9XY0": control.execute_sne_reg,
    "ANNN": load.execute_ld_i,
    "BNNN": control.execute_jp_offset,
    "CXNN": alu.execute_rnd,
    "DXYN": display.execute_drw,
    "EX9E": control.execute_skp,
    "EXA1": control.execute_sknp,

    "FX07": load.execute_ld_vx_dt,
    "FX0A": load.execute_ld_vx_k,
    "FX15": load.execute_ld_dt,
    "FX18": load.execute_ld_st,
    "FX1E": load.execute_add_i,
    "FX29": load.execute_ld_font,
    "FX33": load.execute_ld_bcd,
    "FX55": load.execute_store_regs,
    "FX65": load.execute_load_regs,
}

# @intent:constant 上位4bit（命令ファミリー）ごとの固定パターン。
_FIXED_FAMILY_PATTERNS = {
    0x1: "1NNN", 0x2: "2NNN", 0x3: "3XNN", 0x4: "4XNN",
    0x6: "6XNN", 0x7: "7XNN", 0xA: "ANNN", 0xB: "BNNN",
    0xC: "CXNN", 0xD: "DXYN",
}


# @intent:responsibility 命令ワードに対応するパターンを求めます。定義されていない場合はNoneを返します。
def resolve_pattern(word: int) -> Optional[str]:
    family = (word >> 12) & 0xF
    if family in _FIXED_FAMILY_PATTERNS:
        pattern = _FIXED_FAMILY_PATTERNS[family]
    elif family == 0x0:
        # 0NNN (SYS) はサポートしないため、完全一致のみ
        pattern = f"{word & 0xFFFF:04X}"
    elif family in (0x5, 0x8, 0x9):
        pattern = f"{family:X}XY{word & 0xF:X}"
    else:  # 0xE, 0xF
        pattern = f"{family:X}X{word & 0xFF:02X}"
    return pattern if pattern in DECODE_MAP else None
