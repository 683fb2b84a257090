# tests/loader/test_assembler.py
"""
Chip8Assemblerの単体テスト。
"""
import unittest

from retro_chip8.loader.assembler import Chip8Assembler
from retro_chip8.loader.loader import to_program_image
from retro_chip8.arch.chip8.disassembler import format_word


class TestAssembler(unittest.TestCase):
    def setUp(self):
        self.assembler = Chip8Assembler()

    def test_chip8_assembler_basic(self):
        lines = [
            "start: CLS",
            "  LD V0, #$05   ; load five",
            "loop: JP loop",
            "data: DB 1, 2, $FF",
            "  DW $1234",
        ]
        symbol_map, binary = self.assembler.assemble(lines)

        self.assertEqual(symbol_map, {"start": 0x200, "loop": 0x204, "data": 0x206})
        image = to_program_image(binary)
        self.assertEqual(image, bytes([
            0x00, 0xE0,
            0x60, 0x05,
            0x12, 0x04,
            0x01, 0x02, 0xFF,
            0x12, 0x34,
        ]))

    def test_forward_reference(self):
        lines = [
            "  CALL sub",
            "  JP $200",
            "sub: RET",
        ]
        symbol_map, binary = self.assembler.assemble(lines)
        self.assertEqual(symbol_map["sub"], 0x204)
        self.assertEqual(to_program_image(binary)[:2], bytes([0x22, 0x04]))

    def test_org_moves_location_counter(self):
        lines = [
            "  JP main",
            "  ORG $300",
            "main: LD I, sprite",
            "sprite: DB $F0",
        ]
        symbol_map, binary = self.assembler.assemble(lines)
        self.assertEqual(symbol_map["main"], 0x300)
        self.assertEqual(symbol_map["sprite"], 0x302)
        self.assertIn((0x300, 0xA3), binary)
        self.assertIn((0x301, 0x02), binary)

    def test_number_formats(self):
        lines = [
            "  LD V0, #10",
            "  LD V1, #0x10",
            "  LD V2, #10h",
            "  LD V3, 10",
        ]
        _, binary = self.assembler.assemble(lines)
        self.assertEqual(to_program_image(binary), bytes([
            0x60, 10, 0x61, 0x10, 0x62, 0x10, 0x63, 10,
        ]))

    def test_lowercase_source(self):
        _, binary = self.assembler.assemble(["  drw v1, va, #3", "  ld [i], vf"])
        self.assertEqual(to_program_image(binary), bytes([0xD1, 0xA3, 0xFF, 0x55]))

    # @intent:test_case 逆アセンブラの出力を再アセンブルすると同じ命令ワードになることを検証します。
    def test_disassembler_output_reassembles(self):
        words = [
            0x00E0, 0x00EE, 0x1ABC, 0x2300, 0x3A42, 0x4B07, 0x5120, 0x6F00, 0x7C01,
            0x8120, 0x8121, 0x8122, 0x8123, 0x8124, 0x8125, 0x8126, 0x8127, 0x812E,
            0x9AB0, 0xA2F0, 0xB123, 0xC3FF, 0xD01F, 0xE59E, 0xE5A1,
            0xF207, 0xF20A, 0xF215, 0xF218, 0xF21E, 0xF229, 0xF233, 0xF255, 0xF265,
            0x0123,
        ]
        lines = [f"  {format_word(word)}" for word in words]
        _, binary = self.assembler.assemble(lines)
        image = to_program_image(binary)
        reassembled = [(image[k] << 8) | image[k + 1] for k in range(0, len(image), 2)]
        self.assertEqual(reassembled, words)


class TestAssemblerErrors(unittest.TestCase):
    def setUp(self):
        self.assembler = Chip8Assembler()

    def assertAssemblyError(self, lines, fragment):
        with self.assertRaises(ValueError) as ctx:
            self.assembler.assemble(lines)
        self.assertIn(fragment, str(ctx.exception))

    def test_unknown_mnemonic(self):
        self.assertAssemblyError(["  CLS", "  FOO V1"], "Line 2: unknown mnemonic 'FOO'")

    def test_invalid_operands(self):
        self.assertAssemblyError(["  LD V1"], "Line 1: invalid operands for LD")

    def test_out_of_range(self):
        self.assertAssemblyError(["  LD V1, #$100"], "Line 1: operand value 0x100 out of range")

    def test_undefined_symbol(self):
        self.assertAssemblyError(["  JP nowhere"], "Line 1: Undefined symbol or invalid value: nowhere")

    def test_duplicate_label(self):
        self.assertAssemblyError(["a: CLS", "a: RET"], "Line 2: duplicate label 'a'")

    def test_jp_v0_requires_v0(self):
        self.assertAssemblyError(["  JP V1, $200"], "Line 1: invalid operands for JP")


if __name__ == '__main__':
    unittest.main()
