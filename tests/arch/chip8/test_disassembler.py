# tests/arch/chip8/test_disassembler.py
"""
逆アセンブラの単体テスト。
"""
import unittest

from retro_chip8.transport.bus import Bus, RAM
from retro_chip8.arch.chip8.disassembler import PeekBus, disassemble, format_word


class TestDisassembler(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0x000, 0xFFF, RAM(0x1000))
        self.bus.load_block(0x200, [0x00, 0xE0, 0xA2, 0x2A, 0x01, 0x23, 0xD0, 0x15])
        self.bus.get_and_clear_activity_log()

    def test_disassemble_range(self):
        result = disassemble(self.bus, 0x200, 8)
        self.assertEqual(result, [
            (0x200, "00 E0", "CLS"),
            (0x202, "A2 2A", "LD I, $22A"),
            (0x204, "01 23", "DW $0123"),
            (0x206, "D0 15", "DRW V0, V1, #$5"),
        ])

    def test_disassemble_does_not_touch_activity_log(self):
        disassemble(self.bus, 0x200, 8)
        self.assertEqual(self.bus.get_and_clear_activity_log(), [])

    def test_trailing_odd_byte_is_skipped(self):
        result = disassemble(self.bus, 0x200, 3)
        self.assertEqual(len(result), 1)

    def test_range_is_clipped_at_end_of_memory(self):
        result = disassemble(self.bus, 0xFFC, 0x100)
        self.assertEqual([addr for addr, _, _ in result], [0xFFC, 0xFFE])

    def test_format_word(self):
        self.assertEqual(format_word(0x6A05), "LD VA, #$05")
        self.assertEqual(format_word(0xFFFF), "DW $FFFF")

    def test_peek_bus_reads_without_logging(self):
        self.bus.load_block(0x200, bytes([0x6A, 0x05]))
        peek = PeekBus(self.bus)
        self.assertEqual(peek.read(0x201), 0x05)
        self.assertEqual(self.bus.get_and_clear_activity_log(), [])
