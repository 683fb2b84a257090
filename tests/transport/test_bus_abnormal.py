import unittest
from retro_chip8.transport.bus import Bus, RAM

class TestBusAbnormal(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0x0000, 0x0FFF, RAM(0x1000)) # 4KB RAM

    def test_read_out_of_bounds(self):
        with self.assertRaises(IndexError):
            self.bus.read(0x1000)

    def test_write_out_of_bounds(self):
        with self.assertRaises(IndexError):
            self.bus.write(0x1000, 0xFF)

    def test_write_non_byte(self):
        with self.assertRaises(ValueError):
            self.bus.write(0x0200, 0x100)

    def test_load_block_past_end(self):
        with self.assertRaises(IndexError):
            self.bus.load_block(0x0FFE, bytes([1, 2, 3]))

    def test_register_device_invalid_range(self):
        with self.assertRaises(ValueError):
            self.bus.register_device(0x2000, 0x1000, RAM(0x100))
        with self.assertRaises(ValueError):
            self.bus.register_device(-1, 0x100, RAM(0x100))

if __name__ == '__main__':
    unittest.main()
