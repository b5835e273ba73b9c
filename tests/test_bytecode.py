"""
Tests for the bit grid / byte list codec.
"""

import unittest

import numpy as np

from arucodict.codec.bytecode import (
    POPCOUNT_TABLE,
    get_bits_from_byte_list,
    get_byte_list_from_bits,
    hamming_distance,
    n_bytes_for,
    pack_bits,
    rotate_bits,
)


class TestRotation(unittest.TestCase):
    """Test cases for grid rotation."""

    def test_rotation_is_clockwise(self):
        grid = np.array([[1, 0],
                         [0, 0]], dtype=np.uint8)
        expected = np.array([[0, 1],
                             [0, 0]], dtype=np.uint8)
        np.testing.assert_array_equal(rotate_bits(grid), expected)

    def test_rotation_closure(self):
        """Four quarter turns give back the original grid."""
        rng = np.random.default_rng(7)
        for size in range(1, 9):
            grids = [
                np.zeros((size, size), dtype=np.uint8),
                np.ones((size, size), dtype=np.uint8),
                rng.integers(0, 2, size=(size, size), dtype=np.uint8),
            ]
            for grid in grids:
                turned = grid
                for _ in range(4):
                    turned = rotate_bits(turned)
                np.testing.assert_array_equal(turned, grid)

    def test_rotation_count(self):
        grid = np.arange(9).reshape(3, 3) % 2
        np.testing.assert_array_equal(rotate_bits(grid, 2), rotate_bits(rotate_bits(grid)))
        np.testing.assert_array_equal(rotate_bits(grid, -1), rotate_bits(grid, 3))


class TestByteList(unittest.TestCase):
    """Test cases for encoding and decoding."""

    def test_round_trip(self):
        rng = np.random.default_rng(0)
        for size in range(1, 9):
            for _ in range(5):
                grid = rng.integers(0, 2, size=(size, size), dtype=np.uint8)
                byte_list = get_byte_list_from_bits(grid)
                self.assertEqual(byte_list.shape, (4, n_bytes_for(size)))
                np.testing.assert_array_equal(get_bits_from_byte_list(byte_list[0], size), grid)

    def test_round_trip_uniform_grids(self):
        for size in (3, 4, 5, 6, 7):
            for value in (0, 1):
                grid = np.full((size, size), value, dtype=np.uint8)
                decoded = get_bits_from_byte_list(get_byte_list_from_bits(grid), size)
                np.testing.assert_array_equal(decoded, grid)

    def test_rows_hold_clockwise_rotations(self):
        rng = np.random.default_rng(3)
        grid = rng.integers(0, 2, size=(5, 5), dtype=np.uint8)
        byte_list = get_byte_list_from_bits(grid)
        for r in range(4):
            np.testing.assert_array_equal(
                get_bits_from_byte_list(byte_list[r], 5), rotate_bits(grid, r))

    def test_msb_first_with_low_order_padding(self):
        grid = np.ones((3, 3), dtype=np.uint8)
        np.testing.assert_array_equal(pack_bits(grid), [0xFF, 0x80])

        grid = np.zeros((3, 3), dtype=np.uint8)
        grid[0, 0] = 1
        grid[2, 2] = 1
        np.testing.assert_array_equal(pack_bits(grid), [0x80, 0x80])

    def test_bool_grid_accepted(self):
        grid = np.eye(4, dtype=bool)
        np.testing.assert_array_equal(
            get_bits_from_byte_list(get_byte_list_from_bits(grid), 4), grid.astype(np.uint8))

    def test_invalid_grids(self):
        with self.assertRaises(ValueError):
            get_byte_list_from_bits(np.zeros((3, 4), dtype=np.uint8))
        with self.assertRaises(ValueError):
            get_byte_list_from_bits(np.full((3, 3), 2, dtype=np.uint8))
        with self.assertRaises(ValueError):
            get_byte_list_from_bits(np.zeros((0, 0), dtype=np.uint8))

    def test_invalid_byte_count(self):
        with self.assertRaises(ValueError):
            get_bits_from_byte_list(np.zeros(3, dtype=np.uint8), 4)
        with self.assertRaises(ValueError):
            get_bits_from_byte_list(np.zeros(2, dtype=np.uint8), 0)


class TestHamming(unittest.TestCase):
    """Test cases for byte-wise Hamming distance."""

    def test_popcount_table(self):
        self.assertEqual(POPCOUNT_TABLE[0], 0)
        self.assertEqual(POPCOUNT_TABLE[0xFF], 8)
        self.assertEqual(POPCOUNT_TABLE[0b10110000], 3)

    def test_matches_naive_bit_count(self):
        rng = np.random.default_rng(11)
        for size in (4, 5, 6, 7):
            a = rng.integers(0, 2, size=(size, size), dtype=np.uint8)
            b = rng.integers(0, 2, size=(size, size), dtype=np.uint8)
            expected = int(np.count_nonzero(a != b))
            self.assertEqual(int(hamming_distance(pack_bits(a), pack_bits(b))), expected)

    def test_broadcasts_over_rotations(self):
        grid = np.zeros((4, 4), dtype=np.uint8)
        grid[0, :] = 1
        byte_list = get_byte_list_from_bits(grid)
        distances = hamming_distance(byte_list[0], byte_list)
        self.assertEqual(distances.tolist(), [0, 6, 8, 6])

    def test_accepts_bytes(self):
        self.assertEqual(int(hamming_distance(b'\x0f\x00', b'\x00\x01')), 5)


if __name__ == '__main__':
    unittest.main()
