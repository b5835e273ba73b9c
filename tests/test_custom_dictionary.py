"""
Tests for custom dictionary generation.
"""

import unittest

import numpy as np

from arucodict.dictionary.dictionary import Dictionary, self_distance
from arucodict.id_generation.custom_dictionary import (
    CustomDictionaryGenerator,
    generate_custom_dictionary,
    initial_target_distance,
)


class TestGenerateCustomDictionary(unittest.TestCase):
    """Test cases for the greedy generator."""

    @classmethod
    def setUpClass(cls):
        cls.dictionary = generate_custom_dictionary(10, 4)

    def test_marker_count_and_size(self):
        self.assertIsInstance(self.dictionary, Dictionary)
        self.assertEqual(len(self.dictionary), 10)
        self.assertEqual(self.dictionary.marker_size, 4)
        self.assertEqual(self.dictionary.bytes_list.shape, (10, 4, 2))
        for idx in range(10):
            self.assertEqual(self.dictionary.get_marker_bits(idx).shape, (4, 4))

    def test_separation_floor(self):
        floor = 2 * self.dictionary.max_correction_bits + 1
        self.assertGreaterEqual(self.dictionary.min_marker_distance(), floor)

    def test_markers_distinguishable_from_own_rotations(self):
        floor = 2 * self.dictionary.max_correction_bits + 1
        for idx in range(len(self.dictionary)):
            self.assertGreaterEqual(self_distance(self.dictionary.get_marker_bits(idx)), floor)

    def test_identifies_every_marker(self):
        for idx in range(len(self.dictionary)):
            for rotation in range(4):
                found, match_id, match_rotation = self.dictionary.identify(
                    self.dictionary.get_marker_bits(idx, rotation), 1.0)
                self.assertTrue(found)
                self.assertEqual((match_id, match_rotation), (idx, rotation))

    def test_deterministic_for_seed(self):
        a = generate_custom_dictionary(8, 5, random_seed=42, max_unproductive_iterations=300)
        b = generate_custom_dictionary(8, 5, random_seed=42, max_unproductive_iterations=300)
        np.testing.assert_array_equal(a.bytes_list, b.bytes_list)
        self.assertEqual(a.max_correction_bits, b.max_correction_bits)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            generate_custom_dictionary(0, 4)
        with self.assertRaises(ValueError):
            generate_custom_dictionary(10, 0)
        with self.assertRaises(ValueError):
            generate_custom_dictionary(-3, 5)
        with self.assertRaises(ValueError):
            generate_custom_dictionary(5, 4, max_unproductive_iterations=0)

    def test_small_trial_budget_degrades_softly(self):
        dictionary = generate_custom_dictionary(12, 4, random_seed=3, max_unproductive_iterations=20)
        self.assertEqual(len(dictionary), 12)
        self.assertLess(dictionary.max_correction_bits, (initial_target_distance(4) - 1) // 2)
        self.assertGreaterEqual(dictionary.min_marker_distance(),
                                2 * dictionary.max_correction_bits + 1)

    def test_zero_target_distance_warns(self):
        with self.assertLogs('arucodict.id_generation.custom_dictionary', level='WARNING') as logs:
            dictionary = generate_custom_dictionary(3, 1)
        self.assertEqual(len(dictionary), 3)
        self.assertEqual(dictionary.max_correction_bits, 0)
        self.assertTrue(any('dropped to 0' in line for line in logs.output))

    def test_initial_target_distance(self):
        self.assertEqual(initial_target_distance(4), 10)
        self.assertEqual(initial_target_distance(5), 16)
        self.assertEqual(initial_target_distance(6), 24)
        self.assertEqual(initial_target_distance(7), 32)


class TestBaseDictionary(unittest.TestCase):
    """Test cases for generation seeded from an existing dictionary."""

    @classmethod
    def setUpClass(cls):
        cls.base = generate_custom_dictionary(5, 4, random_seed=1, max_unproductive_iterations=500)

    def test_base_markers_come_first(self):
        dictionary = generate_custom_dictionary(8, 4, base_dictionary=self.base,
                                                max_unproductive_iterations=500)
        self.assertEqual(len(dictionary), 8)
        np.testing.assert_array_equal(dictionary.bytes_list[:5], self.base.bytes_list)
        self.assertGreaterEqual(dictionary.min_marker_distance(),
                                2 * dictionary.max_correction_bits + 1)

    def test_base_larger_than_request(self):
        dictionary = generate_custom_dictionary(3, 4, base_dictionary=self.base)
        self.assertEqual(len(dictionary), 3)
        np.testing.assert_array_equal(dictionary.bytes_list, self.base.bytes_list[:3])
        self.assertGreaterEqual(dictionary.min_marker_distance(),
                                2 * dictionary.max_correction_bits + 1)

    def test_empty_base_is_ignored(self):
        empty = Dictionary(marker_size=4)
        a = generate_custom_dictionary(4, 4, base_dictionary=empty, random_seed=2,
                                       max_unproductive_iterations=200)
        b = generate_custom_dictionary(4, 4, random_seed=2, max_unproductive_iterations=200)
        np.testing.assert_array_equal(a.bytes_list, b.bytes_list)

    def test_marker_size_mismatch(self):
        with self.assertRaises(ValueError):
            generate_custom_dictionary(8, 5, base_dictionary=self.base)

    def test_generator_object(self):
        generator = CustomDictionaryGenerator(6, 4, base_dictionary=self.base, random_seed=9,
                                              max_unproductive_iterations=200, batch_size=16)
        dictionary = generator.generate()
        self.assertEqual(len(dictionary), 6)
        self.assertEqual(dictionary.max_correction_bits, max(0, (generator.tau - 1) // 2))


if __name__ == '__main__':
    unittest.main()
