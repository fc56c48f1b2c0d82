import unittest

import numpy as np

from synthchar.batch import (
    as_array,
    batch_weights,
    gf_adjusted_quantities,
    precursor_quantities,
    product_quantities,
    scale_weights,
    to_optional,
    total_weight,
)


class TestQuantities(unittest.TestCase):
    def test_precursor_mode(self):
        q = precursor_quantities([30.0, 60.0], [56.077, 61.831], [1.0, 2.0])
        np.testing.assert_allclose(q, [30 * 56.077 / 1000, 60 * 61.831 * 2 / 1000])

    def test_gf_mode_ignores_moles(self):
        q = gf_adjusted_quantities([60.0], [69.617])
        np.testing.assert_allclose(q, [60 * 69.617 / 1000])

    def test_product_mode_applies_gf(self):
        gf = 61.831 * 2 / 69.617
        q = product_quantities([60.0, 10.0], [69.617, 325.817], [gf, None], [2.0, 1.0], [1.0, 1.0])
        np.testing.assert_allclose(q, [60 * 69.617 * gf / 1000, 10 * 325.817 / 1000])

    def test_product_mode_skips_gf_for_zero_moles(self):
        q = product_quantities([50.0], [100.0], [3.0], [0.0], [2.0])
        np.testing.assert_allclose(q, [50 * 100.0 * 2 / 1000])

    def test_unresolved_weight_propagates(self):
        q = precursor_quantities([30.0, 70.0], [None, 50.0], [1.0, 1.0])
        self.assertTrue(np.isnan(q[0]))
        self.assertEqual(to_optional(q), [None, 3.5])


class TestScaling(unittest.TestCase):
    def test_scaled_weights_sum_to_desired_batch(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            n = int(rng.integers(1, 8))
            matrices = rng.uniform(0.0, 100.0, n)
            weights = rng.uniform(1.0, 400.0, n)
            factors = rng.uniform(0.5, 3.0, n)
            desired = float(rng.uniform(0.1, 500.0))
            bundle = batch_weights(precursor_quantities(matrices, weights, factors), desired)
            self.assertTrue(bundle.is_scalable)
            self.assertAlmostEqual(float(np.sum(bundle.scaled)), desired, delta=1e-6)

    def test_unresolved_entries_excluded_from_total(self):
        q = as_array([1.0, None, 3.0])
        self.assertEqual(total_weight(q), 4.0)
        self.assertEqual(to_optional(scale_weights(q, 4.0, 5.0)), [1.25, None, 3.75])

    def test_zero_total_leaves_weights_unresolved(self):
        bundle = batch_weights(precursor_quantities([0.0, 0.0], [56.077, 61.831], [1.0, 1.0]), 5.0)
        self.assertEqual(bundle.total, 0.0)
        self.assertFalse(bundle.is_scalable)
        self.assertEqual(bundle.scaled_list(), [None, None])

    def test_all_unresolved_total_is_none(self):
        bundle = batch_weights(as_array([None, None]), 5.0)
        self.assertIsNone(bundle.total)
        self.assertFalse(bundle.is_scalable)
        self.assertFalse(bundle.overflowed)
        self.assertEqual(bundle.scaled_list(), [None, None])

    def test_overflowing_total_is_none(self):
        q = as_array([1e308, 1e308, None])
        with np.errstate(over="ignore"):
            bundle = batch_weights(q, 5.0)
        self.assertIsNone(bundle.total)
        self.assertTrue(bundle.overflowed)
        self.assertEqual(bundle.scaled_list(), [None, None, None])

    def test_empty_batch(self):
        bundle = batch_weights(as_array([]), 5.0)
        self.assertEqual(bundle.total, 0.0)
        self.assertEqual(bundle.scaled_list(), [])


if __name__ == '__main__':
    unittest.main()
