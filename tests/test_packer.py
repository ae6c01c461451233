import itertools
import logging
import math
import os
import tempfile
import unittest

from scipy.stats import uniform

from bubblebath import (
    PackingConfig,
    Sphere,
    SpherePacker,
    bubblebath,
    bubblebath_inplace,
    is_inside_boundaries,
    packing_fraction,
    setup_logging,
)


def surface_distances(spheres):
    return [
        math.dist(a.pos, b.pos) - (a.radius + b.radius)
        for a, b in itertools.combinations(spheres, 2)
    ]


class TestBubblebath(unittest.TestCase):
    def setUp(self):
        self.L = 10
        self.extent = (self.L, self.L, self.L)

    # --- Argument validation ---

    def test_negative_radii_rejected(self):
        with self.assertRaises(ValueError):
            bubblebath([-4.0], self.extent)
        with self.assertRaises(ValueError):
            bubblebath([4.0, 0.0], self.extent)

    def test_phi_max_out_of_range(self):
        with self.assertRaises(ValueError):
            bubblebath([4.0], self.extent, -0.1)
        with self.assertRaises(ValueError):
            bubblebath([4.0], self.extent, 1.1)

    def test_invalid_options(self):
        with self.assertRaises(ValueError):
            bubblebath([1.0], self.extent, min_distance=-1.0)
        with self.assertRaises(ValueError):
            bubblebath([1.0], self.extent, max_tries=-1)
        with self.assertRaises(ValueError):
            bubblebath([1.0], (10, 0, 10))

    # --- Single sphere scenarios ---

    def test_single_sphere(self):
        r = 4.0
        bath = bubblebath([r], self.extent, verbose=False, rng=0)

        self.assertEqual(len(bath), 1)
        self.assertIsInstance(bath[0], Sphere)
        self.assertEqual(bath[0].radius, r)
        for x in bath[0].pos:
            self.assertTrue(r <= x <= self.L - r)
        self.assertAlmostEqual(
            packing_fraction(bath, self.extent), (4 * math.pi * r ** 3 / 3) / self.L ** 3
        )

    def test_too_large_sphere_is_dropped(self):
        """A radius above L/2 can't be inserted without crossing the boundaries."""
        bath = bubblebath([8.0], self.extent, verbose=False, rng=0)
        self.assertEqual(bath, [])

    def test_too_large_sphere_through_boundaries(self):
        r = 8.0
        bath = bubblebath([r], self.extent, through_boundaries=True, verbose=False, rng=0)
        self.assertEqual(len(bath), 1)
        # it will surely cross all domain boundaries
        for x in bath[0].pos:
            self.assertFalse(r <= x <= self.L - r)
            self.assertTrue(0 <= x < self.L)

    def test_through_boundaries_keeps_min_distance(self):
        """Unconfined centres still keep their distance from earlier spheres."""
        min_distance = 0.5
        bath = bubblebath(
            [2.0, 1.5, 1.5, 1.0, 1.0, 1.0], self.extent,
            min_distance=min_distance, through_boundaries=True, verbose=False, rng=9,
        )

        self.assertEqual(len(bath), 6)
        self.assertTrue(all(0 <= x < self.L for s in bath for x in s.pos))
        self.assertTrue(all(d >= min_distance for d in surface_distances(bath)))

    def test_abort_warning(self):
        with self.assertLogs("bubblebath", level="WARNING") as captured:
            bath = bubblebath([8.0, 8.0], self.extent, max_tries=0, max_fails=0, verbose=False)
        self.assertEqual(bath, [])
        self.assertTrue(any("Reached max. number of tries" in line for line in captured.output))

    # --- Distribution-driven baths ---

    def test_distribution_bath(self):
        extent = (10, 15, 12)
        phi_max = 0.4
        bath = bubblebath(uniform(1, 1), extent, phi_max, verbose=False, rng=11)

        self.assertGreater(len(bath), 0)
        self.assertTrue(all(1 <= s.radius <= 2 for s in bath))
        self.assertTrue(all(is_inside_boundaries(s.pos, s.radius, extent) for s in bath))
        self.assertLessEqual(packing_fraction(bath, extent), phi_max)
        self.assertTrue(all(d >= 0 for d in surface_distances(bath)))

    def test_min_distance(self):
        """Sphere surfaces stay at least min_distance apart."""
        min_distance = 0.5
        bath = bubblebath([2.0], self.extent, 0.4, min_distance=min_distance, verbose=False, rng=3)

        self.assertGreater(len(bath), 1)
        self.assertTrue(all(d >= min_distance for d in surface_distances(bath)))

    def test_largest_first(self):
        bath = bubblebath([1.0, 3.0, 2.0], (50, 50), verbose=False, rng=0)
        self.assertEqual([s.radius for s in bath], [3.0, 2.0, 1.0])

    def test_seeded_bath_is_reproducible(self):
        first = bubblebath(uniform(1, 2), (30, 30), 0.3, verbose=False, rng=21)
        second = bubblebath(uniform(1, 2), (30, 30), 0.3, verbose=False, rng=21)
        self.assertEqual(first, second)

    # --- Logging ---

    def test_verbose_logging(self):
        with self.assertLogs("bubblebath", level="INFO") as captured:
            bubblebath(uniform(1, 1), (10, 10), 0.3, rng=0)
        output = "\n".join(captured.output)
        self.assertRegex(output, r"Generated \d+ spheres")
        self.assertRegex(output, r"\d+/\d+ new spheres inserted")

    def test_quiet(self):
        with self.assertNoLogs("bubblebath", level="INFO"):
            bubblebath(uniform(1, 1), (10, 10), 0.3, verbose=False, rng=0)


class TestBubblebathInplace(unittest.TestCase):

    def test_extend_existing_bath(self):
        L = 50
        extent = (L, L)
        seed = Sphere((L / 2, L / 2), 3.0)
        spheres = [seed]

        result = bubblebath_inplace(spheres, [1.0] * 10, extent, verbose=False, rng=4)

        self.assertIsNone(result)
        self.assertEqual(len(spheres), 11)
        self.assertIs(spheres[0], seed)
        self.assertEqual(sum(s.radius == 3 for s in spheres), 1)
        self.assertEqual(sum(s.radius == 1 for s in spheres), 10)
        # the new spheres should not overlap the seed sphere
        for s in spheres[1:]:
            self.assertGreater(math.dist(seed.pos, s.pos), seed.radius + s.radius)

    def test_new_spheres_respect_min_distance_to_existing(self):
        extent = (50, 50)
        spheres = [Sphere((25, 25), 5.0), Sphere((10, 10), 4.0)]
        bubblebath_inplace(spheres, [1.0] * 20, extent, min_distance=2.0, verbose=False, rng=8)

        self.assertEqual(len(spheres), 22)
        self.assertTrue(all(d >= 2.0 for d in surface_distances(spheres)))

    def test_full_domain_is_left_untouched(self):
        L = 10
        extent = (L, L)
        r = L / 2
        spheres_old = [Sphere((L / 2, L / 2), r)]  # largest sphere to fit extent
        spheres_new = list(spheres_old)

        bubblebath_inplace(spheres_new, [r], extent, verbose=False, rng=0)

        self.assertEqual(spheres_new, spheres_old)

    def test_abort_warning(self):
        spheres = [Sphere((5, 5), 5.0)]
        with self.assertLogs("bubblebath", level="WARNING") as captured:
            bubblebath_inplace(spheres, [5.0, 5.0], (10, 10), max_tries=0, max_fails=0, verbose=False)
        self.assertTrue(any("Reached max. number of tries" in line for line in captured.output))
        self.assertEqual(len(spheres), 1)

    def test_dimension_mismatch(self):
        with self.assertRaises(ValueError):
            bubblebath_inplace([Sphere((1, 1), 1)], [1.0], (10, 10, 10), verbose=False)


class TestSpherePacker(unittest.TestCase):

    def test_progress_after_abort(self):
        config = PackingConfig(max_tries=0, max_fails=0, verbose=False)
        packer = SpherePacker((10, 10, 10), config, rng=0)
        with self.assertLogs("bubblebath.packer", level="WARNING"):
            spheres = packer.pack([8.0, 8.0, 8.0])

        self.assertEqual(spheres, [])
        self.assertEqual(packer.progress.requested, 3)
        self.assertEqual(packer.progress.inserted, 0)
        self.assertEqual(packer.progress.failed, 1)
        self.assertTrue(packer.progress.aborted)

    def test_progress_without_abort(self):
        config = PackingConfig(max_tries=10, max_fails=5, verbose=False)
        packer = SpherePacker((10, 10, 10), config, rng=0)
        spheres = packer.pack([8.0, 8.0, 8.0, 1.0])

        self.assertEqual([s.radius for s in spheres], [1.0])
        self.assertEqual(packer.progress.failed, 3)
        self.assertEqual(packer.progress.dropped, 3)
        self.assertFalse(packer.progress.aborted)
        self.assertEqual(str(packer.progress), "1/4 new spheres inserted.")

    def test_generate_yields_new_spheres_only(self):
        existing = [Sphere((5, 5), 2.0)]
        packer = SpherePacker((20, 20), PackingConfig(verbose=False), rng=1)
        new = list(packer.generate([1.0, 1.0], existing))

        self.assertEqual(len(new), 2)
        self.assertEqual(len(existing), 1)
        for s in new:
            self.assertGreaterEqual(math.dist(s.pos, existing[0].pos), 3.0)

    def test_small_batches_match_config(self):
        config = PackingConfig(sample_batch_size=1, verbose=False)
        spheres = SpherePacker((20, 20), config, rng=2).pack([2.0, 1.0, 1.0])
        self.assertEqual(len(spheres), 3)

    def test_invalid_batch_size(self):
        with self.assertRaises(ValueError):
            SpherePacker((10, 10), PackingConfig(sample_batch_size=0))


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger("bubblebath")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    def test_log_file_receives_summaries(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "bath.log")
            setup_logging(logging.INFO, log_file)
            bubblebath([1.0], (10, 10), rng=0)
            for handler in logging.getLogger("bubblebath").handlers:
                handler.flush()
            with open(log_file, encoding="utf-8") as f:
                content = f.read()
        self.assertIn("1/1 new spheres inserted.", content)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        setup_logging()
        self.assertEqual(len(logging.getLogger("bubblebath").handlers), 1)


if __name__ == '__main__':
    unittest.main()
