import math

from django.test import SimpleTestCase

from quotevault.disclosure import (
    DisclosureRegistry,
    ImageSchedule,
    InvalidLevel,
    QuoteSchedule,
    clarity_for_hints,
    get_schedule,
    reveal_hints,
    scramble_tier,
)


class ClarityCurveTests(SimpleTestCase):
    def test_zero_hints_shows_calibration_floor(self):
        self.assertAlmostEqual(clarity_for_hints(0, 0.02), 0.02)
        self.assertAlmostEqual(clarity_for_hints(0, 0.4), 0.4)

    def test_linear_steps(self):
        self.assertAlmostEqual(clarity_for_hints(1, 0.02), 0.17)
        self.assertAlmostEqual(clarity_for_hints(4, 0.02), 0.62)
        self.assertAlmostEqual(clarity_for_hints(6, 0.02), 0.92)

    def test_clamped_at_full_reveal(self):
        self.assertEqual(clarity_for_hints(7, 0.02), 1.0)
        self.assertEqual(clarity_for_hints(50, 0.5), 1.0)

    def test_rejects_malformed_hint_counts(self):
        for bad in (-1, 1.5, True, "2", None):
            with self.assertRaises(InvalidLevel):
                clarity_for_hints(bad, 0.02)

    def test_rejects_malformed_base_clarity(self):
        for bad in (-0.01, 1.01, math.nan, math.inf, "0.2", None):
            with self.assertRaises(InvalidLevel):
                clarity_for_hints(0, bad)

    def test_reveal_hints(self):
        self.assertEqual(reveal_hints(0.02), 7)
        self.assertEqual(reveal_hints(0.0), 7)
        self.assertEqual(reveal_hints(0.85), 1)
        self.assertEqual(reveal_hints(1.0), 0)


class ImageScheduleTests(SimpleTestCase):
    def setUp(self):
        self.schedule = ImageSchedule()

    def test_below_reveal_threshold(self):
        d = self.schedule.disclose(6, 0.02)
        self.assertEqual(d.mode, "image")
        self.assertFalse(d.revealed)
        self.assertTrue(d.hint_available)
        self.assertIsNone(d.tier)

    def test_full_reveal_is_not_puzzle_yet(self):
        d = self.schedule.disclose(7, 0.02)
        self.assertEqual(d.mode, "image")
        self.assertEqual(d.clarity_level, 1.0)
        self.assertTrue(d.revealed)
        self.assertTrue(d.hint_available)

    def test_one_hint_after_reveal_opens_puzzle_and_stops(self):
        self.assertEqual(self.schedule.hint_ceiling(0.02), 8)
        d = self.schedule.disclose(8, 0.02)
        self.assertEqual(d.mode, "puzzle")
        self.assertEqual(d.tier, 1)
        self.assertFalse(d.hint_available)

    def test_already_clear_image_goes_straight_to_puzzle(self):
        self.assertEqual(self.schedule.hint_ceiling(1.0), 1)
        self.assertTrue(self.schedule.disclose(0, 1.0).revealed)
        self.assertEqual(self.schedule.disclose(1, 1.0).mode, "puzzle")

    def test_auto_hint_threshold(self):
        self.assertEqual(self.schedule.auto_hint_after, 3)


class QuoteScheduleTests(SimpleTestCase):
    def setUp(self):
        self.schedule = QuoteSchedule()

    def test_no_hints_is_plain_text(self):
        d = self.schedule.disclose(0, 0.02)
        self.assertEqual(d.mode, "text")
        self.assertIsNone(d.clarity_level)
        self.assertTrue(d.hint_available)

    def test_tier_follows_hints(self):
        for hints in (1, 2, 3):
            d = self.schedule.disclose(hints, 0.02)
            self.assertEqual(d.mode, "puzzle")
            self.assertEqual(d.tier, hints)
            self.assertTrue(d.hint_available)

    def test_tier_capped_at_four(self):
        self.assertEqual(scramble_tier(4), 4)
        self.assertEqual(scramble_tier(9), 4)
        self.assertFalse(self.schedule.disclose(4, 0.02).hint_available)
        self.assertEqual(self.schedule.hint_ceiling(0.02), 4)

    def test_scramble_tier_before_first_hint(self):
        self.assertIsNone(scramble_tier(0))

    def test_auto_hint_threshold(self):
        self.assertEqual(self.schedule.auto_hint_after, 5)


class RegistryTests(SimpleTestCase):
    def test_lookup_is_case_and_space_insensitive(self):
        self.assertIsInstance(get_schedule(" Quote "), QuoteSchedule)
        self.assertIsInstance(get_schedule("character"), ImageSchedule)
        self.assertIsInstance(get_schedule("BANNER"), ImageSchedule)

    def test_unknown_kind(self):
        with self.assertRaises(KeyError):
            get_schedule("trailer")

    def test_kinds(self):
        self.assertEqual(DisclosureRegistry.kinds(), ["banner", "character", "quote"])

    def test_register_rejects_blank_kind(self):
        with self.assertRaises(ValueError):
            DisclosureRegistry.register("  ", QuoteSchedule())
