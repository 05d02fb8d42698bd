import random
from collections import Counter

from django.test import SimpleTestCase

from quotevault.disclosure import (
    AnagramPuzzle,
    InvalidLevel,
    MalformedAnswer,
    TileLocked,
    build_puzzle,
)

ANSWERS = ["The Dark Knight", "Ocean's 11", "I, Robot", "Up", "M", "  Spirited   Away  "]


def letters(puzzle):
    return [tile.letter for tile in puzzle.tiles()]


def locked_slots(group):
    return [i for i, tile in enumerate(group) if tile.locked]


class TileConservationTests(SimpleTestCase):
    def test_multiset_preserved_for_every_tier(self):
        rng = random.Random(7)
        for answer in ANSWERS:
            expected = Counter(ch for ch in answer if not ch.isspace())
            for tier in (1, 2, 3, 4):
                puzzle = build_puzzle(answer, tier, rng)
                self.assertEqual(Counter(letters(puzzle)), expected, (answer, tier))

    def test_groups_mirror_words(self):
        puzzle = build_puzzle("  Spirited   Away  ", 1, random.Random(1))
        self.assertEqual([len(g) for g in puzzle.groups], [8, 4])

    def test_punctuation_stays_with_its_word(self):
        puzzle = build_puzzle("I, Robot", 2, random.Random(3))
        self.assertEqual(Counter(t.letter for t in puzzle.groups[0]), Counter("I,"))


class TierRuleTests(SimpleTestCase):
    def test_tier_one_locks_nothing(self):
        puzzle = build_puzzle("The Dark Knight", 1, random.Random(5))
        self.assertFalse(any(t.locked for t in puzzle.tiles()))

    def test_tier_one_deals_letters_across_words(self):
        rng = random.Random(21)
        crossed = False
        for _ in range(30):
            puzzle = build_puzzle("abc xyz", 1, rng)
            self.assertEqual(Counter(letters(puzzle)), Counter("abcxyz"))
            self.assertEqual([len(g) for g in puzzle.groups], [3, 3])
            first = {t.letter for t in puzzle.groups[0]}
            if first & set("xyz"):
                crossed = True
        self.assertTrue(crossed)

    def test_tier_two_shuffles_within_words(self):
        puzzle = build_puzzle("The Dark Knight", 2, random.Random(5))
        for group, word in zip(puzzle.groups, ["The", "Dark", "Knight"]):
            self.assertEqual(Counter(t.letter for t in group), Counter(word))
            self.assertFalse(any(t.locked for t in group))

    def test_tier_three_dark_knight(self):
        puzzle = build_puzzle("The Dark Knight", 3, random.Random(11))
        the, dark, knight = puzzle.groups
        self.assertEqual((the[0].letter, the[0].locked), ("T", True))
        self.assertEqual((dark[0].letter, dark[0].locked), ("D", True))
        self.assertEqual((knight[0].letter, knight[0].locked), ("K", True))
        self.assertEqual(Counter(t.letter for t in dark[1:]), Counter("ark"))
        self.assertEqual(Counter(t.letter for t in knight[1:]), Counter("night"))
        for group in puzzle.groups:
            self.assertEqual(locked_slots(group), [0])

    def test_tier_four_locks_both_ends(self):
        puzzle = build_puzzle("The Dark Knight", 4, random.Random(11))
        for group, word in zip(puzzle.groups, ["The", "Dark", "Knight"]):
            self.assertEqual(locked_slots(group), [0, len(word) - 1])
            self.assertEqual(group[0].letter, word[0])
            self.assertEqual(group[-1].letter, word[-1])

    def test_tier_four_single_letter_word_has_one_lock(self):
        puzzle = build_puzzle("A Quiet Place", 4, random.Random(2))
        self.assertEqual(locked_slots(puzzle.groups[0]), [0])

    def test_single_character_answer(self):
        for tier in (1, 2, 3, 4):
            puzzle = build_puzzle("M", tier)
            self.assertEqual(puzzle.assembled_guess(), "M")
        self.assertTrue(build_puzzle("M", 4).groups[0][0].locked)

    def test_same_seed_same_layout(self):
        a = build_puzzle("Pulp Fiction", 1, random.Random(42))
        b = build_puzzle("Pulp Fiction", 1, random.Random(42))
        self.assertEqual(a.to_dict(), b.to_dict())

    def test_shuffle_is_unbiased(self):
        rng = random.Random(1234)
        counts = Counter(build_puzzle("abc", 2, rng).assembled_guess() for _ in range(6000))
        self.assertEqual(len(counts), 6)
        for arrangement, count in counts.items():
            self.assertTrue(850 < count < 1150, (arrangement, count))


class InvalidInputTests(SimpleTestCase):
    def test_blank_answers_are_malformed(self):
        for bad in ("", "   ", "\t\n", None):
            with self.assertRaises(MalformedAnswer):
                build_puzzle(bad, 2)

    def test_tier_out_of_range(self):
        for bad in (0, 5, -1, "2", 2.0, True):
            with self.assertRaises(InvalidLevel):
                build_puzzle("Alien", bad)


class InteractionTests(SimpleTestCase):
    def setUp(self):
        self.puzzle = build_puzzle("The Dark Knight", 3, random.Random(9))

    def _unlocked(self):
        return [t for t in self.puzzle.tiles() if not t.locked]

    def test_swap_exchanges_slots(self):
        first, second = self._unlocked()[0], self._unlocked()[-1]
        before = [t.id for t in self.puzzle.tiles()]
        before_letters = letters(self.puzzle)
        i, j = before.index(first.id), before.index(second.id)
        self.puzzle.begin_drag(first.id)
        self.puzzle.complete_drop(first.id, second.id)
        after = [t.id for t in self.puzzle.tiles()]
        self.assertEqual(after[i], second.id)
        self.assertEqual(after[j], first.id)
        self.assertEqual(Counter(letters(self.puzzle)), Counter(before_letters))

    def test_locked_tile_refuses_drag(self):
        locked = self.puzzle.groups[0][0]
        with self.assertRaises(TileLocked):
            self.puzzle.begin_drag(locked.id)

    def test_locked_tile_refuses_drop(self):
        locked = self.puzzle.groups[1][0]
        source = self._unlocked()[0]
        before = self.puzzle.to_dict()
        with self.assertRaises(TileLocked):
            self.puzzle.complete_drop(source.id, locked.id)
        self.assertEqual(self.puzzle.to_dict(), before)

    def test_unknown_tile(self):
        with self.assertRaises(KeyError):
            self.puzzle.begin_drag(999)

    def test_assembled_guess_includes_locked_tiles(self):
        guess = self.puzzle.assembled_guess()
        self.assertEqual(len(guess), len("TheDarkKnight"))
        self.assertEqual(guess[0], "T")

    def test_dict_form_restores_puzzle(self):
        restored = AnagramPuzzle.from_dict(self.puzzle.to_dict())
        self.assertEqual(restored, self.puzzle)
