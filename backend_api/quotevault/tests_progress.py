import random

from django.test import SimpleTestCase

from quotevault.disclosure import (
    EmptyGuess,
    PlayProgress,
    ProgressClosed,
    PuzzleUnavailable,
    answers_match,
    normalize_answer,
)


class RecordingLog:
    def __init__(self):
        self.calls = []

    def record_solve(self, progress, time_taken):
        self.calls.append((progress.question_id, progress.attempts, progress.hints_used, time_taken))


def quote(answer="Say my name", **kwargs):
    return PlayProgress(question_id=1, kind="quote", answer=answer, started_at=1000.0, **kwargs)


def portrait(answer="Walter White", base_clarity=0.02, **kwargs):
    return PlayProgress(question_id=2, kind="character", answer=answer, base_clarity=base_clarity, started_at=1000.0, **kwargs)


class NormalizationTests(SimpleTestCase):
    def test_forgiving_match(self):
        self.assertTrue(answers_match("Say My Name!", "Say my name"))
        self.assertTrue(answers_match("saymyname", "Say my name"))
        self.assertFalse(answers_match("say my names", "Say my name"))

    def test_strips_non_ascii_alnum(self):
        self.assertEqual(normalize_answer("  Amélie (2001) "), "amlie2001")
        self.assertEqual(normalize_answer(None), "")


class GuessTests(SimpleTestCase):
    def test_correct_guess_solves_and_logs(self):
        log = RecordingLog()
        progress = quote()
        outcome = progress.submit_guess("Say My Name!", activity_log=log, now=1042.0)
        self.assertTrue(outcome.correct)
        self.assertEqual(outcome.canonical_answer, "Say my name")
        self.assertTrue(progress.solved)
        self.assertEqual(progress.status, "SOLVED")
        self.assertEqual(log.calls, [(1, 1, 0, 42)])

    def test_wrong_guess_counts_attempt(self):
        progress = quote()
        outcome = progress.submit_guess("Heisenberg")
        self.assertFalse(outcome.correct)
        self.assertIsNone(outcome.canonical_answer)
        self.assertEqual(progress.attempts, 1)
        self.assertFalse(progress.solved)

    def test_blank_guess_is_not_an_attempt(self):
        progress = quote()
        for blank in ("", "   ", None):
            with self.assertRaises(EmptyGuess):
                progress.submit_guess(blank)
        self.assertEqual(progress.attempts, 0)

    def test_solved_is_terminal(self):
        progress = quote()
        progress.submit_guess("saymyname")
        with self.assertRaises(ProgressClosed):
            progress.submit_guess("saymyname")
        self.assertEqual(progress.attempts, 1)


class AutoEscalationTests(SimpleTestCase):
    def test_quote_escalates_after_five_misses(self):
        progress = quote()
        outcomes = [progress.submit_guess("nope", rng=random.Random(1)) for _ in range(5)]
        self.assertEqual([o.auto_hint for o in outcomes], [False] * 4 + [True])
        self.assertEqual(progress.hints_used, 1)
        self.assertEqual(progress.manual_hints, 0)
        self.assertEqual(progress.puzzle.tier, 1)

    def test_image_escalates_after_three_misses(self):
        progress = portrait()
        for _ in range(3):
            progress.submit_guess("Jesse")
        self.assertEqual(progress.hints_used, 1)
        self.assertAlmostEqual(progress.clarity_level, 0.17)
        for _ in range(3):
            progress.submit_guess("Jesse")
        self.assertEqual(progress.hints_used, 2)

    def test_hint_request_resets_streak(self):
        progress = portrait()
        progress.submit_guess("Jesse")
        progress.submit_guess("Jesse")
        progress.request_hint()
        progress.submit_guess("Jesse")
        progress.submit_guess("Jesse")
        self.assertEqual(progress.hints_used, 1)

    def test_no_escalation_at_ceiling(self):
        progress = quote(hints_used=4)
        for _ in range(5):
            outcome = progress.submit_guess("nope")
        self.assertFalse(outcome.auto_hint)
        self.assertEqual(progress.hints_used, 4)
        self.assertEqual(progress.wrong_streak, 0)


class HintTests(SimpleTestCase):
    def test_quote_hints_tighten_puzzle(self):
        progress = quote()
        self.assertIsNone(progress.puzzle)
        for tier in (1, 2, 3, 4):
            self.assertTrue(progress.request_hint(random.Random(tier)))
            self.assertEqual(progress.puzzle.tier, tier)
        self.assertEqual(progress.manual_hints, 4)

    def test_quote_ceiling_is_idempotent(self):
        progress = quote()
        for _ in range(4):
            progress.request_hint()
        snapshot = progress.to_dict()
        for _ in range(10):
            self.assertFalse(progress.request_hint())
        self.assertEqual(progress.to_dict(), snapshot)

    def test_image_hints_then_single_puzzle_hint(self):
        progress = portrait()
        for _ in range(7):
            progress.request_hint()
        disclosure = progress.disclosure()
        self.assertEqual(disclosure.mode, "image")
        self.assertTrue(disclosure.revealed)
        self.assertFalse(progress.solved)
        self.assertIsNone(progress.puzzle)

        self.assertTrue(progress.request_hint())
        self.assertEqual(progress.disclosure().mode, "puzzle")
        self.assertEqual(progress.puzzle.tier, 1)

        snapshot = progress.to_dict()
        self.assertFalse(progress.request_hint())
        self.assertEqual(progress.to_dict(), snapshot)
        self.assertEqual(progress.hints_used, 8)

    def test_no_hints_once_solved(self):
        progress = quote()
        progress.submit_guess("say my name")
        self.assertFalse(progress.request_hint())
        self.assertEqual(progress.hints_used, 0)

    def test_solved_image_is_fully_revealed(self):
        progress = portrait()
        progress.submit_guess("walter white")
        self.assertEqual(progress.clarity_level, 1.0)
        self.assertFalse(progress.disclosure().hint_available)


class PuzzleSubmitTests(SimpleTestCase):
    def test_requires_puzzle(self):
        with self.assertRaises(PuzzleUnavailable):
            quote().submit_puzzle()

    def test_fully_locked_puzzle_solves(self):
        progress = quote(answer="Up")
        for _ in range(4):
            progress.request_hint()
        outcome = progress.submit_puzzle()
        self.assertTrue(outcome.correct)
        self.assertEqual(progress.attempts, 1)

    def test_wrong_arrangement_counts_attempt(self):
        progress = quote(answer="Jaws")
        for _ in range(4):
            progress.request_hint(random.Random(3))
        puzzle = progress.puzzle
        a, w = puzzle.groups[0][1], puzzle.groups[0][2]
        if puzzle.assembled_guess() == "Jaws":
            puzzle.complete_drop(a.id, w.id)
        self.assertEqual(puzzle.assembled_guess(), "Jwas")
        self.assertFalse(progress.submit_puzzle().correct)
        self.assertEqual(progress.attempts, 1)


class SkipAndScoreTests(SimpleTestCase):
    def test_skip_is_terminal_without_logging(self):
        progress = quote()
        self.assertEqual(progress.skip(), "Say my name")
        self.assertTrue(progress.solved)
        self.assertTrue(progress.skipped)
        self.assertEqual(progress.status, "SKIPPED")
        self.assertEqual(progress.score(), 0)
        with self.assertRaises(ProgressClosed):
            progress.submit_guess("say my name")

    def test_skip_after_solve_keeps_solve(self):
        progress = quote()
        progress.submit_guess("say my name")
        progress.skip()
        self.assertFalse(progress.skipped)

    def test_manual_hints_cost_points(self):
        progress = portrait()
        progress.request_hint()
        progress.request_hint()
        progress.submit_guess("walter white")
        self.assertEqual(progress.score(), 80)
        self.assertEqual(progress.score(points_base=50, hint_penalty=30), 0)

    def test_automatic_hints_are_free(self):
        progress = portrait()
        for _ in range(3):
            progress.submit_guess("Jesse")
        progress.submit_guess("walter white")
        self.assertEqual(progress.hints_used, 1)
        self.assertEqual(progress.score(), 100)

    def test_unsolved_scores_nothing(self):
        self.assertEqual(quote().score(), 0)


class SerializationTests(SimpleTestCase):
    def test_dict_form_keeps_puzzle(self):
        progress = quote()
        progress.request_hint(random.Random(5))
        restored = PlayProgress.from_dict(progress.to_dict())
        self.assertEqual(restored, progress)
        self.assertEqual(restored.puzzle.assembled_guess(), progress.puzzle.assembled_guess())
