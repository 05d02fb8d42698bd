from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from .anagram import AnagramPuzzle, build_puzzle
from .errors import EmptyGuess, ProgressClosed, PuzzleUnavailable
from .levels import Disclosure, HintSchedule
from .registry import get_schedule, is_image_kind

logger = logging.getLogger(__name__)

_NOT_ALNUM = re.compile(r"[^a-z0-9]")

DEFAULT_BASE_CLARITY = 0.02


# PUBLIC_INTERFACE
def normalize_answer(text: str) -> str:
    """Lower-case and drop everything except ASCII letters and digits.

    "Say My Name!" -> "saymyname". Accented letters are dropped, not folded.
    """
    return _NOT_ALNUM.sub("", (text or "").lower())


# PUBLIC_INTERFACE
def answers_match(guess: str, answer: str) -> bool:
    return normalize_answer(guess) == normalize_answer(answer)


class ActivityLog(Protocol):
    """Durable sink for genuine solves (analytics, recommendations)."""

    def record_solve(self, progress: "PlayProgress", time_taken: int) -> None: ...


@dataclass(frozen=True)
class GuessOutcome:
    """Result of one submitted guess.

    canonical_answer is only set when the guess was correct. auto_hint is True
    when the wrong guess tripped automatic escalation.
    """

    correct: bool
    canonical_answer: Optional[str] = None
    auto_hint: bool = False


# PUBLIC_INTERFACE
@dataclass
class PlayProgress:
    """Play state of one question for one player.

    Unsolved(attempts, hints_used) moves to solved, which is terminal. skip()
    reaches the same terminal state with skipped set, so it never counts as
    a genuine solve.
    """

    question_id: int
    kind: str
    answer: str
    base_clarity: float = DEFAULT_BASE_CLARITY
    solved: bool = False
    skipped: bool = False
    attempts: int = 0
    hints_used: int = 0
    manual_hints: int = 0
    wrong_streak: int = 0
    started_at: float = field(default_factory=time.time)
    puzzle: Optional[AnagramPuzzle] = None

    @property
    def schedule(self) -> HintSchedule:
        return get_schedule(self.kind)

    # PUBLIC_INTERFACE
    def disclosure(self) -> Disclosure:
        """Current disclosure; a finished question is always fully revealed."""
        current = self.schedule.disclose(self.hints_used, self.base_clarity)
        if self.solved:
            clarity = 1.0 if is_image_kind(self.kind) else None
            return Disclosure(current.mode, clarity, current.tier, clarity is not None, False)
        return current

    @property
    def clarity_level(self) -> Optional[float]:
        return self.disclosure().clarity_level

    @property
    def at_ceiling(self) -> bool:
        return self.hints_used >= self.schedule.hint_ceiling(self.base_clarity)

    @property
    def status(self) -> str:
        if self.skipped:
            return "SKIPPED"
        return "SOLVED" if self.solved else "IN_PROGRESS"

    def _sync_puzzle(self, rng: Optional[random.Random] = None) -> None:
        """Rebuild the puzzle from scratch whenever the tier changes."""
        current = self.schedule.disclose(self.hints_used, self.base_clarity)
        if current.mode != "puzzle":
            self.puzzle = None
        elif self.puzzle is None or self.puzzle.tier != current.tier:
            self.puzzle = build_puzzle(self.answer, current.tier, rng)

    def _advance_hint(self, charged: bool, rng: Optional[random.Random] = None) -> None:
        self.hints_used += 1
        if charged:
            self.manual_hints += 1
        self.wrong_streak = 0
        self._sync_puzzle(rng)

    # PUBLIC_INTERFACE
    def request_hint(self, rng: Optional[random.Random] = None) -> bool:
        """Spend one hint. Returns False (and changes nothing) when solved or at the ceiling."""
        if self.solved or self.at_ceiling:
            return False
        self._advance_hint(charged=True, rng=rng)
        logger.debug("Question %s: hint %s requested", self.question_id, self.hints_used)
        return True

    # PUBLIC_INTERFACE
    def submit_guess(
        self,
        raw: str,
        activity_log: Optional[ActivityLog] = None,
        now: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> GuessOutcome:
        """Verify a guess, count the attempt and update state.

        Raises:
            EmptyGuess: blank guess; the attempt is not counted.
            ProgressClosed: the question is already solved or skipped.
        """
        if self.solved:
            raise ProgressClosed(f"Question {self.question_id} is already finished.")
        if not raw or not raw.strip():
            raise EmptyGuess("Guess must not be empty.")

        self.attempts += 1
        if answers_match(raw, self.answer):
            self.solved = True
            logger.info(
                "Question %s solved after %s attempts, %s hints",
                self.question_id, self.attempts, self.hints_used,
            )
            if activity_log is not None:
                activity_log.record_solve(self, self.time_taken(now))
            return GuessOutcome(correct=True, canonical_answer=self.answer)

        self.wrong_streak += 1
        auto_hint = False
        if self.wrong_streak >= self.schedule.auto_hint_after:
            self.wrong_streak = 0
            if not self.at_ceiling:
                self._advance_hint(charged=False, rng=rng)
                auto_hint = True
                logger.debug("Question %s: automatic hint %s", self.question_id, self.hints_used)
        return GuessOutcome(correct=False, auto_hint=auto_hint)

    # PUBLIC_INTERFACE
    def submit_puzzle(
        self,
        activity_log: Optional[ActivityLog] = None,
        now: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> GuessOutcome:
        """Submit the current tile arrangement as a guess."""
        if self.puzzle is None:
            raise PuzzleUnavailable(f"Question {self.question_id} has no active puzzle.")
        return self.submit_guess(self.puzzle.assembled_guess(), activity_log, now, rng)

    # PUBLIC_INTERFACE
    def skip(self) -> str:
        """Give up: finish without a correct guess and return the answer for display."""
        if not self.solved:
            self.solved = True
            self.skipped = True
            logger.info("Question %s skipped after %s attempts", self.question_id, self.attempts)
        return self.answer

    def time_taken(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(0, int(round(now - self.started_at)))

    # PUBLIC_INTERFACE
    def score(self, points_base: int = 100, hint_penalty: int = 10) -> int:
        """Points for a genuine solve; automatic hints are free."""
        if not self.solved or self.skipped:
            return 0
        return max(points_base - self.manual_hints * hint_penalty, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "kind": self.kind,
            "answer": self.answer,
            "base_clarity": self.base_clarity,
            "solved": self.solved,
            "skipped": self.skipped,
            "attempts": self.attempts,
            "hints_used": self.hints_used,
            "manual_hints": self.manual_hints,
            "wrong_streak": self.wrong_streak,
            "started_at": self.started_at,
            "puzzle": self.puzzle.to_dict() if self.puzzle else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayProgress":
        puzzle = data.get("puzzle")
        return cls(
            question_id=data["question_id"],
            kind=data["kind"],
            answer=data["answer"],
            base_clarity=data.get("base_clarity", DEFAULT_BASE_CLARITY),
            solved=data.get("solved", False),
            skipped=data.get("skipped", False),
            attempts=data.get("attempts", 0),
            hints_used=data.get("hints_used", 0),
            manual_hints=data.get("manual_hints", 0),
            wrong_streak=data.get("wrong_streak", 0),
            started_at=data.get("started_at", time.time()),
            puzzle=AnagramPuzzle.from_dict(puzzle) if puzzle else None,
        )
