"""Multiple-choice questions about git commands and concepts."""

from __future__ import annotations

from pathlib import Path

from .base import (
    AnswerOutOfRangeError,
    Challenge,
    ChallengeConfigError,
    ChallengeResult,
    ChallengeType,
    require_text,
)


class QuizChallenge(Challenge):
    """
    Question with two or more options and one correct answer.

    The only mutable state is the player's answer slot, which can be
    overwritten until the quiz is judged correct.
    """

    challenge_type = ChallengeType.QUIZ

    def __init__(
        self,
        id: str,
        description: str,
        question: str,
        options: list[str],
        correct_answer_index: int,
        hint: str | None = None,
    ):
        super().__init__(id, description)
        self.question = require_text(question, "Question")

        if options is None or len(options) < 2:
            raise ChallengeConfigError("Must provide at least 2 options")
        if not 0 <= correct_answer_index < len(options):
            raise ChallengeConfigError(
                f"Correct answer index must be between 0 and {len(options) - 1}"
            )

        self.options = list(options)
        self.correct_answer_index = correct_answer_index
        self.hint = hint
        self._player_answer: int | None = None

    @property
    def player_answer(self) -> int | None:
        return self._player_answer

    @property
    def has_answer(self) -> bool:
        return self._player_answer is not None

    def submit_answer(self, index: int) -> None:
        """
        Record a zero-based answer index.

        Raises:
            AnswerOutOfRangeError: index outside the options; the previous
                answer is kept
        """
        if not 0 <= index < len(self.options):
            raise AnswerOutOfRangeError(index, len(self.options))
        self._player_answer = index

    def setup(self, working_dir: Path | str) -> None:
        # Nothing to prepare: quizzes never touch the working tree
        return None

    def validate(self, working_dir: Path | str) -> ChallengeResult:
        if self._player_answer is None:
            return ChallengeResult.failed(
                "You haven't answered the question yet.",
                "Use 'answer <number>' to select an option "
                "(e.g., 'answer 1' for the first option)",
            )

        if self._player_answer == self.correct_answer_index:
            return ChallengeResult.passed(
                f"Correct! {self.options[self.correct_answer_index]} is the right answer."
            )

        return ChallengeResult.failed(
            f"Incorrect. '{self.options[self._player_answer]}' is not the right answer.",
            self.hint,
        )
