"""Questionnaire scoring: answers -> total score -> risk profile."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping

from src.analysis.questionnaire import QUESTION_IDS
from src.config import SETTINGS
from src.errors import InvalidAnswerError

DEFAULT_OPTION_WEIGHTS: dict[str, int] = {"A": 1, "B": 2, "C": 3}
DEFAULT_THRESHOLDS: dict[str, int] = {
    "reference_questions": 5,
    "conservative_max": 7,
    "moderate_max": 11,
}


class RiskProfile(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class RiskScorer:
    """Maps a complete answer set to a RiskProfile.

    Threshold limits are given for a reference instrument (5 questions); for
    another question count they are scaled by ``n / reference_questions``.
    The scorer holds configuration only, so ``score_profile`` is pure.
    """

    def __init__(
        self,
        question_ids: Iterable[str] = QUESTION_IDS,
        option_weights: Mapping[str, int] | None = None,
        thresholds: Mapping[str, int] | None = None,
    ):
        scoring = SETTINGS.get("scoring", {})
        self.question_ids: tuple[str, ...] = tuple(question_ids)
        if not self.question_ids:
            raise ValueError("RiskScorer needs at least one question")
        weights = option_weights or scoring.get("option_weights") or DEFAULT_OPTION_WEIGHTS
        self.option_weights = {str(k).upper(): int(v) for k, v in weights.items()}
        limits = {**DEFAULT_THRESHOLDS, **(thresholds or scoring.get("thresholds") or {})}
        scale = len(self.question_ids) / limits["reference_questions"]
        self.conservative_max = int(limits["conservative_max"] * scale)
        self.moderate_max = int(limits["moderate_max"] * scale)

    def validate(self, answers: Mapping[str, str]) -> dict[str, str]:
        """Return normalised answers or raise InvalidAnswerError."""
        if not isinstance(answers, Mapping):
            raise InvalidAnswerError("answers must be a mapping of question id to option")

        missing = [q for q in self.question_ids if q not in answers]
        unexpected = sorted(map(str, (k for k in answers if k not in self.question_ids)))
        if missing:
            raise InvalidAnswerError(f"missing answers for: {', '.join(missing)}")
        if unexpected:
            raise InvalidAnswerError(f"unknown questions: {', '.join(unexpected)}")

        normalised: dict[str, str] = {}
        for qid in self.question_ids:
            raw = answers[qid]
            label = raw.strip().upper() if isinstance(raw, str) else None
            if label not in self.option_weights:
                allowed = "/".join(sorted(self.option_weights))
                raise InvalidAnswerError(
                    f"invalid option {raw!r} for {qid} (expected one of {allowed})"
                )
            normalised[qid] = label
        return normalised

    def score(self, answers: Mapping[str, str]) -> int:
        normalised = self.validate(answers)
        return sum(self.option_weights[label] for label in normalised.values())

    def profile_for_score(self, score: int) -> RiskProfile:
        if score <= self.conservative_max:
            return RiskProfile.CONSERVATIVE
        if score <= self.moderate_max:
            return RiskProfile.MODERATE
        return RiskProfile.AGGRESSIVE

    def score_profile(self, answers: Mapping[str, str]) -> RiskProfile:
        return self.profile_for_score(self.score(answers))


def score_profile(answers: Mapping[str, str]) -> RiskProfile:
    """Score with the default five-question instrument."""
    return RiskScorer().score_profile(answers)
