"""
Probability Service - Deck consistency questions answered in player terms.

This module turns the raw probabilities from utils.math_utils into results
the rest of the application can show:
- Single-card-group questions (exactly / at least / at most / between)
- Combo questions across several card groups
- Turn-based draw counts (on the play or on the draw)
- Percentage, odds, and text report formatting
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from utils.constants.probability import ODDS_DECIMALS, OPENING_HAND_SIZE, PERCENT_DECIMALS
from utils.math_utils import (
    GroupConstraint,
    InvalidShapeError,
    coerce_groups,
    hypergeometric_at_least,
    hypergeometric_at_most,
    hypergeometric_between,
    hypergeometric_probability,
    multivariate_hypergeometric,
)


@dataclass(frozen=True)
class ProbabilityResult:
    """Result of a draw-probability question."""

    probability: float
    description: str
    population: int
    sample_size: int
    target_count: int | None = None

    @property
    def percentage(self) -> float:
        return self.probability * 100

    @property
    def odds(self) -> float | None:
        """Return N for "1 in N" odds, or None when the draw can never happen."""
        if self.is_impossible:
            return None
        return 1 / self.probability

    @property
    def is_impossible(self) -> bool:
        return self.probability <= 0.0

    def format_percentage(self) -> str:
        return f"{self.percentage:.{PERCENT_DECIMALS}f}%"

    def format_odds(self) -> str:
        odds = self.odds
        if odds is None:
            return "never"
        return f"1 in {odds:.{ODDS_DECIMALS}f}"


def cards_seen_by_turn(
    turn: int, on_the_play: bool = True, hand_size: int = OPENING_HAND_SIZE
) -> int:
    """
    Return how many cards a player has seen by the given turn.

    The player on the play skips the first-turn draw, so turn 3 on the play
    sees 9 cards from a 7-card hand while turn 3 on the draw sees 10.
    """
    if turn < 1:
        raise ValueError(f"Turn must be at least 1, got {turn}")
    if hand_size < 0:
        raise ValueError(f"Hand size must be non-negative, got {hand_size}")
    return hand_size + turn - 1 if on_the_play else hand_size + turn


def describe_group(group: GroupConstraint, index: int) -> str:
    label = group.name or f"group {index + 1}"
    if group.max_drawn is None:
        return f"at least {group.min_drawn} of {label}"
    if group.min_drawn == group.max_drawn:
        return f"exactly {group.min_drawn} of {label}"
    return f"between {group.min_drawn} and {group.max_drawn} of {label}"


def render_report(result: ProbabilityResult) -> str:
    """Render a multi-line text summary of a probability result."""
    lines = [
        "Hypergeometric Probability Calculation",
        "",
        "Deck Setup:",
        f"  Total cards in deck: {result.population}",
    ]
    if result.target_count is not None:
        share = result.target_count / result.population * 100 if result.population else 0.0
        lines.append(f"  Target cards in deck: {result.target_count} ({share:.1f}%)")
    lines.extend(
        [
            f"  Cards drawn: {result.sample_size}",
            "",
            "Question:",
            f"  What's the probability of drawing {result.description} target card(s)?",
            "",
            "Result:",
            f"  {result.format_percentage()} chance",
            f"  Odds: {result.format_odds()}",
        ]
    )
    return "\n".join(lines)


class ProbabilityService:
    """Service for deck consistency and combo probability questions."""

    def __init__(
        self,
        combo_calculator: Callable[..., float] | None = None,
        hand_size: int = OPENING_HAND_SIZE,
    ):
        """
        Initialize the probability service.

        Args:
            combo_calculator: Function computing multi-group probabilities
                (defaults to multivariate_hypergeometric)
            hand_size: Opening hand size used for turn-based questions
        """
        self.combo_calculator = combo_calculator or multivariate_hypergeometric
        self.hand_size = hand_size

    # ============= Single Group Questions =============

    def exactly(self, deck_size: int, target_count: int, drawn: int, k: int) -> ProbabilityResult:
        probability = self._compute(hypergeometric_probability, deck_size, target_count, drawn, k)
        return self._result(probability, f"exactly {k}", deck_size, drawn, target_count)

    def at_least(
        self, deck_size: int, target_count: int, drawn: int, minimum: int
    ) -> ProbabilityResult:
        probability = self._compute(
            hypergeometric_at_least, deck_size, target_count, drawn, minimum
        )
        return self._result(probability, f"at least {minimum}", deck_size, drawn, target_count)

    def at_most(
        self, deck_size: int, target_count: int, drawn: int, maximum: int
    ) -> ProbabilityResult:
        probability = self._compute(
            hypergeometric_at_most, deck_size, target_count, drawn, maximum
        )
        return self._result(probability, f"at most {maximum}", deck_size, drawn, target_count)

    def between(
        self, deck_size: int, target_count: int, drawn: int, minimum: int, maximum: int
    ) -> ProbabilityResult:
        probability = self._compute(
            hypergeometric_between, deck_size, target_count, drawn, minimum, maximum
        )
        return self._result(
            probability,
            f"between {minimum} and {maximum}",
            deck_size,
            drawn,
            target_count,
        )

    # ============= Combo Questions =============

    def combo(
        self,
        deck_size: int,
        groups: Iterable[GroupConstraint | Mapping[str, Any]],
        drawn: int,
    ) -> ProbabilityResult:
        """
        Probability of assembling every group's requirement within ``drawn`` cards.

        Args:
            deck_size: Total cards in the deck
            groups: GroupConstraint objects or ``{"count", "min", "max"}`` mappings
            drawn: Cards seen

        Raises:
            InvalidShapeError: If the groups hold more cards than the deck, or a group
                definition is not a mapping or GroupConstraint
        """
        try:
            constraints = coerce_groups(groups)
        except InvalidShapeError as exc:
            logger.warning(f"Rejected combo groups: {exc}")
            raise
        probability = self._compute(self.combo_calculator, deck_size, constraints, drawn)
        description = " and ".join(
            describe_group(group, index) for index, group in enumerate(constraints)
        )
        return self._result(probability, description or "anything", deck_size, drawn)

    def combo_by_turn(
        self,
        deck_size: int,
        groups: Iterable[GroupConstraint | Mapping[str, Any]],
        turn: int,
        on_the_play: bool = True,
    ) -> ProbabilityResult:
        drawn = cards_seen_by_turn(turn, on_the_play=on_the_play, hand_size=self.hand_size)
        logger.debug(
            f"Turn {turn} ({'play' if on_the_play else 'draw'}) sees {drawn} cards"
        )
        return self.combo(deck_size, groups, drawn)

    # ============= Helpers =============

    def _compute(self, calculator: Callable[..., float], *args: Any) -> float:
        try:
            probability = calculator(*args)
        except InvalidShapeError as exc:
            logger.warning(f"Rejected probability question {args}: {exc}")
            raise
        name = getattr(calculator, "__name__", type(calculator).__name__)
        logger.debug(f"{name}{args} = {probability:.6f}")
        return probability

    @staticmethod
    def _result(
        probability: float,
        description: str,
        deck_size: int,
        drawn: int,
        target_count: int | None = None,
    ) -> ProbabilityResult:
        if probability <= 0.0:
            logger.info(f"Drawing {description} in {drawn} cards is impossible")
        return ProbabilityResult(
            probability=probability,
            description=description,
            population=deck_size,
            sample_size=drawn,
            target_count=target_count,
        )


__all__ = [
    "ProbabilityResult",
    "ProbabilityService",
    "cards_seen_by_turn",
    "describe_group",
    "render_report",
]
