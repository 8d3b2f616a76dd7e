"""
Mathematical utility functions for probability calculations.

This module provides functions for calculating probabilities related to
card draws in Magic: The Gathering using the hypergeometric distribution,
including the multivariate form used for "all combo pieces by turn X"
questions.

Impossible draws (more copies requested than exist, negative targets,
group minimums that cannot fit in the sample) are answered with 0.0.
Inconsistent deck models (negative sizes, drawing more cards than the deck
holds, groups that together exceed the deck) raise InvalidShapeError.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from utils.constants.probability import DEFAULT_GROUP_MIN


class InvalidShapeError(ValueError):
    """Raised when the population, sample, or group sizes are inconsistent."""


@dataclass(frozen=True)
class GroupConstraint:
    """A group of interchangeable cards and how many of them must be drawn.

    ``max_drawn`` of None means "up to the sample size".
    """

    count: int
    min_drawn: int = DEFAULT_GROUP_MIN
    max_drawn: int | None = None
    name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GroupConstraint:
        """Build a constraint from a ``{"count", "min", "max", "name"}`` mapping."""
        if "count" not in data:
            raise InvalidShapeError(f"Group definition is missing 'count': {dict(data)}")
        min_drawn = data.get("min")
        max_drawn = data.get("max")
        return cls(
            count=int(data["count"]),
            min_drawn=DEFAULT_GROUP_MIN if min_drawn is None else int(min_drawn),
            max_drawn=None if max_drawn is None else int(max_drawn),
            name=data.get("name"),
        )


def binomial_coefficient(n: int, k: int) -> float:
    """
    Return C(n, k), the number of ways to choose k items from n.

    The product is built as ``result * (n - i) / (i + 1)`` one step at a time
    so every partial value is itself a binomial coefficient; this keeps
    magnitudes bounded for 100-card decks where factorials would not be.

    Returns 0 when ``k < 0`` or ``k > n``.
    """
    if k > n or k < 0:
        return 0
    if k == 0 or k == n:
        return 1

    k = min(k, n - k)

    result = 1.0
    for i in range(k):
        result = result * (n - i) / (i + 1)
    return result


def _validate_draw(population: int, successes_in_pop: int, sample_size: int) -> None:
    if population < 0:
        raise InvalidShapeError(f"Population must be non-negative, got {population}")
    if successes_in_pop < 0:
        raise InvalidShapeError(
            f"Successes in population must be non-negative, got {successes_in_pop}"
        )
    if sample_size < 0:
        raise InvalidShapeError(f"Sample size must be non-negative, got {sample_size}")
    if successes_in_pop > population:
        raise InvalidShapeError(
            f"Successes in population ({successes_in_pop}) cannot exceed "
            f"population ({population})"
        )
    if sample_size > population:
        raise InvalidShapeError(
            f"Sample size ({sample_size}) cannot exceed population ({population})"
        )
    if math.isinf(binomial_coefficient(population, sample_size)):
        raise InvalidShapeError(
            f"Population too large for float evaluation: C({population}, {sample_size}) "
            "overflows; use a smaller deck or draw"
        )


def _exact(population: int, successes_in_pop: int, sample_size: int, k: int) -> float:
    if k < 0:
        return 0.0
    numerator = binomial_coefficient(successes_in_pop, k) * binomial_coefficient(
        population - successes_in_pop, sample_size - k
    )
    return numerator / binomial_coefficient(population, sample_size)


def _sum_exact(
    population: int, successes_in_pop: int, sample_size: int, low: int, high: int
) -> float:
    total_probability = 0.0
    for k in range(max(low, 0), high + 1):
        total_probability += _exact(population, successes_in_pop, sample_size, k)
    return total_probability


def hypergeometric_probability(
    population: int,
    successes_in_pop: int,
    sample_size: int,
    successes_in_sample: int,
) -> float:
    """
    Calculate the exact probability of drawing a specific number of target cards.

    Uses the hypergeometric distribution to compute the probability of drawing
    exactly k target cards when drawing n cards from a deck of N cards that
    contains K copies of the target card.

    Formula: P(X = k) = [C(K, k) × C(N-K, n-k)] / C(N, n)

    Args:
        population: Total number of cards in the deck (N)
        successes_in_pop: Number of target cards in the deck (K)
        sample_size: Number of cards drawn (n)
        successes_in_sample: Target number of cards to draw (k)

    Returns:
        Probability as a float between 0.0 and 1.0. Requests that cannot be
        met (negative k, or k larger than K or n) return 0.0.

    Raises:
        InvalidShapeError: If N, K or n is negative, K > N, n > N, or C(N, n)
            overflows a float

    Example:
        >>> # Probability of drawing exactly 3 lands in a Commander opening hand
        >>> # (38 lands in a 100-card deck, drawing 7 cards)
        >>> hypergeometric_probability(100, 38, 7, 3)
        0.2940...
    """
    _validate_draw(population, successes_in_pop, sample_size)
    return _exact(population, successes_in_pop, sample_size, successes_in_sample)


def hypergeometric_at_least(
    population: int,
    successes_in_pop: int,
    sample_size: int,
    min_successes: int,
) -> float:
    """
    Calculate the probability of drawing at least a minimum number of target cards.

    Computes P(X >= min_successes) by summing probabilities from min_successes
    to the maximum possible number of target cards that could be drawn.

    Args:
        population: Total number of cards in the deck (N)
        successes_in_pop: Number of target cards in the deck (K)
        sample_size: Number of cards drawn (n)
        min_successes: Minimum number of target cards desired (k_min)

    Returns:
        Probability as a float between 0.0 and 1.0

    Raises:
        InvalidShapeError: If N, K or n is negative, K > N, n > N, or C(N, n)
            overflows a float

    Example:
        >>> # Probability of drawing at least 2 lands in opening hand
        >>> hypergeometric_at_least(100, 38, 7, 2)
        0.8233...
    """
    _validate_draw(population, successes_in_pop, sample_size)

    # Maximum possible successes is min of (cards drawn, copies in deck)
    max_successes = min(sample_size, successes_in_pop)
    return _sum_exact(population, successes_in_pop, sample_size, min_successes, max_successes)


def hypergeometric_at_most(
    population: int,
    successes_in_pop: int,
    sample_size: int,
    max_successes: int,
) -> float:
    """
    Calculate the probability of drawing at most a maximum number of target cards.

    Computes P(X <= max_successes). A negative maximum yields 0.0.

    Args:
        population: Total number of cards in the deck (N)
        successes_in_pop: Number of target cards in the deck (K)
        sample_size: Number of cards drawn (n)
        max_successes: Maximum number of target cards desired (k_max)

    Raises:
        InvalidShapeError: If N, K or n is negative, K > N, n > N, or C(N, n)
            overflows a float
    """
    _validate_draw(population, successes_in_pop, sample_size)

    upper = min(max_successes, sample_size, successes_in_pop)
    return _sum_exact(population, successes_in_pop, sample_size, 0, upper)


def hypergeometric_between(
    population: int,
    successes_in_pop: int,
    sample_size: int,
    min_successes: int,
    max_successes: int,
) -> float:
    """
    Calculate the probability of drawing between two counts of target cards.

    Both bounds are inclusive; an empty range (min > max) yields 0.0.

    Raises:
        InvalidShapeError: If N, K or n is negative, K > N, n > N, or C(N, n)
            overflows a float
    """
    _validate_draw(population, successes_in_pop, sample_size)

    upper = min(max_successes, sample_size, successes_in_pop)
    return _sum_exact(population, successes_in_pop, sample_size, min_successes, upper)


def coerce_groups(groups: Iterable[GroupConstraint | Mapping[str, Any]]) -> list[GroupConstraint]:
    """Normalize group definitions, rejecting anything that is not a group."""
    coerced: list[GroupConstraint] = []
    for group in groups:
        if isinstance(group, GroupConstraint):
            coerced.append(group)
        elif isinstance(group, Mapping):
            coerced.append(GroupConstraint.from_mapping(group))
        else:
            raise InvalidShapeError(f"Unsupported group definition: {group!r}")
    return coerced


def multivariate_hypergeometric(
    population: int,
    groups: Iterable[GroupConstraint | Mapping[str, Any]],
    sample_size: int,
) -> float:
    """
    Calculate the probability that every group's draw lands inside its window.

    Each group holds ``count`` cards of the deck and asks for between
    ``min_drawn`` (default 1) and ``max_drawn`` (default: the sample size)
    of them. Cards outside all groups form an unconstrained remainder.
    Groups must be disjoint.

    The draw is split group by group: each group takes a share of the cards
    still unassigned, bounded by its window and its size, and whatever is
    left over comes from the remainder. Every such split contributes

        prod(C(count_i, k_i)) × C(remainder, leftover) / C(N, n)

    which sums to the exact multivariate hypergeometric probability.

    Args:
        population: Total number of cards in the deck (N)
        groups: GroupConstraint objects or ``{"count", "min", "max"}`` mappings
        sample_size: Number of cards drawn (n)

    Returns:
        Probability as a float between 0.0 and 1.0. No groups at all yields
        1.0; unreachable minimums yield exactly 0.0.

    Raises:
        InvalidShapeError: If N or n is negative, n > N, a group count is
            negative, the group counts add up to more than N, or C(N, n)
            overflows a float

    Example:
        >>> # Both halves of a two-card combo (3 and 2 copies) by turn 8
        >>> multivariate_hypergeometric(
        ...     100, [{"count": 3, "min": 1}, {"count": 2, "min": 1}], 15
        ... )
        0.11...
    """
    _validate_draw(population, 0, sample_size)
    constraints = coerce_groups(groups)

    for index, group in enumerate(constraints):
        if group.count < 0:
            raise InvalidShapeError(
                f"Group {index + 1} count must be non-negative, got {group.count}"
            )

    group_total = sum(group.count for group in constraints)
    if group_total > population:
        raise InvalidShapeError(
            f"Total group cards exceeds population size ({group_total} > {population})"
        )

    if not constraints:
        return 1.0

    other = population - group_total
    total_ways = binomial_coefficient(population, sample_size)

    windows = []
    for group in constraints:
        max_drawn = sample_size if group.max_drawn is None else group.max_drawn
        windows.append(
            (group.count, max(0, group.min_drawn), min(group.count, max_drawn, sample_size))
        )

    def accumulate(index: int, remaining: int, ways: float) -> float:
        if index == len(windows):
            return ways * binomial_coefficient(other, remaining) / total_ways

        count, low, high = windows[index]
        probability = 0.0
        for drawn in range(low, min(high, remaining) + 1):
            probability += accumulate(
                index + 1,
                remaining - drawn,
                ways * binomial_coefficient(count, drawn),
            )
        return probability

    return accumulate(0, sample_size, 1.0)


__all__ = [
    "GroupConstraint",
    "InvalidShapeError",
    "binomial_coefficient",
    "coerce_groups",
    "hypergeometric_at_least",
    "hypergeometric_at_most",
    "hypergeometric_between",
    "hypergeometric_probability",
    "multivariate_hypergeometric",
]
