"""Pairing score calculation.

A pairing is scored by looking at all 1024 equally likely offspring:

  rank scheme (default):
    Give each outcome its absolute rank on the 0..1023 scale (see
    ranking.genotype_ranks) and sort the space worst → best. A pair can
    be bred ``n = min(max_siblings, attempts_f, attempts_m)`` more times
    and only the best chick is kept, so the score is the expected maximum
    rank among n uniform draws:

        F(i) = (i + 1) / 1024
        P(best = i) = F(i)^n - F(i - 1)^n,   F(-1) = 0
        score = Σ rank_i · P(best = i)

    Equal outcomes share a rank, so a pair whose chicks all come out the
    same scores that rank for any n >= 1.

    n = 0 gives exactly 0.

  percent scheme:
    Mean quality_score() over the space as a percentage of the ceiling
    genotype's quality. This is the expected quality of ONE chick and
    ignores attempts; it is not comparable with rank scores.

The active scheme comes from ScoringSection.scheme and is chosen in one
place, evaluate_pairing().
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from chocobo_breeding.config import ScoringSection
from chocobo_breeding.genetics import enumerate_genotype_space
from chocobo_breeding.ranking import ceiling_genotype, quality_score, rank_values
from chocobo_breeding.types import (
    GENOTYPE_SPACE_SIZE,
    MAX_SIBLINGS,
    STAT_MAX_DEFAULT,
    Candidate,
    check_candidate,
)


# ═══════════════════════════════════════════════════════════════════════
# BEST-OF-N ORDER STATISTIC
# ═══════════════════════════════════════════════════════════════════════


def n_siblings(
    father: Candidate,
    mother: Candidate,
    max_siblings: int = MAX_SIBLINGS,
) -> int:
    """Offspring still obtainable from a pair, clamped to [0, max_siblings]."""
    n = min(max_siblings, father.attempts_remaining, mother.attempts_remaining)
    return max(0, int(n))


def best_of_n_probabilities(n_outcomes: int, siblings: int) -> np.ndarray:
    """Distribution of the best position among ``siblings`` uniform draws.

    Args:
        n_outcomes: Size of the (sorted) outcome space.
        siblings: Number of independent draws; values <= 0 mean no draws.

    Returns:
        (n_outcomes,) float64 probabilities that the best draw sits at each
        sorted position. All zeros when siblings <= 0.
    """
    if siblings <= 0:
        return np.zeros(n_outcomes, dtype=np.float64)
    cdf = np.arange(1, n_outcomes + 1, dtype=np.float64) / n_outcomes
    return np.diff(cdf ** siblings, prepend=0.0)


def expected_best_rank(ranks: np.ndarray, siblings: int) -> float:
    """Expected rank of the best of ``siblings`` draws.

    Args:
        ranks: (N,) non-decreasing rank per sorted position.
        siblings: Number of draws.

    Returns:
        Σ rank_i · P(best = i).
    """
    ranks = np.asarray(ranks, dtype=np.float64)
    probs = best_of_n_probabilities(len(ranks), siblings)
    return float(np.dot(ranks, probs))


# ═══════════════════════════════════════════════════════════════════════
# SCORING SCHEMES
# ═══════════════════════════════════════════════════════════════════════


def expected_rank_score(
    father: Candidate,
    mother: Candidate,
    super_sprint: bool = False,
    stat_max: int = STAT_MAX_DEFAULT,
    max_siblings: int = MAX_SIBLINGS,
) -> float:
    """Expected best-of-N offspring rank for a pairing (0..1023)."""
    siblings = n_siblings(father, mother, max_siblings)
    if siblings == 0:
        return 0.0
    space = enumerate_genotype_space(father, mother)
    ranks = rank_values(space, stat_max, super_sprint)
    return expected_best_rank(ranks, siblings)


def expected_quality_percent(
    father: Candidate,
    mother: Candidate,
    super_sprint: bool = False,
    stat_max: int = STAT_MAX_DEFAULT,
) -> float:
    """Expected quality of one offspring as a percentage of the ceiling.

    Ignores attempts_remaining.
    """
    space = enumerate_genotype_space(father, mother)
    expected = float(quality_score(space, stat_max, super_sprint).mean())
    ceiling = float(quality_score(ceiling_genotype(stat_max), stat_max, super_sprint)[0])
    return expected / ceiling * 100.0


def score_ceiling(scoring: Optional[ScoringSection] = None) -> float:
    """Highest score the configured scheme can produce."""
    scoring = scoring or ScoringSection()
    if scoring.scheme == "percent":
        return 100.0
    return float(GENOTYPE_SPACE_SIZE - 1)


def evaluate_pairing(
    father: Candidate,
    mother: Candidate,
    super_sprint: bool = False,
    scoring: Optional[ScoringSection] = None,
) -> float:
    """Score a (father, mother) pairing under the configured scheme.

    Pure and deterministic. Swapping the two candidates gives the same
    score.

    Args:
        father: Father candidate.
        mother: Mother candidate.
        super_sprint: Racing-formula mode for the ranking.
        scoring: Scoring parameters (defaults to ScoringSection()).

    Returns:
        Expected best rank (scheme "rank") or expected quality percent
        (scheme "percent").

    Raises:
        InvalidStatValue: If check_inputs is set and an allele is out of range.
        ValueError: If the scheme is unknown.
    """
    scoring = scoring or ScoringSection()
    if scoring.check_inputs:
        check_candidate(father, scoring.stat_max)
        check_candidate(mother, scoring.stat_max)

    if scoring.scheme == "rank":
        return expected_rank_score(
            father, mother, super_sprint, scoring.stat_max, scoring.max_siblings,
        )
    if scoring.scheme == "percent":
        return expected_quality_percent(father, mother, super_sprint, scoring.stat_max)
    raise ValueError(f"Unknown scoring scheme '{scoring.scheme}'")
