"""Genotype enumeration for chocobo breeding.

An offspring inherits, for every stat independently, one allele from the
father's pair and one from the mother's pair. With two choices per parent
that is 4 outcomes per stat and 4^5 = 1024 equally likely genotypes.

Core responsibilities:
  - Per-stat allele options (father allele × mother allele)
  - Full genotype space, deterministic lexicographic order
  - Per-stat breeding potential (best / worst / average / perfect)
  - Candidate summary counts (max-value alleles, locked stats, total stars)
  - Random Mendelian offspring draws for simulation checks
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass

import numpy as np

from chocobo_breeding.types import (
    N_ALLELE_CHOICES,
    N_STATS,
    STAT_MAX_DEFAULT,
    Candidate,
    Stat,
)


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

# (1024, 5) choice index per stat, lexicographic with stat 0 most significant.
# Choice k encodes (father allele k // 2, mother allele k % 2).
CHOICE_GRID: np.ndarray = np.array(
    list(itertools.product(range(N_ALLELE_CHOICES), repeat=N_STATS)),
    dtype=np.intp,
)

_STAT_INDEX = np.arange(N_STATS)


# ═══════════════════════════════════════════════════════════════════════
# GENOTYPE SPACE
# ═══════════════════════════════════════════════════════════════════════


def parent_alleles(candidate: Candidate) -> np.ndarray:
    """(N_STATS, 2) int8 alleles a candidate can pass on."""
    return candidate.genotype()


def stat_allele_options(father: Candidate, mother: Candidate) -> np.ndarray:
    """Four allele combinations per stat.

    Order per stat: (fG, mG), (fG, mM), (fM, mG), (fM, mM), where f/m is
    the father/mother candidate and G/M the allele it got from its own
    grandfather/grandmother.

    Returns:
        (N_STATS, 4, 2) int8; [..., 0] from father, [..., 1] from mother.
    """
    f = parent_alleles(father)
    m = parent_alleles(mother)
    options = np.empty((N_STATS, N_ALLELE_CHOICES, 2), dtype=np.int8)
    options[:, :, 0] = np.repeat(f, 2, axis=1)   # fG fG fM fM
    options[:, :, 1] = np.tile(m, (1, 2))        # mG mM mG mM
    return options


def enumerate_genotype_space(father: Candidate, mother: Candidate) -> np.ndarray:
    """Every offspring genotype obtainable from a pairing.

    Cartesian product of the per-stat options from stat_allele_options(),
    lexicographic over the choice index with MAX_SPEED most significant.
    Duplicated genotypes (when alleles repeat) are kept: each row is one
    equally likely outcome.

    Args:
        father: Father candidate.
        mother: Mother candidate.

    Returns:
        (GENOTYPE_SPACE_SIZE, N_STATS, 2) int8 array.
    """
    options = stat_allele_options(father, mother)
    return options[_STAT_INDEX, CHOICE_GRID]


def sample_offspring(
    father: Candidate,
    mother: Candidate,
    rng: np.random.Generator,
    n_offspring: int = 1,
) -> np.ndarray:
    """Draw offspring by Mendelian segregation at every stat.

    Each parent transmits one of its two alleles, chosen uniformly and
    independently per stat.

    Args:
        father: Father candidate.
        mother: Mother candidate.
        rng: NumPy random Generator.
        n_offspring: Number of offspring to produce.

    Returns:
        (n_offspring, N_STATS, 2) int8 offspring genotypes.
    """
    f = parent_alleles(father)
    m = parent_alleles(mother)
    picks_f = rng.integers(0, 2, size=(n_offspring, N_STATS))
    picks_m = rng.integers(0, 2, size=(n_offspring, N_STATS))

    offspring = np.empty((n_offspring, N_STATS, 2), dtype=np.int8)
    offspring[:, :, 0] = f[_STAT_INDEX, picks_f]
    offspring[:, :, 1] = m[_STAT_INDEX, picks_m]
    return offspring


# ═══════════════════════════════════════════════════════════════════════
# PER-STAT POTENTIAL
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StatPotential:
    """Range of values a pairing can pass on for one stat."""
    best: int
    worst: int
    average: float
    has_perfect: bool  # all four grandparent alleles at stat_max


def stat_potential(
    father: Candidate,
    mother: Candidate,
    stat: Stat,
    stat_max: int = STAT_MAX_DEFAULT,
) -> StatPotential:
    """Best, worst and mean of the four grandparent alleles for one stat."""
    values = father.alleles[stat] + mother.alleles[stat]
    return StatPotential(
        best=max(values),
        worst=min(values),
        average=sum(values) / len(values),
        has_perfect=all(v == stat_max for v in values),
    )


# ═══════════════════════════════════════════════════════════════════════
# CANDIDATE SUMMARIES
# ═══════════════════════════════════════════════════════════════════════


def count_max_alleles(candidate: Candidate, stat_max: int = STAT_MAX_DEFAULT) -> int:
    """Number of alleles (out of 10) at stat_max."""
    return int((parent_alleles(candidate) == stat_max).sum())


def count_locked_stats(candidate: Candidate, stat_max: int = STAT_MAX_DEFAULT) -> int:
    """Number of stats whose two alleles are both stat_max."""
    return int((parent_alleles(candidate) == stat_max).all(axis=1).sum())


def total_stars(candidate: Candidate) -> int:
    """Sum of all ten alleles."""
    return int(parent_alleles(candidate).sum(dtype=np.int64))
