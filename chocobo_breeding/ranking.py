"""Quality ranking of offspring genotypes.

Genotypes are ordered by three criteria, each only breaking ties of the
previous one:

  1. Stats holding at least one stat_max allele (more is better). A stat
     without one can never become locked in later generations.
  2. Locked stats, i.e. both alleles at stat_max (more is better).
  3. Racing formula over per-stat allele means (a0 + a1) / 2:
       normal:        MaxSpeed + Stamina - Cunning - Acceleration,
                      ties broken by higher Endurance
       super sprint:  Stamina + Endurance - Cunning - Acceleration,
                      ties broken by higher MaxSpeed

Anything still tied compares equal. The super-sprint flag is fixed for a
whole ranking.

Ranks are absolute: a genotype is placed among all genotypes with alleles
in 1..stat_max, not just among the outcomes of one pairing, so ranks from
different pairings are comparable. The scale runs from 0 (the all-minimum
genotype, or anything worse) to RANK_CEILING (every allele at stat_max).
"""

from __future__ import annotations

import functools

import numpy as np

from chocobo_breeding.types import (
    GENOTYPE_SPACE_SIZE,
    N_STATS,
    STAT_MAX_DEFAULT,
    STAT_MIN,
    Stat,
)


# ═══════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

N_KEYS = 4  # (n_with_max, n_locked, formula, tiebreak)

# Weights for the single-number encoding used by quality_score().
# Each weight exceeds the full range of everything below it.
W_WITH_MAX: float = 1_000_000.0
W_LOCKED: float = 10_000.0
W_FORMULA: float = 100.0
W_TIEBREAK: float = 1.0

# Top of the absolute rank scale (one step per outcome of a pairing).
RANK_CEILING: float = float(GENOTYPE_SPACE_SIZE - 1)


# ═══════════════════════════════════════════════════════════════════════
# RANKING KEYS
# ═══════════════════════════════════════════════════════════════════════


def _as_batch(genotypes: np.ndarray) -> np.ndarray:
    genotypes = np.asarray(genotypes)
    if genotypes.ndim == 2:
        genotypes = genotypes[np.newaxis]
    if genotypes.shape[1:] != (N_STATS, 2):
        raise ValueError(
            f"Expected genotypes of shape (N, {N_STATS}, 2), got {genotypes.shape}"
        )
    return genotypes


def stat_averages(genotypes: np.ndarray) -> np.ndarray:
    """(N, N_STATS) float64 allele means per stat."""
    g = _as_batch(genotypes)
    return g.sum(axis=2, dtype=np.float64) * 0.5


def racing_formula(
    averages: np.ndarray,
    super_sprint: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """Racing formula and its tiebreak stat from per-stat averages.

    Args:
        averages: (N, N_STATS) from stat_averages().
        super_sprint: Use the super-sprint formula.

    Returns:
        (formula, tiebreak), each (N,) float64.
    """
    a = averages
    if super_sprint:
        formula = (a[:, Stat.STAMINA] + a[:, Stat.ENDURANCE]
                   - a[:, Stat.CUNNING] - a[:, Stat.ACCELERATION])
        tiebreak = a[:, Stat.MAX_SPEED]
    else:
        formula = (a[:, Stat.MAX_SPEED] + a[:, Stat.STAMINA]
                   - a[:, Stat.CUNNING] - a[:, Stat.ACCELERATION])
        tiebreak = a[:, Stat.ENDURANCE]
    return formula, tiebreak


def ranking_keys(
    genotypes: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> np.ndarray:
    """Ranking criteria for each genotype, most significant first.

    Args:
        genotypes: (N, N_STATS, 2) or a single (N_STATS, 2) genotype.
        stat_max: Highest stat value.
        super_sprint: Racing-formula mode.

    Returns:
        (N, 4) float64: n_with_max, n_locked, formula, tiebreak.
        Larger is better in every column.
    """
    g = _as_batch(genotypes)
    is_max = g == stat_max
    n_with_max = is_max.any(axis=2).sum(axis=1)
    n_locked = is_max.all(axis=2).sum(axis=1)
    formula, tiebreak = racing_formula(stat_averages(g), super_sprint)
    return np.column_stack([n_with_max, n_locked, formula, tiebreak]).astype(np.float64)


def compare_genotypes(
    a: np.ndarray,
    b: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> int:
    """Three-way comparison of two genotypes.

    Returns:
        1 if ``a`` is better, -1 if ``b`` is better, 0 if they rank equal.
        Suitable for functools.cmp_to_key (ascending = worst first).
    """
    ka, kb = ranking_keys(np.stack([a, b]), stat_max, super_sprint)
    for x, y in zip(ka, kb):
        if x != y:
            return 1 if x > y else -1
    return 0


# ═══════════════════════════════════════════════════════════════════════
# SORTING & RANKS
# ═══════════════════════════════════════════════════════════════════════


def _order_from_keys(keys: np.ndarray) -> np.ndarray:
    # lexsort treats the LAST key as primary
    return np.lexsort(keys[:, ::-1].T)


def sort_genotype_space(
    space: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> np.ndarray:
    """Indices that order a genotype space worst → best.

    Stable: equal genotypes keep their enumeration order.
    """
    return _order_from_keys(ranking_keys(space, stat_max, super_sprint))


def ceiling_genotype(stat_max: int = STAT_MAX_DEFAULT) -> np.ndarray:
    """The best possible genotype: every allele at stat_max."""
    return np.full((N_STATS, 2), stat_max, dtype=np.int8)


def floor_genotype() -> np.ndarray:
    """The all-minimum genotype: every allele at STAT_MIN."""
    return np.full((N_STATS, 2), STAT_MIN, dtype=np.int8)


def _key_codes(keys: np.ndarray, stat_max: int) -> np.ndarray:
    """Order-preserving int64 encoding of ranking-key rows.

    formula and tiebreak are multiples of 0.5, so doubling them gives
    integers; each field is shifted into its own mixed-radix digit.
    """
    n_with_max = keys[:, 0].astype(np.int64)
    n_locked = keys[:, 1].astype(np.int64)
    formula2 = np.rint(keys[:, 2] * 2).astype(np.int64) + 4 * stat_max
    tiebreak2 = np.rint(keys[:, 3] * 2).astype(np.int64)
    span_formula = 8 * stat_max + 1
    span_tiebreak = 2 * stat_max + 1
    return (
        (n_with_max * (N_STATS + 1) + n_locked) * span_formula + formula2
    ) * span_tiebreak + tiebreak2


@functools.lru_cache(maxsize=None)
def _rank_table(stat_max: int, super_sprint: bool) -> tuple[np.ndarray, np.ndarray]:
    """Distribution of ranking keys over every genotype with alleles in 1..stat_max.

    Only (holds a max allele, locked, allele sum) per stat matters to the
    keys, so the stat_max^10 genotypes collapse to S^5 weighted rows where
    S is the number of distinct per-stat states.

    Returns:
        (codes, below): sorted distinct key codes, and for each insertion
        position 0..len(codes) the number of genotypes with a smaller code.
    """
    values = np.arange(STAT_MIN, stat_max + 1)
    a, b = np.meshgrid(values, values, indexing='ij')
    a, b = a.ravel(), b.ravel()
    per_pair = np.column_stack([
        (a == stat_max) | (b == stat_max),
        (a == stat_max) & (b == stat_max),
        a + b,
    ]).astype(np.int64)
    states, counts = np.unique(per_pair, axis=0, return_counts=True)

    n_states = len(states)
    grid = np.indices((n_states,) * N_STATS).reshape(N_STATS, -1).T
    weights = counts[grid].prod(axis=1)

    averages = states[grid, 2] * 0.5
    formula, tiebreak = racing_formula(averages, super_sprint)
    keys = np.column_stack([
        states[grid, 0].sum(axis=1),
        states[grid, 1].sum(axis=1),
        formula,
        tiebreak,
    ]).astype(np.float64)

    codes, inverse = np.unique(_key_codes(keys, stat_max), return_inverse=True)
    mass = np.bincount(inverse.ravel(), weights=weights, minlength=len(codes))
    below = np.concatenate([[0.0], np.cumsum(mass)])
    return codes, below


def genotype_ranks(
    genotypes: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> np.ndarray:
    """Absolute rank of each genotype on the 0..RANK_CEILING scale.

    The rank counts the genotypes (over all stat_max^10 allele
    assignments) that compare strictly worse, measured from the
    floor_genotype() and scaled so the ceiling genotype sits at
    RANK_CEILING. Genotypes that compare worse than the floor rank 0.
    Equal genotypes always get equal ranks, whatever pairing they came
    from.

    Returns:
        (N,) float64, in input order.
    """
    codes, below = _rank_table(stat_max, bool(super_sprint))

    def _below(g):
        keys = ranking_keys(g, stat_max, super_sprint)
        return below[np.searchsorted(codes, _key_codes(keys, stat_max), side='left')]

    low = _below(floor_genotype())[0]
    high = below[-1] - 1.0  # only the ceiling itself is not below it
    ranks = (_below(genotypes) - low) * RANK_CEILING / (high - low)
    return np.clip(ranks, 0.0, RANK_CEILING)


def rank_values(
    space: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> np.ndarray:
    """Ranks of a genotype space in sorted (worst → best) order.

    Returns:
        (N,) float64, non-decreasing; see genotype_ranks().
    """
    return np.sort(genotype_ranks(space, stat_max, super_sprint))


# ═══════════════════════════════════════════════════════════════════════
# SINGLE-NUMBER QUALITY
# ═══════════════════════════════════════════════════════════════════════


def quality_score(
    genotypes: np.ndarray,
    stat_max: int = STAT_MAX_DEFAULT,
    super_sprint: bool = False,
) -> np.ndarray:
    """Monotone numeric encoding of the ranking criteria.

    q = n_with_max·W_WITH_MAX + n_locked·W_LOCKED + formula·W_FORMULA
        + tiebreak·W_TIEBREAK, floored at 0.

    Returns:
        (N,) float64.
    """
    keys = ranking_keys(genotypes, stat_max, super_sprint)
    weights = np.array([W_WITH_MAX, W_LOCKED, W_FORMULA, W_TIEBREAK])
    return np.maximum(0.0, keys @ weights)
