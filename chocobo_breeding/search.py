"""Optimal breeding pair search.

Evaluates every (male, female) combination of a roster and returns the
best-scoring one. Iteration is row-major (males outer, females inner, both
in roster order) and the FIRST maximal pair wins, so results are
reproducible regardless of worker count.

Rows of the cross product can be evaluated on a thread pool
(``search.parallel_workers``); each worker returns its local best and a
single merge picks the global one.
"""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple

from chocobo_breeding.config import BreedingConfig, ScoringSection, default_config
from chocobo_breeding.scoring import evaluate_pairing
from chocobo_breeding.types import Candidate, Gender, PairingResult

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════


def partition_by_gender(
    candidates: Iterable[Candidate],
) -> Tuple[List[Candidate], List[Candidate]]:
    """Split a roster into (males, females), preserving order."""
    males, females = [], []
    for c in candidates:
        if c.gender is Gender.MALE:
            males.append(c)
        else:
            females.append(c)
    return males, females


def _resolve(
    config: Optional[BreedingConfig],
    super_sprint: Optional[bool],
) -> Tuple[BreedingConfig, bool]:
    config = config or default_config()
    if super_sprint is None:
        super_sprint = config.scoring.super_sprint
    return config, super_sprint


def _score_row(
    row: int,
    father: Candidate,
    females: Sequence[Candidate],
    super_sprint: bool,
    scoring: ScoringSection,
) -> List[Tuple[float, int, int]]:
    """Score one male against every female: [(score, row, col), ...]."""
    scored = []
    for col, mother in enumerate(females):
        score = evaluate_pairing(father, mother, super_sprint, scoring)
        logger.debug(
            "Pair %s (M) + %s (F) = %.4f", father.label, mother.label, score,
        )
        scored.append((score, row, col))
    return scored


def _score_all(
    males: Sequence[Candidate],
    females: Sequence[Candidate],
    super_sprint: bool,
    config: BreedingConfig,
) -> List[List[Tuple[float, int, int]]]:
    """Score the full cross product, one list per male, in row order."""
    workers = config.search.parallel_workers
    if workers <= 1 or len(males) <= 1:
        return [
            _score_row(i, m, females, super_sprint, config.scoring)
            for i, m in enumerate(males)
        ]

    with ThreadPoolExecutor(max_workers=min(workers, len(males))) as pool:
        futures = [
            pool.submit(_score_row, i, m, females, super_sprint, config.scoring)
            for i, m in enumerate(males)
        ]
        return [f.result() for f in futures]


def _first_max(entries: Iterable[Tuple[float, int, int]]) -> Tuple[float, int, int]:
    """Highest score; earliest (row, col) among equals."""
    return max(entries, key=lambda e: (e[0], -e[1], -e[2]))


# ═══════════════════════════════════════════════════════════════════════
# SEARCH
# ═══════════════════════════════════════════════════════════════════════


def find_best_pairing(
    candidates: Iterable[Candidate],
    super_sprint: Optional[bool] = None,
    config: Optional[BreedingConfig] = None,
) -> Optional[PairingResult]:
    """Best (male, female) pairing in a roster.

    Args:
        candidates: Roster of both genders. Not modified.
        super_sprint: Racing-formula mode; None uses config.scoring.super_sprint.
        config: Configuration (defaults to default_config()).

    Returns:
        PairingResult for the first maximal pair, or None when the roster
        lacks a male or a female.
    """
    config, super_sprint = _resolve(config, super_sprint)
    males, females = partition_by_gender(candidates)
    if not males or not females:
        logger.info(
            "No valid pairing: %d male(s), %d female(s)", len(males), len(females),
        )
        return None

    logger.info(
        "Evaluating %d pairings (super_sprint=%s, scheme=%s)",
        len(males) * len(females), super_sprint, config.scoring.scheme,
    )
    rows = _score_all(males, females, super_sprint, config)
    # Per-row local bests, then one merge step
    score, i, j = _first_max(_first_max(row) for row in rows)

    result = PairingResult(father=males[i], mother=females[j], score=score)
    logger.info(
        "Best pair: %s (M) + %s (F) = %.4f",
        result.father.label, result.mother.label, result.score,
    )
    return result


def rank_pairings(
    candidates: Iterable[Candidate],
    super_sprint: Optional[bool] = None,
    config: Optional[BreedingConfig] = None,
) -> List[PairingResult]:
    """Every (male, female) pairing, best first.

    Equal scores keep row-major iteration order, so the first entry is
    always the pair find_best_pairing() returns. Empty when either gender
    is missing.
    """
    config, super_sprint = _resolve(config, super_sprint)
    males, females = partition_by_gender(candidates)
    if not males or not females:
        return []

    rows = _score_all(males, females, super_sprint, config)
    entries = [e for row in rows for e in row]
    entries.sort(key=lambda e: -e[0])  # stable
    return [
        PairingResult(father=males[i], mother=females[j], score=score)
        for score, i, j in entries
    ]


def record_breeding(result: PairingResult) -> PairingResult:
    """Consume one attempt from each parent of a chosen pairing.

    Returns a new PairingResult with updated candidates (attempts floored
    at 0) and the same score; the input is left untouched.
    """
    def _spend(c: Candidate) -> Candidate:
        return dataclasses.replace(
            c, attempts_remaining=max(0, c.attempts_remaining - 1),
        )

    return dataclasses.replace(
        result, father=_spend(result.father), mother=_spend(result.mother),
    )
