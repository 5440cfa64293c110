"""Core data types for chocobo_breeding.

This module is the SINGLE SOURCE OF TRUTH for:
  - Stat, Gender and Ability enumerations
  - Stat range and genotype-space constants (N_STATS, GENOTYPE_SPACE_SIZE)
  - Candidate and PairingResult records
  - The InvalidStatValue precondition signal

All modules import these types from here. No other module defines stat order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Mapping, Optional, Tuple

import numpy as np


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class Stat(IntEnum):
    """Racing stats, in the fixed order used for every genotype row."""
    MAX_SPEED    = 0
    ACCELERATION = 1
    ENDURANCE    = 2
    STAMINA      = 3
    CUNNING      = 4


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"


# Bumped whenever the membership list below changes.
ABILITY_LIST_VERSION = "1.0"


class Ability(Enum):
    """Closed set of learnable abilities.

    Descriptive only: nothing in the scoring path reads it.
    """
    CHOCO_DASH_I = "Choco Dash I"
    CHOCO_DASH_II = "Choco Dash II"
    CHOCO_DASH_III = "Choco Dash III"
    CHOCO_CURE_I = "Choco Cure I"
    CHOCO_CURE_II = "Choco Cure II"
    CHOCO_CURE_III = "Choco Cure III"
    CHOCO_ESUNA_I = "Choco Esuna I"
    CHOCO_ESUNA_II = "Choco Esuna II"
    CHOCO_ESUNA_III = "Choco Esuna III"
    CHOCO_EASE_I = "Choco Ease I"
    CHOCO_EASE_II = "Choco Ease II"
    CHOCO_EASE_III = "Choco Ease III"
    CHOCO_CALM_I = "Choco Calm I"
    CHOCO_CALM_II = "Choco Calm II"
    CHOCO_CALM_III = "Choco Calm III"
    CHOCO_REFLECT_I = "Choco Reflect I"
    CHOCO_REFLECT_II = "Choco Reflect II"
    CHOCO_REFLECT_III = "Choco Reflect III"
    CHOCO_STEAL_I = "Choco Steal I"
    CHOCO_STEAL_II = "Choco Steal II"
    CHOCO_STEAL_III = "Choco Steal III"
    CHOCO_SILENCE_I = "Choco Silence I"
    CHOCO_SILENCE_II = "Choco Silence II"
    CHOCO_SILENCE_III = "Choco Silence III"
    CHOCO_SHOCK_I = "Choco Shock I"
    CHOCO_SHOCK_II = "Choco Shock II"
    CHOCO_SHOCK_III = "Choco Shock III"
    INCREASED_STAMINA_I = "Increased Stamina I"
    INCREASED_STAMINA_II = "Increased Stamina II"
    INCREASED_STAMINA_III = "Increased Stamina III"
    SPEEDY_RECOVERY_I = "Speedy Recovery I"
    SPEEDY_RECOVERY_II = "Speedy Recovery II"
    SPEEDY_RECOVERY_III = "Speedy Recovery III"
    DRESSAGE_I = "Dressage I"
    DRESSAGE_II = "Dressage II"
    DRESSAGE_III = "Dressage III"
    CHOCO_DRAIN_I = "Choco Drain I"
    CHOCO_DRAIN_II = "Choco Drain II"
    CHOCO_DRAIN_III = "Choco Drain III"
    MIMIC_I = "Mimic I"
    MIMIC_II = "Mimic II"
    MIMIC_III = "Mimic III"
    FEATHER_FIELD_I = "Feather Field I"
    FEATHER_FIELD_II = "Feather Field II"
    FEATHER_FIELD_III = "Feather Field III"
    CHOCO_RERAISE_I = "Choco Reraise I"
    CHOCO_RERAISE_II = "Choco Reraise II"
    CHOCO_RERAISE_III = "Choco Reraise III"
    ENFEEBLEMENT_CLAUSE_I = "Enfeeblement Clause I"
    ENFEEBLEMENT_CLAUSE_II = "Enfeeblement Clause II"
    ENFEEBLEMENT_CLAUSE_III = "Enfeeblement Clause III"
    BREATHER_I = "Breather I"
    BREATHER_II = "Breather II"
    BREATHER_III = "Breather III"
    HEAVY_RESISTANCE_I = "Heavy Resistance I"
    HEAVY_RESISTANCE_II = "Heavy Resistance II"
    HEAVY_RESISTANCE_III = "Heavy Resistance III"
    HEAVY_RESISTANCE_IV = "Heavy Resistance IV"
    HEAVY_RESISTANCE_V = "Heavy Resistance V"
    LEVEL_HEAD_I = "Level Head I"
    LEVEL_HEAD_II = "Level Head II"
    LEVEL_HEAD_III = "Level Head III"
    LEVEL_HEAD_IV = "Level Head IV"
    LEVEL_HEAD_V = "Level Head V"
    SUPER_SPRINT = "Super Sprint"
    PARADIGM_SHIFT = "Paradigm Shift"


# ═══════════════════════════════════════════════════════════════════════
# STAT & GENOTYPE CONSTANTS
# ═══════════════════════════════════════════════════════════════════════

N_STATS = len(Stat)              # 5
STAT_MIN = 1                     # Lowest star rating
STAT_MAX_DEFAULT = 4             # Current game ceiling
VALID_STAT_MAX = (4, 5)          # Ceilings seen across game revisions

N_ALLELE_CHOICES = 4             # 2 father alleles × 2 mother alleles per stat
GENOTYPE_SPACE_SIZE = N_ALLELE_CHOICES ** N_STATS  # 1024

MAX_SIBLINGS = 9                 # Game cap on offspring per pair
MAX_ATTEMPTS = 10                # Upper bound of attempts_remaining
DEFAULT_ATTEMPTS = 9
GRADE_RANGE = (1, 9)

# Record keys for each stat, in Stat order.
STAT_RECORD_KEYS = (
    "MaxSpeed",
    "Acceleration",
    "Endurance",
    "Stamina",
    "Cunning",
)


# ═══════════════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════════════

class InvalidStatValue(ValueError):
    """A stat allele lies outside [STAT_MIN, stat_max].

    Ranges are checked upstream, so this signals a broken precondition.
    """


# ═══════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════

AllelePair = Tuple[int, int]


@dataclass(frozen=True)
class Candidate:
    """A bird that may be bred.

    ``alleles[s]`` holds ``(from_grandfather, from_grandmother)`` for stat
    ``s`` in ``Stat`` order: the values this bird inherited and can pass on.
    Its own displayed stars play no part in breeding.
    """
    gender: Gender
    alleles: Tuple[AllelePair, ...]
    attempts_remaining: int = DEFAULT_ATTEMPTS
    candidate_id: Optional[str] = None
    name: Optional[str] = None
    grade: Optional[int] = None
    ability: Optional[Ability] = None

    def __post_init__(self):
        if len(self.alleles) != N_STATS:
            raise ValueError(
                f"Candidate needs {N_STATS} allele pairs, got {len(self.alleles)}"
            )
        # Normalise lists/arrays into hashable int tuples
        object.__setattr__(
            self,
            'alleles',
            tuple((int(a), int(b)) for a, b in self.alleles),
        )

    def genotype(self) -> np.ndarray:
        """(N_STATS, 2) int8 array of this candidate's inheritable alleles."""
        return np.array(self.alleles, dtype=np.int8)

    @property
    def label(self) -> str:
        """Name if set, else a short id, for log lines."""
        if self.name:
            return self.name
        if self.candidate_id:
            return self.candidate_id[:8]
        return f"<{self.gender.value}>"


@dataclass(frozen=True)
class PairingResult:
    """Best (father, mother) pairing found by a search."""
    father: Candidate
    mother: Candidate
    score: float


# ═══════════════════════════════════════════════════════════════════════
# CONSTRUCTION & CHECKS
# ═══════════════════════════════════════════════════════════════════════

def make_candidate(
    gender: Gender | str,
    father_stats,
    mother_stats,
    attempts_remaining: int = DEFAULT_ATTEMPTS,
    **extra: Any,
) -> Candidate:
    """Build a Candidate from its parents' five-stat vectors.

    Args:
        gender: Gender or its string value.
        father_stats: Five stats inherited from the grandfather (Stat order).
        mother_stats: Five stats inherited from the grandmother (Stat order).
        attempts_remaining: Breeding attempts still available.
        **extra: candidate_id, name, grade, ability.

    Returns:
        Candidate.
    """
    if len(father_stats) != N_STATS or len(mother_stats) != N_STATS:
        raise ValueError(
            f"father_stats and mother_stats need {N_STATS} values each, got "
            f"{len(father_stats)} and {len(mother_stats)}"
        )
    return Candidate(
        gender=Gender(gender),
        alleles=tuple(zip(father_stats, mother_stats)),
        attempts_remaining=attempts_remaining,
        **extra,
    )


def candidate_from_record(record: Mapping[str, Any]) -> Candidate:
    """Adapt a stored bird record into a Candidate.

    Expected shape::

        {"id": "...", "gender": "male", "name": "...", "grade": 3,
         "ability": "Choco Dash II", "coveringsLeft": 9,
         "stats": {"fatherMaxSpeed": 4, ..., "motherCunning": 2}}

    Only ``gender`` and ``stats`` are required. Values are assumed to have
    been range-checked already; see check_candidate().

    Raises:
        KeyError: If a required field is missing.
        ValueError: If gender or ability is not a known value.
    """
    stats = record['stats']
    father = [stats[f"father{key}"] for key in STAT_RECORD_KEYS]
    mother = [stats[f"mother{key}"] for key in STAT_RECORD_KEYS]
    ability = record.get('ability')
    return make_candidate(
        record['gender'],
        father,
        mother,
        attempts_remaining=int(record.get('coveringsLeft', DEFAULT_ATTEMPTS)),
        candidate_id=record.get('id'),
        name=record.get('name'),
        grade=record.get('grade'),
        ability=Ability(ability) if ability is not None else None,
    )


def check_candidate(candidate: Candidate, stat_max: int = STAT_MAX_DEFAULT) -> None:
    """Raise InvalidStatValue if any allele is outside [STAT_MIN, stat_max]."""
    for stat in Stat:
        for value in candidate.alleles[stat]:
            if not STAT_MIN <= value <= stat_max:
                raise InvalidStatValue(
                    f"{candidate.label}: {stat.name} allele {value} outside "
                    f"[{STAT_MIN}, {stat_max}]"
                )
