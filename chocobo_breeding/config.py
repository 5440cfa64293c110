"""Configuration system for chocobo_breeding.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → override file → programmatic overrides

Design decisions:
  - stat_max is a versioned game constant (4 or 5), never inferred from data
  - Exactly one scoring scheme is active per configuration: "rank"
    (expected best-of-N rank) or "percent" (expected single-offspring
    quality as % of the ceiling). They answer different questions and are
    never mixed inside one search.
"""

from __future__ import annotations

import dataclasses
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from chocobo_breeding.types import MAX_SIBLINGS, STAT_MAX_DEFAULT, VALID_STAT_MAX


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

SCORING_SCHEMES = ("rank", "percent")


@dataclass
class ScoringSection:
    """Pairing score parameters.

    scheme: "rank":    expected best rank among N siblings (0..1023)
            "percent": expected single-offspring quality, % of ceiling
    """
    stat_max: int = STAT_MAX_DEFAULT    # Highest star value (4 or 5)
    scheme: str = "rank"
    max_siblings: int = MAX_SIBLINGS    # Cap on offspring per pair
    super_sprint: bool = False          # Default racing-formula mode
    check_inputs: bool = True           # Re-check stat ranges before scoring


@dataclass
class SearchSection:
    """Optimal pair search parameters."""
    parallel_workers: int = 1           # 1 = serial


@dataclass
class BreedingConfig:
    """Complete configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    scoring: ScoringSection = field(default_factory=ScoringSection)
    search: SearchSection = field(default_factory=SearchSection)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced
    - Keys in override but not base are added

    Args:
        base: Base dictionary (modified in place).
        override: Override dictionary.

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict) -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return section_cls(**filtered)


def _yaml_to_config(data: Dict) -> BreedingConfig:
    """Convert a merged YAML dict to a BreedingConfig."""
    section_map = {
        'scoring': ScoringSection,
        'search': SearchSection,
    }
    sections = {}
    for key, cls in section_map.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _dict_to_section(cls, data[key])
        else:
            sections[key] = cls()
    return BreedingConfig(**sections)


def validate_config(config: BreedingConfig) -> None:
    """Validate configuration constraints. Raises ValueError on failure.

    Checks:
      - stat_max is a known game ceiling
      - scheme is one of SCORING_SCHEMES
      - max_siblings and parallel_workers are in range
    """
    s = config.scoring
    if s.stat_max not in VALID_STAT_MAX:
        raise ValueError(
            f"scoring.stat_max must be one of {VALID_STAT_MAX}, got {s.stat_max}"
        )
    if s.scheme not in SCORING_SCHEMES:
        raise ValueError(
            f"scoring.scheme must be one of {SCORING_SCHEMES}, got '{s.scheme}'"
        )
    if s.max_siblings < 0:
        raise ValueError(
            f"scoring.max_siblings must be >= 0, got {s.max_siblings}"
        )
    if s.scheme == "percent" and s.max_siblings != MAX_SIBLINGS:
        warnings.warn(
            "scoring.max_siblings has no effect when scheme='percent' "
            "(expected single-offspring quality ignores attempts)",
            UserWarning,
            stacklevel=2,
        )

    if config.search.parallel_workers < 1:
        raise ValueError(
            f"search.parallel_workers must be >= 1, "
            f"got {config.search.parallel_workers}"
        )


def load_config(
    base_path: Union[str, Path],
    override_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> BreedingConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → override file → overrides dict.
    Each layer overrides only the fields it specifies.

    Args:
        base_path: Path to base configuration YAML.
        override_path: Optional override YAML (skipped if missing).
        overrides: Optional dict of overrides.

    Returns:
        Validated BreedingConfig.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ValueError: If validation fails.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    with open(base_path) as f:
        config_dict = yaml.safe_load(f) or {}

    if override_path is not None:
        override_path = Path(override_path)
        if override_path.exists():
            with open(override_path) as f:
                override = yaml.safe_load(f) or {}
            deep_merge(config_dict, override)

    if overrides is not None:
        deep_merge(config_dict, overrides)

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> BreedingConfig:
    """Return a BreedingConfig with all default values."""
    config = BreedingConfig()
    validate_config(config)
    return config
