"""End-to-end tests: stored records → candidates → pair search → breeding.

Acceptance criteria:
  1. Swapping attempts between the two parents never changes the score
  2. Swapping the two candidates never changes the score (both modes)
  3. Score never decreases as siblings grow
  4. All-max parents score 1023 for any siblings >= 1; all-min score 0
  5. Zero attempts on either parent score exactly 0
  6. A roster with one all-max cross pair returns it at the ceiling
  7. Breeding the best pair uses up attempts until its score reaches 0
"""

import dataclasses

import numpy as np
import pytest

from chocobo_breeding.config import default_config, load_config
from chocobo_breeding.scoring import evaluate_pairing
from chocobo_breeding.search import find_best_pairing, rank_pairings, record_breeding
from chocobo_breeding.types import STAT_RECORD_KEYS, Stat, candidate_from_record, make_candidate


# ═══════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════


def _random_pair(rng, stat_max=4):
    stats = rng.integers(1, stat_max + 1, size=(4, 5))
    father = make_candidate('male', stats[0].tolist(), stats[1].tolist(),
                            attempts_remaining=int(rng.integers(0, 11)))
    mother = make_candidate('female', stats[2].tolist(), stats[3].tolist(),
                            attempts_remaining=int(rng.integers(0, 11)))
    return father, mother


def _record(bird_id, gender, father_stats, mother_stats, covers=9):
    stats = {}
    for stat in Stat:
        stats[f"father{STAT_RECORD_KEYS[stat]}"] = father_stats[stat]
        stats[f"mother{STAT_RECORD_KEYS[stat]}"] = mother_stats[stat]
    return {'id': bird_id, 'gender': gender, 'coveringsLeft': covers, 'stats': stats}


@pytest.fixture
def pairs():
    rng = np.random.default_rng(2024)
    return [_random_pair(rng) for _ in range(8)]


# ═══════════════════════════════════════════════════════════════════════
# SCORING PROPERTIES
# ═══════════════════════════════════════════════════════════════════════


class TestScoringProperties:
    def test_attempts_swap_symmetry(self, pairs):
        for father, mother in pairs:
            swapped_f = dataclasses.replace(father, attempts_remaining=mother.attempts_remaining)
            swapped_m = dataclasses.replace(mother, attempts_remaining=father.attempts_remaining)
            assert evaluate_pairing(father, mother) == evaluate_pairing(swapped_f, swapped_m)

    def test_candidate_swap_symmetry(self, pairs):
        for father, mother in pairs:
            for mode in (False, True):
                assert evaluate_pairing(father, mother, mode) == \
                    pytest.approx(evaluate_pairing(mother, father, mode))

    def test_monotone_in_siblings(self, pairs):
        for father, mother in pairs:
            scores = [
                evaluate_pairing(dataclasses.replace(father, attempts_remaining=n),
                                 dataclasses.replace(mother, attempts_remaining=9))
                for n in range(10)
            ]
            assert all(b >= a for a, b in zip(scores, scores[1:]))

    @pytest.mark.parametrize("siblings", [1, 3, 9])
    def test_perfection(self, siblings):
        m = make_candidate('male', [4] * 5, [4] * 5, attempts_remaining=siblings)
        f = make_candidate('female', [4] * 5, [4] * 5)
        assert evaluate_pairing(m, f) == pytest.approx(1023.0)
        assert evaluate_pairing(m, f, super_sprint=True) == pytest.approx(1023.0)

    @pytest.mark.parametrize("siblings", [1, 9])
    def test_degenerate_floor(self, siblings):
        m = make_candidate('male', [1] * 5, [1] * 5, attempts_remaining=siblings)
        f = make_candidate('female', [1] * 5, [1] * 5)
        assert evaluate_pairing(m, f) == 0.0

    def test_zero_attempts_floor(self, pairs):
        for father, mother in pairs:
            spent = dataclasses.replace(father, attempts_remaining=0)
            assert evaluate_pairing(spent, mother) == 0.0

    def test_concrete_all_max(self):
        m = make_candidate('male', [4] * 5, [4] * 5)
        f = make_candidate('female', [4] * 5, [4] * 5)
        config = default_config()
        assert evaluate_pairing(m, f, scoring=config.scoring) == pytest.approx(1023.0)
        config.scoring.scheme = "percent"
        assert evaluate_pairing(m, f, scoring=config.scoring) == 100.0


# ═══════════════════════════════════════════════════════════════════════
# RECORDS → SEARCH → BREEDING
# ═══════════════════════════════════════════════════════════════════════


class TestRosterWorkflow:
    @pytest.fixture
    def records(self):
        return [
            _record('m-1', 'male', [3, 2, 2, 3, 1], [2, 3, 1, 2, 2]),
            _record('f-1', 'female', [2, 4, 1, 4, 3], [3, 1, 4, 4, 1]),
            _record('m-2', 'male', [4] * 5, [4] * 5),
            _record('f-2', 'female', [1, 2, 3, 2, 1], [2, 2, 2, 1, 3]),
            _record('m-3', 'male', [4, 3, 2, 1, 4], [1, 4, 4, 2, 3]),
            _record('f-3', 'female', [4] * 5, [4] * 5),
        ]

    def test_unique_all_max_pair_found(self, records):
        roster = [candidate_from_record(r) for r in records]
        rng = np.random.default_rng(11)
        for _ in range(3):
            shuffled = [roster[i] for i in rng.permutation(len(roster))]
            best = find_best_pairing(shuffled)
            assert (best.father.candidate_id, best.mother.candidate_id) == ('m-2', 'f-3')
            assert best.score == pytest.approx(1023.0)

    def test_breeding_until_exhausted(self, records):
        records[2]['coveringsLeft'] = 2
        roster = [candidate_from_record(r) for r in records]
        best = find_best_pairing(roster)
        assert best.father.candidate_id == 'm-2'

        bred = record_breeding(record_breeding(best))
        assert bred.father.attempts_remaining == 0
        assert evaluate_pairing(bred.father, bred.mother) == 0.0

        # The exhausted male drops out of contention
        roster = [bred.father if c.candidate_id == 'm-2' else c for c in roster]
        best_after = find_best_pairing(roster)
        assert best_after.father.candidate_id != 'm-2'
        assert best_after.score < 1023.0

    def test_yaml_config_drives_search(self, records, tmp_path):
        path = tmp_path / "breeding.yaml"
        path.write_text(
            "scoring:\n  super_sprint: true\nsearch:\n  parallel_workers: 2\n"
        )
        config = load_config(path)
        roster = [candidate_from_record(r) for r in records]
        from_yaml = rank_pairings(roster, config=config)
        explicit = rank_pairings(roster, super_sprint=True)
        assert [r.score for r in from_yaml] == [r.score for r in explicit]
