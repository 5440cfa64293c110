"""chocobo_breeding: breeding-outcome evaluator for racing chocobos.

Scores candidate (father, mother) pairings by enumerating every possible
offspring genotype and computing the expected quality of the best chick a
pair can still produce:
  - Genotype enumeration (4 allele combinations per stat, 4^5 outcomes)
  - Multi-criterion quality ranking (max-value alleles, locked stats,
    racing formula with a super-sprint variant)
  - Best-of-N expected rank, or expected quality as % of the ceiling
  - Exhaustive search for the best pair in a roster

Pure function library: callers supply Candidate objects and get back a
number or a PairingResult.
"""

__version__ = "0.1.0"
