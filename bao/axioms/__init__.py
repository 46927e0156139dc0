"""
Bao axioms

The paired rewrite rules over Forms:
- inversion: Clarify / Enfold
- arrangement: Disperse / Collect
- reflection: Cancel / Create

Every function here is pure and answers "not applicable" with fresh clones
of its input rather than raising.
"""
