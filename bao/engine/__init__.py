"""
Bao engine

- rewrite: locate nodes by id and rebuild forests by path copying
- dispatcher: map operations onto the rewrite engine and the axioms
"""
