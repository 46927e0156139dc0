"""
Pytest configuration for bao tests.

Provides:
- Hypothesis configuration for deterministic fuzzing
- Shared Form strategies (forms, frames) for property tests
- A fresh built-in level registry for every test
"""

import os

import pytest

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# - print_blob=True makes failures easy to reproduce
# - derandomize=False keeps search random; the example database replays failures
# NOTE: Do NOT set database=None - that DISABLES the database. Omit to use default.

try:
    from hypothesis import settings
    from hypothesis import strategies as st
    from hypothesis.strategies import composite

    settings.register_profile(
        "default",
        print_blob=True,
        derandomize=False,
    )

    # CI profile: same as default but explicit for documentation
    settings.register_profile(
        "ci",
        print_blob=True,
        derandomize=False,
        max_examples=200,
    )

    profile = os.environ.get("HYPOTHESIS_PROFILE", "default")
    settings.load_profile(profile)

except ImportError:
    composite = None  # hypothesis not installed, property tests skip themselves


# =============================================================================
# Shared Form strategies
# =============================================================================

if composite is not None:
    from bao.core.form import ATOM, BOUNDARIES, SQUARE, atom, create_form, round_, square

    LABELS = st.sampled_from(["a", "b", "c", "x", "y"])

    @composite
    def forms(draw, max_depth=3, max_children=3):
        """
        Arbitrary Forms of bounded size.

        Args:
            max_depth: nesting limit; at 0 only leaves (atoms, void boundaries)
            max_children: fan-out limit per node
        """
        boundary = draw(st.sampled_from(BOUNDARIES))
        if boundary == ATOM:
            return atom(draw(LABELS))
        if max_depth <= 0:
            return create_form(boundary)
        n = draw(st.integers(min_value=0, max_value=max_children))
        children = [draw(forms(max_depth=max_depth - 1, max_children=max_children)) for _ in range(n)]
        return create_form(boundary, *children)

    @composite
    def non_square_forms(draw, max_depth=2):
        form = draw(forms(max_depth=max_depth))
        if form.boundary == SQUARE:
            return round_(*form.children)
        return form

    @composite
    def frames(draw, max_depth=2):
        """round(context..., square(contents...)) with a non-empty square and no other squares."""
        context = draw(st.lists(non_square_forms(max_depth=max_depth), max_size=2))
        contents = draw(st.lists(forms(max_depth=max_depth), min_size=1, max_size=3))
        return round_(*context, square(*contents))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_level_registry():
    from bao.levels.builtin import clear_registry

    clear_registry()
    yield
    clear_registry()
