"""
Tests for the term registry.

Tests:
- Registration and lookup
- Duplicate and conflicting registrations
- Building a registry from a kind mapping
"""

import pytest

from ..logic.errors import DuplicateTermError, WorldDefinitionError
from ..logic.terms import Term, TermRegistry, TermType


class TestTermRegistry:
    """Tests for TermRegistry."""

    def test_register_and_lookup(self):
        """Registered terms can be looked up by name."""
        terms = TermRegistry()
        term = terms.register("Dash", TermType.BOOL)

        assert term == Term("Dash", TermType.BOOL)
        assert terms.get("Dash") is term
        assert terms.kind_of("Dash") == TermType.BOOL
        assert "Dash" in terms
        assert len(terms) == 1

    def test_unknown_term(self):
        """Unknown names have no term and no kind."""
        terms = TermRegistry()
        assert terms.get("Nothing") is None
        assert terms.kind_of("Nothing") is None
        assert not terms.is_state("Nothing")

    def test_duplicate_registration_fails(self):
        """Registering the same name twice raises DuplicateTermError."""
        terms = TermRegistry()
        terms.register("Dash", TermType.BOOL)

        with pytest.raises(DuplicateTermError) as exc_info:
            terms.register("Dash", TermType.BOOL)
        assert exc_info.value.name == "Dash"

    def test_get_or_add_returns_existing(self):
        """get_or_add reuses a term of the same kind."""
        terms = TermRegistry()
        first = terms.get_or_add("Town", TermType.STATE)
        second = terms.get_or_add("Town", TermType.STATE)

        assert first is second
        assert len(terms) == 1

    def test_get_or_add_conflicting_kind_fails(self):
        """get_or_add with a different kind is a duplicate."""
        terms = TermRegistry()
        terms.register("Town", TermType.BOOL)

        with pytest.raises(DuplicateTermError):
            terms.get_or_add("Town", TermType.STATE)

    def test_state_terms(self):
        """State terms are recognized as such."""
        terms = TermRegistry()
        terms.register("Town", TermType.STATE)
        terms.register("Grubs", TermType.COUNTER)

        assert terms.is_state("Town")
        assert terms.get("Town").is_state
        assert not terms.is_state("Grubs")

    def test_iteration_keeps_registration_order(self):
        """Iterating yields terms in registration order."""
        terms = TermRegistry()
        for name in ["C", "A", "B"]:
            terms.register(name, TermType.BOOL)

        assert [t.name for t in terms] == ["C", "A", "B"]


class TestFromMapping:
    """Tests for TermRegistry.from_mapping."""

    def test_builds_all_kinds(self, terms):
        """Every kind key is registered with its kind."""
        assert terms.kind_of("Dash") == TermType.BOOL
        assert terms.kind_of("Grubs") == TermType.COUNTER
        assert terms.kind_of("Town") == TermType.STATE

    def test_unknown_kind_rejected(self):
        """Unknown kind keys are rejected."""
        with pytest.raises(WorldDefinitionError, match="Float"):
            TermRegistry.from_mapping({"Float": ["Speed"]})

    def test_duplicate_across_kinds_rejected(self):
        """A name listed under two kinds is a duplicate."""
        with pytest.raises(DuplicateTermError):
            TermRegistry.from_mapping({"Bool": ["Town"], "State": ["Town"]})
