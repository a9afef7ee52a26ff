"""
Language Definitions Test Suite
===============================

Tests for the immutable Definitions value and the stock PSC language.
"""

import dataclasses

import pytest

from psc_lua.definitions import (
    DEFAULT_DEFINITIONS,
    BuiltinFunction,
    KeywordKind,
)


class TestTypes:
    """Tests for built-in type lookup."""

    def test_normalize_aliases(self):
        assert DEFAULT_DEFINITIONS.normalize_type("caractere") == "caractère"
        assert DEFAULT_DEFINITIONS.normalize_type(" entier ") == "entier"

    def test_builtin_type_check(self):
        assert DEFAULT_DEFINITIONS.is_builtin_type("Booleen")
        assert not DEFAULT_DEFINITIONS.is_builtin_type("Point")

    @pytest.mark.parametrize("type_name,zero", [
        ("entier", "0"),
        ("réel", "0"),
        ("booleen", "false"),
        ("chaîne", '""'),
        ("liste", None),
        ("Point", None),
    ])
    def test_zero_values(self, type_name, zero):
        """Only scalar types have a fill value for fresh arrays."""
        assert DEFAULT_DEFINITIONS.zero_value(type_name) == zero


class TestFunctions:
    """Tests for the built-in function table."""

    def test_lookup_is_case_insensitive(self):
        builtin = DEFAULT_DEFINITIONS.function("AjoutTeteListe")
        assert builtin is not None
        assert builtin.arity == 2
        assert builtin.is_mutator

    def test_unknown_function(self):
        assert DEFAULT_DEFINITIONS.function("inconnue") is None
        assert not DEFAULT_DEFINITIONS.is_builtin_function("inconnue")

    def test_longest_first(self):
        """A name never precedes a longer name it is a prefix of."""
        names = [f.name for f in DEFAULT_DEFINITIONS.functions_longest_first()]
        assert names.index("suppressionteteliste") < names.index("tete")
        lengths = [len(n) for n in names]
        assert lengths == sorted(lengths, reverse=True)

    def test_mutators(self):
        mutators = {f.name for f in DEFAULT_DEFINITIONS.mutators()}
        assert "ajouttable" in mutators
        assert "ajoutqueueliste" in mutators
        assert "empiler" not in mutators

    def test_inline_builtins(self):
        """String built-ins map to Lua operators or string.sub."""
        helpers = {f.name: f.lua_helper for f in DEFAULT_DEFINITIONS.functions if f.is_inline}
        assert helpers["longueur"] == "#"
        assert helpers["concat"] == ".."
        assert helpers["souschaîne"] == "string.sub"
        assert helpers["ième"] == "string.sub"

    def test_records_are_frozen(self):
        builtin = DEFAULT_DEFINITIONS.function("tete")
        with pytest.raises(dataclasses.FrozenInstanceError):
            builtin.arity = 3


class TestKeywords:
    """Tests for keywords and known identifiers."""

    def test_keyword_kinds(self):
        booleans = DEFAULT_DEFINITIONS.keyword_names(KeywordKind.BOOLEAN)
        assert booleans == {"vrai", "faux"}

    def test_known_identifiers(self):
        """Keywords, types, built-ins and extras are all known."""
        known = DEFAULT_DEFINITIONS.known_identifiers()
        for name in ("si", "début", "entier", "chaine", "longueur", "fin_ligne", "listesym"):
            assert name in known
        assert "x" not in known

    def test_alternate_definitions(self):
        """A replaced Definitions value is independent of the default."""
        extra = BuiltinFunction("carre", 1, "__carre")
        custom = dataclasses.replace(
            DEFAULT_DEFINITIONS,
            functions=DEFAULT_DEFINITIONS.functions + (extra,),
        )
        assert custom.function("carre") is extra
        assert DEFAULT_DEFINITIONS.function("carre") is None
