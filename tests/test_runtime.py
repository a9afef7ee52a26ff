"""
Lua Runtime Prelude Test Suite
==============================

Static checks on the runtime text, plus execution tests that run the
generated Lua when a ``lua`` interpreter is on PATH.
"""

import re
import shutil

import pytest

from psc_lua.definitions import DEFAULT_DEFINITIONS
from psc_lua.transpiler.runtime import LUA_RUNTIME, defined_helpers


requires_lua = pytest.mark.skipif(
    shutil.which("lua") is None, reason="lua interpreter not on PATH"
)

ENGINE_HELPERS = {
    "__psc_write",
    "__psc_lire",
    "__psc_lire_chaine",
    "__psc_liste_from_table",
    "__psc_listesym_from_table",
    "__psc_pile_from_values",
    "__psc_file_from_values",
    "__psc_pile_vide",
    "__psc_file_vide",
    "__psc_table_vide",
    "__psc_table_from_pairs",
}


class TestPreludeText:
    """Static checks on LUA_RUNTIME."""

    def test_every_builtin_helper_is_defined(self):
        helpers = defined_helpers()
        for builtin in DEFAULT_DEFINITIONS.functions:
            if builtin.is_inline:
                continue
            assert builtin.lua_helper in helpers, builtin.name

    def test_engine_helpers_are_defined(self):
        assert ENGINE_HELPERS <= defined_helpers()

    def test_helpers_are_local(self):
        """No global function leaks from the prelude."""
        assert re.search(r"^function ", LUA_RUNTIME, re.MULTILINE) is None

    def test_helpers_defined_before_use(self):
        """A helper is only called after its own definition."""
        prefix = "local function "
        for name in defined_helpers():
            definition = LUA_RUNTIME.index(f"{prefix}{name}(")
            first_use = re.search(rf"(?<!\w){re.escape(name)}\(", LUA_RUNTIME)
            assert first_use.start() == definition + len(prefix), name

    def test_serializer_labels(self):
        for label in ("'Pile'", "'File'", "'Table('", "'LS('", "'Vrai'", "'Faux'"):
            assert label in LUA_RUNTIME


@requires_lua
class TestExecution:
    """Programs run through a real Lua interpreter."""

    def test_hello(self, run_psc):
        result = run_psc("""
            Début
                écrire("Bonjour")
            Fin
        """)
        assert result.returncode == 0
        assert result.stdout == "Bonjour\n"

    def test_in_out_swap(self, run_psc):
        result = run_psc("""
            Fonction echanger(InOut a : entier, InOut b : entier)
            Début
                c ← a
                a ← b
                b ← c
            Fin
            Début
                x ← 1
                y ← 2
                echanger(x, y)
                écrire(x, " ", y)
            Fin
        """)
        assert result.stdout == "2 1\n"

    def test_in_out_with_return_value(self, run_psc):
        result = run_psc("""
            Fonction g(InOut a : entier, b : entier) : entier
            Début
                a ← a + 1
                retourner a + b
            Fin
            Début
                n ← 1
                g(n, 10)
                écrire(n)
                r ← g(n, 10)
                écrire(r, " ", n)
            Fin
        """)
        assert result.stdout == "2\n13 3\n"

    def test_loop_bound_named_a(self, run_psc):
        result = run_psc("""
            Début
                a ← 3
                s ← 0
                Pour i de 0 à a - 1 Faire
                    s ← s + i
                fpour
                écrire(s)
            Fin
        """)
        assert result.stdout == "3\n"

    def test_array_zero_based(self, run_psc):
        result = run_psc("""
            Début
                t ← tableau entier[0..2]
                Pour i de 0 à 2 Faire
                    t[i] ← i * 10
                fpour
                écrire(t[0], ",", t[2])
            Fin
        """)
        assert result.stdout == "0,20\n"

    def test_serialization(self, run_psc):
        result = run_psc("""
            Point = <x : entier, y : entier>
            Début
                écrire((1, 2, 3))
                écrire([1, 2])
                écrire(Point(3, 4))
                écrire(vrai)
                p ← pile(1, 2)
                écrire(p)
                t ← Table("b" → 2, "a" → 1)
                écrire(t)
            Fin
        """)
        assert result.stdout.splitlines() == [
            "(1, 2, 3)",
            "[1, 2]",
            "{x:3, y:4}",
            "Vrai",
            "Pile[1, 2]",
            "Table(a → 1, b → 2)",
        ]

    def test_linked_list_operations(self, run_psc):
        result = run_psc("""
            Début
                l ← listeVide()
                ajoutTeteListe(l, 2)
                ajoutTeteListe(l, 1)
                ajoutQueueListe(l, 3)
                écrire(l)
                écrire(val(l, 1))
            Fin
        """)
        assert result.stdout.splitlines() == ["(1, 2, 3)", "2"]

    def test_read_input(self, run_psc):
        result = run_psc("""
            Lexique
                nom : chaîne
            Début
                n ← lire()
                nom ← lire()
                écrire(n * 2, " ", nom)
            Fin
        """, input_text="21\n42\n")
        assert result.stdout == "42 42\n"
