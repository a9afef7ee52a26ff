"""
Linter Test Suite
=================

Tests for undeclared-identifier and arity diagnostics.
"""

import textwrap

from psc_lua.linter import Diagnostic, Linter, Severity


def lint(source: str) -> list[Diagnostic]:
    return Linter().refresh(textwrap.dedent(source))


def messages(source: str) -> list[str]:
    return [d.message for d in lint(source)]


class TestUndeclaredIdentifiers:
    """Tests for use-before-assignment reports."""

    def test_clean_program(self):
        assert lint("""
            Lexique
                n : entier
            Début
                n ← 3
                x ← n * 2
                écrire(x)
            Fin
        """) == []

    def test_undeclared_reported_with_position(self):
        diagnostics = lint("x ← y + 1\n")
        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.message == "L'identifiant 'y' est utilisé avant d'avoir reçu une valeur."
        assert (diagnostic.line, diagnostic.column, diagnostic.end_column) == (0, 4, 5)
        assert diagnostic.severity is Severity.ERROR

    def test_assignment_declares_target(self):
        assert lint("x ← 1\ny ← x\n") == []

    def test_self_reference_on_first_assignment(self):
        assert messages("x ← x + 1") == [
            "L'identifiant 'x' est utilisé avant d'avoir reçu une valeur."
        ]

    def test_strings_and_fields_ignored(self):
        assert lint("""
            Point = <x : entier, suivant : entier>
            p ← Point(1, 2)
            écrire("valeur de z : ", p.x, p.suivant.nom)
        """) == []

    def test_function_parameters_scoped(self):
        diagnostics = lint("""
            Fonction carre(InOut a : entier, b : entier) : entier
            Début
                retourner a * b
            Fin
            Début
                écrire(a)
            Fin
        """)
        assert [d.message for d in diagnostics] == [
            "L'identifiant 'a' est utilisé avant d'avoir reçu une valeur."
        ]
        assert diagnostics[0].line == 6

    def test_declared_functions_and_types(self):
        assert lint("""
            Point = <x : entier, y : entier>
            Fonction f(a : entier) : entier
            Début
                retourner a
            Fin
            Début
                p ← point(f(1), 2)
            Fin
        """) == []

    def test_for_loop_variable(self):
        assert lint("""
            n ← 3
            Pour i de 0 à n - 1 Faire
                écrire(i)
            fpour
        """) == []

    def test_for_loop_variable_out_of_scope(self):
        assert messages("""
            Pour i de 0 à 3 Faire
            fpour
            écrire(i)
        """) == ["L'identifiant 'i' est utilisé avant d'avoir reçu une valeur."]

    def test_keywords_and_builtins_known(self):
        assert lint("""
            l ← listeVide()
            Si non estDans(1, l) et vrai Alors
                écrire(longueur("abc"), fin_ligne)
            fsi
        """) == []

    def test_index_variables_on_target_checked(self):
        assert messages("t[k] ← 1") == [
            "L'identifiant 'k' est utilisé avant d'avoir reçu une valeur."
        ]

    def test_algorithm_header_ignored(self):
        assert lint("""
            Algorithme Tri
                Trie un tableau
            Fin
        """) == []

    def test_comments_ignored(self):
        assert lint("x ← 1 // y z\n/* w\n v */") == []

    def test_array_declaration(self):
        assert messages("n ← 3\nt ← tableau entier[0..n]\nécrire(t, m)") == [
            "L'identifiant 'm' est utilisé avant d'avoir reçu une valeur."
        ]


class TestArity:
    """Tests for built-in arity checks."""

    def test_wrong_arity(self):
        diagnostics = lint("l ← listeVide()\nx ← val(l)\n")
        assert len(diagnostics) == 1
        assert diagnostics[0].message == "La fonction 'val' attend 2 argument(s), 1 fourni(s)."
        assert diagnostics[0].line == 1
        assert diagnostics[0].column == 4

    def test_string_arguments_counted(self):
        assert lint('x ← concat("a", "b")') == []
        assert len(lint('x ← longueur("a", "b")')) == 1

    def test_user_function_overrides_builtin(self):
        assert lint("""
            Fonction tete(a : entier, b : entier) : entier
            Début
                retourner a
            Fin
            x ← tete(1, 2)
        """) == []


class TestStructure:
    """Tests for structural warnings."""

    def test_unbalanced_parenthesis(self):
        diagnostics = lint("x ← f(1\n")
        assert any(d.severity is Severity.WARNING for d in diagnostics)

    def test_unclosed_block(self):
        diagnostics = lint("Si vrai Alors\n    x ← 1\n")
        assert [d.severity for d in diagnostics] == [Severity.WARNING]

    def test_format(self):
        diagnostic = Diagnostic(2, 4, 5, "message")
        assert diagnostic.format("exo.psc") == "exo.psc:3:5: error: message"
