"""
PSC Language Definitions
========================

Single source of truth for the PSC pseudo-code language: built-in types,
keywords, built-in functions (with their arity and Lua runtime helper) and
operator substitutions.

Every other component (function/composite registries, the transpile engine,
the linter, the CLI) receives a ``Definitions`` value at construction time
instead of reading module-level state. ``DEFAULT_DEFINITIONS`` is the stock
language; tests may build alternates with ``dataclasses.replace``.

Usage
-----
>>> from psc_lua.definitions import DEFAULT_DEFINITIONS
>>> DEFAULT_DEFINITIONS.function("ajoutTeteListe").lua_helper
'__psc_liste_ajout_tete'
>>> DEFAULT_DEFINITIONS.normalize_type("Booleen")
'booléen'
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# Definition Records
# =============================================================================

class KeywordKind(Enum):
    """Category of a PSC keyword."""
    CONTROL = "control"
    BLOCK = "block"
    BOOLEAN = "boolean"
    OPERATOR = "operator"
    IO = "io"
    MODIFIER = "modifier"
    OTHER = "other"


@dataclass(frozen=True)
class TypeDefinition:
    """
    A built-in PSC type.

    Attributes:
        name: Canonical (accented) spelling
        aliases: Every accepted spelling, lowercase
        zero_value: Lua literal used to fill fresh arrays of this type
    """
    name: str
    aliases: tuple[str, ...]
    zero_value: Optional[str] = None


@dataclass(frozen=True)
class Keyword:
    """A PSC keyword and its Lua equivalent, when it has one."""
    name: str
    kind: KeywordKind
    lua_equivalent: Optional[str] = None


@dataclass(frozen=True)
class BuiltinFunction:
    """
    A built-in PSC function.

    Attributes:
        name: Lowercase PSC name (calls match case-insensitively)
        arity: Exact number of arguments
        lua_helper: Runtime helper (or Lua operator) the call maps to
        is_mutator: The call is rewritten to ``first = helper(first, ...)``
                    because the runtime returns the updated structure
        is_inline: The call maps to operator syntax or reordered arguments
                   and is rewritten by a dedicated rule, not by renaming
        description: Short French description for tooling
    """
    name: str
    arity: int
    lua_helper: str
    is_mutator: bool = False
    is_inline: bool = False
    description: str = ""


@dataclass(frozen=True)
class OperatorReplacement:
    """
    A token substitution applied near the end of line rewriting.

    Word replacements match whole identifiers case-insensitively; symbol
    replacements match the literal glyph.
    """
    source: str
    target: str
    is_word: bool = True


# =============================================================================
# Definitions Value
# =============================================================================

@dataclass(frozen=True)
class Definitions:
    """
    Immutable language configuration injected into every component.

    Attributes:
        types: Built-in types
        keywords: Reserved words
        functions: Built-in functions
        replacements: Keyword/operator substitutions, applied in order
        extra_identifiers: Other names the linter must accept
    """
    types: tuple[TypeDefinition, ...]
    keywords: tuple[Keyword, ...]
    functions: tuple[BuiltinFunction, ...]
    replacements: tuple[OperatorReplacement, ...]
    extra_identifiers: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Derived lookup tables; frozen dataclass so bypass __setattr__.
        aliases = {}
        for type_def in self.types:
            for alias in type_def.aliases:
                aliases[alias.lower()] = type_def
        object.__setattr__(self, "_type_aliases", aliases)
        object.__setattr__(
            self, "_functions", {f.name.lower(): f for f in self.functions}
        )

    # -------------------------------------------------------------------------
    # Types
    # -------------------------------------------------------------------------

    def normalize_type(self, raw: str) -> str:
        """Map a type spelling to its canonical name; unknown names pass through."""
        type_def = self._type_aliases.get(raw.strip().lower())
        return type_def.name if type_def else raw.strip()

    def is_builtin_type(self, name: str) -> bool:
        return name.strip().lower() in self._type_aliases

    def zero_value(self, type_name: str) -> Optional[str]:
        """Lua literal for a fresh element of ``type_name``, or None."""
        type_def = self._type_aliases.get(type_name.strip().lower())
        return type_def.zero_value if type_def else None

    def type_aliases(self) -> list[str]:
        return sorted(self._type_aliases)

    # -------------------------------------------------------------------------
    # Functions
    # -------------------------------------------------------------------------

    def function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a built-in function, case-insensitively."""
        return self._functions.get(name.lower())

    def is_builtin_function(self, name: str) -> bool:
        return name.lower() in self._functions

    def functions_longest_first(self) -> list[BuiltinFunction]:
        """Built-ins sorted so a short name never shadows a longer one."""
        return sorted(self.functions, key=lambda f: len(f.name), reverse=True)

    def mutators(self) -> list[BuiltinFunction]:
        return [f for f in self.functions_longest_first() if f.is_mutator]

    # -------------------------------------------------------------------------
    # Keywords
    # -------------------------------------------------------------------------

    def keyword_names(self, kind: Optional[KeywordKind] = None) -> set[str]:
        return {k.name for k in self.keywords if kind is None or k.kind == kind}

    def known_identifiers(self) -> set[str]:
        """
        Lowercase names that are never user variables.

        Used by the linter: keywords, type spellings, built-in functions and
        the extra identifiers (``lexique``, ``fin_ligne``, ...).
        """
        known = {k.name for k in self.keywords}
        known.update(self._type_aliases)
        known.update(self._functions)
        known.update(self.extra_identifiers)
        return known


# =============================================================================
# Stock PSC Language
# =============================================================================

_TYPES = (
    TypeDefinition("entier", ("entier",), zero_value="0"),
    TypeDefinition("réel", ("réel", "reel"), zero_value="0"),
    TypeDefinition("booléen", ("booléen", "booleen"), zero_value="false"),
    TypeDefinition("chaîne", ("chaîne", "chaine"), zero_value='""'),
    TypeDefinition("caractère", ("caractère", "caractere"), zero_value='""'),
    TypeDefinition("tableau", ("tableau",)),
    TypeDefinition("liste", ("liste",)),
    TypeDefinition("pile", ("pile",)),
    TypeDefinition("file", ("file",)),
    TypeDefinition("listesym", ("listesym",)),
    TypeDefinition("table", ("table",)),
)

_KEYWORDS = (
    # Control
    Keyword("si", KeywordKind.CONTROL, "if"),
    Keyword("alors", KeywordKind.CONTROL, "then"),
    Keyword("sinon", KeywordKind.CONTROL, "else"),
    Keyword("fsi", KeywordKind.CONTROL, "end"),
    Keyword("tant", KeywordKind.CONTROL, "while"),
    Keyword("que", KeywordKind.CONTROL),
    Keyword("ftq", KeywordKind.CONTROL, "end"),
    Keyword("ftant", KeywordKind.CONTROL, "end"),
    Keyword("pour", KeywordKind.CONTROL, "for"),
    Keyword("allant", KeywordKind.CONTROL),
    Keyword("de", KeywordKind.CONTROL),
    Keyword("à", KeywordKind.CONTROL),
    Keyword("faire", KeywordKind.CONTROL, "do"),
    Keyword("fpour", KeywordKind.CONTROL, "end"),
    Keyword("décroissant", KeywordKind.CONTROL),
    Keyword("decroissant", KeywordKind.CONTROL),
    Keyword("retourner", KeywordKind.CONTROL, "return"),
    Keyword("retourne", KeywordKind.CONTROL, "return"),
    # Blocks
    Keyword("début", KeywordKind.BLOCK),
    Keyword("debut", KeywordKind.BLOCK),
    Keyword("fin", KeywordKind.BLOCK),
    Keyword("algorithme", KeywordKind.BLOCK),
    Keyword("fonction", KeywordKind.BLOCK),
    Keyword("lexique", KeywordKind.BLOCK),
    # Booleans
    Keyword("vrai", KeywordKind.BOOLEAN, "true"),
    Keyword("faux", KeywordKind.BOOLEAN, "false"),
    # Operators
    Keyword("et", KeywordKind.OPERATOR, "and"),
    Keyword("ou", KeywordKind.OPERATOR, "or"),
    Keyword("non", KeywordKind.OPERATOR, "not"),
    Keyword("mod", KeywordKind.OPERATOR, "%"),
    # IO
    Keyword("écrire", KeywordKind.IO, "__psc_write"),
    Keyword("ecrire", KeywordKind.IO, "__psc_write"),
    Keyword("lire", KeywordKind.IO, "__psc_lire"),
    # Modifiers
    Keyword("inout", KeywordKind.MODIFIER),
)

_FUNCTIONS = (
    # Strings (dedicated inline rules)
    BuiltinFunction("longueur", 1, "#", is_inline=True, description="Longueur de la chaîne"),
    BuiltinFunction("concat", 2, "..", is_inline=True, description="Concaténation"),
    BuiltinFunction("souschaîne", 3, "string.sub", is_inline=True, description="Sous-chaîne"),
    BuiltinFunction("souschaine", 3, "string.sub", is_inline=True, description="Sous-chaîne"),
    BuiltinFunction("ième", 2, "string.sub", is_inline=True, description="Caractère à la position i"),
    BuiltinFunction("ieme", 2, "string.sub", is_inline=True, description="Caractère à la position i"),

    # Files
    BuiltinFunction("fichierouvrir", 2, "__psc_fichierOuvrir"),
    BuiltinFunction("fichierfermer", 1, "__psc_fichierFermer"),
    BuiltinFunction("fichierlire", 1, "__psc_fichierLire"),
    BuiltinFunction("fichierfin", 1, "__psc_fichierFin"),
    BuiltinFunction("chaineversentier", 1, "__psc_chaineVersEntier"),
    BuiltinFunction("fichiercreer", 1, "__psc_fichierCreer"),
    BuiltinFunction("fichierecrire", 2, "__psc_fichierEcrire"),

    # List ADT (integer places)
    BuiltinFunction("tete", 1, "__psc_generic_tete"),
    BuiltinFunction("val", 2, "__psc_liste_val"),
    BuiltinFunction("suc", 2, "__psc_liste_suc"),
    BuiltinFunction("finliste", 2, "__psc_liste_fin"),
    BuiltinFunction("listevide", 0, "__psc_liste_vide"),
    BuiltinFunction("ajoutteteliste", 2, "__psc_liste_ajout_tete", is_mutator=True),
    BuiltinFunction("suppressionteteliste", 1, "__psc_liste_suppression_tete", is_mutator=True),
    BuiltinFunction("ajoutqueueliste", 2, "__psc_liste_ajout_queue", is_mutator=True),
    BuiltinFunction("suppressionqueueliste", 1, "__psc_liste_suppression_queue", is_mutator=True),
    BuiltinFunction("ajoutliste", 3, "__psc_liste_ajout", is_mutator=True),
    BuiltinFunction("suppressionliste", 2, "__psc_liste_suppression", is_mutator=True),
    BuiltinFunction("changeliste", 3, "__psc_liste_change", is_mutator=True),

    # Symmetric list ADT (mutated in place through the {head, tail} container)
    BuiltinFunction("tetels", 1, "__psc_listesym_tete"),
    BuiltinFunction("queuels", 1, "__psc_listesym_queue"),
    BuiltinFunction("valls", 2, "__psc_listesym_val"),
    BuiltinFunction("sucls", 2, "__psc_listesym_suc"),
    BuiltinFunction("precls", 2, "__psc_listesym_prec"),
    BuiltinFunction("finls", 2, "__psc_listesym_fin"),
    BuiltinFunction("videls", 0, "__psc_listesym_vide"),
    BuiltinFunction("ajouttetels", 2, "__psc_listesym_ajout_tete"),
    BuiltinFunction("suppressiontetels", 1, "__psc_listesym_suppression_tete"),
    BuiltinFunction("ajoutqueuels", 2, "__psc_listesym_ajout_queue"),
    BuiltinFunction("suppressionqueuels", 1, "__psc_listesym_suppression_queue"),
    BuiltinFunction("ajoutls", 3, "__psc_listesym_ajout"),
    BuiltinFunction("suppressionls", 2, "__psc_listesym_suppression"),
    BuiltinFunction("changels", 3, "__psc_listesym_change"),

    # Stack ADT
    BuiltinFunction("pilevide", 0, "__psc_pile_vide"),
    BuiltinFunction("sommet", 1, "__psc_pile_sommet"),
    BuiltinFunction("estvidepile", 1, "__psc_pile_est_vide"),
    BuiltinFunction("empiler", 2, "__psc_pile_empiler"),
    BuiltinFunction("depiler", 1, "__psc_pile_depiler"),

    # Queue ADT
    BuiltinFunction("filevide", 0, "__psc_file_vide"),
    BuiltinFunction("estvidefile", 1, "__psc_file_est_vide"),
    BuiltinFunction("enfiler", 2, "__psc_file_enfiler"),
    BuiltinFunction("defiler", 1, "__psc_file_defiler"),
    BuiltinFunction("premier", 1, "__psc_file_premier"),
    BuiltinFunction("ajoutfile", 2, "__psc_file_enfiler"),
    BuiltinFunction("suppressionfile", 1, "__psc_file_defiler"),
    BuiltinFunction("estfilevide", 1, "__psc_file_est_vide"),

    # Table ADT (key -> value)
    BuiltinFunction("tablevide", 0, "__psc_table_vide"),
    BuiltinFunction("domaine", 1, "__psc_table_domaine"),
    BuiltinFunction("accestable", 2, "__psc_table_acces"),
    BuiltinFunction("ajouttable", 3, "__psc_table_ajout", is_mutator=True),
    BuiltinFunction("suppressiontable", 2, "__psc_table_suppression", is_mutator=True),
    BuiltinFunction("changetable", 3, "__psc_table_change", is_mutator=True),
    BuiltinFunction("estdans", 2, "__psc_ensemble_estdans"),
)

_REPLACEMENTS = (
    OperatorReplacement("vrai", "true"),
    OperatorReplacement("faux", "false"),
    OperatorReplacement("non", "not"),
    OperatorReplacement("ou", "or"),
    OperatorReplacement("et", "and"),
    OperatorReplacement("mod", "%"),
    OperatorReplacement("≠", "~=", is_word=False),
    OperatorReplacement("≤", "<=", is_word=False),
    OperatorReplacement("≥", ">=", is_word=False),
    OperatorReplacement("÷", "//", is_word=False),
    OperatorReplacement("fin_ligne", "'\\n'"),
)

DEFAULT_DEFINITIONS = Definitions(
    types=_TYPES,
    keywords=_KEYWORDS,
    functions=_FUNCTIONS,
    replacements=_REPLACEMENTS,
    extra_identifiers=frozenset({"fin_ligne", "listesym"}),
)
