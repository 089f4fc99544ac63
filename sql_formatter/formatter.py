"""
SQL Formatter - Formateur et indenteur SQL.

Point d'entrée principal : tokenize la requête, substitue éventuellement les
paramètres, puis réémet le SQL avec l'indentation, la casse des mots-clés et
l'espacement entre requêtes demandés.

Usage:
    from sql_formatter.formatter import format_sql, format_query, FormatOptions, Indent

    # Formatage simple
    formatted = format_sql("SELECT a,b,c FROM t WHERE x>1")

    # Résultat étiqueté (tag, texte)
    tag, formatted = format_query("select 1;select 2")

    # Configuration
    options = FormatOptions(indent=Indent.tabs(), uppercase=False, lines_between_queries=2)
    formatter = SQLFormatter(options)
    formatted = formatter.format("select * from t where id = ?", ["42"]).payload
"""

import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional

from .emitter import SQLEmitter
from .params import QueryParams, substitute_params
from .tokenizer import SQLTokenizer


logger = logging.getLogger(__name__)


class SQLFormatError(Exception):
    """Erreur de base du formateur SQL."""


class InvalidOptionsError(SQLFormatError):
    """Options de formatage invalides."""


class IndentKind(Enum):
    """Unités d'indentation."""
    SPACES = "spaces"
    TABS = "tabs"


@dataclass(frozen=True)
class Indent:
    """Unité d'un niveau d'indentation : N espaces ou une tabulation."""
    kind: IndentKind = IndentKind.SPACES
    size: int = 4

    def __post_init__(self):
        if not isinstance(self.kind, IndentKind):
            raise InvalidOptionsError(f"Invalid indent kind: {self.kind!r}")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise InvalidOptionsError(f"Indent size must be a non-negative integer, got {self.size!r}")

    @classmethod
    def spaces(cls, size: int = 4) -> 'Indent':
        return cls(IndentKind.SPACES, size)

    @classmethod
    def tabs(cls) -> 'Indent':
        return cls(IndentKind.TABS, 1)

    @property
    def unit(self) -> str:
        """Chaîne d'un niveau d'indentation."""
        if self.kind == IndentKind.TABS:
            return '\t'
        return ' ' * self.size


@dataclass(frozen=True)
class FormatOptions:
    """Options de formatage SQL."""

    # Indentation
    indent: Indent = field(default_factory=Indent)

    # Casse des mots-clés (les autres tokens ne changent jamais de casse)
    uppercase: bool = True

    # Lignes vides entre deux requêtes
    lines_between_queries: int = 1

    def __post_init__(self):
        if not isinstance(self.indent, Indent):
            raise InvalidOptionsError(f"indent must be an Indent, got {self.indent!r}")
        if not isinstance(self.uppercase, bool):
            raise InvalidOptionsError(f"uppercase must be a boolean, got {self.uppercase!r}")
        lines = self.lines_between_queries
        if isinstance(lines, bool) or not isinstance(lines, int) or lines < 0:
            raise InvalidOptionsError(
                f"lines_between_queries must be a non-negative integer, got {lines!r}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'FormatOptions':
        """
        Construit des options à partir de valeurs simples.

        Args:
            values: Dict avec 'indent' (nombre d'espaces ou "tabs"),
                'uppercase' et 'lines_between_queries' (tous optionnels)

        Returns:
            FormatOptions
        """
        unknown = set(values) - {'indent', 'uppercase', 'lines_between_queries'}
        if unknown:
            raise InvalidOptionsError(f"Unknown format options: {', '.join(sorted(unknown))}")

        kwargs = {}
        indent = values.get('indent')
        if indent == 'tabs':
            kwargs['indent'] = Indent.tabs()
        elif isinstance(indent, Indent):
            kwargs['indent'] = indent
        elif indent is not None:
            kwargs['indent'] = Indent.spaces(indent)
        if 'uppercase' in values:
            kwargs['uppercase'] = values['uppercase']
        if 'lines_between_queries' in values:
            kwargs['lines_between_queries'] = values['lines_between_queries']
        return cls(**kwargs)


class ResultTag(Enum):
    """Étiquette du résultat de formatage."""
    OK = "ok"
    ERROR = "error"  # Réservé aux variantes validantes ; jamais produit ici


class FormatResult(NamedTuple):
    """Résultat étiqueté : (tag, texte)."""
    tag: ResultTag
    payload: str

    @property
    def ok(self) -> bool:
        return self.tag == ResultTag.OK


class SQLFormatter:
    """
    Formateur SQL avec options personnalisables.

    Tokenize le SQL, substitue les paramètres puis réémet les tokens.
    Sans état entre deux appels : une instance peut être partagée.
    """

    def __init__(self, options: Optional[FormatOptions] = None):
        """
        Initialise le formateur.

        Args:
            options: Options de formatage (défaut : 4 espaces, majuscules, 1 ligne)
        """
        self.options = options or FormatOptions()

    def format(self, sql: str, params: Any = None) -> FormatResult:
        """
        Formate une requête SQL.

        Args:
            sql: Code SQL à formater
            params: QueryParams, liste (positionnels), dict (nommés) ou None

        Returns:
            FormatResult(ResultTag.OK, SQL formaté)
        """
        query_params = QueryParams.coerce(params)
        tokens = SQLTokenizer(sql).tokenize()
        logger.debug("Tokenized %d characters into %d tokens", len(sql), len(tokens))

        if not query_params.is_empty:
            tokens = list(substitute_params(tokens, query_params))

        emitter = SQLEmitter(
            indent=self.options.indent.unit,
            uppercase=self.options.uppercase,
            lines_between_queries=self.options.lines_between_queries,
        )
        return FormatResult(ResultTag.OK, emitter.emit(tokens))

    def format_file(self, filepath: str, output_path: str = None, params: Any = None) -> str:
        """
        Formate un fichier SQL.

        Args:
            filepath: Chemin du fichier à formater
            output_path: Chemin de sortie (si None, retourne le contenu)
            params: Paramètres de requête

        Returns:
            Contenu formaté
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            sql = f.read()

        formatted = self.format(sql, params).payload

        if output_path:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(formatted)

        return formatted


def format_query(sql: str, params: Any = None, options: Optional[FormatOptions] = None) -> FormatResult:
    """
    Formate du SQL et retourne le résultat étiqueté.

    Args:
        sql: Code SQL à formater
        params: Paramètres de requête (QueryParams, liste, dict ou None)
        options: Options de formatage

    Returns:
        FormatResult (tag, texte)
    """
    return SQLFormatter(options).format(sql, params)


def format_sql(sql: str, params: Any = None, options: Optional[FormatOptions] = None, **kwargs) -> str:
    """
    Fonction utilitaire pour formater du SQL.

    Args:
        sql: Code SQL à formater
        params: Paramètres de requête
        options: Options de formatage
        **kwargs: Options simples (passées à FormatOptions.from_dict)

    Returns:
        Code SQL formaté

    Examples:
        >>> format_sql("select a,b from t where a=1")
        'SELECT\\n    a,\\n    b\\nFROM\\n    t\\nWHERE\\n    a = 1'

        >>> format_sql("select 1", uppercase=False, indent=2)
        'select\\n  1'
    """
    if kwargs:
        if options is not None:
            raise InvalidOptionsError("Pass either options or keyword options, not both")
        options = FormatOptions.from_dict(kwargs)
    return format_query(sql, params, options).payload
