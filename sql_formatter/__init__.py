"""
SQL Formatter - Un formateur SQL déterministe, sans analyse syntaxique.

Ce module fournit:
- Tokenizer: Analyse lexicale du SQL (sans perte : les tokens recouvrent tout le texte)
- Params: Substitution des placeholders (?, $N, :name, @name)
- Emitter: Réémission des tokens avec indentation, casse et espacement
- Formatter: Point d'entrée avec options (indentation, casse, lignes entre requêtes)
- Adapter: Options par défaut et exécution dans un pool

Usage:
    from sql_formatter import format_sql, format_query, FormatOptions, Indent

    # Formater du SQL
    formatted = format_sql("select a,b from t where a=1")

    # Résultat étiqueté
    tag, formatted = format_query("select 1;select 2")

    # Substituer des paramètres
    formatted = format_sql("select * from t where id = ?", ["42"])

    # Options
    options = FormatOptions(indent=Indent.tabs(), uppercase=False, lines_between_queries=2)
    formatted = format_sql(sql, options=options)
"""

from .tokenizer import SQLTokenizer, Token, TokenType, tokenize
from .params import QueryParams, ParamsKind, ParameterSubstituter, substitute_params, sql_literal
from .emitter import SQLEmitter, EmitterState
from .formatter import (
    SQLFormatter, FormatOptions, FormatResult, Indent, IndentKind, ResultTag,
    SQLFormatError, InvalidOptionsError, format_query, format_sql,
)
from .adapter import DEFAULT_OPTIONS, InvalidInputError, format_default, format_async

__version__ = "1.0.0"
__all__ = [
    "SQLTokenizer",
    "Token",
    "TokenType",
    "tokenize",
    "QueryParams",
    "ParamsKind",
    "ParameterSubstituter",
    "substitute_params",
    "sql_literal",
    "SQLEmitter",
    "EmitterState",
    "SQLFormatter",
    "FormatOptions",
    "FormatResult",
    "Indent",
    "IndentKind",
    "ResultTag",
    "SQLFormatError",
    "InvalidOptionsError",
    "InvalidInputError",
    "format_query",
    "format_sql",
    "format_default",
    "format_async",
    "DEFAULT_OPTIONS",
]
