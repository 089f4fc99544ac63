#!/usr/bin/env python3
"""
SQL Formatter - Script principal.

Formate du SQL depuis la ligne de commande, un fichier ou l'entrée standard.

Usage:
    python -m sql_formatter "select a,b from t where a=1"
    python -m sql_formatter -f query.sql
    python -m sql_formatter -f query.sql -o formatted.sql
    python -m sql_formatter --tabs --lowercase -f query.sql
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .formatter import FormatOptions, InvalidOptionsError, SQLFormatter
from .params import QueryParams
from .tokenizer import SQLTokenizer


def _parse_named(values):
    """Convertit une liste 'nom=valeur' en dict."""
    named = {}
    for value in values:
        name, sep, param = value.partition('=')
        name = name.lstrip(':@')
        if not sep or not name:
            raise ValueError(f"Paramètre nommé invalide '{value}' (attendu: nom=valeur)")
        named[name] = param
    return named


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sql_formatter",
        description="Formate et indente du SQL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemples:
  # Formater une requête directement
  python -m sql_formatter "select id, name from users where age > 18"

  # Formater un fichier et sauvegarder le résultat
  python -m sql_formatter -f query.sql -o formatted.sql

  # Tabulations, mots-clés en minuscules, deux lignes entre requêtes
  python -m sql_formatter --tabs --lowercase --lines-between-queries 2 -f queries.sql

  # Substituer des paramètres positionnels (?, $1) ou nommés (:id, @id)
  python -m sql_formatter -p 42 "select * from t where id = ?"
  python -m sql_formatter -n id=42 "select * from t where id = :id"

  # Afficher seulement les tokens (analyse lexicale)
  python -m sql_formatter --tokens "select * from users"
"""
    )

    parser.add_argument(
        "sql",
        nargs="?",
        help="Requête SQL à formater"
    )

    parser.add_argument(
        "-f", "--file",
        type=str,
        help="Fichier SQL à formater"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        help="Fichier de sortie"
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=4,
        help="Nombre d'espaces par niveau d'indentation (défaut: 4)"
    )

    parser.add_argument(
        "--tabs",
        action="store_true",
        help="Indenter avec des tabulations"
    )

    parser.add_argument(
        "--lowercase",
        action="store_true",
        help="Mots-clés en minuscules"
    )

    parser.add_argument(
        "--lines-between-queries",
        type=int,
        default=1,
        metavar="N",
        help="Lignes vides entre deux requêtes (défaut: 1)"
    )

    params = parser.add_mutually_exclusive_group()
    params.add_argument(
        "-p", "--param",
        action="append",
        default=None,
        metavar="VALUE",
        help="Paramètre positionnel (répétable, dans l'ordre des ?)"
    )
    params.add_argument(
        "-n", "--named-param",
        action="append",
        default=None,
        metavar="NAME=VALUE",
        help="Paramètre nommé (répétable)"
    )

    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Afficher seulement les tokens (JSON)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Journalisation détaillée sur la sortie d'erreur"
    )

    return parser


def _write_output(text: str, output, label: str):
    if output:
        Path(output).write_text(text + '\n', encoding='utf-8')
        print(f"{label} sauvegardé dans '{output}'")
    else:
        print(text)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Récupération du SQL
    sql = None

    if args.file:
        filepath = Path(args.file)
        if not filepath.exists():
            print(f"Erreur: Le fichier '{args.file}' n'existe pas.", file=sys.stderr)
            sys.exit(1)
        sql = filepath.read_text(encoding='utf-8')
    elif args.sql:
        sql = args.sql
    else:
        # Lire depuis stdin si disponible
        if not sys.stdin.isatty():
            sql = sys.stdin.read()
        else:
            print("Erreur: Aucune requête SQL fournie.", file=sys.stderr)
            print("Usage: python -m sql_formatter \"SELECT * FROM users\"", file=sys.stderr)
            print("       python -m sql_formatter -f query.sql", file=sys.stderr)
            sys.exit(1)

    # Mode tokens uniquement
    if args.tokens:
        result = {
            "tokens": [
                {
                    "type": token.type.name,
                    "value": token.value,
                    "line": token.line,
                    "column": token.column
                }
                for token in SQLTokenizer(sql, include_whitespace=False)
            ]
        }
        _write_output(json.dumps(result, indent=2, ensure_ascii=False), args.output, "Tokens")
        return

    try:
        options = FormatOptions.from_dict({
            "indent": "tabs" if args.tabs else args.indent,
            "uppercase": not args.lowercase,
            "lines_between_queries": args.lines_between_queries,
        })
        if args.param:
            query_params = QueryParams.positional(args.param)
        elif args.named_param:
            query_params = QueryParams.named(_parse_named(args.named_param))
        else:
            query_params = QueryParams.none()
    except (InvalidOptionsError, ValueError) as e:
        print(f"Erreur: {e}", file=sys.stderr)
        sys.exit(1)

    result = SQLFormatter(options).format(sql, query_params)
    _write_output(result.payload, args.output, "SQL formaté")


if __name__ == "__main__":
    main()
