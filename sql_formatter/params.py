"""
Substitution des paramètres de requête.

Remplace les placeholders (?, $N, :name, @name) d'une séquence de tokens par
des littéraux SQL construits à partir des valeurs fournies.

Usage:
    from sql_formatter.params import QueryParams, substitute_params

    tokens = substitute_params(tokens, QueryParams.positional(["42"]))
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .tokenizer import Token, TokenType


logger = logging.getLogger(__name__)


class ParamsKind(Enum):
    """Variantes de paramètres de requête."""
    NONE = "none"
    POSITIONAL = "positional"
    NAMED = "named"


@dataclass(frozen=True)
class QueryParams:
    """
    Paramètres d'une requête : aucun, positionnels ou nommés.

    Préférer les constructeurs ``none()``, ``positional()`` et ``named()``.
    Le dict ``mapping`` est exclu du hash : deux paramètres égaux ont le
    même hash, et l'instance reste utilisable comme clé.
    """
    kind: ParamsKind = ParamsKind.NONE
    values: Tuple[str, ...] = ()
    mapping: Dict[str, str] = field(default_factory=dict, hash=False)

    @classmethod
    def none(cls) -> 'QueryParams':
        return cls()

    @classmethod
    def positional(cls, values: Iterable[Any]) -> 'QueryParams':
        return cls(kind=ParamsKind.POSITIONAL, values=tuple(str(value) for value in values))

    @classmethod
    def named(cls, mapping: Mapping[str, Any]) -> 'QueryParams':
        return cls(kind=ParamsKind.NAMED,
                   mapping={str(name): str(value) for name, value in mapping.items()})

    @classmethod
    def coerce(cls, params: Any) -> 'QueryParams':
        """
        Construit des QueryParams à partir d'une valeur Python.

        Args:
            params: None, QueryParams, mapping (nommés) ou séquence (positionnels)

        Returns:
            QueryParams correspondant
        """
        if params is None:
            return cls.none()
        if isinstance(params, QueryParams):
            return params
        if isinstance(params, Mapping):
            return cls.named(params)
        if isinstance(params, (str, bytes)):
            raise TypeError("Query params must be a sequence or a mapping, not a string")
        return cls.positional(params)

    @property
    def is_empty(self) -> bool:
        return self.kind == ParamsKind.NONE


def sql_literal(value: str) -> str:
    """
    Rend une valeur sous forme de littéral SQL.

    Examples:
        >>> sql_literal("it's")
        "'it''s'"
    """
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


class ParameterSubstituter:
    """Réécrit les placeholders d'une séquence de tokens."""

    def __init__(self, params: QueryParams):
        self.params = params
        self._cursor = 0

    def _resolve(self, token: Token) -> Optional[str]:
        """Retourne la valeur d'un placeholder, ou None s'il reste inchangé."""
        params = self.params

        if params.kind == ParamsKind.POSITIONAL:
            if token.key is None:
                # ? : consomme la valeur suivante
                if self._cursor >= len(params.values):
                    return None
                value = params.values[self._cursor]
                self._cursor += 1
                return value
            if isinstance(token.key, int):
                # $N : lecture directe, sans avancer le curseur des ?
                if 1 <= token.key <= len(params.values):
                    return params.values[token.key - 1]
            return None

        if params.kind == ParamsKind.NAMED and isinstance(token.key, str):
            return params.mapping.get(token.key)

        return None

    def substitute(self, tokens: Iterable[Token]) -> Iterator[Token]:
        """
        Substitue les placeholders.

        Args:
            tokens: Séquence de tokens

        Yields:
            Tokens, les placeholders résolus étant remplacés par des STRING
        """
        self._cursor = 0
        for token in tokens:
            if token.type != TokenType.PLACEHOLDER or self.params.is_empty:
                yield token
                continue

            value = self._resolve(token)
            if value is None:
                logger.debug("Placeholder %s left unresolved", token.value)
                yield token
                continue

            yield replace(token, type=TokenType.STRING, value=sql_literal(value), key=None)


def substitute_params(tokens: Iterable[Token], params: Any = None) -> Iterator[Token]:
    """
    Fonction utilitaire de substitution des placeholders.

    Args:
        tokens: Séquence de tokens
        params: QueryParams ou valeur convertible (None, liste, dict)

    Returns:
        Itérateur de tokens réécrits
    """
    return ParameterSubstituter(QueryParams.coerce(params)).substitute(tokens)
