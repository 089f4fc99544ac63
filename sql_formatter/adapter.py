"""
Adaptateur d'appel pour un hôte externe.

Expose le formateur avec des options fixes (4 espaces, majuscules, une
ligne vide entre requêtes) et sans substitution de paramètres. Le formatage
est une opération CPU : ``format_async`` l'exécute dans un pool pour ne
pas bloquer une boucle d'événements.
"""

import asyncio
import logging
from concurrent.futures import Executor
from functools import partial
from typing import Optional, Union

from .formatter import FormatOptions, FormatResult, Indent, SQLFormatError, format_query


logger = logging.getLogger(__name__)


DEFAULT_OPTIONS = FormatOptions(
    indent=Indent.spaces(4),
    uppercase=True,
    lines_between_queries=1,
)


class InvalidInputError(SQLFormatError):
    """Entrée rejetée avant formatage (type invalide, UTF-8 invalide)."""


def decode_input(sql: Union[str, bytes]) -> str:
    """
    Valide et décode l'entrée de l'hôte.

    Args:
        sql: Texte ou octets UTF-8

    Returns:
        Texte SQL

    Raises:
        InvalidInputError: Si l'entrée n'est ni du texte ni de l'UTF-8 valide
    """
    if isinstance(sql, str):
        return sql
    if isinstance(sql, (bytes, bytearray, memoryview)):
        try:
            return bytes(sql).decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidInputError(f"SQL input is not valid UTF-8: {e}") from e
    raise InvalidInputError(f"SQL input must be str or bytes, got {type(sql).__name__}")


def format_default(sql: Union[str, bytes]) -> FormatResult:
    """
    Formate une requête avec les options par défaut de l'adaptateur.

    Args:
        sql: Texte ou octets UTF-8

    Returns:
        FormatResult (ResultTag.OK, SQL formaté)
    """
    return format_query(decode_input(sql), None, DEFAULT_OPTIONS)


async def format_async(sql: Union[str, bytes],
                       options: Optional[FormatOptions] = None,
                       executor: Optional[Executor] = None) -> FormatResult:
    """
    Formate une requête dans un exécuteur, sans bloquer la boucle courante.

    Args:
        sql: Texte ou octets UTF-8
        options: Options de formatage (défaut : DEFAULT_OPTIONS)
        executor: Pool d'exécution (défaut : pool de la boucle)

    Returns:
        FormatResult
    """
    text = decode_input(sql)
    loop = asyncio.get_running_loop()
    logger.debug("Dispatching %d characters to executor", len(text))
    call = partial(format_query, text, None, options or DEFAULT_OPTIONS)
    return await loop.run_in_executor(executor, call)
