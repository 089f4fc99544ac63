"""
Tables de mots-clés SQL utilisées par le tokenizer et l'émetteur.

Le jeu de mots-clés part d'une liste ANSI et l'étend avec les mots-clés
courants des dialectes (PostgreSQL, MySQL, Presto/Athena). Les mots très
souvent utilisés comme noms de colonnes (name, value, type, ...) en sont
volontairement exclus.
"""

from typing import Dict, FrozenSet, Tuple


KEYWORDS: FrozenSet[str] = frozenset({
    # DML
    'select', 'insert', 'update', 'delete', 'merge', 'truncate', 'into',
    'values', 'set', 'returning', 'default',
    # DDL
    'create', 'alter', 'drop', 'table', 'view', 'index', 'schema',
    'database', 'temporary', 'temp', 'column', 'add', 'rename', 'to',
    'primary', 'key', 'foreign', 'references', 'unique', 'check',
    'constraint', 'cascade', 'restrict', 'replace', 'if',
    # Clauses
    'from', 'where', 'group', 'by', 'having', 'order', 'limit', 'offset',
    'fetch', 'window', 'with', 'recursive', 'distinct', 'all', 'as',
    'asc', 'desc', 'nulls', 'first', 'last', 'top',
    # Prédicats et opérateurs logiques
    'and', 'or', 'not', 'in', 'between', 'like', 'ilike', 'is', 'null',
    'true', 'false', 'exists', 'any', 'some', 'escape',
    # Jointures
    'join', 'inner', 'left', 'right', 'full', 'outer', 'cross', 'natural',
    'on', 'using', 'lateral',
    # Opérations ensemblistes
    'union', 'intersect', 'except', 'minus',
    # CASE
    'case', 'when', 'then', 'else', 'end',
    # Fenêtrage
    'over', 'partition', 'rows', 'range', 'preceding', 'following',
    'unbounded', 'current', 'row', 'filter', 'within',
    # Conflits / verrous
    'conflict', 'do', 'nothing', 'for', 'share', 'nowait', 'skip',
    'locked', 'of', 'only',
    # Expressions
    'cast', 'interval', 'extract', 'collate', 'array', 'unnest',
    'ordinality', 'grouping', 'sets', 'cube', 'rollup',
    # Fonctions d'agrégation
    'count', 'sum', 'avg', 'min', 'max', 'coalesce', 'nullif',
    # Types
    'int', 'integer', 'smallint', 'bigint', 'decimal', 'numeric', 'real',
    'float', 'double', 'precision', 'char', 'varchar', 'text', 'boolean',
    'date', 'time', 'timestamp', 'zone', 'at',
    # Transactions
    'begin', 'commit', 'rollback', 'transaction', 'savepoint',
    # Droits
    'grant', 'revoke', 'explain', 'analyze',
})


# Mots-clés de clause : saut de ligne avant, corps indenté d'un niveau
CLAUSE_KEYWORDS: FrozenSet[str] = frozenset({
    'SELECT', 'FROM', 'WHERE', 'GROUP BY', 'ORDER BY', 'HAVING', 'LIMIT',
    'OFFSET', 'VALUES', 'INSERT INTO', 'UPDATE', 'SET', 'DELETE FROM',
    'RETURNING', 'WITH',
})

# Opérations ensemblistes : clause sans indentation de la requête suivante
SET_OPERATION_KEYWORDS: FrozenSet[str] = frozenset({
    'UNION', 'UNION ALL', 'UNION DISTINCT', 'INTERSECT', 'INTERSECT ALL',
    'EXCEPT', 'EXCEPT ALL', 'MINUS',
})

# Mots-clés de clause qui ne sont structurants qu'en tête de clause
# (ON DELETE SET NULL, FOR UPDATE, ...)
CONTEXTUAL_CLAUSE_KEYWORDS: FrozenSet[str] = frozenset({'UPDATE', 'SET'})

JOIN_KEYWORDS: FrozenSet[str] = frozenset({
    'JOIN', 'INNER JOIN', 'LEFT JOIN', 'LEFT OUTER JOIN', 'RIGHT JOIN',
    'RIGHT OUTER JOIN', 'FULL JOIN', 'FULL OUTER JOIN', 'CROSS JOIN',
    'NATURAL JOIN', 'OUTER JOIN',
})

# Conditions de jointure : sur une nouvelle ligne après un JOIN
JOIN_CONDITION_KEYWORDS: FrozenSet[str] = frozenset({'ON', 'USING'})

LOGICAL_KEYWORDS: FrozenSet[str] = frozenset({'AND', 'OR'})

# Mots-clés composés reconnus par anticipation (le plus long d'abord)
MULTI_WORD_KEYWORDS: Tuple[Tuple[str, ...], ...] = tuple(sorted({
    ('GROUP', 'BY'),
    ('ORDER', 'BY'),
    ('PARTITION', 'BY'),
    ('INSERT', 'INTO'),
    ('DELETE', 'FROM'),
    ('UNION', 'ALL'),
    ('UNION', 'DISTINCT'),
    ('INTERSECT', 'ALL'),
    ('EXCEPT', 'ALL'),
    ('INNER', 'JOIN'),
    ('LEFT', 'JOIN'),
    ('LEFT', 'OUTER', 'JOIN'),
    ('RIGHT', 'JOIN'),
    ('RIGHT', 'OUTER', 'JOIN'),
    ('FULL', 'JOIN'),
    ('FULL', 'OUTER', 'JOIN'),
    ('CROSS', 'JOIN'),
    ('NATURAL', 'JOIN'),
    ('OUTER', 'JOIN'),
}, key=lambda words: -len(words)))

# Index des mots composés par premier mot
MULTI_WORD_INDEX: Dict[str, Tuple[Tuple[str, ...], ...]] = {}
for _words in MULTI_WORD_KEYWORDS:
    MULTI_WORD_INDEX.setdefault(_words[0], ())
    MULTI_WORD_INDEX[_words[0]] += (_words,)
del _words


def is_keyword(word: str) -> bool:
    """Indique si un mot (insensible à la casse) est un mot-clé SQL."""
    return word.isascii() and word.lower() in KEYWORDS
