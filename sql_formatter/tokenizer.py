"""
Tokenizer (Analyseur Lexical) pour SQL.

Découpe une chaîne SQL en une séquence de tokens classifiés, sans trou ni
chevauchement : la concaténation des valeurs des tokens reproduit exactement
le texte d'entrée. Le tokenizer n'échoue jamais ; un caractère non reconnu
produit un token UNKNOWN.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from .keywords import is_keyword


class TokenType(Enum):
    """Types de tokens SQL."""

    KEYWORD = auto()
    IDENTIFIER = auto()
    QUOTED_IDENTIFIER = auto()  # "col" ou `col`
    STRING = auto()             # 'texte'
    NUMBER = auto()
    OPERATOR = auto()

    # Ponctuation
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    COMMA = auto()              # ,
    SEMICOLON = auto()          # ;
    DOT = auto()                # .

    # Commentaires
    LINE_COMMENT = auto()       # -- ...
    BLOCK_COMMENT = auto()      # /* ... */

    WHITESPACE = auto()
    PLACEHOLDER = auto()        # ?, $1, :name, @name
    UNKNOWN = auto()


WHITESPACE_CHARS = ' \t\r\n\f\v'

MULTI_CHAR_OPERATORS = ('<=', '>=', '<>', '!=', '||', '::')

SINGLE_CHAR_OPERATORS = '+-*/%=<>!|&^~:'

PUNCTUATION = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    '.': TokenType.DOT,
}


@dataclass
class Token:
    """Représente un token SQL."""
    type: TokenType
    value: str
    line: int
    column: int
    position: int  # Position absolue dans le texte
    # Clé d'un placeholder : None pour ?, l'index pour $N, le nom pour :name/@name
    key: Optional[Union[int, str]] = None

    @property
    def is_whitespace(self) -> bool:
        return self.type == TokenType.WHITESPACE

    @property
    def is_comment(self) -> bool:
        return self.type in (TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT)

    @property
    def normalized(self) -> str:
        """Valeur en majuscules pour les mots-clés, valeur brute sinon."""
        if self.type == TokenType.KEYWORD:
            return self.value.upper()
        return self.value

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, line={self.line}, col={self.column})"


def _is_identifier_start(char: Optional[str]) -> bool:
    return char is not None and (char.isalpha() or char == '_')


def _is_identifier_char(char: Optional[str]) -> bool:
    return char is not None and (char.isalnum() or char == '_')


def _is_digit(char: Optional[str]) -> bool:
    return char is not None and char in '0123456789'


class SQLTokenizer:
    """
    Analyseur lexical pour SQL.

    L'itération est paresseuse : ``iter(SQLTokenizer(sql))`` produit les
    tokens au fur et à mesure de la lecture.
    """

    def __init__(self, sql: str, include_whitespace: bool = True, include_comments: bool = True):
        """
        Initialise le tokenizer.

        Args:
            sql: Le code SQL à tokenizer
            include_whitespace: Inclure les tokens d'espaces blancs
            include_comments: Inclure les tokens de commentaires
        """
        self.sql = sql
        self.include_whitespace = include_whitespace
        self.include_comments = include_comments
        self.pos = 0
        self.line = 1
        self.column = 1

    def _current_char(self) -> Optional[str]:
        """Retourne le caractère courant ou None si fin de chaîne."""
        if self.pos >= len(self.sql):
            return None
        return self.sql[self.pos]

    def _peek(self, offset: int = 1) -> Optional[str]:
        """Regarde le caractère à offset positions devant."""
        pos = self.pos + offset
        if pos >= len(self.sql):
            return None
        return self.sql[pos]

    def _advance(self, count: int = 1) -> str:
        """Avance de count caractères et retourne les caractères consommés."""
        result = self.sql[self.pos:self.pos + count]
        for char in result:
            if char == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(result)
        return result

    def _advance_to(self, end: int) -> str:
        """Avance jusqu'à la position absolue end (exclue)."""
        return self._advance(end - self.pos)

    def _read_whitespace(self) -> str:
        end = self.pos
        while end < len(self.sql) and self.sql[end] in WHITESPACE_CHARS:
            end += 1
        return self._advance_to(end)

    def _read_line_comment(self) -> str:
        """Lit un commentaire sur une seule ligne (-- ...), saut de ligne inclus."""
        end = self.sql.find('\n', self.pos)
        if end == -1:
            end = len(self.sql)
        else:
            end += 1
        return self._advance_to(end)

    def _read_block_comment(self) -> str:
        """Lit un commentaire multi-ligne (/* ... */), non imbriqué."""
        end = self.sql.find('*/', self.pos + 2)
        if end == -1:
            # Non terminé : consomme jusqu'à la fin
            end = len(self.sql)
        else:
            end += 2
        return self._advance_to(end)

    def _read_quoted(self, quote_char: str) -> str:
        """
        Lit une chaîne ou un identifiant délimité par quote_char.

        Un délimiteur doublé est un échappement ; une chaîne non terminée
        consomme jusqu'à la fin de l'entrée.
        """
        end = self.pos + 1
        while end < len(self.sql):
            if self.sql[end] == quote_char:
                if end + 1 < len(self.sql) and self.sql[end + 1] == quote_char:
                    end += 2
                    continue
                end += 1
                break
            end += 1
        return self._advance_to(end)

    def _read_number(self) -> str:
        """Lit un nombre (entier, décimal, notation scientifique)."""
        end = self.pos
        while _is_digit(self._char_at(end)):
            end += 1

        # Partie décimale
        if self._char_at(end) == '.' and _is_digit(self._char_at(end + 1)):
            end += 1
            while _is_digit(self._char_at(end)):
                end += 1

        # Exposant
        marker = self._char_at(end)
        if marker is not None and marker in 'eE':
            digits_at = end + 1
            if self._char_at(digits_at) in ('+', '-'):
                digits_at += 1
            if _is_digit(self._char_at(digits_at)):
                end = digits_at
                while _is_digit(self._char_at(end)):
                    end += 1

        return self._advance_to(end)

    def _read_word(self) -> str:
        end = self.pos
        while _is_identifier_char(self._char_at(end)):
            end += 1
        return self._advance_to(end)

    def _char_at(self, pos: int) -> Optional[str]:
        if pos >= len(self.sql):
            return None
        return self.sql[pos]

    def _read_placeholder(self):
        """
        Lit un placeholder si la position courante en commence un.

        Returns:
            Tuple (valeur, clé) ou None
        """
        char = self._current_char()
        if char == '?':
            return self._advance(), None
        if char == '$' and _is_digit(self._peek()):
            value = self._advance()
            end = self.pos
            while _is_digit(self._char_at(end)):
                end += 1
            digits = self._advance_to(end)
            return value + digits, int(digits)
        if char in (':', '@') and _is_identifier_start(self._peek()):
            value = self._advance()
            name = self._read_word()
            return value + name, name
        return None

    def _next_token(self) -> Token:
        """Lit le token suivant à partir de la position courante."""
        start_line, start_col, start_pos = self.line, self.column, self.pos
        char = self._current_char()
        next_char = self._peek()
        key = None

        # Espaces blancs
        if char in WHITESPACE_CHARS:
            token_type = TokenType.WHITESPACE
            value = self._read_whitespace()

        # Commentaires
        elif char == '-' and next_char == '-':
            token_type = TokenType.LINE_COMMENT
            value = self._read_line_comment()
        elif char == '/' and next_char == '*':
            token_type = TokenType.BLOCK_COMMENT
            value = self._read_block_comment()

        # Chaînes de caractères
        elif char == "'":
            token_type = TokenType.STRING
            value = self._read_quoted("'")

        # Identifiants entre guillemets ou backticks
        elif char in ('"', '`'):
            token_type = TokenType.QUOTED_IDENTIFIER
            value = self._read_quoted(char)

        else:
            placeholder = self._read_placeholder()
            if placeholder is not None:
                token_type = TokenType.PLACEHOLDER
                value, key = placeholder

            # Nombres (le signe est un opérateur séparé)
            elif _is_digit(char):
                token_type = TokenType.NUMBER
                value = self._read_number()

            # Identifiants ou mots-clés
            elif _is_identifier_start(char):
                value = self._read_word()
                if is_keyword(value):
                    token_type = TokenType.KEYWORD
                else:
                    token_type = TokenType.IDENTIFIER

            # Opérateurs à deux caractères avant ceux à un caractère
            elif char + (next_char or '') in MULTI_CHAR_OPERATORS:
                token_type = TokenType.OPERATOR
                value = self._advance(2)
            elif char in SINGLE_CHAR_OPERATORS:
                token_type = TokenType.OPERATOR
                value = self._advance()
            elif char in PUNCTUATION:
                token_type = PUNCTUATION[char]
                value = self._advance()
            else:
                token_type = TokenType.UNKNOWN
                value = self._advance()

        return Token(token_type, value, start_line, start_col, start_pos, key)

    def __iter__(self) -> Iterator[Token]:
        """Produit les tokens paresseusement, du début à la fin du texte."""
        self.pos = 0
        self.line = 1
        self.column = 1

        while self.pos < len(self.sql):
            token = self._next_token()
            if token.is_whitespace and not self.include_whitespace:
                continue
            if token.is_comment and not self.include_comments:
                continue
            yield token

    def tokenize(self) -> List[Token]:
        """
        Tokenize la chaîne SQL complète.

        Returns:
            Liste de tokens
        """
        return list(self)


def tokenize(sql: str, include_whitespace: bool = True, include_comments: bool = True) -> List[Token]:
    """
    Fonction utilitaire pour tokenizer du SQL.

    Args:
        sql: Le code SQL à tokenizer
        include_whitespace: Inclure les tokens d'espaces blancs
        include_comments: Inclure les tokens de commentaires

    Returns:
        Liste de tokens
    """
    return SQLTokenizer(sql, include_whitespace, include_comments).tokenize()


def significant_tokens(tokens) -> List[Token]:
    """Filtre les espaces blancs et les commentaires d'une séquence de tokens."""
    return [token for token in tokens if not token.is_whitespace and not token.is_comment]
