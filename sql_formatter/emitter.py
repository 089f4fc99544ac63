"""
Émetteur SQL - Réécrit une séquence de tokens en SQL indenté.

L'émetteur ignore les espaces blancs d'origine et génère les siens :
- un saut de ligne avant chaque mot-clé de clause (SELECT, FROM, WHERE...),
  le corps de la clause étant indenté d'un niveau ;
- un saut de ligne avant les jointures, ON/USING et AND/OR ;
- une virgule de liste termine la ligne ;
- une sous-requête entre parenthèses ouvre un bloc indenté ;
- les requêtes sont séparées par un nombre fixe de lignes vides.

Les espaces d'origine ne servent qu'à savoir si deux lexèmes non-mots
étaient collés (appel de fonction, préfixe de chaîne, caractère inconnu).
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .keywords import (
    CLAUSE_KEYWORDS, SET_OPERATION_KEYWORDS, CONTEXTUAL_CLAUSE_KEYWORDS,
    JOIN_KEYWORDS, JOIN_CONDITION_KEYWORDS, LOGICAL_KEYWORDS, MULTI_WORD_INDEX,
)
from .tokenizer import Token, TokenType


class EmitterState(Enum):
    """États de l'émetteur."""
    STATEMENT_START = auto()   # Début de requête
    CLAUSE = auto()            # Juste après un mot-clé de clause
    EXPRESSION = auto()        # Dans le corps d'une clause
    LIST_ITEM = auto()         # Juste après une virgule de liste
    SUBQUERY_OPEN = auto()     # Juste après la parenthèse d'une sous-requête


class _Level(Enum):
    TOP_LEVEL = auto()
    BLOCK_LEVEL = auto()
    CONDITION_LEVEL = auto()   # ON/USING sous un JOIN


WORD_TYPES = (
    TokenType.KEYWORD, TokenType.IDENTIFIER, TokenType.QUOTED_IDENTIFIER,
    TokenType.PLACEHOLDER,
)

# Tokens après lesquels une parenthèse collée reste collée (appel de fonction)
CALLABLE_TYPES = WORD_TYPES + (TokenType.RPAREN, TokenType.UNKNOWN)

# Mots-clés qui terminent une expression : un signe qui les suit est binaire
VALUE_KEYWORDS = frozenset({'END', 'NULL', 'TRUE', 'FALSE'})

SUBQUERY_KEYWORDS = frozenset({'SELECT', 'WITH'})


@dataclass
class _Item:
    """Token significatif et contexte d'espacement d'origine."""
    token: Token
    space_before: bool
    newline_before: bool
    newline_after: bool = False


@dataclass
class _Line:
    level: int
    text: str = ''
    closed_by_comment: bool = False


@dataclass
class _Frame:
    """Contexte d'un niveau de parenthèses (ou de la requête elle-même)."""
    block: bool
    clause: Optional[str] = None
    joined: bool = False
    condition: bool = False
    between: int = 0
    case_depth: int = 0


class SQLEmitter:
    """
    Émet du SQL formaté à partir d'une séquence de tokens.

    L'émetteur n'échoue jamais : les tokens inconnus sont recopiés tels
    quels et les parenthèses déséquilibrées laissent l'indentation en l'état.
    """

    def __init__(self,
                 indent: str = '    ',
                 uppercase: bool = True,
                 lines_between_queries: int = 1):
        """
        Initialise l'émetteur.

        Args:
            indent: Chaîne d'un niveau d'indentation
            uppercase: Mots-clés en majuscules (sinon en minuscules)
            lines_between_queries: Lignes vides entre deux requêtes
        """
        self.indent = indent
        self.uppercase = uppercase
        self.lines_between_queries = lines_between_queries
        self._reset()

    def _reset(self):
        self.state = EmitterState.STATEMENT_START
        self._lines: List[_Line] = [_Line(0)]
        self._levels: List[_Level] = []
        self._frames: List[_Frame] = [_Frame(block=True)]
        self._pending_blank_lines: Optional[int] = None
        self._last: Optional[Token] = None
        self._last_significant: Optional[Token] = None
        self._last_unary = False

    @property
    def indent_level(self) -> int:
        return len(self._levels)

    @property
    def subquery_depth(self) -> int:
        return sum(1 for frame in self._frames[1:] if frame.block)

    # ============== Sortie ==============

    @property
    def _line(self) -> _Line:
        return self._lines[-1]

    def _write(self, text: str, space: bool = False):
        """Écrit du texte sur la ligne courante."""
        line = self._line
        if not line.text:
            line.level = len(self._levels)
            line.text = text
        elif space:
            line.text += ' ' + text
        else:
            line.text += text

    def _write_glued(self, text: str):
        """Écrit du texte collé au dernier lexème, même s'il est sur la ligne précédente."""
        if not self._line.text and len(self._lines) > 1:
            previous = self._lines[-2]
            if previous.text and not previous.closed_by_comment:
                previous.text += text
                return
        self._write(text)

    def _newline(self):
        if self._line.text:
            self._lines.append(_Line(len(self._levels)))

    def _blank_lines(self, count: int):
        self._newline()
        self._lines[-1:-1] = [_Line(0) for _ in range(count)]

    def _render(self) -> str:
        rendered = []
        for line in self._lines:
            if line.text:
                rendered.append(self.indent * line.level + line.text)
            else:
                rendered.append('')
        while rendered and not rendered[-1]:
            rendered.pop()
        return '\n'.join(rendered)

    # ============== Indentation ==============

    def _increase_top_level(self):
        self._levels.append(_Level.TOP_LEVEL)

    def _increase_block_level(self):
        self._levels.append(_Level.BLOCK_LEVEL)

    def _decrease_top_level(self):
        if self._levels and self._levels[-1] == _Level.TOP_LEVEL:
            self._levels.pop()

    def _increase_condition_level(self, frame: _Frame):
        if not frame.condition:
            self._levels.append(_Level.CONDITION_LEVEL)
            frame.condition = True

    def _decrease_condition_level(self, frame: _Frame):
        if frame.condition:
            if self._levels and self._levels[-1] == _Level.CONDITION_LEVEL:
                self._levels.pop()
            frame.condition = False

    def _decrease_block_level(self):
        while self._levels:
            if self._levels.pop() == _Level.BLOCK_LEVEL:
                break

    # ============== Espacement ==============

    def _case(self, keyword: str) -> str:
        return keyword.upper() if self.uppercase else keyword.lower()

    def _space_before(self, item: _Item) -> bool:
        """Indique si un espace sépare le token du lexème précédent."""
        prev = self._last
        token = item.token
        if prev is None:
            return False
        if token.type in (TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT):
            return True
        if token.type in (TokenType.COMMA, TokenType.SEMICOLON, TokenType.RPAREN):
            return False
        if prev.type == TokenType.COMMA:
            return True
        if token.type == TokenType.DOT:
            # 1 .5 ne doit pas devenir 1.5
            return prev.type == TokenType.NUMBER
        if prev.type in (TokenType.DOT, TokenType.LPAREN):
            return False
        if self._last_unary:
            # Jamais "--" : un signe suivi d'un opérateur garde son espace
            return token.type == TokenType.OPERATOR
        if token.type == TokenType.LPAREN:
            return item.space_before or prev.type not in CALLABLE_TYPES
        if token.type == TokenType.OPERATOR and token.value == '::':
            return prev.type in (TokenType.OPERATOR, TokenType.UNKNOWN)
        if prev.type == TokenType.OPERATOR and prev.value == '::':
            return token.type not in (TokenType.IDENTIFIER, TokenType.KEYWORD,
                                      TokenType.QUOTED_IDENTIFIER)
        if token.type == TokenType.UNKNOWN or prev.type == TokenType.UNKNOWN:
            return item.space_before
        if (token.type == TokenType.STRING
                and prev.type in (TokenType.IDENTIFIER, TokenType.KEYWORD)
                and not item.space_before):
            # Préfixe de chaîne : N'abc', E'\n', DATE'2024-01-01'
            return False
        return True

    def _is_unary_sign(self, token: Token) -> bool:
        if token.type != TokenType.OPERATOR or token.value not in ('+', '-'):
            return False
        prev = self._last_significant
        if prev is None:
            return True
        if prev.type in (TokenType.OPERATOR, TokenType.LPAREN, TokenType.COMMA,
                         TokenType.SEMICOLON):
            return True
        return prev.type == TokenType.KEYWORD and prev.value.upper() not in VALUE_KEYWORDS

    def _emit_token(self, item: _Item, text: str, space: Optional[bool] = None):
        """Écrit un token significatif et met à jour le contexte."""
        token = item.token
        if space is None:
            space = self._space_before(item)
        unary = self._is_unary_sign(token)
        self._write(text, space)
        self._last = token
        self._last_significant = token
        self._last_unary = unary

    # ============== Émission ==============

    def emit(self, tokens: Iterable[Token]) -> str:
        """
        Formate une séquence de tokens.

        Args:
            tokens: Tokens, espaces blancs compris

        Returns:
            SQL formaté, sans espace ni saut de ligne final
        """
        self._reset()
        items = self._prepare(tokens)

        index = 0
        while index < len(items):
            item = items[index]
            token_type = item.token.type

            if self._pending_blank_lines is not None:
                self._blank_lines(self._pending_blank_lines)
                self._pending_blank_lines = None

            if token_type == TokenType.KEYWORD:
                index = self._emit_keyword(items, index)
                continue

            if token_type == TokenType.LINE_COMMENT:
                self._emit_line_comment(item)
            elif token_type == TokenType.BLOCK_COMMENT:
                self._emit_block_comment(item)
            elif token_type == TokenType.LPAREN:
                self._emit_open_paren(items, index)
            elif token_type == TokenType.RPAREN:
                self._emit_close_paren(item)
            elif token_type == TokenType.COMMA:
                self._emit_comma(item)
            elif token_type == TokenType.SEMICOLON:
                self._emit_semicolon(item)
            else:
                self._emit_token(item, item.token.value)
                self.state = EmitterState.EXPRESSION
            index += 1

        return self._render()

    def _prepare(self, tokens: Iterable[Token]) -> List[_Item]:
        """Retire les espaces blancs en notant où ils se trouvaient."""
        items = []
        space_before = False
        newline_before = True
        for token in tokens:
            if token.type == TokenType.WHITESPACE:
                space_before = True
                if '\n' in token.value:
                    newline_before = True
                    if items:
                        items[-1].newline_after = True
                continue
            items.append(_Item(token, space_before, newline_before))
            space_before = token.type == TokenType.LINE_COMMENT
            newline_before = space_before
        return items

    def _match_keyword(self, items: List[_Item], index: int) -> Tuple[str, int]:
        """
        Reconnaît un mot-clé éventuellement composé (GROUP BY, LEFT OUTER JOIN...).

        Returns:
            Tuple (mot-clé normalisé, nombre de tokens consommés)
        """
        first = items[index].token.value.upper()
        for words in MULTI_WORD_INDEX.get(first, ()):
            candidate = items[index:index + len(words)]
            if len(candidate) == len(words) and all(
                    item.token.type == TokenType.KEYWORD and item.token.value.upper() == word
                    for item, word in zip(candidate, words)):
                return ' '.join(words), len(words)
        return first, 1

    def _emit_keyword(self, items: List[_Item], index: int) -> int:
        """Émet un mot-clé et applique son effet structurel. Retourne l'index suivant."""
        item = items[index]
        frame = self._frames[-1]
        prev = self._last_significant
        after_dot = prev is not None and prev.type == TokenType.DOT

        if after_dot:
            name, count = item.token.value.upper(), 1
        else:
            name, count = self._match_keyword(items, index)
        text = self._case(name)
        structural = frame.block and not after_dot

        if not after_dot:
            if name == 'CASE':
                frame.case_depth += 1
            elif name == 'END' and frame.case_depth:
                frame.case_depth -= 1
            elif name == 'BETWEEN':
                frame.between += 1

        clause = False
        if structural and name in SET_OPERATION_KEYWORDS:
            self._emit_clause(item, name, text, indent_body=False)
            clause = True
        elif (structural and name in CLAUSE_KEYWORDS
              and not (name in CONTEXTUAL_CLAUSE_KEYWORDS
                       and prev is not None and prev.type == TokenType.KEYWORD)):
            self._emit_clause(item, name, text)
            clause = True
        elif structural and name in JOIN_KEYWORDS:
            self._decrease_condition_level(frame)
            frame.joined = True
            self._newline()
            self._emit_token(item, text)
        elif structural and name in JOIN_CONDITION_KEYWORDS and frame.joined:
            self._newline()
            self._increase_condition_level(frame)
            self._emit_token(item, text)
        elif name in LOGICAL_KEYWORDS:
            if name == 'AND' and frame.between:
                frame.between -= 1
            elif structural and frame.clause is not None and not frame.case_depth:
                self._newline()
            self._emit_token(item, text)
        else:
            self._emit_token(item, text)

        if not clause:
            self.state = EmitterState.EXPRESSION
        return index + count

    def _emit_clause(self, item: _Item, name: str, text: str, indent_body: bool = True):
        """Mot-clé de clause : sur sa propre ligne, corps indenté en dessous."""
        frame = self._frames[-1]
        self._decrease_condition_level(frame)
        self._decrease_top_level()
        self._newline()
        self._emit_token(item, text, space=False)
        if indent_body:
            self._increase_top_level()
        self._newline()

        frame.clause = name
        frame.joined = False
        frame.between = 0
        self.state = EmitterState.CLAUSE

    def _next_significant(self, items: List[_Item], index: int) -> Optional[Token]:
        for item in items[index + 1:]:
            if item.token.type not in (TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT):
                return item.token
        return None

    def _emit_open_paren(self, items: List[_Item], index: int):
        item = items[index]
        following = self._next_significant(items, index)
        subquery = (following is not None
                    and following.type == TokenType.KEYWORD
                    and following.value.upper() in SUBQUERY_KEYWORDS)

        self._emit_token(item, '(')
        if subquery:
            self._increase_block_level()
            self._frames.append(_Frame(block=True))
            self._newline()
            self.state = EmitterState.SUBQUERY_OPEN
        else:
            self._frames.append(_Frame(block=False))
            self.state = EmitterState.EXPRESSION

    def _emit_close_paren(self, item: _Item):
        if len(self._frames) == 1:
            # Parenthèse fermante orpheline : indentation inchangée
            self._emit_token(item, ')')
            return

        frame = self._frames.pop()
        if frame.block:
            self._decrease_block_level()
            self._newline()
            self._emit_token(item, ')', space=False)
        else:
            self._write_glued(')')
            self._last = self._last_significant = item.token
            self._last_unary = False
        self.state = EmitterState.EXPRESSION

    def _emit_comma(self, item: _Item):
        self._write_glued(',')
        self._last = self._last_significant = item.token
        self._last_unary = False

        frame = self._frames[-1]
        if frame.block and frame.clause != 'LIMIT' and not frame.case_depth:
            self._decrease_condition_level(frame)
            self._newline()
            self.state = EmitterState.LIST_ITEM

    def _emit_semicolon(self, item: _Item):
        self._write_glued(';')
        self._last = self._last_significant = item.token
        self._last_unary = False

        if len(self._frames) > 1:
            # Point-virgule dans des parenthèses : pas une fin de requête
            return

        self._levels.clear()
        self._frames = [_Frame(block=True)]
        self._pending_blank_lines = self.lines_between_queries
        self.state = EmitterState.STATEMENT_START

    def _emit_line_comment(self, item: _Item):
        self._write(item.token.value.rstrip(), space=True)
        self._line.closed_by_comment = True
        self._last = item.token
        self._newline()

    def _emit_block_comment(self, item: _Item):
        value = item.token.value
        own_line = (item.newline_before or item.newline_after
                    or not self._line.text or '\n' in value)
        self._last = item.token

        if not own_line:
            self._write(value, space=True)
            return

        self._newline()
        first, *rest = value.split('\n')
        self._write(first.rstrip())
        # Lignes suivantes : alignement relatif à l'ouverture conservé
        margin = item.token.column - 1
        for text in rest:
            leading = len(text) - len(text.lstrip(' \t'))
            self._lines.append(_Line(len(self._levels), text[min(margin, leading):].rstrip()))
        self._newline()
