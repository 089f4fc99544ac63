"""
Tests de la substitution des paramètres de requête.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_formatter.params import (
    QueryParams, ParamsKind, ParameterSubstituter, substitute_params, sql_literal,
)
from sql_formatter.tokenizer import TokenType, tokenize


def substituted(sql, params):
    return [t for t in substitute_params(tokenize(sql, include_whitespace=False), params)]


def values(sql, params):
    return [t.value for t in substituted(sql, params)]


# ============================================================
# SECTION 1: QUERY PARAMS
# ============================================================

class TestQueryParams:
    """Tests des variantes de paramètres."""

    def test_none(self):
        params = QueryParams.none()
        assert params.kind == ParamsKind.NONE
        assert params.is_empty

    def test_positional_converts_to_strings(self):
        params = QueryParams.positional([1, "a"])
        assert params.kind == ParamsKind.POSITIONAL
        assert params.values == ("1", "a")

    def test_named(self):
        params = QueryParams.named({"id": 42})
        assert params.kind == ParamsKind.NAMED
        assert params.mapping == {"id": "42"}

    def test_coerce(self):
        assert QueryParams.coerce(None).kind == ParamsKind.NONE
        assert QueryParams.coerce(["a"]).kind == ParamsKind.POSITIONAL
        assert QueryParams.coerce(("a", "b")).values == ("a", "b")
        assert QueryParams.coerce({"a": "b"}).kind == ParamsKind.NAMED
        params = QueryParams.positional(["x"])
        assert QueryParams.coerce(params) is params

    def test_hashable(self):
        assert hash(QueryParams.none()) == hash(QueryParams.none())
        assert hash(QueryParams.named({"a": "b"})) == hash(QueryParams.named({"a": "b"}))
        cache = {QueryParams.positional(["1"]): "un"}
        assert cache[QueryParams.positional([1])] == "un"

    def test_equality_includes_mapping(self):
        assert QueryParams.named({"a": "b"}) != QueryParams.named({"a": "c"})

    def test_coerce_rejects_string(self):
        with pytest.raises(TypeError):
            QueryParams.coerce("42")


class TestSqlLiteral:
    """Tests du rendu des littéraux."""

    def test_plain(self):
        assert sql_literal("42") == "'42'"

    def test_embedded_quote_is_doubled(self):
        assert sql_literal("it's") == "'it''s'"

    def test_empty(self):
        assert sql_literal("") == "''"


# ============================================================
# SECTION 2: SUBSTITUTION POSITIONNELLE
# ============================================================

class TestPositional:
    """Tests des placeholders positionnels."""

    def test_question_marks_consume_in_order(self):
        assert values("? , ?", ["a", "b"]) == ["'a'", ",", "'b'"]

    def test_substituted_token_is_string(self):
        token = substituted("?", ["42"])[0]
        assert token.type == TokenType.STRING
        assert token.key is None
        assert token.position == 0

    def test_dollar_index_does_not_advance_cursor(self):
        assert values("$2 ? ?", ["a", "b"]) == ["'b'", "'a'", "'b'"]

    def test_dollar_index_repeated(self):
        assert values("$1 $1", ["x"]) == ["'x'", "'x'"]

    def test_exhausted_source_passes_through(self):
        tokens = substituted("? ? ?", ["a"])
        assert [t.value for t in tokens] == ["'a'", "?", "?"]
        assert [t.type for t in tokens][1:] == [TokenType.PLACEHOLDER] * 2

    def test_out_of_range_index_passes_through(self):
        assert values("$0 $5", ["a"]) == ["$0", "$5"]

    def test_named_placeholder_ignored_with_positional(self):
        assert values(":id", ["a"]) == [":id"]

    def test_value_with_quote(self):
        assert values("?", ["O'Brien"]) == ["'O''Brien'"]


# ============================================================
# SECTION 3: SUBSTITUTION NOMMÉE
# ============================================================

class TestNamed:
    """Tests des placeholders nommés."""

    def test_colon_name(self):
        assert values("id = :id", {"id": "7"}) == ["id", "=", "'7'"]

    def test_at_name_equivalent(self):
        assert values("@id", {"id": "7"}) == values(":id", {"id": "7"})

    def test_unknown_name_passes_through(self):
        assert values(":other", {"id": "7"}) == [":other"]

    def test_question_mark_ignored_with_named(self):
        assert values("?", {"id": "7"}) == ["?"]


class TestNoParams:
    """Sans paramètres, les tokens sont inchangés."""

    def test_none_passes_through(self):
        tokens = tokenize("select ? , :a , $1")
        assert list(substitute_params(tokens, None)) == tokens

    def test_other_tokens_unchanged(self):
        sql = "select a, 'b' from t where x = ? and y = :y"
        before = [t for t in tokenize(sql) if t.type != TokenType.PLACEHOLDER]
        after = list(substitute_params(tokenize(sql), QueryParams.positional(["1"])))
        untouched = [t for t in after if t.position in {b.position for b in before}]
        assert untouched == before

    def test_substituter_is_reusable(self):
        substituter = ParameterSubstituter(QueryParams.positional(["a"]))
        first = list(substituter.substitute(tokenize("?")))
        second = list(substituter.substitute(tokenize("?")))
        assert first[0].value == second[0].value == "'a'"
