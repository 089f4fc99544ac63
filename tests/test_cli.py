"""
Tests de la ligne de commande.
"""

import io
import json

import pytest
import sys
sys.path.insert(0, '..')

from sql_formatter.__main__ import main, build_parser


def run(capsys, *argv):
    main(list(argv))
    return capsys.readouterr()


class TestFormatting:
    """Tests du formatage depuis la ligne de commande."""

    def test_sql_argument(self, capsys):
        out = run(capsys, "select a,b from t").out
        assert out == "SELECT\n    a,\n    b\nFROM\n    t\n"

    def test_options(self, capsys):
        out = run(capsys, "--tabs", "--lowercase", "SELECT A FROM T").out
        assert out == "select\n\tA\nfrom\n\tT\n"

    def test_indent(self, capsys):
        assert run(capsys, "--indent", "2", "select 1").out == "SELECT\n  1\n"

    def test_lines_between_queries(self, capsys):
        out = run(capsys, "--lines-between-queries", "0", "select 1;select 2").out
        assert out == "SELECT\n    1;\nSELECT\n    2\n"

    def test_positional_params(self, capsys):
        out = run(capsys, "-p", "42", "-p", "x", "select ?, ?").out
        assert out == "SELECT\n    '42',\n    'x'\n"

    def test_named_params(self, capsys):
        out = run(capsys, "-n", "id=42", "select * from t where id = :id").out
        assert out.endswith("WHERE\n    id = '42'\n")

    def test_named_param_prefix_stripped(self, capsys):
        out = run(capsys, "-n", ":id=1", "select @id").out
        assert out == "SELECT\n    '1'\n"

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("select 1"))
        assert run(capsys).out == "SELECT\n    1\n"

    def test_file_input_and_output(self, capsys, tmp_path):
        source = tmp_path / "query.sql"
        source.write_text("select a from t", encoding="utf-8")
        target = tmp_path / "out.sql"

        out = run(capsys, "-f", str(source), "-o", str(target)).out
        assert "sauvegardé" in out
        assert target.read_text(encoding="utf-8") == "SELECT\n    a\nFROM\n    t\n"


class TestTokens:
    """Tests du mode tokens."""

    def test_tokens_json(self, capsys):
        data = json.loads(run(capsys, "--tokens", "select a").out)
        assert data["tokens"] == [
            {"type": "KEYWORD", "value": "select", "line": 1, "column": 1},
            {"type": "IDENTIFIER", "value": "a", "line": 1, "column": 8},
        ]


class TestErrors:
    """Tests des erreurs."""

    def test_missing_file(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["-f", str(tmp_path / "missing.sql")])
        assert exc_info.value.code == 1
        assert "n'existe pas" in capsys.readouterr().err

    def test_negative_indent(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--indent", "-1", "select 1"])
        assert exc_info.value.code == 1
        assert "Erreur" in capsys.readouterr().err

    def test_invalid_named_param(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-n", "novalue", "select 1"])
        assert exc_info.value.code == 1

    def test_params_mutually_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-p", "1", "-n", "a=1", "select 1"])
        assert exc_info.value.code == 2
