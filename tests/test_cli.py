"""Tests for the dlq command line tool."""

import io
import json

import pytest

from adapter import Session
from dlq.cli import build_parser, main
from dlq.commands.shell import handle_line


@pytest.fixture
def program_file(tmp_path, lion_king_program):
    path = tmp_path / "lion_king.dl"
    path.write_text(lion_king_program, encoding="utf-8")
    return path


@pytest.fixture
def bad_program_file(tmp_path):
    path = tmp_path / "bad.dl"
    path.write_text('parent("a", "b").\nfather(P, C) :- parent(P, C).\n', encoding="utf-8")
    return path


class TestParser:
    def test_command_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "dlq 0.1.0" in capsys.readouterr().out

    def test_log_level_choices(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "loud", "query", "x.dl"])
        assert exc_info.value.code == 2

    def test_log_level_case_insensitive(self):
        assert build_parser().parse_args(["--log-level", "debug", "query", "x.dl"]).log_level == "DEBUG"

    def test_invalid_log_level_from_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("DLQ_LOG_LEVEL", "loud")
        with pytest.raises(SystemExit) as exc_info:
            main(["query", "x.dl"])
        assert exc_info.value.code == 2
        assert "invalid DLQ_LOG_LEVEL 'LOUD'" in capsys.readouterr().err

    def test_engine_choices(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["query", "x.dl", "--engine", "quantum"])


class TestQueryCommand:
    def test_prints_envelope(self, program_file, capsys):
        main(["query", str(program_file)])
        out = capsys.readouterr().out
        assert out == '{"status":"success","data":["father(\\"Mufasa\\", \\"Simba\\")."]}\n'

    def test_seminaive_engine(self, program_file, capsys):
        main(["query", str(program_file), "--engine", "seminaive"])
        assert json.loads(capsys.readouterr().out)["data"] == ['father("Mufasa", "Simba").']

    def test_error_exits_nonzero(self, bad_program_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["query", str(bad_program_file)])
        assert exc_info.value.code == 1
        assert json.loads(capsys.readouterr().out) == {
            "status": "error",
            "message": "The last statement must be a query atom, not a rule.",
        }

    def test_reads_stdin(self, monkeypatch, capsys, vulnerable_program):
        monkeypatch.setattr("sys.stdin", io.StringIO(vulnerable_program))
        main(["query", "-"])
        assert json.loads(capsys.readouterr().out)["data"] == ['is_vulnerable("order-service").']

    def test_source_name_option(self, tmp_path, capsys):
        path = tmp_path / "broken.dl"
        path.write_text("@", encoding="utf-8")
        with pytest.raises(SystemExit):
            main(["query", str(path), "--source-name", "broken.dl"])
        message = json.loads(capsys.readouterr().out)["message"]
        assert message.startswith("Parser error: broken.dl:1:1:")

    def test_table_output(self, program_file, capsys):
        main(["query", str(program_file), "--table"])
        out = capsys.readouterr().out
        assert 'father("Mufasa", "Simba").' in out
        assert "1 results" in out

    def test_table_no_results(self, tmp_path, capsys):
        path = tmp_path / "empty.dl"
        path.write_text("a(1). a(2).", encoding="utf-8")
        main(["query", str(path), "--table"])
        assert "No results." in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["query", str(tmp_path / "missing.dl")])
        assert exc_info.value.code == 1
        assert "Cannot read program" in capsys.readouterr().out


class TestCheckCommand:
    def test_reports_schema_and_strata(self, program_file, capsys):
        main(["check", str(program_file)])
        out = capsys.readouterr().out
        assert "Clauses: 6" in out
        assert "father/2" in out
        assert "intensional" in out
        assert "extensional" in out
        assert "Stratum 0" in out
        assert 'Query: father(Father, "Simba")' in out

    def test_show_derived(self, program_file, capsys):
        main(["check", str(program_file), "--show-derived"])
        out = capsys.readouterr().out
        assert "Derived facts:" in out
        assert 'father("Mufasa", "Simba").' in out

    def test_unknown_engine(self, program_file, monkeypatch, capsys):
        monkeypatch.setenv("DLQ_ENGINE", "bogus")
        with pytest.raises(SystemExit) as exc_info:
            main(["check", str(program_file), "--show-derived"])
        assert exc_info.value.code == 1
        assert "Evaluation failed: unknown engine 'bogus'" in capsys.readouterr().out

    def test_failure(self, bad_program_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["check", str(bad_program_file)])
        assert exc_info.value.code == 1
        assert "Check failed:" in capsys.readouterr().out


class TestShell:
    def test_session_from_stdin(self, monkeypatch, capsys):
        lines = "\n".join([
            'parent("Mufasa", "Simba").',
            'is_male("Mufasa").',
            "father(P, C) :- parent(P, C), is_male(P).",
            "?- father(F, C)",
            ":quit",
            "",
        ])
        monkeypatch.setattr("sys.stdin", io.StringIO(lines))
        main(["shell"])
        out = capsys.readouterr().out
        assert '"Mufasa"' in out
        assert "1 answers" in out

    def test_load_option(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "facts.dl"
        path.write_text('bar("baz").\n', encoding="utf-8")
        monkeypatch.setattr("sys.stdin", io.StringIO('?- bar("baz")\n'))
        main(["shell", "--load", str(path)])
        out = capsys.readouterr().out
        assert "Loaded 1 clauses" in out
        assert "true" in out

    def test_unknown_engine_reported(self, monkeypatch, capsys):
        monkeypatch.setenv("DLQ_ENGINE", "bogus")
        session = Session()
        assert handle_line(session, "a(1).")
        assert handle_line(session, "?- a(X)")
        assert "Error: unknown engine 'bogus'" in capsys.readouterr().out

    def test_handle_line(self, capsys):
        session = Session()
        assert handle_line(session, "a(1).")
        assert handle_line(session, "?- a(2)")
        assert "false" in capsys.readouterr().out
        assert handle_line(session, ":clauses")
        assert "a(1)." in capsys.readouterr().out
        assert handle_line(session, "a(")
        assert "Error:" in capsys.readouterr().out
        assert handle_line(session, ":reset")
        assert session.clauses == []
        assert not handle_line(session, ":q")
