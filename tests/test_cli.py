"""Tests for curlcopy.cli — argument handling, output modes and exit codes."""

import io
import json

import pytest

from curlcopy.cli import main

CAPTURE = (
    "curl 'https://x.test/search?q=1' \\\n"
    "  -H 'Accept: */*' \\\n"
    "  -H 'cookie: NID=219=abc; DV=xyz' \\\n"
    "  --compressed\n"
)


@pytest.fixture
def curl_file(tmp_path):
    path = tmp_path / "request.txt"
    path.write_text(CAPTURE, encoding="utf-8")
    return path


class TestCLIHelp:
    def test_help_exits_zero(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0


class TestCLIOutput:
    def test_json_output(self, curl_file, capsys):
        assert main([str(curl_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data == {
            "url": "https://x.test/search?q=1",
            "cookies": {"NID": "219=abc", "DV": "xyz"},
            "headers": {"Accept": "*/*"},
            "body": "",
            "flags": {"compressed": ""},
        }

    def test_table_output(self, curl_file, capsys):
        assert main([str(curl_file)]) == 0
        out = capsys.readouterr().out
        assert "https://x.test/search?q=1" in out
        assert "GET" in out
        assert "Headers" in out
        assert "Cookies" in out
        assert "NID" in out

    def test_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("curl 'https://x.test/' -X 'DELETE'"))
        assert main(["--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["flags"] == {"X": "DELETE"}


class TestCLIErrors:
    def test_parse_error_exits_one(self, tmp_path, capsys):
        path = tmp_path / "bad.txt"
        path.write_text("curl 'https://x.test/' -H 'Cookie: a'", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "Could not parse" in capsys.readouterr().err

    def test_missing_file_exits_two(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.txt")]) == 2
        assert "Cannot read" in capsys.readouterr().err

    def test_trailing_input_tolerated_by_default(self, tmp_path, capsys):
        path = tmp_path / "trailing.txt"
        path.write_text("curl 'https://x.test/' -X 'GET'junk", encoding="utf-8")
        assert main([str(path), "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["flags"] == {"X": "GET"}

    def test_trailing_input_rejected_when_strict(self, tmp_path):
        path = tmp_path / "trailing.txt"
        path.write_text("curl 'https://x.test/' -X 'GET'junk", encoding="utf-8")
        assert main([str(path), "--strict"]) == 1
