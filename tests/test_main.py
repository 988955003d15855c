"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest

from entrypoint_config.__main__ import main


def test_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["-e", "Name:foo Address::8000 Compress:on"])

    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["foo"]["address"] == ":8000"
    assert data["foo"]["compress"] is True
    assert data["foo"]["forwarded_headers"]["insecure"] is True
    assert data["foo"]["tls"] is None


def test_command_line_overrides_file(expressions_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main([str(expressions_file), "-e", "Name:http Address::8080"])

    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert set(data) == {"http", "https"}
    assert data["http"]["address"] == ":8080"
    assert data["http"]["redirect"] is None


def test_missing_name_fails(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["-e", "Address::8000"])

    assert code == 1
    assert "Configuration error" in capsys.readouterr().err


def test_missing_file_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main([str(tmp_path / "missing.conf")])

    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_no_expressions(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "No entry point expressions" in capsys.readouterr().err


def test_validate(expressions_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main([str(expressions_file), "-e", "Name:admin Bogus:1", "--validate"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Unknown key 'bogus'" in out
    assert "Entry point 'admin' has no address" in out
    assert "https: :443 [tls]" in out
    assert "Configuration is valid!" in out


def test_list_keys(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-keys"]) == 0

    keys = capsys.readouterr().out.split()
    assert "tls_acme" in keys
    assert "auth_forward_tls_insecureskipverify" in keys


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert "0.1.0" in capsys.readouterr().out
