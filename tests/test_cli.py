import os
from pathlib import Path

import click
import pytest
from dotenv import dotenv_values

from langsource import __version__, cli
from langsource.client import InvalidAPIKeyError
from langsource.translator import STATUS_FAILED, STATUS_WRITTEN, TranslationResult
from langsource.utils import API_KEY_ENV_VAR


@pytest.fixture
def online(monkeypatch):
    async def _connected():
        return True

    monkeypatch.setattr(cli, "check_connectivity", _connected)


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])

    assert exc_info.value.code == 0
    assert f"langsource {__version__}" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    out = capsys.readouterr().out
    assert "generate" in out
    assert "LANGSOURCE_API_KEY" in out


def test_unknown_command_is_rejected():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["translate"])
    assert exc_info.value.code == 2


@pytest.mark.parametrize("command", ["generate", "g"])
def test_generate_and_alias_run(monkeypatch, online, command):
    calls = []
    monkeypatch.setattr(cli, "run_generate", lambda: calls.append(command) or 0)

    assert cli.main([command]) == 0
    assert calls == [command]


def test_offline_is_fatal(monkeypatch, capsys):
    async def _offline():
        return False

    monkeypatch.setattr(cli, "check_connectivity", _offline)
    monkeypatch.setattr(cli, "run_generate", lambda: pytest.fail("should not run"))

    assert cli.main(["generate"]) == 1
    assert "requires internet connection" in capsys.readouterr().err


def test_invalid_api_key_is_fatal(monkeypatch, online, capsys):
    def _run():
        raise InvalidAPIKeyError("Invalid API Key.")

    monkeypatch.setattr(cli, "run_generate", _run)

    assert cli.main(["g"]) == 1
    assert "Error: Invalid API Key." in capsys.readouterr().err


def test_interrupt(monkeypatch, online):
    def _run():
        raise click.Abort()

    monkeypatch.setattr(cli, "run_generate", _run)
    assert cli.main(["g"]) == 130


def test_prompt_api_key_saves_new_key(monkeypatch, tmp_path, api_key_env):
    verified = []

    async def _verify(api_key):
        verified.append(api_key)

    monkeypatch.setattr(cli, "_verify_api_key", _verify)
    monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: " secret-key ")
    env_file = tmp_path / ".env"

    cli.prompt_api_key(env_file)

    assert verified == ["secret-key"]
    assert dotenv_values(env_file)[API_KEY_ENV_VAR] == "secret-key"
    assert os.environ[API_KEY_ENV_VAR] == "secret-key"


def test_prompt_api_key_keeps_existing(monkeypatch, tmp_path):
    monkeypatch.setenv(API_KEY_ENV_VAR, "existing")
    monkeypatch.setattr(click, "confirm", lambda *args, **kwargs: False)
    monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: pytest.fail("no prompt"))
    env_file = tmp_path / ".env"

    cli.prompt_api_key(env_file)

    assert not env_file.exists()
    assert os.environ[API_KEY_ENV_VAR] == "existing"


def test_prompt_api_key_invalid_is_not_saved(monkeypatch, tmp_path, api_key_env):
    async def _verify(api_key):
        raise InvalidAPIKeyError("Invalid API Key.")

    monkeypatch.setattr(cli, "_verify_api_key", _verify)
    monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: "bad-key")
    env_file = tmp_path / ".env"

    with pytest.raises(InvalidAPIKeyError):
        cli.prompt_api_key(env_file)

    assert not env_file.exists()
    assert API_KEY_ENV_VAR not in os.environ


def test_language_value():
    assert cli._language_value("ja,ko") == ["ja", "ko"]
    with pytest.raises(click.BadParameter, match="at least one language"):
        cli._language_value("  ")
    with pytest.raises(click.BadParameter, match="Unsupported language code"):
        cli._language_value("ja, klingon")


def test_base_file_value(tmp_path):
    base_file = tmp_path / "en.json"
    base_file.write_text("{}", encoding="utf-8")
    (tmp_path / "en.yaml").write_text("a: b", encoding="utf-8")

    assert cli._base_file_value(f" {base_file} ") == base_file
    with pytest.raises(click.BadParameter, match="valid path"):
        cli._base_file_value("")
    with pytest.raises(click.BadParameter, match="valid JSON file"):
        cli._base_file_value(str(tmp_path / "en.yaml"))
    with pytest.raises(click.BadParameter, match="does not exist"):
        cli._base_file_value(str(tmp_path / "fr.json"))


def test_run_generate_reports_results(monkeypatch, tmp_path, capsys):
    base_file = tmp_path / "en.json"
    captured = {}

    async def _generate(path, languages):
        captured["args"] = (path, languages)
        return [
            TranslationResult("de", "German", STATUS_WRITTEN, output_file=tmp_path / "de.json"),
            TranslationResult("fr", "French", STATUS_FAILED, error=ValueError("boom")),
        ]

    monkeypatch.setattr(cli, "prompt_api_key", lambda: None)
    monkeypatch.setattr(cli, "prompt_languages", lambda: ["de", "fr"])
    monkeypatch.setattr(cli, "prompt_base_file", lambda: base_file)
    monkeypatch.setattr(cli, "generate_translations", _generate)

    assert cli.run_generate() == 0

    assert captured["args"] == (base_file, ["de", "fr"])
    out = capsys.readouterr().out
    assert f"German (de): Written to {Path(tmp_path / 'de.json')}" in out
    assert "French (fr): FAILED - boom" in out
