import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from alman import __version__
from alman.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def home_bashrc(home, bashrc_text):
    path = home / ".bashrc"
    path.write_text(bashrc_text)
    return path


@pytest.fixture
def home_gitconfig(home, gitconfig_text):
    path = home / ".gitconfig"
    path.write_text(gitconfig_text)
    return path


def test_cli_version(runner, home):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_show__all(runner, home_bashrc):
    result = runner.invoke(main, ["show"])

    assert result.exit_code == 0
    assert "alias g='git'" in result.output
    assert "alias ll='ls -la'" in result.output
    assert 'echo "hello $1"' in result.output
    assert 'mkcd() { mkdir -p "$1" && cd "$1"; }' in result.output


def test_cli_show__by_name(runner, home_bashrc):
    result = runner.invoke(main, ["sh", "g"])

    assert result.exit_code == 0
    assert "alias g='git'" in result.output
    assert "alias gp='git push'" in result.output
    assert "alias ll='ls -la'" not in result.output
    assert "greet() {" in result.output
    assert "mkcd" not in result.output


def test_cli_show__content(runner, home_bashrc):
    result = runner.invoke(main, ["--content", "show", "push"])

    assert result.exit_code == 0
    assert result.output.strip() == "alias gp='git push'"


def test_cli_show__not_found(runner, home_bashrc):
    result = runner.invoke(main, ["show", "zzz"])

    assert result.exit_code == 1
    assert "✗ No alias or function matching 'zzz'" in result.output


def test_cli_show__function_only(runner, home_bashrc):
    result = runner.invoke(main, ["show", "mkcd"])

    assert result.exit_code == 0
    assert "alias" not in result.output
    assert "mkcd()" in result.output


def test_cli_show__invalid_pattern(runner, home_bashrc):
    result = runner.invoke(main, ["show", "("])

    assert result.exit_code == 1
    assert "Invalid search pattern" in result.output


def test_cli_show__missing_file(runner, home):
    result = runner.invoke(main, ["show"])

    assert result.exit_code == 1
    assert "✗ Cannot read" in result.output


def test_cli_add(runner, home_bashrc, bashrc_text):
    result = runner.invoke(main, ["add", "gs", "git status"])

    assert result.exit_code == 0
    assert "✔ New alias added: alias gs='git status'" in result.output
    assert home_bashrc.read_text() == bashrc_text + "alias gs='git status'\n"


def test_cli_add__already_exists(runner, home_bashrc, bashrc_text):
    result = runner.invoke(main, ["add", "g", "git status"])

    assert result.exit_code == 1
    assert "✗ Alias 'g' already exists" in result.output
    assert home_bashrc.read_text() == bashrc_text


def test_cli_add__single_quote(runner, home_bashrc, bashrc_text):
    result = runner.invoke(main, ["add", "hi", "echo 'hi'"])

    assert result.exit_code == 1
    assert "Command cannot contain single quotes" in result.output
    assert home_bashrc.read_text() == bashrc_text


def test_cli_add__missing_arguments(runner, home_bashrc):
    result = runner.invoke(main, ["add", "gs"])

    assert result.exit_code == 2


@pytest.mark.parametrize("operation", ["remove", "del"])
def test_cli_remove(runner, home_bashrc, operation):
    result = runner.invoke(main, [operation, "gp"])

    assert result.exit_code == 0
    assert "✔ Removed alias: alias gp='git push'" in result.output
    assert "alias gp=" not in home_bashrc.read_text()


def test_cli_remove__not_found_suggests(runner, home_bashrc):
    result = runner.invoke(main, ["remove", "lll"])

    assert result.exit_code == 1
    assert "✗ Alias 'lll' not found" in result.output
    assert "Did you mean: ll?" in result.output


@pytest.mark.parametrize("operation", ["edit", "mod"])
def test_cli_edit(runner, home_bashrc, bashrc_text, operation):
    result = runner.invoke(main, [operation, "g", "git status"])

    assert result.exit_code == 0
    assert "✔ Edited alias: alias g='git'" in result.output
    assert home_bashrc.read_text() == bashrc_text.replace("alias g='git'", "alias g='git status'")


def test_cli_edit__not_found(runner, home_bashrc):
    result = runner.invoke(main, ["edit", "nothing", "ls"])

    assert result.exit_code == 1
    assert "✗ Alias 'nothing' not found" in result.output


def test_cli_git_show(runner, home_bashrc, home_gitconfig):
    result = runner.invoke(main, ["--git", "show"])

    assert result.exit_code == 0
    assert "co = checkout" in result.output
    assert "alias g='git'" not in result.output
    assert "greet" not in result.output


def test_cli_git_add(runner, home_gitconfig):
    result = runner.invoke(main, ["-g", "add", "br", "branch"])

    assert result.exit_code == 0
    assert "\tbr = branch\n[core]" in home_gitconfig.read_text()


def test_cli_file_option(runner, home, tmp_path):
    other = tmp_path / "aliases.sh"
    other.write_text("alias k='kubectl'\n")

    result = runner.invoke(main, ["--file", str(other), "show", "k"])

    assert result.exit_code == 0
    assert "alias k='kubectl'" in result.output


def test_cli_configured_bashrc(runner, home):
    (home / ".alman").mkdir()
    (home / ".alman" / "config.json").write_text(json.dumps({"bashrc": ".bash_aliases"}))
    (home / ".bash_aliases").write_text("alias k='kubectl'\n")

    result = runner.invoke(main, ["show"])

    assert result.exit_code == 0
    assert "alias k='kubectl'" in result.output


def test_cli_auto_backup(runner, home_bashrc, home, bashrc_text):
    (home / ".alman").mkdir()
    (home / ".alman" / "config.json").write_text(json.dumps({"auto_backup": True}))

    result = runner.invoke(main, ["remove", "g"])

    assert result.exit_code == 0
    backups = list((home / ".alman" / "backups").iterdir())
    assert len(backups) == 1
    assert backups[0].read_text() == bashrc_text


def test_cli_home_unresolvable(runner):
    with patch("alman.locator.Path.home", side_effect=RuntimeError("no home")):
        result = runner.invoke(main, ["show"])

    assert result.exit_code == 1
    assert "✗ Unable to get your home dir!" in result.output


def test_cli_config__list(runner, home):
    result = runner.invoke(main, ["config"])

    assert result.exit_code == 0
    assert "auto_backup" in result.output
    assert "gitconfig" in result.output


def test_cli_config__set_and_get(runner, home):
    result = runner.invoke(main, ["config", "auto_backup", "true"])

    assert result.exit_code == 0
    saved = json.loads((home / ".alman" / "config.json").read_text())
    assert saved["auto_backup"] is True

    result = runner.invoke(main, ["config", "auto_backup"])
    assert result.output.strip() == "true"


def test_cli_config__string_value(runner, home):
    result = runner.invoke(main, ["config", "theme", "ocean"])

    assert result.exit_code == 0
    saved = json.loads((home / ".alman" / "config.json").read_text())
    assert saved["theme"] == "ocean"


def test_cli_config__unknown_key(runner, home):
    result = runner.invoke(main, ["config", "colour", "red"])

    assert result.exit_code == 1
    assert "Unknown setting 'colour'" in result.output


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("bashrc", "5", "Setting 'bashrc' expects a string, got 5"),
        ("max_backups", "abc", "Setting 'max_backups' expects a whole number"),
        ("max_backups", "true", "Setting 'max_backups' expects a whole number"),
        ("max_backups", "0", "Setting 'max_backups' must be at least 1"),
        ("auto_backup", "yes", "Setting 'auto_backup' expects true or false"),
        ("theme", "neon", "Unknown theme 'neon'"),
    ],
)
def test_cli_config__rejects_bad_value(runner, home, key, value, message):
    result = runner.invoke(main, ["config", key, value])

    assert result.exit_code == 1
    assert message in result.output
    assert not (home / ".alman" / "config.json").exists()


def test_cli_config__number_value(runner, home):
    result = runner.invoke(main, ["config", "max_backups", "3"])

    assert result.exit_code == 0
    saved = json.loads((home / ".alman" / "config.json").read_text())
    assert saved["max_backups"] == 3


def test_cli_broken_config_file_still_runs(runner, home_bashrc, home):
    (home / ".alman").mkdir()
    (home / ".alman" / "config.json").write_text(
        json.dumps({"bashrc": 5, "max_backups": "abc", "auto_backup": True})
    )

    result = runner.invoke(main, ["show", "g"])
    assert result.exit_code == 0
    assert "alias g='git'" in result.output

    result = runner.invoke(main, ["config", "bashrc"])
    assert result.exit_code == 0
    assert '".bashrc"' in result.output

    result = runner.invoke(main, ["remove", "g"])
    assert result.exit_code == 0
    assert len(list((home / ".alman" / "backups").iterdir())) == 1


def test_cli_git_edit(runner, home_gitconfig):
    result = runner.invoke(main, ["--git", "edit", "co", "checkout -b"])

    assert result.exit_code == 0
    assert "✔ Edited alias: co = checkout" in result.output
    assert "Now: co = checkout -b" in result.output
    assert "'checkout -b'" not in result.output
    assert "\tco = checkout -b\n" in home_gitconfig.read_text()


def test_cli_edit__shows_new_line(runner, home_bashrc):
    result = runner.invoke(main, ["edit", "g", "git status"])

    assert "Now: alias g='git status'" in result.output


def test_cli_completion(runner, home):
    result = runner.invoke(main, ["completion", "zsh"])

    assert result.exit_code == 0
    assert "_ALMAN_COMPLETE" in result.output


def test_cli_completion__unknown_shell(runner, home, monkeypatch):
    monkeypatch.setenv("SHELL", "/bin/tcsh")

    result = runner.invoke(main, ["completion"])

    assert result.exit_code == 1
    assert "Unable to determine shell" in result.output
