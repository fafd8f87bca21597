from pathlib import Path

import pytest

from alman.store import AliasStore

BASHRC = """\
# ~/.bashrc
export PATH="$HOME/bin:$PATH"
alias g='git'
alias gp='git push'
alias ll='ls -la'

greet() {
    echo "hello $1"
}

mkcd() { mkdir -p "$1" && cd "$1"; }
"""

GITCONFIG = """\
[user]
\tname = Jane Doe
\temail = jane@example.com
[alias]
\tco = checkout
\tst = status -sb

\tlg = log --oneline --graph
[core]
\teditor = vim
"""


@pytest.fixture
def bashrc(tmp_path) -> Path:
    path = tmp_path / ".bashrc"
    path.write_text(BASHRC)
    return path


@pytest.fixture
def gitconfig(tmp_path) -> Path:
    path = tmp_path / ".gitconfig"
    path.write_text(GITCONFIG)
    return path


@pytest.fixture
def empty_file(tmp_path) -> Path:
    path = tmp_path / ".bashrc"
    path.write_text("")
    return path


@pytest.fixture
def store(bashrc) -> AliasStore:
    return AliasStore(bashrc)


@pytest.fixture
def git_store(gitconfig) -> AliasStore:
    return AliasStore(gitconfig, git=True)


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """Point the home directory at a temporary one"""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def bashrc_text() -> str:
    return BASHRC


@pytest.fixture
def gitconfig_text() -> str:
    return GITCONFIG
