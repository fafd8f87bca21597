"""Line-oriented access to aliases and functions in a shell or git config file"""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from rapidfuzz import fuzz, process
from rich.text import Text

from alman.errors import (
    AlreadyExistsError,
    ConfigIOError,
    InvalidInputError,
    NotFoundError,
)
from alman.models import (
    ALIAS_PREFIX,
    BASH_ALIAS_PATTERN,
    GIT_ALIAS_PATTERN,
    Alias,
    ShellFunction,
)
from alman.render import Render

logger = logging.getLogger(__name__)

# Any line that looks like an alias definition
ALIAS_LINE_PATTERN = re.compile(r"^\s*alias.*=.*")
FUNCTION_START_PATTERN = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*\(\s*\)\s*\{")
GIT_ALIAS_SECTION = re.compile(r"^\s*\[alias\]\s*(?:[#;].*)?$", re.IGNORECASE)

SUGGESTION_CUTOFF = 60
SUGGESTION_LIMIT = 3


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def _eol(line: str) -> str:
    return line[len(_strip_eol(line)):]


def _is_section_header(line: str) -> bool:
    return line.lstrip().startswith("[")


class AliasStore:
    """Read, search and rewrite alias lines of a single config file

    The file is re-read on every operation; nothing is cached between
    calls. In git mode the store works on the ``[alias]`` section of a git
    config file instead of ``alias name='command'`` lines.
    """

    def __init__(
        self,
        path: Path,
        git: bool = False,
        render: Optional[Render] = None,
        backup_dir: Optional[Path] = None,
        max_backups: int = 10,
    ):
        self.path = Path(path)
        self.git = git
        self.render = render or Render()
        self.backup_dir = backup_dir
        self.max_backups = max_backups

    # file access

    def read(self) -> str:
        """Return the whole file contents"""
        try:
            with open(self.path, "r") as f:
                return f.read()
        except OSError as e:
            raise ConfigIOError(f"Cannot read {self.path}: {e.strerror or e}") from e

    def write(self, contents: str) -> None:
        """Truncate the file and write contents in one pass"""
        if self.backup_dir is not None:
            self.create_backup()
        try:
            with open(self.path, "w") as f:
                f.write(contents)
        except OSError as e:
            raise ConfigIOError(f"Cannot write {self.path}: {e.strerror or e}") from e

    def create_backup(self) -> Optional[Path]:
        """Copy the config file to a timestamped backup"""
        if self.backup_dir is None or not self.path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.backup_dir / f"{self.path.name}_{timestamp}"

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.path, backup_path)
            self.cleanup_old_backups(keep=self.max_backups)
        except OSError as e:
            logger.warning("Backup of %s failed: %s", self.path, e)
            return None
        logger.debug("Backed up %s to %s", self.path, backup_path)
        return backup_path

    def cleanup_old_backups(self, keep: int = 10) -> None:
        """Remove old backups of this file, keeping only the most recent ones

        Only ``<filename>_YYYYmmdd_HHMMSS`` entries count, so backups of a
        file sharing the name prefix (``.bashrc_local``) are left alone. The
        newest backup is always kept.
        """
        own_backup = re.compile(rf"^{re.escape(self.path.name)}_\d{{8}}_\d{{6}}$")
        backups = sorted(p for p in self.backup_dir.iterdir() if own_backup.match(p.name))
        for backup in backups[:-max(keep, 1)]:
            backup.unlink()

    # aliases

    def _git_alias_indices(self, lines: List[str]) -> List[int]:
        """Indices of non-blank lines inside [alias] sections"""
        indices = []
        in_section = False
        for i, line in enumerate(lines):
            if _is_section_header(line):
                in_section = bool(GIT_ALIAS_SECTION.match(line))
                continue
            if in_section and line.strip():
                indices.append(i)
        return indices

    def _alias_indices(self, lines: List[str]) -> List[int]:
        if self.git:
            return self._git_alias_indices(lines)
        return [i for i, line in enumerate(lines) if ALIAS_LINE_PATTERN.match(line)]

    def list_aliases(self) -> List[str]:
        """Return every alias line, in file order"""
        lines = self.read().splitlines()
        return [lines[i] for i in self._alias_indices(lines)]

    def aliases(self) -> List[Alias]:
        """Parsed aliases; lines that cannot be parsed are skipped"""
        parsed = (Alias.from_line(line, git=self.git) for line in self.list_aliases())
        return [alias for alias in parsed if alias is not None]

    def _name_span(self, line: str) -> Tuple[int, int]:
        """Offsets of the alias name inside its line"""
        pattern = GIT_ALIAS_PATTERN if self.git else BASH_ALIAS_PATTERN
        match = pattern.match(line)
        if match:
            return match.span(1)
        # fall back to everything before the first '='
        return 0, line.find("=") if "=" in line else len(line)

    @staticmethod
    def _compile(query: str) -> re.Pattern:
        try:
            return re.compile(query)
        except re.error as e:
            raise InvalidInputError(f"Invalid search pattern '{query}': {e}") from e

    def find(self, query: Optional[str] = None, match_content: bool = False) -> List[Text]:
        """Search aliases by name, or by the whole line with match_content

        Without a query every alias is returned unhighlighted.
        """
        lines = self.list_aliases()
        if query is None:
            logger.debug("Show all aliases")
            return [self.render.plain(line) for line in lines]

        logger.debug("Show alias: %s (content=%s)", query, match_content)
        pattern = self._compile(query)
        results = []
        for line in lines:
            start, end = (0, len(line)) if match_content else self._name_span(line)
            if pattern.search(line[start:end]):
                results.append(self.render.highlight(line, pattern, start, end))

        if not results:
            raise NotFoundError(f"No alias matching '{query}'")
        return results

    def _name_pattern(self, name: str) -> re.Pattern:
        if self.git:
            return re.compile(rf"^\s*{re.escape(name)}\s*=")
        return re.compile(rf"^\s*{ALIAS_PREFIX}\s*{re.escape(name)}=.*")

    def _check_command(self, command: str) -> None:
        if not self.git and "'" in command:
            raise InvalidInputError("Command cannot contain single quotes")

    def _matching_indices(self, lines: List[str], name: str) -> List[int]:
        pattern = self._name_pattern(name)
        return [i for i in self._alias_indices(lines) if pattern.match(lines[i])]

    def add(self, name: str, command: str) -> str:
        """Append a new alias, return the written line"""
        logger.debug("Add alias: %s, command=%s", name, command)
        self._check_command(command)

        contents = self.read()
        lines = contents.splitlines(keepends=True)
        if self._matching_indices(lines, name):
            raise AlreadyExistsError(f"Alias '{name}' already exists")

        new_line = Alias(name=name, command=command, git=self.git).to_line()
        if self.git:
            self.write(self._insert_git_alias(lines, new_line))
        else:
            separator = "\n" if contents and not contents.endswith("\n") else ""
            if self.backup_dir is not None:
                self.create_backup()
            try:
                with open(self.path, "a") as f:
                    f.write(f"{separator}{new_line}\n")
            except OSError as e:
                raise ConfigIOError(f"Cannot write {self.path}: {e.strerror or e}") from e
        logger.info("New alias added: %s", new_line.strip())
        return new_line

    def _insert_git_alias(self, lines: List[str], new_line: str) -> str:
        """Place new_line at the end of the first [alias] section"""
        header = next((i for i, line in enumerate(lines) if GIT_ALIAS_SECTION.match(line)), None)
        if header is None:
            contents = "".join(lines)
            if contents and not contents.endswith("\n"):
                contents += "\n"
            return f"{contents}[alias]\n{new_line}\n"

        insert_at = header + 1
        for i in range(header + 1, len(lines)):
            if _is_section_header(lines[i]):
                break
            if lines[i].strip():
                insert_at = i + 1

        if insert_at == len(lines) and not _eol(lines[-1]):
            lines[-1] += "\n"
        lines.insert(insert_at, f"{new_line}\n")
        return "".join(lines)

    def remove(self, name: str) -> List[str]:
        """Delete every line defining name, return the removed lines"""
        logger.debug("Remove alias: %s", name)
        return self._modify(name, None)

    def edit(self, name: str, command: str) -> List[str]:
        """Replace every line defining name, return the previous lines"""
        logger.debug("Edit alias: %s with new command: %s", name, command)
        self._check_command(command)
        return self._modify(name, command)

    def _modify(self, name: str, command: Optional[str]) -> List[str]:
        """Remove the alias when command is None, otherwise rewrite it"""
        lines = self.read().splitlines(keepends=True)
        matched = self._matching_indices(lines, name)
        if not matched:
            raise NotFoundError(f"Alias '{name}' not found", suggestions=self.suggest(name))
        if len(matched) > 1:
            logger.warning("Found more than one alias with name '%s'", name)

        previous = [_strip_eol(lines[i]) for i in matched]
        matched = set(matched)
        new_lines = []
        for i, line in enumerate(lines):
            if i not in matched:
                new_lines.append(line)
            elif command is not None:
                new_line = Alias(name=name, command=command, git=self.git).to_line()
                new_lines.append(new_line + _eol(line))
        self.write("".join(new_lines))
        return previous

    def suggest(self, name: str) -> List[str]:
        """Existing alias names close to name"""
        names = list(dict.fromkeys(alias.name for alias in self.aliases()))
        matches = process.extract(
            name,
            names,
            scorer=fuzz.ratio,
            limit=SUGGESTION_LIMIT,
            score_cutoff=SUGGESTION_CUTOFF,
        )
        return [choice for choice, _score, _index in matches]

    # functions

    def list_functions(self) -> List[ShellFunction]:
        """Collect function blocks, each ending at the first line with '}'"""
        functions = []
        name = None
        body: List[str] = []
        for line in self.read().splitlines():
            if name is None:
                match = FUNCTION_START_PATTERN.match(line)
                if not match:
                    continue
                name, body = match.group(1), [line]
                # single-line definition
                if "}" in line[match.end():]:
                    functions.append(ShellFunction(name=name, body=line))
                    name = None
                continue

            body.append(line)
            # nested blocks are not tracked, the first '}' closes the function
            if "}" in line:
                functions.append(ShellFunction(name=name, body="\n".join(body)))
                name = None

        if name is not None:
            logger.debug("Function '%s' has no closing brace", name)
        return functions

    def find_functions(self, query: Optional[str] = None, match_content: bool = False) -> List[Text]:
        """Search functions by name, or by their whole body with match_content"""
        functions = self.list_functions()
        if query is None:
            return [self.render.plain(function.body) for function in functions]

        pattern = self._compile(query)
        results = []
        for function in functions:
            if match_content:
                if pattern.search(function.body):
                    results.append(self.render.highlight(function.body, pattern))
            elif pattern.search(function.name):
                start, end = FUNCTION_START_PATTERN.match(function.body).span(1)
                results.append(self.render.highlight(function.body, pattern, start, end))

        if not results:
            raise NotFoundError(f"No function matching '{query}'")
        return results
