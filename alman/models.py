"""Data models for aliases and shell functions"""

import re
from dataclasses import dataclass
from typing import Optional

ALIAS_PREFIX = "alias"

# alias ll='ls -la'
BASH_ALIAS_PATTERN = re.compile(r"^\s*alias\s*([^=\s]+)\s*=\s*(.*)$")
# [alias] section entry: co = checkout
GIT_ALIAS_PATTERN = re.compile(r"^\s*([^=\s]+)\s*=\s*(.*)$")


@dataclass
class Alias:
    """Represents a single alias line from a config file"""
    name: str
    command: str
    git: bool = False

    @classmethod
    def from_line(cls, line: str, git: bool = False) -> Optional["Alias"]:
        """Parse an alias line, return None when the line is not an alias"""
        pattern = GIT_ALIAS_PATTERN if git else BASH_ALIAS_PATTERN
        match = pattern.match(line)
        if not match:
            return None
        name, command = match.groups()
        command = command.strip()
        if not git and len(command) >= 2 and command[0] == command[-1] and command[0] in "'\"":
            command = command[1:-1]
        return cls(name=name, command=command, git=git)

    def to_line(self) -> str:
        """Serialize the alias the way it is written to the config file"""
        if self.git:
            return f"\t{self.name} = {self.command}"
        return f"{ALIAS_PREFIX} {self.name}='{self.command}'"

    def __str__(self) -> str:
        """String representation for display"""
        return f"{self.name}='{self.command}'"


@dataclass
class ShellFunction:
    """A brace-delimited function definition, kept verbatim"""
    name: str
    body: str

    def __str__(self) -> str:
        return self.body
