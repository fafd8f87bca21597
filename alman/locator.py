"""Home directory and configuration file resolution"""

from enum import Enum
from pathlib import Path
from typing import Optional

from alman.errors import ConfigIOError


class ConfigTarget(Enum):
    """Kinds of files alman can edit"""

    BASH = "bash"
    GIT = "git"


class ConfigLocator:
    """Resolve the file an invocation works on"""

    DEFAULT_FILES = {
        ConfigTarget.BASH: ".bashrc",
        ConfigTarget.GIT: ".gitconfig",
    }

    def __init__(self, home_dir: Optional[Path] = None):
        """Initialize locator with an optional home directory"""
        self._home_dir = home_dir

    @property
    def home_dir(self) -> Path:
        if self._home_dir is None:
            try:
                self._home_dir = Path.home()
            except (RuntimeError, KeyError) as e:
                raise ConfigIOError("Unable to get your home dir!") from e
        return self._home_dir

    def target_file(self, target: ConfigTarget, filename: Optional[str] = None) -> Path:
        """Path of the file for target, relative names resolve against home"""
        path = Path(filename or self.DEFAULT_FILES[target]).expanduser()
        if path.is_absolute():
            return path
        return self.home_dir / path
