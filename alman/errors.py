"""Errors raised by alias store operations"""

from typing import List, Optional


class AlmanError(Exception):
    """Base class for every error reported to the user"""


class NotFoundError(AlmanError):
    """No alias or function matched the query"""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.suggestions = suggestions or []


class AlreadyExistsError(AlmanError):
    """An alias with the same name is already defined"""


class InvalidInputError(AlmanError):
    """The name, command or search pattern cannot be used"""


class ConfigIOError(AlmanError):
    """The configuration file or home directory is not accessible"""
