"""Rendering of search results with highlighted matches"""

import re
from typing import Optional

from rich.text import Text

DEFAULT_HIGHLIGHT = "bold red"


class Render:
    """Build rich Text objects with the matched substrings styled"""

    def __init__(self, style: str = DEFAULT_HIGHLIGHT):
        self.style = style

    def plain(self, line: str) -> Text:
        return Text(line)

    def highlight(
        self,
        line: str,
        pattern: re.Pattern,
        start: int = 0,
        end: Optional[int] = None,
    ) -> Text:
        """Style every match of pattern inside line[start:end]

        The pattern runs on the slice alone, so anchors bind to the slice
        boundaries. Offsets in the returned Text refer to the whole line.
        """
        if end is None:
            end = len(line)
        text = Text(line)
        for match in pattern.finditer(line[start:end]):
            # empty matches would produce zero-width spans
            if match.end() > match.start():
                text.stylize(self.style, start + match.start(), start + match.end())
        return text
