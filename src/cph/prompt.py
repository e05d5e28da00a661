"""Line-oriented prompts.

Commands never read ``stdin`` directly; they go through a
:class:`LineReader` so that closed input (pipes, CI) resolves to an empty
answer instead of blocking or raising.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["LineReader"]

log = logging.getLogger(__name__)


class LineReader:
    """Print a prompt and read one line of input.

    Args:
        console: Console the prompt is printed on.
        stream: Input stream. Defaults to the current ``sys.stdin``,
            resolved at read time.
    """

    def __init__(self, console: Console, stream: IO[str] | None = None) -> None:
        self._console = console
        self._stream = stream

    def read_line(self, prompt: str) -> str:
        """Print ``prompt`` and return the next line, stripped.

        Returns:
            The line without surrounding whitespace, or ``""`` at end of input.
        """
        self._console.print(prompt, end="")
        stream = self._stream if self._stream is not None else sys.stdin
        line = stream.readline()
        if not line:
            log.debug("End of input reached while waiting for an answer")
            self._console.print()
            return ""
        return line.strip()
