"""
Report output sink.

Everything the search emits goes through a ReportWriter, which writes it to
a text stream (stdout by default) and keeps a copy so the complete report
can be returned to the caller once the search is over.
"""

import sys
import threading
from typing import List, Optional, TextIO


class ReportWriter:
    """Writes report chunks to a stream and captures them."""

    def __init__(self, stream: Optional[TextIO] = None, echo: bool = True):
        """
        Initialize the writer.

        Args:
            stream: Stream receiving the report (default: sys.stdout at write time)
            echo: When False, chunks are only captured, not written
        """
        self.stream = stream
        self.echo = echo
        self._chunks: List[str] = []
        self._lock = threading.Lock()

    def emit(self, text: str) -> None:
        """
        Emit one chunk of the report, terminating it with a newline if needed.

        Args:
            text: A line or a block of lines
        """
        chunk = text if text.endswith("\n") else text + "\n"
        with self._lock:
            self._chunks.append(chunk)
            if self.echo:
                stream = self.stream or sys.stdout
                stream.write(chunk)
                stream.flush()

    @property
    def text(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    @property
    def lines(self) -> List[str]:
        return self.text.splitlines()
