"""
Console progress bar for the batch loop.
"""

import sys
from typing import Optional, TextIO


class ProgressBar:
    """Single-line progress bar rewritten in place with a carriage return."""

    def __init__(self, total: int, title: str = "Progress", width: int = 30, stream: Optional[TextIO] = None):
        self.total = int(total)
        self.title = title
        self.width = int(width)
        self.stream = stream or sys.stdout
        self.current = 0

    def render(self, value: int) -> str:
        if self.total <= 0:
            return ""
        value = max(0, min(int(value), self.total))
        filled = int(round(self.width * value / float(self.total)))
        bar = "█" * filled + "░" * (self.width - filled)
        pct = value / float(self.total) * 100.0
        return f"{self.title}: [{bar}] {pct:5.1f}% ({value}/{self.total})"

    def update(self, value: int) -> None:
        self.current = int(value)
        line = self.render(value)
        if not line:
            return
        self.stream.write("\r" + line)
        self.stream.flush()

    def complete(self) -> None:
        if self.total <= 0:
            return
        self.current = self.total
        self.stream.write("\r" + self.render(self.total) + "\n")
        self.stream.flush()
