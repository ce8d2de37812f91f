from __future__ import annotations


class InserterError(Exception):
  """Base class for pipeline errors."""


class SetupError(InserterError):
  """Required input locations are missing or empty. Fatal."""


class SourceParseError(InserterError):
  """A single workbook or image could not be decoded. The source is skipped."""

  def __init__(self, path: str, reason: str):
    super().__init__(f"{path}: {reason}")
    self.path = path
    self.reason = reason


class LayoutError(InserterError):
  """Region or font computation failed for one text block."""


class RenderError(InserterError):
  """Compositing or encoding one text block failed."""


class BatchError(InserterError):
  """Unexpected failure outside the per-item guards. Aborts remaining batches."""
