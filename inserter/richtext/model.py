from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

DEFAULT_COLOR = "#000000"


@dataclass(frozen=True)
class Segment:
  """Character range [start, start + length) carrying a colour or a bold flag."""
  start: int
  length: int
  color: Optional[str] = None

  @property
  def end(self) -> int:
    return self.start + self.length

  def contains(self, position: int) -> bool:
    return self.start <= position < self.end

  def covers(self, start: int, end: int) -> bool:
    return self.start <= start and end <= self.end

  def shifted(self, offset: int) -> "Segment":
    return Segment(self.start + offset, self.length, self.color)


def first_containing(segments: Sequence[Segment], position: int) -> Optional[Segment]:
  for seg in segments:
    if seg.contains(position):
      return seg
  return None


def first_covering(segments: Sequence[Segment], start: int, end: int) -> Optional[Segment]:
  for seg in segments:
    if seg.covers(start, end):
      return seg
  return None


@dataclass(frozen=True)
class Paragraph:
  text: str
  color_segments: List[Segment] = field(default_factory=list)
  bold_segments: List[Segment] = field(default_factory=list)

  def is_bold_at(self, position: int) -> bool:
    return first_containing(self.bold_segments, position) is not None

  def color_at(self, position: int) -> str:
    seg = first_containing(self.color_segments, position)
    return seg.color if seg is not None and seg.color else DEFAULT_COLOR

  def is_bold_span(self, start: int, end: int) -> bool:
    return first_covering(self.bold_segments, start, end) is not None

  def color_of_span(self, start: int, end: int) -> str:
    seg = first_covering(self.color_segments, start, end)
    return seg.color if seg is not None and seg.color else DEFAULT_COLOR


@dataclass(frozen=True)
class TextBlock:
  """One spreadsheet row: text plus colour/bold annotations over the whole row."""
  text: str
  color_segments: List[Segment] = field(default_factory=list)
  bold_segments: List[Segment] = field(default_factory=list)
  source: str = ""


def _segments_for(segments: Sequence[Segment], start: int, length: int) -> List[Segment]:
  # A segment belongs to the paragraph its start falls in.
  end = start + length
  return [seg.shifted(-start) for seg in segments if start <= seg.start < end]


def split_paragraphs(block: TextBlock) -> List[Paragraph]:
  """Split a block on newlines, rebasing segments to paragraph-relative offsets."""
  paragraphs: List[Paragraph] = []
  offset = 0
  for para in (block.text or "").split("\n"):
    paragraphs.append(
      Paragraph(
        text=para,
        color_segments=_segments_for(block.color_segments, offset, len(para)),
        bold_segments=_segments_for(block.bold_segments, offset, len(para)),
      )
    )
    offset += len(para) + 1
  return paragraphs
