"""
Heuristic glyph widths.

No font is loaded: every character falls into one of four width buckets and its
advance is `font_size * ratio`. The font-size solver relies on these numbers being
stable, so the tables below are part of the layout contract.
"""

from __future__ import annotations

SPACE_RATIO = 0.30
NARROW_RATIO = 0.35
WIDE_RATIO = 0.75
DEFAULT_RATIO = 0.55

SPACE_CHARS = frozenset(" \t")
NARROW_CHARS = frozenset("ijl,.'\"|!()[]{}/-_")
WIDE_CHARS = frozenset("mwWM@QOCDG%&#AHNUX")


def char_ratio(ch: str) -> float:
  if ch in SPACE_CHARS or ch.isspace():
    return SPACE_RATIO
  if ch in NARROW_CHARS:
    return NARROW_RATIO
  if ch in WIDE_CHARS:
    return WIDE_RATIO
  return DEFAULT_RATIO


def char_width(ch: str, font_size: float) -> float:
  return float(font_size) * char_ratio(ch)


def text_width(text: str, font_size: float) -> float:
  return sum(char_width(ch, font_size) for ch in (text or ""))
