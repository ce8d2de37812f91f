from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence

from inserter.autofit.glyphs import text_width
from inserter.richtext.model import DEFAULT_COLOR, Paragraph

_WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class Word:
  text: str
  width: float
  color: str = DEFAULT_COLOR
  is_bold: bool = False


@dataclass
class WrappedLine:
  words: List[Word] = field(default_factory=list)
  width: float = 0.0
  # Spacing-only marker between paragraphs; never rendered.
  is_paragraph_space: bool = False

  @property
  def text(self) -> str:
    return " ".join(w.text for w in self.words)

  @property
  def is_bold(self) -> bool:
    return bool(self.words) and all(w.is_bold for w in self.words)

  @classmethod
  def paragraph_space(cls) -> "WrappedLine":
    return cls(words=[], width=0.0, is_paragraph_space=True)


def paragraph_words(para: Paragraph, normal_size: float, bold_size: float) -> List[Word]:
  """Words of a paragraph with the style of the segment covering each whole word."""
  words: List[Word] = []
  for m in _WORD_RE.finditer(para.text or ""):
    start, end = m.start(), m.end()
    is_bold = para.is_bold_span(start, end)
    words.append(
      Word(
        text=m.group(0),
        width=text_width(m.group(0), bold_size if is_bold else normal_size),
        color=para.color_of_span(start, end),
        is_bold=is_bold,
      )
    )
  return words


def wrap_paragraph(
  para: Paragraph,
  effective_width: float,
  normal_size: float,
  bold_size: float,
) -> List[WrappedLine]:
  space_w = text_width(" ", normal_size)
  lines: List[WrappedLine] = []
  current = WrappedLine()

  for word in paragraph_words(para, normal_size, bold_size):
    if not current.words:
      # A word wider than the line still gets a line of its own.
      current.words.append(word)
      current.width = word.width
      continue
    if current.width + space_w + word.width <= effective_width:
      current.words.append(word)
      current.width += space_w + word.width
      continue
    lines.append(current)
    current = WrappedLine(words=[word], width=word.width)

  if current.words:
    lines.append(current)
  return lines


def wrap_paragraphs(
  paragraphs: Sequence[Paragraph],
  effective_width: float,
  normal_size: float,
  bold_size: float,
) -> List[WrappedLine]:
  out: List[WrappedLine] = []
  for idx, para in enumerate(paragraphs):
    if idx > 0:
      out.append(WrappedLine.paragraph_space())
    out.extend(wrap_paragraph(para, effective_width, normal_size, bold_size))
  return out
