from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from openpyxl import load_workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock as RichRun

from inserter.config import WORKBOOK_EXTENSIONS
from inserter.discovery import iter_files
from inserter.errors import SourceParseError
from inserter.richtext.colors import parse_theme_colors, resolve_color
from inserter.richtext.model import Segment, TextBlock

logger = logging.getLogger(__name__)


def _font_bold(font: Any) -> bool:
  return bool(getattr(font, "b", False)) if font is not None else False


def _font_color(font: Any, theme_colors: List[str]) -> Optional[str]:
  if font is None:
    return None
  return resolve_color(getattr(font, "color", None), theme_colors)


def _display_text(value: Any) -> str:
  """Plain cell values as a spreadsheet shows them by default."""
  if isinstance(value, bool):
    return "TRUE" if value else "FALSE"
  if isinstance(value, datetime.datetime):
    if value.time() == datetime.time(0, 0):
      return value.date().isoformat()
    return value.strftime("%Y-%m-%d %H:%M:%S")
  if isinstance(value, (datetime.date, datetime.time)):
    return value.isoformat()
  if isinstance(value, float) and value.is_integer():
    return str(int(value))
  return str(value)


def _cell_pieces(value: Any) -> Tuple[str, List[Tuple[str, Any]]]:
  """Return the cell text and, for rich-text cells, its (text, font) runs."""
  if isinstance(value, CellRichText):
    runs: List[Tuple[str, Any]] = []
    for part in value:
      if isinstance(part, RichRun):
        runs.append((str(part.text or ""), part.font))
      else:
        runs.append((str(part), None))
    return "".join(t for t, _f in runs), runs
  return _display_text(value), []


def _clip_segments(segments: List[Segment], lead: int, size: int) -> List[Segment]:
  out: List[Segment] = []
  for seg in segments:
    start = max(0, seg.start - lead)
    end = min(size, seg.end - lead)
    if end > start:
      out.append(Segment(start, end - start, seg.color))
  return out


def row_to_block(cells: List[Any], theme_colors: List[str], source: str = "") -> Optional[TextBlock]:
  row_text = ""
  color_segments: List[Segment] = []
  bold_segments: List[Segment] = []

  for cell in cells:
    value = getattr(cell, "value", None)
    if value is None:
      continue
    cell_text, runs = _cell_pieces(value)
    if not cell_text.strip():
      continue

    if row_text:
      row_text += " "
    start = len(row_text)
    font = getattr(cell, "font", None)

    if runs:
      pos = start
      for text, run_font in runs:
        if text and _font_bold(run_font):
          bold_segments.append(Segment(pos, len(text)))
        color = _font_color(run_font, theme_colors)
        if text and color:
          color_segments.append(Segment(pos, len(text), color))
        pos += len(text)
    else:
      color = _font_color(font, theme_colors)
      if color:
        color_segments.append(Segment(start, len(cell_text), color))

    if _font_bold(font):
      bold_segments.append(Segment(start, len(cell_text)))

    row_text += cell_text

  text = row_text.strip()
  if not text:
    return None
  lead = len(row_text) - len(row_text.lstrip())
  return TextBlock(
    text=text,
    color_segments=_clip_segments(color_segments, lead, len(text)),
    bold_segments=_clip_segments(bold_segments, lead, len(text)),
    source=source,
  )


def read_workbook(path: Path) -> List[TextBlock]:
  """One TextBlock per non-blank row of the first worksheet."""
  try:
    wb = load_workbook(str(path), rich_text=True, data_only=True)
  except Exception as e:
    raise SourceParseError(str(path), str(e) or e.__class__.__name__) from e

  try:
    if not wb.worksheets:
      return []
    ws = wb.worksheets[0]
    theme_colors = parse_theme_colors(getattr(wb, "loaded_theme", None))
    blocks: List[TextBlock] = []
    for row in ws.iter_rows():
      block = row_to_block(list(row), theme_colors, source=str(path))
      if block is not None:
        blocks.append(block)
    return blocks
  finally:
    wb.close()


def read_text_blocks(text_dir: Path) -> List[TextBlock]:
  """Read every workbook under `text_dir`; unreadable ones are skipped with a warning."""
  blocks: List[TextBlock] = []
  for path in iter_files(text_dir, WORKBOOK_EXTENSIONS):
    try:
      blocks.extend(read_workbook(path))
    except SourceParseError as e:
      logger.warning(f"Skipped workbook {path.name}: {e.reason}")
  return blocks


def read_text_blocks_cached(text_dir: Path, cache: Dict[str, List[TextBlock]]) -> List[TextBlock]:
  key = str(text_dir)
  if key not in cache:
    cache[key] = read_text_blocks(text_dir)
  return cache[key]
