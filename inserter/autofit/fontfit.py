from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from inserter.autofit.glyphs import char_width
from inserter.config import LayoutConfig
from inserter.errors import LayoutError
from inserter.regions.finder import Region
from inserter.richtext.model import Paragraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontPlan:
  normal_font_size: float
  bold_font_size: float
  line_spacing_ratio: float
  estimated_lines: int
  iterations: int = 0


def default_plan(paragraph_count: int) -> FontPlan:
  return FontPlan(
    normal_font_size=20,
    bold_font_size=22,
    line_spacing_ratio=1.2,
    estimated_lines=int(paragraph_count),
  )


def _simulate_char_wrap(
  paragraphs: Sequence[Paragraph],
  font_size: float,
  effective_width: float,
  effective_height: float,
  bold_scale: float,
  line_spacing: float,
) -> Optional[List[str]]:
  """
  Wrap character by character at `font_size`; None as soon as the running
  height exceeds `effective_height`.
  """
  bold_size = font_size * bold_scale
  line_height = font_size * line_spacing
  lines: List[str] = []
  total_height = 0.0

  for idx, para in enumerate(paragraphs):
    if idx > 0:
      total_height += line_height * 0.5

    current = ""
    line_w = 0.0
    for pos, ch in enumerate(para.text):
      cw = char_width(ch, bold_size if para.is_bold_at(pos) else font_size)
      if line_w + cw <= effective_width:
        current += ch
        line_w += cw
        continue
      if current:
        lines.append(current)
        total_height += line_height
        if total_height > effective_height:
          return None
      current = ch
      line_w = cw

    if current:
      lines.append(current)
      total_height += line_height
      if total_height > effective_height:
        return None

  if total_height > effective_height:
    return None
  return lines


def _bold_ratio(paragraphs: Sequence[Paragraph]) -> float:
  total = sum(len(p.text) for p in paragraphs)
  if total <= 0:
    return 0.0
  bold = sum(seg.length for p in paragraphs for seg in p.bold_segments)
  return bold / float(total)


def seed_font_size(paragraphs: Sequence[Paragraph], effective_width: float, effective_height: float) -> int:
  count = max(1, len(paragraphs))
  by_height = math.floor(effective_height / (count * 1.5))
  by_width = math.floor(effective_width / (20 + _bold_ratio(paragraphs) * 5))
  return int(min(by_height, by_width))


def _search(paragraphs: Sequence[Paragraph], region: Region, config: LayoutConfig) -> FontPlan:
  if region.width <= 0 or region.height <= 0:
    raise LayoutError(f"degenerate region {region.width}x{region.height}")
  if not paragraphs:
    raise LayoutError("no paragraphs to fit")

  effective_width = region.width * config.width_ratio
  effective_height = region.height * config.height_ratio

  lo = int(config.min_font_size)
  hi = int(config.max_font_size)
  seed = seed_font_size(paragraphs, effective_width, effective_height)

  best: Optional[int] = None
  best_lines: List[str] = []
  iterations = 0
  while lo <= hi and iterations < config.max_iterations:
    if iterations == 0:
      mid = max(lo, min(hi, seed))
    else:
      mid = (lo + hi) // 2
    lines = _simulate_char_wrap(
      paragraphs,
      mid,
      effective_width,
      effective_height,
      config.bold_scale,
      config.line_spacing,
    )
    if lines is not None:
      best = mid
      best_lines = lines
      lo = mid + 1
    else:
      hi = mid - 1
    iterations += 1

  if best is None:
    # Soft overflow: nothing fits, lay out at the smallest size anyway.
    best = int(config.min_font_size)
    best_lines = _simulate_char_wrap(
      paragraphs,
      best,
      effective_width,
      math.inf,
      config.bold_scale,
      config.line_spacing,
    ) or []
    logger.debug(f"No font size in range fits {region.width}x{region.height}; using {best}")

  return FontPlan(
    normal_font_size=best,
    bold_font_size=best * config.bold_scale,
    line_spacing_ratio=config.line_spacing,
    estimated_lines=len(best_lines),
    iterations=iterations,
  )


def solve_font_size(
  paragraphs: Sequence[Paragraph],
  region: Region,
  config: LayoutConfig = LayoutConfig(),
) -> FontPlan:
  """
  Largest font size in [min_font_size, max_font_size] whose character-level
  wrap fits the region. Never raises; degenerate input yields the default plan.
  """
  try:
    return _search(paragraphs, region, config)
  except LayoutError as e:
    logger.warning(f"Font size calculation failed ({e}); using defaults")
    return default_plan(len(paragraphs))
