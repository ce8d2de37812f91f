from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Sequence

from inserter.autofit.fontfit import FontPlan
from inserter.autofit.wrap import WrappedLine
from inserter.config import LayoutConfig
from inserter.regions.finder import Region
from inserter.richtext.model import DEFAULT_COLOR

ALIGN_TOP = "top"
ALIGN_CENTER = "center"
ALIGN_BOTTOM = "bottom"


@dataclass(frozen=True)
class ColorSpan:
  text: str
  color: str = DEFAULT_COLOR
  is_bold: bool = False


@dataclass(frozen=True)
class TextRun:
  """One positioned line, anchored at its horizontal centre and vertical middle."""
  text: str
  x: float
  y: float
  font_size: float
  is_bold: bool = False
  color_spans: List[ColorSpan] = field(default_factory=list)

  def scaled(self, factor: float) -> "TextRun":
    return replace(self, x=self.x * factor, y=self.y * factor, font_size=self.font_size * factor)


@dataclass(frozen=True)
class LayoutAdjustment:
  line_height: float
  font_size: float
  content_height: float
  content_density: float
  height_ratio: float


def content_height(lines: Sequence[WrappedLine], line_height: float) -> float:
  total = 0.0
  for line in lines:
    total += line_height * 0.5 if line.is_paragraph_space else line_height
  return total


def content_density(lines: Sequence[WrappedLine], font_size: float, region_width: float) -> float:
  if not lines or region_width <= 0:
    return 0.0
  total = 0.0
  for line in lines:
    if line.is_paragraph_space or not line.words:
      continue
    total += (len(line.text) * font_size) / float(region_width)
  return total / float(len(lines))


def optimize_layout(
  lines: Sequence[WrappedLine],
  region: Region,
  line_height: float,
  font_size: float,
) -> LayoutAdjustment:
  """Single-pass spacing/size correction from the height ratio and density."""
  height = content_height(lines, line_height)
  density = content_density(lines, font_size, region.width)
  ratio = height / float(region.height) if region.height > 0 else 0.0

  adj_line_height = line_height
  adj_font_size = font_size
  if ratio > 1.1:
    adj_line_height = line_height * 0.9
    adj_font_size = font_size * 0.95
  elif ratio > 0.95:
    adj_line_height = line_height * 0.95
  elif ratio < 0.7 and density < 0.5:
    adj_line_height = line_height * 1.1

  return LayoutAdjustment(
    line_height=adj_line_height,
    font_size=adj_font_size,
    content_height=height,
    content_density=density,
    height_ratio=ratio,
  )


def determine_vertical_alignment(region: Region, total_height: float, lines: Sequence[WrappedLine]) -> str:
  if not lines:
    return ALIGN_CENTER
  avg_chars = sum(len(line.text) for line in lines) / float(len(lines))
  ratio = total_height / float(region.height) if region.height > 0 else 0.0
  is_sparse = avg_chars < 30 and len(lines) < 5

  if ratio < 0.5 or is_sparse:
    return ALIGN_CENTER
  if ratio > 0.8:
    return ALIGN_TOP
  has_long_lines = any(len(line.text) > 50 for line in lines)
  return ALIGN_TOP if has_long_lines else ALIGN_CENTER


def compute_start_y(alignment: str, region: Region, total_height: float, line_height: float) -> float:
  top_pad = line_height * 0.5
  bottom_pad = line_height * 0.5
  lowest = region.y + top_pad
  highest = region.y + region.height - total_height - bottom_pad

  if alignment == ALIGN_TOP:
    start_y = lowest
  elif alignment == ALIGN_BOTTOM:
    start_y = highest
  else:
    start_y = region.y + (region.height - total_height) / 2.0

  # Overflowing content keeps the top padding.
  return max(lowest, min(start_y, highest))


def place_runs(
  lines: Sequence[WrappedLine],
  region: Region,
  plan: FontPlan,
  config: LayoutConfig = LayoutConfig(),
) -> List[TextRun]:
  line_height = plan.normal_font_size * plan.line_spacing_ratio
  adj = optimize_layout(lines, region, line_height, plan.normal_font_size)
  scale = adj.font_size / float(plan.normal_font_size) if plan.normal_font_size else 1.0
  normal_size = adj.font_size
  bold_size = plan.bold_font_size * scale

  total_height = content_height(lines, adj.line_height)
  alignment = determine_vertical_alignment(region, total_height, lines)
  start_y = compute_start_y(alignment, region, total_height, adj.line_height)

  effective_width = region.width * config.width_ratio
  text_start_x = region.x + region.width * (1.0 - config.width_ratio) / 2.0
  center_x = text_start_x + effective_width / 2.0

  runs: List[TextRun] = []
  current_y = start_y
  for line in lines:
    if line.is_paragraph_space:
      current_y += adj.line_height * 0.5
      continue
    if not line.words:
      continue
    size = bold_size if line.is_bold else normal_size
    runs.append(
      TextRun(
        text=line.text,
        x=center_x,
        y=current_y + size / 2.0,
        font_size=size,
        is_bold=line.is_bold,
        color_spans=[ColorSpan(w.text, w.color, w.is_bold) for w in line.words],
      )
    )
    current_y += adj.line_height
  return runs
