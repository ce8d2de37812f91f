from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from inserter.autofit.fontfit import solve_font_size
from inserter.autofit.layout import TextRun, place_runs
from inserter.autofit.wrap import wrap_paragraphs
from inserter.config import LayoutConfig, RegionConfig, RenderConfig
from inserter.errors import RenderError
from inserter.regions.finder import Region
from inserter.render.compositor import composite_text
from inserter.render.surface import RasterSurface
from inserter.richtext.model import TextBlock, split_paragraphs

logger = logging.getLogger(__name__)


def usable_regions(regions: Sequence[Region], config: RegionConfig = RegionConfig()) -> List[Region]:
  return [r for r in regions if r.width >= config.min_width and r.height >= config.min_height]


def layout_text_block(
  block: TextBlock,
  region: Region,
  layout: LayoutConfig = LayoutConfig(),
) -> List[TextRun]:
  """Paragraph split, font-size solve, word wrap and placement for one block."""
  paragraphs = split_paragraphs(block)
  plan = solve_font_size(paragraphs, region, layout)
  lines = wrap_paragraphs(
    paragraphs,
    effective_width=region.width * layout.width_ratio,
    normal_size=plan.normal_font_size,
    bold_size=plan.bold_font_size,
  )
  return place_runs(lines, region, plan, layout)


def insert_text_into_regions(
  image: bytes,
  block: TextBlock,
  regions: Sequence[Region],
  surface: Optional[RasterSurface] = None,
  region_cfg: RegionConfig = RegionConfig(),
  layout: LayoutConfig = LayoutConfig(),
  render: RenderConfig = RenderConfig(),
) -> bytes:
  """
  Render `block` into the largest usable region of `image`.

  Returns the input bytes untouched when there is no text or no usable region.
  """
  if not (block.text or "").strip():
    logger.info("No text content to insert")
    return image

  candidates = usable_regions(regions, region_cfg)
  if not candidates:
    logger.info("No valid regions found for text insertion")
    return image

  region = candidates[0]
  runs = layout_text_block(block, region, layout)
  try:
    return composite_text(image, runs, surface=surface, layout=layout, render=render)
  except RenderError:
    raise
  except Exception as e:
    raise RenderError(f"compositing failed: {e}") from e
