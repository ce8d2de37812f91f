"""
Text compositing.

Runs are written as SVG <text> elements, rasterised with cairosvg and laid over
the image. Small images are upscaled first and the result is downscaled back
with Lanczos, which smooths glyph edges at small output sizes.
"""

from __future__ import annotations

from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

import cairosvg

from inserter.autofit.glyphs import text_width
from inserter.autofit.layout import TextRun
from inserter.config import LayoutConfig, RenderConfig
from inserter.errors import RenderError
from inserter.render.surface import RasterSurface

_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_markup(text: str) -> str:
  """Escape & < > " ' for embedding in SVG text content or attributes."""
  return escape(text or "", _ENTITIES)


def _num(v: float) -> str:
  return f"{float(v):.2f}"


def upscale_factor(width: int, height: int, config: RenderConfig = RenderConfig()) -> float:
  shorter = min(int(width), int(height))
  if shorter <= 0 or shorter >= config.upscale_threshold:
    return 1.0
  return min(float(config.max_upscale), config.upscale_threshold / float(shorter))


def _text_element(run: TextRun, font_family: str) -> str:
  weight = "bold" if run.is_bold else "normal"
  attrs = (
    f'x="{_num(run.x)}" y="{_num(run.y)}" '
    f'font-size="{_num(run.font_size)}px" '
    f'text-anchor="middle" dominant-baseline="middle" '
    f'font-weight="{weight}" font-family="{escape_markup(font_family)}" '
    f'style="letter-spacing: 0px" '
    f'shape-rendering="geometricPrecision" text-rendering="geometricPrecision"'
  )

  if not run.color_spans:
    return f'<text {attrs} fill="#000000">{escape_markup(run.text)}</text>'

  space = text_width(" ", run.font_size)
  tspans: List[str] = []
  for idx, span in enumerate(run.color_spans):
    extra = ""
    if idx > 0:
      extra += f' dx="{_num(space)}"'
    if span.is_bold != run.is_bold:
      extra += f' font-weight="{"bold" if span.is_bold else "normal"}"'
    tspans.append(f'<tspan fill="{escape_markup(span.color)}"{extra}>{escape_markup(span.text)}</tspan>')
  return f"<text {attrs}>{''.join(tspans)}</text>"


def build_svg(width: int, height: int, runs: Sequence[TextRun], font_family: str = LayoutConfig().font_family) -> str:
  elements = "".join(_text_element(run, font_family) for run in runs)
  return (
    '<?xml version="1.0" encoding="UTF-8"?>'
    f'<svg xmlns="http://www.w3.org/2000/svg" width="{int(width)}" height="{int(height)}" '
    f'viewBox="0 0 {int(width)} {int(height)}" '
    'shape-rendering="geometricPrecision" text-rendering="geometricPrecision">'
    f"{elements}</svg>"
  )


def rasterize_svg(svg: str, width: int, height: int, density: int) -> bytes:
  try:
    png = cairosvg.svg2png(
      bytestring=svg.encode("utf-8"),
      output_width=int(width),
      output_height=int(height),
      dpi=int(density),
    )
  except Exception as e:
    raise RenderError(f"SVG rasterisation failed: {e}") from e
  if not isinstance(png, bytes):
    raise RenderError("SVG rasterisation returned no data")
  return png


def composite_text(
  image: bytes,
  runs: Sequence[TextRun],
  surface: Optional[RasterSurface] = None,
  layout: LayoutConfig = LayoutConfig(),
  render: RenderConfig = RenderConfig(),
) -> bytes:
  """Draw `runs` (image-space coordinates) onto `image`; returns PNG bytes at the original size."""
  surface = surface or RasterSurface()
  width, height = surface.metadata(image)

  factor = upscale_factor(width, height, render)
  target_w = int(round(width * factor))
  target_h = int(round(height * factor))

  upscaled = surface.resize(image, target_w, target_h, kernel="lanczos3")
  scaled_runs = [run.scaled(factor) for run in runs]

  svg = build_svg(target_w, target_h, scaled_runs, font_family=layout.font_family)
  overlay = rasterize_svg(svg, target_w, target_h, density=int(round(render.base_density * factor)))
  composited = surface.composite_overlay(upscaled, overlay, top=0, left=0)

  return surface.resize(composited, width, height, kernel="lanczos3")
