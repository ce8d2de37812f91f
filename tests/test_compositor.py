import io
import xml.etree.ElementTree as ElementTree

import pytest
from PIL import Image

from inserter.autofit.layout import ColorSpan, TextRun
from inserter.config import RenderConfig
from inserter.render.compositor import build_svg, composite_text, escape_markup, upscale_factor
from inserter.render.surface import RasterSurface

SVG_NS = "{http://www.w3.org/2000/svg}"


def test_escape_markup_handles_all_five():
  assert escape_markup("&<>\"'") == "&amp;&lt;&gt;&quot;&apos;"
  assert escape_markup("") == ""
  assert escape_markup(None) == ""


def test_svg_text_round_trips_through_parser():
  text = 'Tom & "Jerry" <3 it\'s'
  run = TextRun(text=text, x=100, y=50, font_size=20, color_spans=[])
  root = ElementTree.fromstring(build_svg(400, 200, [run]))
  (el,) = root.findall(f"{SVG_NS}text")
  assert el.text == text
  assert el.get("fill") == "#000000"
  assert el.get("text-anchor") == "middle"
  assert root.get("width") == "400" and root.get("height") == "200"


def test_svg_tspans_carry_color_and_weight():
  run = TextRun(
    text="red & bold",
    x=10,
    y=10,
    font_size=16,
    is_bold=False,
    color_spans=[ColorSpan("red", "#FF0000"), ColorSpan("&", "#000000"), ColorSpan("bold", "#000000", True)],
  )
  root = ElementTree.fromstring(build_svg(200, 100, [run]))
  tspans = root.findall(f"{SVG_NS}text/{SVG_NS}tspan")
  assert [t.text for t in tspans] == ["red", "&", "bold"]
  assert [t.get("fill") for t in tspans] == ["#FF0000", "#000000", "#000000"]
  assert tspans[0].get("dx") is None and tspans[1].get("dx") is not None
  assert tspans[2].get("font-weight") == "bold"
  assert tspans[0].get("font-weight") is None


def test_upscale_factor():
  assert upscale_factor(800, 600) == pytest.approx(2.0)
  assert upscale_factor(1600, 1000) == pytest.approx(1.2)
  assert upscale_factor(2000, 1200) == 1.0
  assert upscale_factor(3000, 4000) == 1.0
  assert upscale_factor(0, 100) == 1.0
  assert upscale_factor(800, 600, RenderConfig(max_upscale=1.5)) == pytest.approx(1.5)


def test_composite_keeps_size_and_draws_text(make_png):
  image = make_png(400, 300)
  run = TextRun(
    text="Hello",
    x=200,
    y=150,
    font_size=48,
    is_bold=True,
    color_spans=[ColorSpan("Hello", "#000000", True)],
  )
  out = composite_text(image, [run])
  surface = RasterSurface()
  assert surface.metadata(out) == (400, 300)
  lo, hi = Image.open(io.BytesIO(out)).convert("L").getextrema()
  assert hi == 255
  assert lo < 128


def test_composite_without_runs_leaves_pixels_white(make_png):
  out = composite_text(make_png(300, 200), [])
  assert Image.open(io.BytesIO(out)).convert("L").getextrema() == (255, 255)
