from openpyxl.styles.colors import Color

from inserter.richtext.colors import (
  DEFAULT_THEME_COLORS,
  apply_tint,
  parse_theme_colors,
  resolve_color,
)
from inserter.richtext.model import DEFAULT_COLOR, Paragraph, Segment, TextBlock, split_paragraphs

THEME_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<a:theme xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" name="Office">
  <a:themeElements>
    <a:clrScheme name="Custom">
      <a:dk1><a:sysClr val="windowText" lastClr="111111"/></a:dk1>
      <a:lt1><a:sysClr val="window" lastClr="FEFEFE"/></a:lt1>
      <a:dk2><a:srgbClr val="222222"/></a:dk2>
      <a:lt2><a:srgbClr val="EEEEEE"/></a:lt2>
      <a:accent1><a:srgbClr val="FF0000"/></a:accent1>
    </a:clrScheme>
  </a:themeElements>
</a:theme>"""


def test_split_rebases_segments():
  block = TextBlock(
    text="first\nsecond line",
    color_segments=[Segment(0, 5, "#FF0000"), Segment(6, 6, "#00FF00")],
    bold_segments=[Segment(13, 4)],
  )
  paras = split_paragraphs(block)
  assert [p.text for p in paras] == ["first", "second line"]
  assert paras[0].color_segments == [Segment(0, 5, "#FF0000")]
  assert paras[1].color_segments == [Segment(0, 6, "#00FF00")]
  assert paras[1].bold_segments == [Segment(7, 4)]
  assert paras[1].is_bold_span(7, 11)


def test_split_repeated_paragraph_text_uses_own_offsets():
  block = TextBlock(text="same\nsame", color_segments=[Segment(5, 4, "#0000FF")])
  first, second = split_paragraphs(block)
  assert first.color_segments == []
  assert second.color_at(0) == "#0000FF"
  assert first.color_at(0) == DEFAULT_COLOR


def test_split_keeps_empty_paragraphs():
  assert [p.text for p in split_paragraphs(TextBlock("a\n\nb"))] == ["a", "", "b"]
  assert [p.text for p in split_paragraphs(TextBlock(""))] == [""]


def test_first_matching_segment_wins():
  para = Paragraph("word", color_segments=[Segment(0, 4, "#111111"), Segment(0, 4, "#222222")])
  assert para.color_of_span(0, 4) == "#111111"


def test_parse_theme_colors_orders_light_first():
  colors = parse_theme_colors(THEME_XML)
  assert colors[:5] == ["#FEFEFE", "#111111", "#EEEEEE", "#222222", "#FF0000"]
  assert colors[5:] == DEFAULT_THEME_COLORS[5:]


def test_parse_theme_colors_defaults():
  assert parse_theme_colors(None) == DEFAULT_THEME_COLORS
  assert parse_theme_colors(b"not xml") == DEFAULT_THEME_COLORS


def test_apply_tint():
  assert apply_tint("#000000", 0.5) == "#808080"
  assert apply_tint("#FFFFFF", -0.5) == "#808080"
  assert apply_tint("#FF0000", 0.0) == "#ff0000"


def test_resolve_rgb_and_indexed():
  assert resolve_color(Color(rgb="FFFF0000")) == "#FF0000"
  assert resolve_color(Color(indexed=4)) == "#0000FF"
  assert resolve_color(None) is None


def test_resolve_theme_with_tint():
  theme = parse_theme_colors(THEME_XML)
  assert resolve_color(Color(theme=4), theme) == "#FF0000"
  assert resolve_color(Color(theme=1, tint=0.5), theme) == apply_tint("#111111", 0.5)
  assert resolve_color(Color(theme=99), theme) == "#000000"
