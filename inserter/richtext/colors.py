from __future__ import annotations

import colorsys
import xml.etree.ElementTree as ElementTree
from typing import Any, List, Optional

from openpyxl.styles.colors import COLOR_INDEX

DEFAULT_THEME_COLORS = [
  "#FFFFFF",  # 0: Background1
  "#000000",  # 1: Text1
  "#EEECE1",  # 2: Background2
  "#1F497D",  # 3: Text2
  "#4F81BD",  # 4: Accent1
  "#C0504D",  # 5: Accent2
  "#9BBB59",  # 6: Accent3
  "#8064A2",  # 7: Accent4
  "#4BACC6",  # 8: Accent5
  "#F79646",  # 9: Accent6
  "#0000FF",  # 10: Hyperlink
  "#800080",  # 11: Followed hyperlink
]

# Theme indices put the light colours first, unlike the XML scheme order.
THEME_ELEMENTS = [
  "lt1", "dk1", "lt2", "dk2",
  "accent1", "accent2", "accent3", "accent4", "accent5", "accent6",
  "hlink", "folHlink",
]

_DRAWINGML_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"


def _normalize_hex(value: str) -> Optional[str]:
  v = str(value or "").strip().lstrip("#")
  if not v:
    return None
  if len(v) == 8:
    v = v[2:]
  v = v[-6:].rjust(6, "0")
  try:
    int(v, 16)
  except ValueError:
    return None
  return f"#{v.upper()}"


def parse_theme_colors(theme_xml: Optional[bytes]) -> List[str]:
  """Read the colour scheme from a workbook theme part, in theme-index order."""
  if not theme_xml:
    return list(DEFAULT_THEME_COLORS)
  try:
    root = ElementTree.fromstring(theme_xml)
  except ElementTree.ParseError:
    return list(DEFAULT_THEME_COLORS)

  scheme = root.find(f".//{_DRAWINGML_NS}clrScheme")
  if scheme is None:
    return list(DEFAULT_THEME_COLORS)

  out: List[str] = []
  for idx, name in enumerate(THEME_ELEMENTS):
    color = DEFAULT_THEME_COLORS[idx]
    el = scheme.find(f"{_DRAWINGML_NS}{name}")
    if el is not None:
      srgb = el.find(f"{_DRAWINGML_NS}srgbClr")
      sys_clr = el.find(f"{_DRAWINGML_NS}sysClr")
      if srgb is not None and srgb.get("val"):
        color = _normalize_hex(srgb.get("val")) or color
      elif sys_clr is not None and sys_clr.get("lastClr"):
        color = _normalize_hex(sys_clr.get("lastClr")) or color
    out.append(color)
  return out


def apply_tint(hex_color: str, tint: float) -> str:
  r = int(hex_color[1:3], 16) / 255.0
  g = int(hex_color[3:5], 16) / 255.0
  b = int(hex_color[5:7], 16) / 255.0
  h, l, s = colorsys.rgb_to_hls(r, g, b)
  if tint < 0:
    l = l * (1.0 + tint)
  else:
    l = l + (1.0 - l) * tint
  nr, ng, nb = colorsys.hls_to_rgb(h, max(0.0, min(1.0, l)), s)

  def _hex(c: float) -> str:
    return f"{int(round(max(0.0, min(255.0, c * 255.0)))):02x}"

  return f"#{_hex(nr)}{_hex(ng)}{_hex(nb)}"


def resolve_color(color: Any, theme_colors: Optional[List[str]] = None) -> Optional[str]:
  """
  Turn an openpyxl Color into '#RRGGBB'.

  Returns None when the font carries no colour at all; unresolvable colours
  fall back to black.
  """
  if color is None:
    return None
  theme_colors = theme_colors or DEFAULT_THEME_COLORS
  ctype = getattr(color, "type", None)
  tint = float(getattr(color, "tint", 0.0) or 0.0)

  if ctype == "rgb":
    return _normalize_hex(getattr(color, "rgb", "")) or "#000000"

  if ctype == "indexed":
    idx = getattr(color, "indexed", None)
    if isinstance(idx, int) and 0 <= idx < len(COLOR_INDEX):
      return _normalize_hex(COLOR_INDEX[idx]) or "#000000"
    return "#000000"

  if ctype == "theme":
    idx = getattr(color, "theme", None)
    if not isinstance(idx, int) or not (0 <= idx < len(theme_colors)):
      return "#000000"
    base = theme_colors[idx]
    return apply_tint(base, tint) if tint else base

  return "#000000"
