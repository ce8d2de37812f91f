"""
Pytest configuration for local imports and shared image fixtures.
"""

import io
import os
import sys

import pytest


def _ensure_repo_on_path() -> None:
  repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
  if repo_root not in sys.path:
    sys.path.insert(0, repo_root)


_ensure_repo_on_path()


def png_bytes(width, height, bands=(), color=(255, 255, 255), mode="RGB"):
  """Encode a flat image; `bands` is a list of (y0, y1) rows painted black."""
  from PIL import Image

  fill = color if mode == "RGB" else color + (255,)
  img = Image.new(mode, (width, height), fill)
  for y0, y1 in bands:
    img.paste((0, 0, 0) if mode == "RGB" else (0, 0, 0, 255), (0, y0, width, y1))
  buf = io.BytesIO()
  img.save(buf, format="PNG")
  return buf.getvalue()


@pytest.fixture
def make_png():
  return png_bytes
