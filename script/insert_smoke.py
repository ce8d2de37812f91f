from __future__ import annotations

import io
import sys
from pathlib import Path


def main() -> int:
  repo_root = Path(__file__).resolve().parents[1]
  sys.path.insert(0, str(repo_root))

  try:
    import cairosvg  # noqa: F401
  except Exception:
    print("[SKIP] cairosvg is not usable here; compositing smoke is not applicable.")
    return 0

  from PIL import Image

  from inserter.insert import insert_text_into_regions
  from inserter.regions.finder import find_empty_regions
  from inserter.render.surface import RasterSurface
  from inserter.richtext.model import Segment, TextBlock

  # White page with a dark band in the middle: two empty bands expected.
  img = Image.new("RGB", (800, 600), (255, 255, 255))
  img.paste((0, 0, 0), (0, 280, 800, 320))
  buf = io.BytesIO()
  img.save(buf, format="PNG")
  data = buf.getvalue()

  surface = RasterSurface()
  regions = find_empty_regions(surface.decode_to_grayscale_raw(data))
  if len(regions) != 2:
    print(f"[FAIL] expected 2 empty bands, got {regions}", file=sys.stderr)
    return 1

  block = TextBlock(
    text="Hello & <world>\nSecond paragraph",
    color_segments=[Segment(0, 5, "#FF0000")],
    bold_segments=[Segment(0, 5)],
  )
  out = insert_text_into_regions(data, block, regions, surface=surface)
  if surface.metadata(out) != (800, 600):
    print(f"[FAIL] output size changed: {surface.metadata(out)}", file=sys.stderr)
    return 1

  top = regions[0]
  before = Image.open(io.BytesIO(data)).convert("L").crop((0, top.y, 800, top.bottom))
  after = Image.open(io.BytesIO(out)).convert("L").crop((0, top.y, 800, top.bottom))
  if before.getextrema() == after.getextrema():
    print("[FAIL] no text was drawn into the largest band", file=sys.stderr)
    return 1

  print("[OK] insert_smoke")
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
