from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from inserter.config import OutputConfig
from inserter.errors import RenderError, SourceParseError

RESAMPLE_KERNELS = {
  "lanczos3": Image.Resampling.LANCZOS,
  "cubic": Image.Resampling.BICUBIC,
  "linear": Image.Resampling.BILINEAR,
  "nearest": Image.Resampling.NEAREST,
}

# Intermediate buffers are PNG: lossless and byte-stable.
_WORK_FORMAT = "PNG"


@dataclass(frozen=True)
class GrayRaster:
  width: int
  height: int
  pixels: np.ndarray


def _flatten_on_white(img: Image.Image) -> Image.Image:
  if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
    rgba = img.convert("RGBA")
    bg = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(bg, rgba).convert("RGB")
  return img.convert("RGB")


class RasterSurface:
  """Bytes-in/bytes-out raster operations backed by Pillow."""

  def __init__(self, work_compress_level: int = 1):
    self.work_compress_level = int(work_compress_level)

  def open(self, data: bytes, name: str = "<bytes>") -> Image.Image:
    try:
      img = Image.open(io.BytesIO(data))
      if getattr(img, "is_animated", False):
        img.seek(0)
      img.load()
      return img
    except Exception as e:
      raise SourceParseError(name, f"cannot decode image: {e}") from e

  def _to_bytes(self, img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=_WORK_FORMAT, compress_level=self.work_compress_level)
    return buf.getvalue()

  def decode_to_grayscale_raw(self, data: bytes) -> GrayRaster:
    img = _flatten_on_white(self.open(data)).convert("L")
    pixels = np.asarray(img, dtype=np.uint8)
    return GrayRaster(width=img.width, height=img.height, pixels=pixels)

  def metadata(self, data: bytes) -> Tuple[int, int]:
    img = self.open(data)
    return int(img.width), int(img.height)

  def resize(self, data: bytes, width: int, height: int, kernel: str = "lanczos3") -> bytes:
    img = self.open(data)
    if img.mode not in ("RGB", "RGBA"):
      img = img.convert("RGBA")
    resample = RESAMPLE_KERNELS.get(kernel, Image.Resampling.LANCZOS)
    if img.size == (int(width), int(height)):
      return self._to_bytes(img)
    return self._to_bytes(img.resize((int(width), int(height)), resample=resample))

  def composite_overlay(self, data: bytes, overlay: bytes, top: int = 0, left: int = 0) -> bytes:
    base = self.open(data).convert("RGBA")
    layer = self.open(overlay, name="<overlay>").convert("RGBA")
    base.alpha_composite(layer, dest=(int(left), int(top)))
    return self._to_bytes(base)

  def encode(self, data: bytes, output: OutputConfig) -> bytes:
    img = self.open(data)
    buf = io.BytesIO()
    try:
      if output.format == "jpeg":
        _flatten_on_white(img).save(
          buf,
          format="JPEG",
          quality=int(output.jpeg_quality),
          subsampling=0,
          optimize=True,
        )
      else:
        if output.png_palette:
          img = img.convert("RGBA").quantize(colors=256, method=Image.Quantize.FASTOCTREE)
        img.save(buf, format="PNG", compress_level=int(output.png_compression))
    except (OSError, ValueError) as e:
      raise RenderError(f"cannot encode {output.format}: {e}") from e
    return buf.getvalue()
