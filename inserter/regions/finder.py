from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from inserter.config import RegionConfig


@dataclass(frozen=True)
class Region:
  x: int
  y: int
  width: int
  height: int

  @property
  def area(self) -> int:
    return int(self.width) * int(self.height)

  @property
  def bottom(self) -> int:
    return self.y + self.height


def _as_gray_array(raster: Any) -> np.ndarray:
  width = int(raster.width)
  height = int(raster.height)
  pixels = raster.pixels
  if isinstance(pixels, np.ndarray):
    arr = pixels
  else:
    arr = np.frombuffer(bytes(pixels), dtype=np.uint8)
  return arr.reshape(height, width)


def occupancy_grid(gray: np.ndarray, cell_size: int, threshold: int) -> np.ndarray:
  """
  Boolean (grid_h, grid_w) map; a cell is occupied if any of its pixels is
  darker than `threshold`. Partial cells on the right/bottom edge count too.
  """
  height, width = gray.shape
  grid_w = int(math.ceil(width / float(cell_size)))
  grid_h = int(math.ceil(height / float(cell_size)))
  dark = np.zeros((grid_h * cell_size, grid_w * cell_size), dtype=bool)
  dark[:height, :width] = gray < threshold
  return dark.reshape(grid_h, cell_size, grid_w, cell_size).any(axis=(1, 3))


def _empty_row_runs(row_empty: np.ndarray, min_cells: int) -> List[tuple]:
  runs: List[tuple] = []
  run_len = 0
  start = 0
  for gy, empty in enumerate(row_empty.tolist()):
    if empty:
      if run_len == 0:
        start = gy
      run_len += 1
      continue
    if run_len >= min_cells:
      runs.append((start, run_len))
    run_len = 0
  if run_len >= min_cells:
    runs.append((start, run_len))
  return runs


def find_empty_regions(
  raster: Any,
  min_height: Optional[int] = None,
  config: RegionConfig = RegionConfig(),
) -> List[Region]:
  """
  Full-width horizontal bands with no dark pixel, largest first.

  `raster` is any object with `width`, `height` and 8-bit grayscale `pixels`
  (row-major bytes or a numpy array). Bands always span the full image width;
  the caller filters by minimum width.
  """
  min_h = int(config.min_height if min_height is None else min_height)
  cs = int(config.cell_size)

  gray = _as_gray_array(raster)
  height, width = gray.shape
  if width <= 0 or height <= 0:
    return []

  grid = occupancy_grid(gray, cs, int(config.threshold))
  row_empty = ~grid.any(axis=1)
  min_cells = int(math.ceil(min_h / float(cs)))

  bands: List[List[int]] = []
  for start, run_len in _empty_row_runs(row_empty, min_cells):
    y = start * cs
    # The last grid row may extend past the image.
    h = min(run_len * cs, height - y)
    bands.append([y, h])

  merge_gap = cs * int(config.merge_gap_cells)
  merged: List[List[int]] = []
  current: Optional[List[int]] = None
  for y, h in bands:
    if current is None:
      current = [y, h]
      continue
    if y - (current[0] + current[1]) < merge_gap:
      current[1] = y + h - current[0]
    else:
      merged.append(current)
      current = [y, h]
  if current is not None:
    merged.append(current)

  regions = [Region(0, int(y), int(width), int(h)) for y, h in merged if h >= min_h]
  return sorted(regions, key=lambda r: r.area, reverse=True)
