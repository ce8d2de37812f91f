import numpy as np

from inserter.config import RegionConfig
from inserter.regions.finder import Region, find_empty_regions, occupancy_grid
from inserter.render.surface import GrayRaster


def _raster(width, height, dark_rows=(), value=0):
  pixels = np.full((height, width), 255, dtype=np.uint8)
  for y0, y1 in dark_rows:
    pixels[y0:y1, :] = value
  return GrayRaster(width=width, height=height, pixels=pixels)


def test_blank_image_is_one_full_region():
  assert find_empty_regions(_raster(400, 300)) == [Region(0, 0, 400, 300)]


def test_height_not_multiple_of_cell_is_clamped():
  regions = find_empty_regions(_raster(400, 303))
  assert regions == [Region(0, 0, 400, 303)]


def test_dark_band_splits_into_two_regions_largest_first():
  regions = find_empty_regions(_raster(400, 300, dark_rows=[(100, 130)]))
  assert regions == [Region(0, 130, 400, 170), Region(0, 0, 400, 100)]
  assert [r.area for r in regions] == sorted((r.area for r in regions), reverse=True)


def test_thin_dark_line_is_merged_over():
  # 10 px of content is closer than the merge gap (4 cells = 20 px).
  regions = find_empty_regions(_raster(400, 300, dark_rows=[(100, 110)]))
  assert regions == [Region(0, 0, 400, 300)]


def test_short_bands_are_dropped():
  regions = find_empty_regions(_raster(400, 300, dark_rows=[(0, 280)]))
  assert regions == []
  regions = find_empty_regions(_raster(400, 300, dark_rows=[(0, 250)]))
  assert regions == [Region(0, 250, 400, 50)]


def test_every_region_meets_minimums():
  raster = _raster(640, 480, dark_rows=[(40, 60), (150, 170), (300, 305), (420, 440)])
  cfg = RegionConfig()
  for region in find_empty_regions(raster):
    assert region.height >= cfg.min_height
    assert region.width >= cfg.min_width
    assert region.bottom <= 480


def test_narrow_image_still_reports_bands():
  # Width filtering belongs to the insertion step.
  assert find_empty_regions(_raster(80, 300)) == [Region(0, 0, 80, 300)]
  assert all(r.width < RegionConfig().min_width for r in find_empty_regions(_raster(80, 300)))


def test_fully_dark_image_has_no_regions():
  assert find_empty_regions(_raster(400, 300, dark_rows=[(0, 300)])) == []


def test_threshold_is_strict():
  assert find_empty_regions(_raster(400, 300, dark_rows=[(0, 300)], value=200)) == [Region(0, 0, 400, 300)]
  assert find_empty_regions(_raster(400, 300, dark_rows=[(0, 300)], value=199)) == []


def test_single_dark_pixel_blocks_its_row():
  raster = _raster(400, 300)
  raster.pixels[150, 399] = 0
  regions = find_empty_regions(raster)
  # Row cell 30 (y 150..154) is occupied; the gap is one cell, so the bands merge.
  assert regions == [Region(0, 0, 400, 300)]
  grid = occupancy_grid(raster.pixels, 5, 200)
  assert grid.shape == (60, 80)
  assert grid[30, 79] and grid.sum() == 1


def test_accepts_row_major_bytes():
  pixels = np.full((300, 400), 255, dtype=np.uint8)
  pixels[100:130, :] = 0
  raster = GrayRaster(width=400, height=300, pixels=pixels.tobytes())
  assert find_empty_regions(raster) == find_empty_regions(_raster(400, 300, dark_rows=[(100, 130)]))


def test_deterministic():
  raster = _raster(500, 700, dark_rows=[(100, 140), (300, 330), (600, 610)])
  assert find_empty_regions(raster) == find_empty_regions(raster)
