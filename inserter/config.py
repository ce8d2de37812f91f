from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from inserter.errors import SetupError


IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
WORKBOOK_EXTENSIONS = (".xlsx", ".xlsm", ".xls")


@dataclass(frozen=True)
class RegionConfig:
  cell_size: int = 5
  # Pixels darker than this (0-255 gray) mark their grid cell as occupied.
  threshold: int = 200
  min_width: int = 100
  min_height: int = 30
  merge_gap_cells: int = 4


@dataclass(frozen=True)
class LayoutConfig:
  min_font_size: int = 14
  max_font_size: int = 72
  max_iterations: int = 10
  width_ratio: float = 0.85
  height_ratio: float = 0.9
  bold_scale: float = 1.1
  line_spacing: float = 1.2
  font_family: str = "Arial, Helvetica, sans-serif"


@dataclass(frozen=True)
class RenderConfig:
  upscale_threshold: int = 1200
  max_upscale: float = 2.0
  base_density: int = 300


@dataclass(frozen=True)
class OutputConfig:
  format: str = "jpeg"
  jpeg_quality: int = 90
  png_compression: int = 9
  png_palette: bool = True

  @property
  def extension(self) -> str:
    return "jpg" if self.format == "jpeg" else self.format


@dataclass(frozen=True)
class BatchConfig:
  images_dir: Path = Path("images")
  text_dir: Path = Path("text")
  result_dir: Path = Path("result")
  batch_size: int = 4
  cache_max_bytes: int = 100 * 1024 * 1024


def load_config(config_path: Optional[str] = "config.yaml") -> Dict[str, Any]:
  if not config_path:
    return {}
  path = Path(config_path)
  if not path.exists():
    return {}
  with path.open("r", encoding="utf-8") as f:
    cfg = yaml.safe_load(f) or {}
  if not isinstance(cfg, dict):
    raise SetupError(f"{path} must contain a YAML mapping (key -> value).")
  return cfg


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
  sec = config.get(name, {}) if isinstance(config, dict) else {}
  return sec if isinstance(sec, dict) else {}


def build_region_config(config: Dict[str, Any]) -> RegionConfig:
  sec = _section(config, "regions")
  d = RegionConfig()
  return RegionConfig(
    cell_size=max(1, int(sec.get("cell_size", d.cell_size))),
    threshold=int(sec.get("threshold", d.threshold)),
    min_width=int(sec.get("min_width", d.min_width)),
    min_height=int(sec.get("min_height", d.min_height)),
    merge_gap_cells=int(sec.get("merge_gap_cells", d.merge_gap_cells)),
  )


def build_layout_config(config: Dict[str, Any]) -> LayoutConfig:
  sec = _section(config, "layout")
  d = LayoutConfig()
  min_size = int(sec.get("min_font_size", d.min_font_size))
  max_size = max(min_size, int(sec.get("max_font_size", d.max_font_size)))
  return LayoutConfig(
    min_font_size=min_size,
    max_font_size=max_size,
    max_iterations=max(1, int(sec.get("max_iterations", d.max_iterations))),
    width_ratio=float(sec.get("width_ratio", d.width_ratio)),
    height_ratio=float(sec.get("height_ratio", d.height_ratio)),
    bold_scale=float(sec.get("bold_scale", d.bold_scale)),
    line_spacing=float(sec.get("line_spacing", d.line_spacing)),
    font_family=str(sec.get("font_family", d.font_family)),
  )


def build_render_config(config: Dict[str, Any]) -> RenderConfig:
  sec = _section(config, "render")
  d = RenderConfig()
  return RenderConfig(
    upscale_threshold=int(sec.get("upscale_threshold", d.upscale_threshold)),
    max_upscale=max(1.0, float(sec.get("max_upscale", d.max_upscale))),
    base_density=int(sec.get("base_density", d.base_density)),
  )


def build_output_config(config: Dict[str, Any]) -> OutputConfig:
  sec = _section(config, "output")
  d = OutputConfig()
  fmt = str(sec.get("format", d.format) or d.format).strip().lower()
  if fmt == "jpg":
    fmt = "jpeg"
  if fmt not in ("jpeg", "png"):
    raise SetupError(f"Unsupported output format: {fmt!r} (expected 'jpeg' or 'png')")
  return OutputConfig(
    format=fmt,
    jpeg_quality=max(1, min(100, int(sec.get("jpeg_quality", d.jpeg_quality)))),
    png_compression=max(0, min(9, int(sec.get("png_compression", d.png_compression)))),
    png_palette=bool(sec.get("png_palette", d.png_palette)),
  )


def build_batch_config(config: Dict[str, Any], root: Optional[Path] = None) -> BatchConfig:
  paths = _section(config, "paths")
  batch = _section(config, "batch")
  d = BatchConfig()
  base = Path(root) if root is not None else Path.cwd()

  def _resolve(key: str, default: Path) -> Path:
    p = Path(str(paths.get(key) or default))
    return p if p.is_absolute() else base / p

  return BatchConfig(
    images_dir=_resolve("images_dir", d.images_dir),
    text_dir=_resolve("text_dir", d.text_dir),
    result_dir=_resolve("result_dir", d.result_dir),
    batch_size=max(1, int(batch.get("batch_size", d.batch_size))),
    cache_max_bytes=max(0, int(batch.get("cache_max_bytes", d.cache_max_bytes))),
  )
