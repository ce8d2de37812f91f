from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence


def _matches(name: str, extensions: Sequence[str]) -> bool:
  if name.startswith("~$"):
    return False
  return os.path.splitext(name)[1].lower() in extensions


def iter_files(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
  """
  Lazily yield files under `root` whose suffix is in `extensions`.

  Walks with an explicit stack; entries are visited in sorted order so the
  sequence is stable between runs.
  """
  exts = tuple(e.lower() for e in extensions)
  root = Path(root)
  if not root.is_dir():
    return
  stack = [root]
  while stack:
    current = stack.pop()
    try:
      entries = sorted(os.scandir(current), key=lambda e: e.name)
    except OSError:
      continue
    subdirs = []
    for entry in entries:
      if entry.is_dir(follow_symlinks=False):
        subdirs.append(Path(entry.path))
      elif entry.is_file() and _matches(entry.name, exts):
        yield Path(entry.path)
    # Reverse so the alphabetically first directory is popped first.
    stack.extend(reversed(subdirs))


def has_files(root: Path, extensions: Iterable[str]) -> bool:
  for _path in iter_files(root, extensions):
    return True
  return False


def relative_folder(image_path: Path, images_dir: Path) -> Path:
  return Path(image_path).parent.relative_to(images_dir)


def text_dir_for_image(image_path: Path, images_dir: Path, text_dir: Path) -> Path:
  """Text subfolder mirroring the image's folder, or the text root when absent."""
  candidate = Path(text_dir) / relative_folder(image_path, images_dir)
  return candidate if candidate.is_dir() else Path(text_dir)


def output_path_for(result_dir: Path, image_path: Path, images_dir: Path, index: int, extension: str) -> Path:
  rel = relative_folder(image_path, images_dir)
  return Path(result_dir) / rel / Path(image_path).stem / f"text_{index + 1}" / f"result.{extension}"
