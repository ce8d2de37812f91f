from __future__ import annotations

from collections import OrderedDict
from typing import Optional


class ImageCache:
  """
  Path -> bytes read cache with a byte budget.

  Eviction drops the oldest *inserted* entry first (FIFO); lookups do not
  refresh an entry's position.
  """

  def __init__(self, max_bytes: int = 100 * 1024 * 1024):
    self.max_bytes = int(max_bytes)
    self._entries: "OrderedDict[str, bytes]" = OrderedDict()
    self.current_bytes = 0

  def __len__(self) -> int:
    return len(self._entries)

  def __contains__(self, key: object) -> bool:
    return str(key) in self._entries

  def get(self, key: str) -> Optional[bytes]:
    return self._entries.get(str(key))

  def _evict_oldest(self) -> None:
    _key, data = self._entries.popitem(last=False)
    self.current_bytes -= len(data)

  def put(self, key: str, data: bytes) -> None:
    key = str(key)
    if key in self._entries:
      return
    size = len(data)
    # Entries larger than the whole budget are served but not kept.
    if size > self.max_bytes:
      return
    while self._entries and self.current_bytes + size > self.max_bytes:
      self._evict_oldest()
    self._entries[key] = data
    self.current_bytes += size

  def clear(self) -> None:
    self._entries.clear()
    self.current_bytes = 0
