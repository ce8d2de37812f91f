from inserter.cache import ImageCache


def test_put_and_get():
  cache = ImageCache(max_bytes=100)
  cache.put("a", b"x" * 10)
  assert cache.get("a") == b"x" * 10
  assert "a" in cache and len(cache) == 1
  assert cache.current_bytes == 10
  assert cache.get("missing") is None


def test_fifo_eviction_ignores_reads():
  cache = ImageCache(max_bytes=30)
  cache.put("a", b"1" * 10)
  cache.put("b", b"2" * 10)
  cache.put("c", b"3" * 10)
  cache.get("a")
  cache.put("d", b"4" * 10)
  assert "a" not in cache
  assert all(k in cache for k in ("b", "c", "d"))
  assert cache.current_bytes == 30


def test_eviction_makes_room_for_large_entry():
  cache = ImageCache(max_bytes=30)
  for key in "abc":
    cache.put(key, b"." * 10)
  cache.put("big", b"." * 25)
  assert list(k for k in "abc" if k in cache) == []
  assert "big" in cache and cache.current_bytes == 25


def test_oversized_entry_is_not_stored():
  cache = ImageCache(max_bytes=10)
  cache.put("small", b"12345")
  cache.put("huge", b"." * 11)
  assert "huge" not in cache
  assert "small" in cache
  path.write_bytes(b"changed")
  assert cache.read(path) == b"data"


def test_clear():
  cache = ImageCache(max_bytes=100)
  cache.put("a", b"abc")
  cache.clear()
  assert len(cache) == 0 and cache.current_bytes == 0
