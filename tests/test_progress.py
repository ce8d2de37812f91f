import io

from inserter.progress import ProgressBar


def test_render_line():
  bar = ProgressBar(4, "Progress", width=8)
  assert bar.render(2) == "Progress: [████░░░░]  50.0% (2/4)"
  assert bar.render(10).endswith("100.0% (4/4)")


def test_update_and_complete_write_in_place():
  stream = io.StringIO()
  bar = ProgressBar(2, "Images", width=4, stream=stream)
  bar.update(1)
  bar.complete()
  out = stream.getvalue()
  assert out.startswith("\rImages: [██░░]")
  assert out.endswith("(2/2)\n")
  assert bar.current == 2


def test_empty_total_writes_nothing():
  stream = io.StringIO()
  bar = ProgressBar(0, stream=stream)
  bar.update(0)
  bar.complete()
  assert stream.getvalue() == ""
