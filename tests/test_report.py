import matplotlib

matplotlib.use("Agg")

from tango_core import MOON as M, SUN as S, all_adjacent_links  # noqa: E402
from tango_corpus import Puzzle  # noqa: E402
from tango_report import build_report_pdf, difficulty_histogram  # noqa: E402


def test_histogram_lists_every_level():
    puzzles = [Puzzle(1, 6, {}, [], 3), Puzzle(2, 6, {}, [], 3), Puzzle(3, 6, {}, [], None)]
    assert difficulty_histogram(puzzles) == {1: 0, 2: 0, 3: 2, 4: 0, 5: 0, 6: 0, 7: 0}


def test_report_pdf(tmp_path, solution):
    puzzles = [
        Puzzle(1, 6, {"0,0": S, "3,4": M}, all_adjacent_links(solution)[:5], 1),
        Puzzle(2, 6, {"5,5": M}, [], 7),
    ]
    out = tmp_path / "rapport.pdf"
    hist = build_report_pdf(puzzles, str(out), samples_per_level=2)
    assert out.read_bytes().startswith(b"%PDF")
    assert hist[1] == 1 and hist[7] == 1
