import json

import pytest

from tango_core import EQUAL, MOON as M, OPPOSED, SUN as S
from tango_corpus import CorpusError, Puzzle, dumps_puzzles, load_puzzles, next_id, save_puzzles


def _puzzle(pid=1, difficulty=3):
    return Puzzle(
        pid,
        6,
        {"0,0": S, "2,3": M},
        [("0,0", "0,1", EQUAL), ("4,4", "5,4", OPPOSED)],
        difficulty,
    )


def test_dict_round_trip():
    p = _puzzle()
    assert Puzzle.from_dict(p.to_dict()) == p
    assert Puzzle.from_dict(json.loads(json.dumps(p.to_dict()))) == p


def test_difficulty_is_optional():
    data = _puzzle().to_dict()
    del data["difficulty"]
    p = Puzzle.from_dict(data)
    assert p.difficulty is None
    assert "difficulty" not in p.to_dict()


def test_save_and_load(tmp_path):
    path = tmp_path / "app-data" / "puzzles.json"
    puzzles = [_puzzle(1), _puzzle(2, difficulty=7)]
    save_puzzles(puzzles, str(path))
    assert load_puzzles(str(path)) == puzzles
    assert list(path.parent.iterdir()) == [path]


def test_output_is_minified_with_glyphs():
    text = dumps_puzzles([_puzzle()])
    assert " " not in text
    assert S in text and M in text
    assert text.startswith('[{"id":1,"size":6,')


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"id": 1}',
        '[{"id": 1, "size": 6, "prefilled": {}}]',
        '[{"id": 1, "size": 5, "prefilled": {}, "constraints": []}]',
        '[{"id": 1, "size": 6, "prefilled": {"0,0": "X"}, "constraints": []}]',
        '[{"id": 1, "size": 6, "prefilled": {"9,0": "☀️"}, "constraints": []}]',
        '[{"id": 1, "size": 6, "prefilled": {"a": "☀️"}, "constraints": []}]',
        '[{"id": 1, "size": 6, "prefilled": {}, "constraints": [["0,0", "0,1", "?"]]}]',
        '[{"id": 1, "size": 6, "prefilled": {}, "constraints": [["0,0", "0,1"]]}]',
        '[{"id": 1, "size": 6, "prefilled": {}, "constraints": [], "difficulty": 9}]',
        '[{"id": "1", "size": 6, "prefilled": {}, "constraints": []}]',
        '[{"id": 0, "size": 6, "prefilled": {}, "constraints": []}]',
        '[{"id": -5, "size": 6, "prefilled": {}, "constraints": []}]',
    ],
)
def test_malformed_corpus(tmp_path, content):
    path = tmp_path / "puzzles.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CorpusError):
        load_puzzles(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(CorpusError):
        load_puzzles(str(tmp_path / "absent.json"))


def test_next_id():
    assert next_id([]) == 1
    assert next_id([_puzzle(4), _puzzle(2)]) == 5
