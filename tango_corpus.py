# tango_corpus.py
"""
Collection de puzzles persistée (JSON consommé par l'appli mobile).

Format : tableau JSON d'objets
  {"id", "size", "prefilled": {"r,c": "☀️"|"🌑"}, "constraints": [["r,c", "r,c", "="|"x"]], "difficulty"}

Réécriture complète du fichier (fichier temporaire puis remplacement atomique).
"""

from __future__ import annotations
from dataclasses import dataclass, field
import json
import os
import tempfile
from typing import Any, Dict, List, Optional

from tango_core import RELATIONS, SYMBOLS, Constraint, Prefilled, parse_coord

DEFAULT_PUZZLES_PATH = os.path.join("app-data", "puzzles.json")


class CorpusError(ValueError):
    """Fichier de puzzles illisible ou mal formé."""


@dataclass
class Puzzle:
    id: int
    size: int
    prefilled: Prefilled = field(default_factory=dict)
    constraints: List[Constraint] = field(default_factory=list)
    difficulty: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "size": self.size,
            "prefilled": dict(self.prefilled),
            "constraints": [list(c) for c in self.constraints],
        }
        if self.difficulty is not None:
            out["difficulty"] = self.difficulty
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "Puzzle":
        if not isinstance(data, dict):
            raise CorpusError(f"Puzzle attendu sous forme d'objet, reçu {type(data).__name__}")
        missing = [k for k in ("id", "size", "prefilled", "constraints") if k not in data]
        if missing:
            raise CorpusError(f"Puzzle {data.get('id', '?')} : champs manquants {missing}")

        pid, size = data["id"], data["size"]
        if not isinstance(pid, int) or isinstance(pid, bool) or pid <= 0:
            raise CorpusError(f"id invalide: {pid!r}")
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0 or size % 2:
            raise CorpusError(f"Puzzle {pid} : taille invalide {size!r}")

        prefilled = data["prefilled"]
        if not isinstance(prefilled, dict):
            raise CorpusError(f"Puzzle {pid} : 'prefilled' doit être un objet")
        for key, val in prefilled.items():
            _check_coord(pid, key, size)
            if val not in SYMBOLS:
                raise CorpusError(f"Puzzle {pid} : symbole inconnu {val!r} en {key}")

        raw_constraints = data["constraints"]
        if not isinstance(raw_constraints, list):
            raise CorpusError(f"Puzzle {pid} : 'constraints' doit être un tableau")
        constraints: List[Constraint] = []
        for con in raw_constraints:
            if not isinstance(con, (list, tuple)) or len(con) != 3:
                raise CorpusError(f"Puzzle {pid} : contrainte mal formée {con!r}")
            a, b, rel = con
            _check_coord(pid, a, size)
            _check_coord(pid, b, size)
            if rel not in RELATIONS:
                raise CorpusError(f"Puzzle {pid} : relation inconnue {rel!r}")
            constraints.append((a, b, rel))

        difficulty = data.get("difficulty")
        if difficulty is not None and (not isinstance(difficulty, int) or not 1 <= difficulty <= 7):
            raise CorpusError(f"Puzzle {pid} : difficulté invalide {difficulty!r}")

        return cls(pid, size, dict(prefilled), constraints, difficulty)


def _check_coord(pid: int, key: Any, size: int) -> None:
    try:
        r, c = parse_coord(key)
    except (AttributeError, ValueError):
        raise CorpusError(f"Puzzle {pid} : coordonnée invalide {key!r}") from None
    if not (0 <= r < size and 0 <= c < size):
        raise CorpusError(f"Puzzle {pid} : coordonnée hors grille {key!r}")


# ---------- Lecture / écriture ----------

def load_puzzles(path: str = DEFAULT_PUZZLES_PATH) -> List[Puzzle]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CorpusError(f"Lecture impossible de {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CorpusError(f"JSON invalide dans {path}: {e}") from e

    if not isinstance(data, list):
        raise CorpusError(f"{path} : tableau de puzzles attendu")
    return [Puzzle.from_dict(item) for item in data]


def dumps_puzzles(puzzles: List[Puzzle]) -> str:
    """JSON minifié, symboles écrits tels quels."""
    return json.dumps([p.to_dict() for p in puzzles], ensure_ascii=False, separators=(",", ":"))


def save_puzzles(puzzles: List[Puzzle], path: str = DEFAULT_PUZZLES_PATH) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".puzzles-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(dumps_puzzles(puzzles))
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def next_id(puzzles: List[Puzzle]) -> int:
    return max((p.id for p in puzzles), default=0) + 1
