# tango_difficulty.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple
import random

from tango_core import (
    SIZE,
    Constraint,
    Grid,
    Prefilled,
    all_adjacent_links,
    coord_key,
    has_unique_solution,
    make_grid,
    parse_constraints,
    parse_coord,
    propagate,
)

DIFFICULTY_LEVELS = range(1, 8)
MAX_ATTEMPTS = 80
TOLERANCE = 1


# ---------- Empreinte (déduplication) ----------

def _link_key(con: Sequence[str]) -> str:
    a, b, rel = con
    # un lien (a, b) et son inverse (b, a) sont le même lien
    if parse_coord(b) < parse_coord(a):
        a, b = b, a
    return f"{a}:{b}:{rel}"


def fingerprint(prefilled: Prefilled, constraints: Sequence[Sequence[str]]) -> str:
    """
    Chaîne canonique indépendante de l'ordre :
    cases pré-remplies triées, puis liens triés.
    """
    pf = "|".join(f"{k}:{v}" for k, v in sorted(prefilled.items()))
    cs = "|".join(sorted(_link_key(c) for c in constraints))
    return f"{pf}__{cs}"


# ====================================================
#   MESURE DE DIFFICULTÉ
# ====================================================

# Seuils (nb d'indices -> difficulté) par profondeur de propagation.
# Clé None = propagation insuffisante (backtracking nécessaire).
DIFFICULTY_TABLE: Dict[Optional[int], List[Tuple[int, int]]] = {
    0: [(22, 1), (17, 2), (0, 3)],
    1: [(16, 2), (11, 3), (0, 4)],
    2: [(12, 3), (8, 4), (0, 5)],
    None: [(14, 4), (10, 5), (7, 6), (0, 7)],
}


def classify(
    max_depth: int,
    unsolved: int,
    total_clues: int,
    table: Dict[Optional[int], List[Tuple[int, int]]] = DIFFICULTY_TABLE,
) -> int:
    key = max_depth if unsolved == 0 else None
    for threshold, level in table[key]:
        if total_clues >= threshold:
            return level
    return table[key][-1][1]


def _analyse(prefilled: Prefilled, constraints: Sequence[Constraint], size: int) -> Tuple[int, int, int]:
    res = propagate(make_grid(prefilled, size), parse_constraints(constraints))
    total_clues = len(prefilled) + len(constraints)
    return res.max_depth, res.unsolved, total_clues


def measure_difficulty(
    prefilled: Prefilled,
    constraints: Sequence[Constraint] = (),
    size: int = SIZE,
    table: Dict[Optional[int], List[Tuple[int, int]]] = DIFFICULTY_TABLE,
) -> int:
    """Difficulté 1 (facile) .. 7 (difficile) d'après la propagation seule."""
    max_depth, unsolved, total_clues = _analyse(prefilled, constraints, size)
    return classify(max_depth, unsolved, total_clues, table)


def hardness_score(prefilled: Prefilled, constraints: Sequence[Constraint] = (), size: int = SIZE) -> int:
    """Score secondaire, utilisé uniquement pour le classement en percentiles."""
    max_depth, unsolved, total_clues = _analyse(prefilled, constraints, size)
    return (2 * size * size - total_clues) * 2 + max_depth * 5 + (15 if unsolved > 0 else 0)


def percentile_levels(scores: Sequence[int], levels: int = 7) -> List[int]:
    """
    Niveau 1..levels par rang (tri stable croissant sur le score) :
    floor(rang * levels / n) + 1, plafonné à levels.
    """
    n = len(scores)
    order = sorted(range(n), key=lambda i: scores[i])
    out = [0] * n
    for rank, i in enumerate(order):
        out[i] = min(rank * levels // n + 1, levels)
    return out


# ====================================================
#   PROFILS
# ====================================================

@dataclass
class DifficultyProfile:
    level: int
    name: str
    prefill_min: int
    prefill_max: int


PROFILES: Dict[int, DifficultyProfile] = {
    p.level: p
    for p in (
        DifficultyProfile(1, "very_easy", 15, 20),
        DifficultyProfile(2, "easy", 12, 15),
        DifficultyProfile(3, "easy_plus", 9, 12),
        DifficultyProfile(4, "medium", 7, 9),
        DifficultyProfile(5, "medium_plus", 5, 7),
        DifficultyProfile(6, "hard", 3, 5),
        DifficultyProfile(7, "expert", 1, 3),
    )
}


def get_profile(level: int) -> DifficultyProfile:
    try:
        return PROFILES[level]
    except KeyError:
        raise ValueError(f"Difficulté inconnue: {level} (attendu 1..7)") from None


# ====================================================
#   GÉNÉRATION D'UN PUZZLE
# ====================================================

def _accept(
    prefilled: Prefilled,
    constraints: List[Constraint],
    target: int,
    fingerprints: Set[str],
    size: int,
    tolerance: int,
) -> Optional[int]:
    fp = fingerprint(prefilled, constraints)
    if fp in fingerprints:
        return None
    diff = measure_difficulty(prefilled, constraints, size)
    if abs(diff - target) > tolerance:
        return None
    fingerprints.add(fp)
    return diff


def generate_puzzle(
    solution: Grid,
    target: int,
    fingerprints: Set[str],
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_ATTEMPTS,
    tolerance: int = TOLERANCE,
) -> Optional[Tuple[Prefilled, List[Constraint], int]]:
    """
    Tire des cases pré-remplies dans 'solution' (nombre selon le profil de
    'target'), puis ajoute des liens au hasard jusqu'à l'unicité.
    Retourne (prefilled, constraints, difficulty) ou None si le budget est épuisé.
    L'empreinte du puzzle accepté est ajoutée à 'fingerprints'.
    """
    rng = rng or random.Random()
    profile = get_profile(target)
    size = len(solution)
    cells = [(r, c) for r in range(size) for c in range(size)]
    adjacent = all_adjacent_links(solution)

    for _attempt in range(max_attempts):
        # plafonné au nombre de cases (petites grilles)
        n_prefilled = min(rng.randint(profile.prefill_min, profile.prefill_max), len(cells))
        prefilled = {coord_key(r, c): solution[r][c] for (r, c) in rng.sample(cells, n_prefilled)}

        # sans liens d'abord
        if has_unique_solution(prefilled, [], size):
            diff = _accept(prefilled, [], target, fingerprints, size, tolerance)
            if diff is not None:
                return prefilled, [], diff
            continue

        # ajout des liens un par un jusqu'à l'unicité
        shuffled = list(adjacent)
        rng.shuffle(shuffled)
        used: List[Constraint] = []
        for con in shuffled:
            used.append(con)
            if has_unique_solution(prefilled, used, size):
                diff = _accept(prefilled, list(used), target, fingerprints, size, tolerance)
                if diff is not None:
                    return prefilled, list(used), diff
                break

    return None


def generate_puzzles_for_profile(
    profile: DifficultyProfile,
    count: int,
    solutions: Sequence[Grid],
    fingerprints: Optional[Set[str]] = None,
    rng: Optional[random.Random] = None,
    max_tries: Optional[int] = None,
) -> List[Tuple[Prefilled, List[Constraint], int]]:
    """
    Génère `count` puzzles pour un profil donné, sans doublons vis-à-vis de
    'fingerprints' (mis à jour au fil de l'eau).
    """
    rng = rng or random.Random()
    fingerprints = fingerprints if fingerprints is not None else set()
    if not solutions:
        raise ValueError("Aucune grille solution fournie")

    puzzles: List[Tuple[Prefilled, List[Constraint], int]] = []
    tries = 0
    max_tries = max_tries if max_tries is not None else count * 50

    while len(puzzles) < count and tries < max_tries:
        if tries and tries % 100 == 0:
            print(f"[{profile.name}] tries={tries}, ok={len(puzzles)}/{count}")
        tries += 1

        solution = rng.choice(solutions)
        result = generate_puzzle(solution, profile.level, fingerprints, rng=rng)
        if result is not None:
            puzzles.append(result)

    if len(puzzles) < count:
        raise RuntimeError(f"Seulement {len(puzzles)} puzzles générés pour le profil {profile.name}")
    return puzzles
