# tango_core.py
"""
Moteur Tango commun :
- grille NxN (N pair, 6 par défaut), deux symboles ☀️ / 🌑
- règles (équilibre des lignes, pas trois symboles identiques d'affilée)
- table des lignes valides + énumération de toutes les grilles solutions
- propagation de contraintes (équilibre, consécutifs, liens = / x)
- comptage des solutions (propagation + backtracking), borné par 'limit'
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

SUN = "☀️"
MOON = "🌑"
SYMBOLS = (SUN, MOON)
OPPOSITE: Dict[str, str] = {SUN: MOON, MOON: SUN}

EQUAL = "="
OPPOSED = "x"
RELATIONS = (EQUAL, OPPOSED)

SIZE = 6

Cell = Optional[str]
Grid = List[List[Cell]]
Pos = Tuple[int, int]
Link = Tuple[int, int, int, int, str]  # r1, c1, r2, c2, relation
Prefilled = Dict[str, str]
Constraint = Tuple[str, str, str]  # ("r,c", "r,c", "=" | "x")


# ---------- Coordonnées & grilles ----------

def coord_key(r: int, c: int) -> str:
    return f"{r},{c}"


def parse_coord(key: str) -> Pos:
    r, c = key.split(",")
    return int(r), int(c)


def check_size(size: int) -> None:
    if size <= 0 or size % 2 != 0:
        raise ValueError(f"Taille invalide: {size} (doit être paire et positive)")


def empty_grid(size: int = SIZE) -> Grid:
    return [[None] * size for _ in range(size)]


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def make_grid(prefilled: Prefilled, size: int = SIZE) -> Grid:
    """Grille de taille 'size' remplie avec les cases pré-remplies."""
    grid = empty_grid(size)
    for key, val in prefilled.items():
        r, c = parse_coord(key)
        grid[r][c] = val
    return grid


def parse_constraints(constraints: Sequence[Sequence[str]]) -> List[Link]:
    links: List[Link] = []
    for a, b, rel in constraints:
        r1, c1 = parse_coord(a)
        r2, c2 = parse_coord(b)
        links.append((r1, c1, r2, c2, rel))
    return links


def column(grid: Grid, c: int) -> List[Cell]:
    return [row[c] for row in grid]


def count_unknown(grid: Grid) -> int:
    return sum(1 for row in grid for v in row if v is None)


# ---------- Règles ----------

def line_balanced(line: Sequence[Cell], complete: bool = False) -> bool:
    """
    Équilibre d'une ligne (ou colonne).
    Partiel : aucun symbole ne dépasse N/2 parmi les cases connues.
    Complet : exactement N/2 de chaque symbole.
    """
    half = len(line) // 2
    suns = sum(1 for v in line if v == SUN)
    moons = sum(1 for v in line if v == MOON)
    if complete:
        return suns == half and moons == half
    return suns <= half and moons <= half


def no_triple_run(line: Sequence[Cell]) -> bool:
    """Pas trois cases connues consécutives avec le même symbole."""
    for i in range(len(line) - 2):
        v = line[i]
        if v is not None and v == line[i + 1] and v == line[i + 2]:
            return False
    return True


def links_satisfied(grid: Grid, links: Sequence[Link]) -> bool:
    """Les liens dont les deux extrémités sont connues doivent être respectés."""
    for r1, c1, r2, c2, rel in links:
        v1, v2 = grid[r1][c1], grid[r2][c2]
        if v1 is None or v2 is None:
            continue
        if (v1 == v2) != (rel == EQUAL):
            return False
    return True


def is_consistent(grid: Grid, links: Sequence[Link] = ()) -> bool:
    """Chaque ligne et colonne respecte l'équilibre partiel et la règle des consécutifs."""
    size = len(grid)
    for r in range(size):
        if not (line_balanced(grid[r]) and no_triple_run(grid[r])):
            return False
    for c in range(size):
        col = column(grid, c)
        if not (line_balanced(col) and no_triple_run(col)):
            return False
    return links_satisfied(grid, links)


def is_complete_valid(grid: Grid) -> bool:
    size = len(grid)
    if count_unknown(grid):
        return False
    lines = [grid[r] for r in range(size)] + [column(grid, c) for c in range(size)]
    return all(line_balanced(line, complete=True) and no_triple_run(line) for line in lines)


# ---------- Lignes valides ----------

@lru_cache(maxsize=None)
def valid_rows(size: int = SIZE) -> Tuple[Tuple[str, ...], ...]:
    """
    Toutes les lignes de longueur 'size' équilibrées et sans triple.
    Pour size=6 : 14 lignes sur 64 motifs.
    """
    check_size(size)
    rows = []
    for mask in range(1 << size):
        row = tuple(SUN if (mask >> (size - 1 - i)) & 1 else MOON for i in range(size))
        if line_balanced(row, complete=True) and no_triple_run(row):
            rows.append(row)
    return tuple(rows)


# ====================================================
#   ÉNUMÉRATION DES GRILLES SOLUTIONS
# ====================================================

def _column_feasible(partial: List[str], rows_left: int, half: int) -> bool:
    suns = sum(1 for v in partial if v == SUN)
    moons = len(partial) - suns
    if suns > half or moons > half:
        return False
    # les lignes restantes doivent pouvoir compléter la colonne
    if suns + rows_left < half or moons + rows_left < half:
        return False
    k = len(partial)
    if k >= 3 and partial[-1] == partial[-2] == partial[-3]:
        return False
    return True


def enumerate_solutions(size: int = SIZE) -> List[Grid]:
    """
    Énumère toutes les grilles complètes valides (backtracking ligne par ligne
    sur la table des lignes valides). Coûteux : à calculer une seule fois par run.
    """
    rows = valid_rows(size)
    half = size // 2
    solutions: List[Grid] = []
    grid: List[Tuple[str, ...]] = []

    def backtrack() -> None:
        r = len(grid)
        if r == size:
            if is_complete_valid([list(row) for row in grid]):
                solutions.append([list(row) for row in grid])
            return
        rows_left = size - r - 1
        for row in rows:
            if all(
                _column_feasible([g[c] for g in grid] + [row[c]], rows_left, half)
                for c in range(size)
            ):
                grid.append(row)
                backtrack()
                grid.pop()

    backtrack()
    return solutions


# ====================================================
#   PROPAGATION DE CONTRAINTES
# ====================================================

@dataclass
class PropagationResult:
    grid: Grid
    max_depth: int  # 0 équilibre, 1 consécutifs, 2 liens
    unsolved: int
    changes: int = 0


def _fill_balance(g: Grid, cells: List[Pos]) -> int:
    half = len(cells) // 2
    values = [g[r][c] for r, c in cells]
    changes = 0
    for sym in SYMBOLS:
        if sum(1 for v in values if v == sym) == half:
            for r, c in cells:
                if g[r][c] is None:
                    g[r][c] = OPPOSITE[sym]
                    changes += 1
    return changes


def _force_runs(g: Grid, cells: List[Pos]) -> int:
    changes = 0
    n = len(cells)
    for i, (r, c) in enumerate(cells):
        if g[r][c] is not None:
            continue
        if i >= 2:
            a, b = cells[i - 2], cells[i - 1]
            v = g[a[0]][a[1]]
            if v is not None and v == g[b[0]][b[1]]:
                g[r][c] = OPPOSITE[v]
                changes += 1
                continue
        if i <= n - 3:
            a, b = cells[i + 1], cells[i + 2]
            v = g[a[0]][a[1]]
            if v is not None and v == g[b[0]][b[1]]:
                g[r][c] = OPPOSITE[v]
                changes += 1
    return changes


def _apply_links(g: Grid, links: Sequence[Link]) -> int:
    changes = 0
    for r1, c1, r2, c2, rel in links:
        v1, v2 = g[r1][c1], g[r2][c2]
        if v1 is not None and v2 is None:
            g[r2][c2] = v1 if rel == EQUAL else OPPOSITE[v1]
            changes += 1
        elif v2 is not None and v1 is None:
            g[r1][c1] = v2 if rel == EQUAL else OPPOSITE[v2]
            changes += 1
    return changes


def propagate_once(grid: Grid, links: Sequence[Link] = ()) -> PropagationResult:
    """
    Une passe : équilibre (lignes puis colonnes), consécutifs (lignes puis
    colonnes), puis liens directs. Retourne une nouvelle grille.
    """
    g = copy_grid(grid)
    size = len(g)
    rows = [[(r, c) for c in range(size)] for r in range(size)]
    cols = [[(r, c) for r in range(size)] for c in range(size)]
    depth = 0

    changes = sum(_fill_balance(g, line) for line in rows + cols)

    forced = sum(_force_runs(g, line) for line in rows + cols)
    if forced:
        depth = 1
    changes += forced

    linked = _apply_links(g, links)
    if linked:
        depth = 2
    changes += linked

    return PropagationResult(g, depth, count_unknown(g), changes)


def propagate(grid: Grid, links: Sequence[Link] = ()) -> PropagationResult:
    """Applique des passes jusqu'au point fixe ; max_depth = technique la plus avancée utilisée."""
    g = copy_grid(grid)
    max_depth = 0
    total = 0
    while True:
        res = propagate_once(g, links)
        if not res.changes:
            break
        max_depth = max(max_depth, res.max_depth)
        total += res.changes
        g = res.grid
    return PropagationResult(g, max_depth, count_unknown(g), total)


# ====================================================
#   SOLVEUR / UNICITÉ
# ====================================================

def _first_unknown(grid: Grid) -> Optional[Pos]:
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if v is None:
                return r, c
    return None


def find_solutions(grid: Grid, links: Sequence[Link] = (), limit: int = 2) -> List[Grid]:
    """
    Propagation + backtracking sur la première case vide (ordre ligne par ligne).
    S'arrête dès que 'limit' solutions sont trouvées.
    """
    solutions: List[Grid] = []

    def dfs(g: Grid) -> None:
        if len(solutions) >= limit:
            return
        ng = propagate(g, links).grid
        if not is_consistent(ng, links):
            return
        pos = _first_unknown(ng)
        if pos is None:
            solutions.append(ng)
            return
        r, c = pos
        for sym in SYMBOLS:
            test = copy_grid(ng)
            test[r][c] = sym
            dfs(test)
            if len(solutions) >= limit:
                return

    if limit > 0:
        dfs(copy_grid(grid))
    return solutions


def count_solutions(grid: Grid, links: Sequence[Link] = (), limit: int = 2) -> int:
    return len(find_solutions(grid, links, limit=limit))


def has_unique_solution(
    prefilled: Prefilled,
    constraints: Sequence[Constraint] = (),
    size: int = SIZE,
) -> bool:
    return count_solutions(make_grid(prefilled, size), parse_constraints(constraints), limit=2) == 1


def solve_unique(
    prefilled: Prefilled,
    constraints: Sequence[Constraint] = (),
    size: int = SIZE,
) -> Optional[Grid]:
    """Retourne l'unique solution, ou None (aucune ou plusieurs)."""
    sols = find_solutions(make_grid(prefilled, size), parse_constraints(constraints), limit=2)
    return sols[0] if len(sols) == 1 else None


def all_adjacent_links(solution: Grid) -> List[Constraint]:
    """Tous les liens entre voisins (horizontaux puis verticaux) d'une grille solution."""
    size = len(solution)
    out: List[Constraint] = []
    for r in range(size):
        for c in range(size - 1):
            rel = EQUAL if solution[r][c] == solution[r][c + 1] else OPPOSED
            out.append((coord_key(r, c), coord_key(r, c + 1), rel))
    for r in range(size - 1):
        for c in range(size):
            rel = EQUAL if solution[r][c] == solution[r + 1][c] else OPPOSED
            out.append((coord_key(r, c), coord_key(r + 1, c), rel))
    return out
