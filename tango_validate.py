# tango_validate.py
"""
Validation d'acceptation des puzzles, sur le même moteur que la génération
(tango_core) : structure, cases pré-remplies, liens, équilibre, conflits de
liens et unicité de la solution.

Usage :
    tango-validate [--puzzles app-data/puzzles.json] [--no-unique]
"""

from __future__ import annotations
import argparse
from dataclasses import dataclass, field
import sys
from typing import Dict, List, Optional, Set, Tuple

from tango_core import (
    EQUAL,
    MOON,
    OPPOSED,
    SUN,
    Grid,
    Prefilled,
    column,
    count_solutions,
    is_complete_valid,
    links_satisfied,
    make_grid,
    parse_constraints,
    parse_coord,
)
from tango_corpus import DEFAULT_PUZZLES_PATH, CorpusError, Puzzle, load_puzzles


class PuzzleValidationError(ValueError):
    pass


@dataclass
class ValidationResult:
    success: bool
    puzzle: Optional[Puzzle] = None
    error: str = ""
    details: List[str] = field(default_factory=list)


# ---------- Vérifications ----------

def _run_length(grid: Grid, r: int, c: int, dr: int, dc: int) -> int:
    """Longueur de la suite de symboles identiques passant par (r, c) dans la direction (dr, dc)."""
    size = len(grid)
    value = grid[r][c]
    count = 1
    for sign in (-1, 1):
        rr, cc = r + sign * dr, c + sign * dc
        while 0 <= rr < size and 0 <= cc < size and grid[rr][cc] == value:
            count += 1
            rr += sign * dr
            cc += sign * dc
    return count


def run_violations(grid: Grid) -> List[Tuple[int, int]]:
    """Cases connues appartenant à une suite de 3+ symboles identiques."""
    bad = []
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if v is None:
                continue
            if _run_length(grid, r, c, 0, 1) > 2 or _run_length(grid, r, c, 1, 0) > 2:
                bad.append((r, c))
    return bad


def check_structure(puzzle: Puzzle) -> None:
    if puzzle.id is None or puzzle.id <= 0:
        raise PuzzleValidationError(f"id de puzzle invalide: {puzzle.id}")
    if puzzle.size <= 0 or puzzle.size % 2 != 0:
        raise PuzzleValidationError(f"Taille invalide: {puzzle.size} (doit être paire et positive)")
    if puzzle.prefilled is None:
        raise PuzzleValidationError("Le puzzle doit avoir des cases pré-remplies")
    if puzzle.constraints is None:
        raise PuzzleValidationError("Le puzzle doit avoir une liste de contraintes")
    for key in puzzle.prefilled:
        try:
            r, c = parse_coord(key)
        except (AttributeError, ValueError):
            raise PuzzleValidationError(f"Case pré-remplie invalide: {key!r}") from None
        if not (0 <= r < puzzle.size and 0 <= c < puzzle.size):
            raise PuzzleValidationError(f"Case pré-remplie hors grille: {key}")


def check_prefilled(puzzle: Puzzle, grid: Grid) -> None:
    violations = [
        f"Case pré-remplie ({r},{c}) : plus de 2 symboles identiques consécutifs"
        for r, c in run_violations(grid)
    ]
    if violations:
        raise PuzzleValidationError("Cases pré-remplies invalides:\n" + "\n".join(violations))


def check_constraints(puzzle: Puzzle, grid: Grid) -> None:
    size = puzzle.size
    violations = []
    for a, b, rel in puzzle.constraints:
        (r1, c1), (r2, c2) = parse_coord(a), parse_coord(b)
        if not (0 <= r1 < size and 0 <= c1 < size and 0 <= r2 < size and 0 <= c2 < size):
            violations.append(f"Coordonnées de contrainte invalides: {a} -> {b}")
            continue
        if not links_satisfied(grid, [(r1, c1, r2, c2, rel)]):
            violations.append(f"Contrainte violée: {a}({grid[r1][c1]}) {rel} {b}({grid[r2][c2]})")
    if violations:
        raise PuzzleValidationError("Contraintes invalides:\n" + "\n".join(violations))


def check_balance(puzzle: Puzzle, grid: Grid) -> None:
    half = puzzle.size // 2
    for label, lines in (("Ligne", grid), ("Colonne", [column(grid, c) for c in range(puzzle.size)])):
        for i, line in enumerate(lines):
            suns = sum(1 for v in line if v == SUN)
            moons = sum(1 for v in line if v == MOON)
            if suns > half or moons > half:
                raise PuzzleValidationError(
                    f"{label} {i} : trop de cases pré-remplies ({suns} {SUN}, {moons} {MOON}, max {half} chacun)"
                )


def check_link_conflicts(puzzle: Puzzle) -> None:
    """Une même paire ne peut pas être à la fois '=' et 'x'."""
    relations: Dict[frozenset, Set[str]] = {}
    for a, b, rel in puzzle.constraints:
        relations.setdefault(frozenset((a, b)), set()).add(rel)
    for pair, rels in relations.items():
        if {EQUAL, OPPOSED} <= rels:
            a, b = sorted(pair)
            raise PuzzleValidationError(f"Conflit: {a} ne peut pas être à la fois égal et opposé à {b}")


def check_unique(puzzle: Puzzle, grid: Grid) -> None:
    n = count_solutions(grid, parse_constraints(puzzle.constraints), limit=2)
    if n == 0:
        raise PuzzleValidationError("Aucune solution")
    if n > 1:
        raise PuzzleValidationError("Plusieurs solutions")


def validate_puzzle(puzzle: Puzzle, require_unique: bool = True) -> ValidationResult:
    try:
        check_structure(puzzle)
        grid = make_grid(puzzle.prefilled, puzzle.size)
        check_prefilled(puzzle, grid)
        check_constraints(puzzle, grid)
        check_balance(puzzle, grid)
        check_link_conflicts(puzzle)
        if require_unique:
            check_unique(puzzle, grid)
    except PuzzleValidationError as e:
        msg = str(e)
        return ValidationResult(False, puzzle, msg, [line for line in msg.split("\n") if line.strip()])
    return ValidationResult(True, puzzle)


# ---------- Vérification d'une grille de jeu ----------

def check_board(puzzle: Puzzle, cells: Prefilled) -> List[str]:
    """
    Erreurs d'une grille (pré-remplies + cases du joueur) : suites de 3+,
    lignes/colonnes déséquilibrées une fois la grille pleine, liens violés.
    """
    board = dict(cells)
    board.update(puzzle.prefilled)
    grid = make_grid(board, puzzle.size)
    errors = [
        f"Trop de {grid[r][c]} consécutifs ligne {r + 1}, colonne {c + 1}"
        for r, c in run_violations(grid)
    ]
    full = len(board) == puzzle.size * puzzle.size
    if full:
        lines = list(grid) + [column(grid, c) for c in range(puzzle.size)]
        if any(sum(1 for v in line if v == SUN) != puzzle.size // 2 for line in lines):
            errors.append("Chaque ligne et colonne doit avoir autant de soleils que de lunes")
    if not links_satisfied(grid, parse_constraints(puzzle.constraints)):
        errors.append("Contraintes violées")
    return errors


def is_board_solved(puzzle: Puzzle, cells: Prefilled) -> bool:
    board = dict(cells)
    board.update(puzzle.prefilled)
    grid = make_grid(board, puzzle.size)
    return is_complete_valid(grid) and links_satisfied(grid, parse_constraints(puzzle.constraints))


# ---------- Résumé ----------

def print_validation_summary(results: List[ValidationResult]) -> None:
    ok = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print("\n[validate] RÉSUMÉ")
    print(f"[validate] puzzles traités : {len(results)}")
    print(f"[validate] valides        : {len(ok)}")
    print(f"[validate] invalides      : {len(failed)}")

    for i, res in enumerate(failed, start=1):
        pid = res.puzzle.id if res.puzzle is not None else "?"
        print(f"\n{i}. puzzle {pid}")
        print(f"   erreur : {res.error}")
        for detail in res.details:
            print(f"      • {detail}")

    if ok:
        ids = sorted(r.puzzle.id for r in ok if r.puzzle is not None)
        print(f"\n[validate] ids valides : {', '.join(str(i) for i in ids)}")

    rate = 100.0 * len(ok) / len(results) if results else 0.0
    print(f"[validate] taux de réussite : {rate:.1f}%")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Valide une collection de puzzles Tango")
    parser.add_argument("--puzzles", default=DEFAULT_PUZZLES_PATH)
    parser.add_argument("--no-unique", action="store_true", help="ne pas vérifier l'unicité")
    args = parser.parse_args(argv)

    try:
        puzzles = load_puzzles(args.puzzles)
    except CorpusError as e:
        print(f"Erreur: {e}", file=sys.stderr)
        return 1

    results = [validate_puzzle(p, require_unique=not args.no_unique) for p in puzzles]
    print_validation_summary(results)
    return 0 if all(r.success for r in results) else 2


if __name__ == "__main__":
    sys.exit(main())
