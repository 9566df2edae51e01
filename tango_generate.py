# tango_generate.py
"""
Générateur de puzzles Tango :
- note (1..7) les puzzles existants qui n'ont pas de difficulté,
- énumère une seule fois toutes les grilles solutions,
- génère de nouveaux puzzles uniques par séries de 7 (difficulté 1 → 7),
- renormalise les difficultés sur toute la collection (percentiles),
- réécrit la collection complète.

Usage :
    tango-generate [--puzzles app-data/puzzles.json] [--target 1000] [--seed 42] [--report rapport.pdf]
"""

from __future__ import annotations
import argparse
import random
import sys
from typing import List, Optional, Set

from tango_core import SIZE, Grid, enumerate_solutions
from tango_corpus import (
    DEFAULT_PUZZLES_PATH,
    CorpusError,
    Puzzle,
    load_puzzles,
    next_id,
    save_puzzles,
)
from tango_difficulty import (
    DIFFICULTY_LEVELS,
    MAX_ATTEMPTS,
    fingerprint,
    generate_puzzle,
    hardness_score,
    measure_difficulty,
    percentile_levels,
)

TARGET_TOTAL = 1000


def rate_missing(puzzles: List[Puzzle]) -> int:
    """Calcule la difficulté des puzzles qui n'en ont pas. Retourne le nombre notés."""
    rated = 0
    for i, p in enumerate(puzzles, start=1):
        if p.difficulty is None:
            p.difficulty = measure_difficulty(p.prefilled, p.constraints, p.size)
            rated += 1
        if i % 100 == 0:
            print(f"[generate]   {i}/{len(puzzles)} notés")
    return rated


def normalise_difficulty(puzzles: List[Puzzle]) -> List[Puzzle]:
    """Réattribue 1..7 par rang de hardness_score : tous les niveaux sont représentés dès 7 puzzles."""
    scores = [hardness_score(p.prefilled, p.constraints, p.size) for p in puzzles]
    for p, level in zip(puzzles, percentile_levels(scores)):
        p.difficulty = level
    return puzzles


def generate_new_puzzles(
    solutions: List[Grid],
    needed: int,
    fingerprints: Set[str],
    first_id: int,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_ATTEMPTS,
    max_fails: Optional[int] = None,
) -> List[Puzzle]:
    """
    Parcourt les grilles solutions en boucle ; pour chacune, tente les 7
    difficultés. S'arrête quand 'needed' puzzles sont générés ou après
    'max_fails' grilles consécutives sans aucun succès.
    """
    rng = rng or random.Random()
    new_puzzles: List[Puzzle] = []
    if needed <= 0 or not solutions:
        return new_puzzles

    max_fails = max_fails if max_fails is not None else len(solutions) * 2
    pid = first_id
    sol_idx = 0
    fails = 0

    while len(new_puzzles) < needed:
        solution = solutions[sol_idx % len(solutions)]
        sol_idx += 1
        got_one = False

        for target in DIFFICULTY_LEVELS:
            if len(new_puzzles) >= needed:
                break
            result = generate_puzzle(solution, target, fingerprints, rng=rng, max_attempts=max_attempts)
            if result is None:
                continue
            prefilled, constraints, diff = result
            new_puzzles.append(Puzzle(pid, len(solution), prefilled, constraints, diff))
            pid += 1
            got_one = True
            if len(new_puzzles) % 50 == 0:
                print(f"[generate]   {len(new_puzzles)}/{needed} générés")

        fails = 0 if got_one else fails + 1
        if fails >= max_fails:
            print(
                f"Attention: espace des solutions épuisé après {len(new_puzzles)} nouveaux puzzles",
                file=sys.stderr,
            )
            break

    return new_puzzles


def build_corpus(
    puzzles: List[Puzzle],
    target_total: int = TARGET_TOTAL,
    size: int = SIZE,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_ATTEMPTS,
    solutions: Optional[List[Grid]] = None,
) -> List[Puzzle]:
    """Note, complète et renormalise la collection en mémoire (aucune écriture)."""
    print("[generate] Notation des puzzles existants …")
    rated = rate_missing(puzzles)
    print(f"[generate] {rated} puzzle(s) noté(s)")

    fingerprints = {fingerprint(p.prefilled, p.constraints) for p in puzzles}

    needed = target_total - len(puzzles)
    new_puzzles: List[Puzzle] = []
    if needed > 0:
        if solutions is None:
            print(f"[generate] Énumération des grilles solutions {size}×{size} …")
            solutions = enumerate_solutions(size)
        print(f"[generate] {len(solutions)} grilles solutions")
        print(f"[generate] Génération de {needed} nouveaux puzzles (séries de 7, difficulté 1 → 7) …")
        new_puzzles = generate_new_puzzles(
            solutions, needed, fingerprints, next_id(puzzles), rng=rng, max_attempts=max_attempts
        )

    all_puzzles = puzzles + new_puzzles
    print(f"[generate] Normalisation des difficultés sur {len(all_puzzles)} puzzles …")
    return normalise_difficulty(all_puzzles)


def format_distribution(puzzles: List[Puzzle]) -> str:
    dist: dict = {}
    for p in puzzles:
        dist[p.difficulty] = dist.get(p.difficulty, 0) + 1
    return ", ".join(f"{k}: {dist[k]}" for k in sorted(dist))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Génère et note des puzzles Tango")
    parser.add_argument("--puzzles", default=DEFAULT_PUZZLES_PATH, help="collection JSON (lue puis réécrite)")
    parser.add_argument("--target", type=int, default=TARGET_TOTAL, help="taille visée de la collection")
    parser.add_argument("--size", type=int, default=SIZE)
    parser.add_argument("--max-attempts", type=int, default=MAX_ATTEMPTS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--report", default=None, help="rapport PDF optionnel")
    args = parser.parse_args(argv)

    try:
        puzzles = load_puzzles(args.puzzles)
    except CorpusError as e:
        print(f"Erreur: {e}", file=sys.stderr)
        return 1
    print(f"[generate] {len(puzzles)} puzzles existants chargés")

    rng = random.Random(args.seed)
    all_puzzles = build_corpus(
        puzzles,
        target_total=args.target,
        size=args.size,
        rng=rng,
        max_attempts=args.max_attempts,
    )

    save_puzzles(all_puzzles, args.puzzles)
    print(f"\n[generate] {len(all_puzzles)} puzzles sauvegardés dans {args.puzzles}")
    print(f"[generate] Distribution finale des difficultés : {format_distribution(all_puzzles)}")

    if args.report:
        from tango_report import build_report_pdf

        build_report_pdf(all_puzzles, args.report)
        print(f"[generate] Rapport PDF : {args.report}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
