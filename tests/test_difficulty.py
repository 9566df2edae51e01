import pytest

from tango_core import EQUAL, MOON as M, OPPOSED, SUN as S, coord_key, enumerate_solutions, solve_unique
from tango_difficulty import (
    DIFFICULTY_TABLE,
    PROFILES,
    classify,
    fingerprint,
    generate_puzzle,
    generate_puzzles_for_profile,
    get_profile,
    hardness_score,
    measure_difficulty,
    percentile_levels,
)


def _full(solution):
    return {coord_key(r, c): solution[r][c] for r in range(6) for c in range(6)}


@pytest.mark.parametrize(
    "depth, unsolved, clues, expected",
    [
        (0, 0, 25, 1),
        (0, 0, 22, 1),
        (0, 0, 21, 2),
        (0, 0, 16, 3),
        (1, 0, 16, 2),
        (1, 0, 11, 3),
        (1, 0, 10, 4),
        (2, 0, 12, 3),
        (2, 0, 8, 4),
        (2, 0, 7, 5),
        (2, 3, 14, 4),
        (0, 3, 10, 5),
        (1, 3, 7, 6),
        (2, 3, 6, 7),
    ],
)
def test_classify_thresholds(depth, unsolved, clues, expected):
    assert classify(depth, unsolved, clues) == expected


def test_classify_accepts_replacement_table():
    flat = {key: [(0, 4)] for key in DIFFICULTY_TABLE}
    assert classify(0, 0, 30, table=flat) == 4


def test_measure_difficulty_full_grid_is_easiest(solution):
    assert measure_difficulty(_full(solution), []) == 1


def test_measure_difficulty_empty_grid_is_hardest():
    assert measure_difficulty({}, []) == 7


def test_hardness_score():
    assert hardness_score({}, []) == 72 * 2 + 15
    assert hardness_score({"0,0": S, "0,1": S}, []) == 70 * 2 + 5 + 15


def test_hardness_score_full_grid(solution):
    assert hardness_score(_full(solution), []) == (72 - 36) * 2


def test_percentile_levels_cover_all_levels():
    assert percentile_levels(list(range(7))) == [1, 2, 3, 4, 5, 6, 7]
    levels = percentile_levels([5, 1, 9, 3, 3, 8, 2, 7, 6, 4, 0, 11, 10, 12])
    assert set(levels) == set(range(1, 8))
    assert levels[10] == 1 and levels[13] == 7
    assert percentile_levels([]) == []


def test_fingerprint_ignores_order():
    pf1 = {"0,0": S, "1,1": M}
    pf2 = {"1,1": M, "0,0": S}
    cs1 = [("0,0", "0,1", EQUAL), ("2,2", "3,2", OPPOSED)]
    cs2 = [("3,2", "2,2", OPPOSED), ("0,0", "0,1", EQUAL)]
    assert fingerprint(pf1, cs1) == fingerprint(pf2, cs2)
    assert fingerprint(pf1, cs1) != fingerprint(pf1, cs1[:1])
    assert fingerprint(pf1, []) != fingerprint({"0,0": M, "1,1": M}, [])


def test_profiles_are_inverse_to_difficulty():
    assert (PROFILES[1].prefill_min, PROFILES[1].prefill_max) == (15, 20)
    assert (PROFILES[7].prefill_min, PROFILES[7].prefill_max) == (1, 3)
    for level in range(1, 7):
        assert PROFILES[level + 1].prefill_max <= PROFILES[level].prefill_max


def test_unknown_profile():
    with pytest.raises(ValueError):
        get_profile(8)


def test_generated_puzzle_is_sound(solution, rng):
    fps = set()
    result = generate_puzzle(solution, 4, fps, rng=rng)
    assert result is not None
    prefilled, constraints, diff = result
    assert 7 <= len(prefilled) <= 9
    assert abs(diff - 4) <= 1
    assert solve_unique(prefilled, constraints) == solution
    assert fps == {fingerprint(prefilled, constraints)}


def test_easy_profile_on_small_grid(rng):
    # 4×4 : 16 cases, moins que le maximum du profil 1
    small = enumerate_solutions(4)[0]
    for target in (1, 2, 4):
        result = generate_puzzle(small, target, set(), rng=rng, max_attempts=10)
        if result is not None:
            prefilled, constraints, diff = result
            assert len(prefilled) <= 16
            assert solve_unique(prefilled, constraints, size=4) == small


def test_generation_rejects_known_fingerprints(solution, rng):
    fps = set()
    seen = []
    for _ in range(5):
        result = generate_puzzle(solution, 4, fps, rng=rng)
        if result is not None:
            seen.append(fingerprint(result[0], result[1]))
    assert len(seen) == len(set(seen)) == len(fps)


def test_hard_targets_use_few_prefilled_cells(solutions6, rng):
    for solution in solutions6[:10]:
        result = generate_puzzle(solution, 7, set(), rng=rng, max_attempts=20)
        if result is not None:
            prefilled, constraints, diff = result
            assert 1 <= len(prefilled) <= 3
            assert diff >= 6
            assert solve_unique(prefilled, constraints) == solution


def test_generate_puzzles_for_profile(solutions6, rng):
    fps = set()
    puzzles = generate_puzzles_for_profile(PROFILES[4], 3, solutions6, fps, rng=rng)
    assert len(puzzles) == 3
    assert len(fps) == 3
    for prefilled, constraints, diff in puzzles:
        assert abs(diff - 4) <= 1
        assert solve_unique(prefilled, constraints) is not None


def test_generate_puzzles_for_profile_budget(solution, rng):
    with pytest.raises(RuntimeError):
        generate_puzzles_for_profile(PROFILES[4], 5, [solution], rng=rng, max_tries=0)
