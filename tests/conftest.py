import random

import pytest

from tango_core import MOON as M, SUN as S, enumerate_solutions

# grille 6x6 valide : lignes équilibrées, colonnes équilibrées, pas de triple
SOLUTION = [
    [S, S, M, M, S, M],
    [M, M, S, S, M, S],
    [S, S, M, M, S, M],
    [M, M, S, S, M, S],
    [S, M, S, M, S, M],
    [M, S, M, S, M, S],
]

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def solution():
    return [list(row) for row in SOLUTION]

@pytest.fixture(scope="session")
def solutions6():
    return enumerate_solutions(6)
