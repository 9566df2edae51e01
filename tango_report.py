# tango_report.py
"""
Rapport PDF d'une collection de puzzles :
- page 1 : histogramme des difficultés + chiffres clés
- puis une page par niveau avec quelques grilles d'exemple
  (cases pré-remplies + marqueurs '=' / '×' sur les liens).
"""

from __future__ import annotations
from collections import Counter
from typing import Dict, List

import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from tango_core import EQUAL, SUN, make_grid, parse_coord
from tango_corpus import Puzzle

TRIM_W_DEFAULT = 8.27
TRIM_H_DEFAULT = 11.69

SUN_COLOR = "#f5b700"
MOON_COLOR = "#33415c"
CELL_SHADE_COLOR = "#f2f2f2"


def chunk(lst, n):
    for i in range(0, len(lst), n):
        yield lst[i : i + n]


def difficulty_histogram(puzzles: List[Puzzle]) -> Dict[int, int]:
    counts = Counter(p.difficulty for p in puzzles if p.difficulty is not None)
    return {level: counts.get(level, 0) for level in range(1, 8)}


# ---------- Dessin d'une grille ----------

def draw_board_at(ax, puzzle: Puzzle, left: float, bottom: float, size: float):
    n = puzzle.size
    cell = size / n
    grid = make_grid(puzzle.prefilled, n)

    ax.add_patch(
        plt.Rectangle((left, bottom), size, size, facecolor=CELL_SHADE_COLOR, edgecolor="none", zorder=0)
    )
    ax.add_patch(plt.Rectangle((left, bottom), size, size, fill=False, linewidth=2, color="k", zorder=3))
    for i in range(1, n):
        ax.plot([left + i * cell] * 2, [bottom, bottom + size], linewidth=0.6, color="k", zorder=2)
        ax.plot([left, left + size], [bottom + i * cell] * 2, linewidth=0.6, color="k", zorder=2)

    # Symboles : disque plein (soleil) ou foncé (lune)
    for r in range(n):
        for c in range(n):
            val = grid[r][c]
            if val is None:
                continue
            x = left + c * cell + cell / 2
            y = bottom + (n - 1 - r) * cell + cell / 2
            color = SUN_COLOR if val == SUN else MOON_COLOR
            ax.add_patch(plt.Circle((x, y), cell * 0.3, color=color, zorder=4))

    # Liens, au milieu de l'arête commune
    font_pts = cell * 0.3 * 72
    for a, b, rel in puzzle.constraints:
        (r1, c1), (r2, c2) = parse_coord(a), parse_coord(b)
        x = left + (c1 + c2 + 1) * cell / 2
        y = bottom + (2 * n - r1 - r2 - 1) * cell / 2
        ax.text(
            x,
            y,
            "=" if rel == EQUAL else "×",
            ha="center",
            va="center",
            fontsize=font_pts,
            fontweight="bold",
            zorder=5,
            bbox=dict(boxstyle="circle,pad=0.1", facecolor="white", edgecolor="none"),
        )


def draw_samples_page_figure(
    puzzles: List[Puzzle],
    trim_w: float,
    trim_h: float,
    rows: int,
    cols: int,
    title: str,
):
    plt.rcParams["font.family"] = "DejaVu Sans"
    fig = plt.figure(figsize=(trim_w, trim_h))
    ax = plt.gca()
    ax.set_xlim(0, trim_w)
    ax.set_ylim(0, trim_h)
    ax.axis("off")

    margin_x = 0.5
    margin_y = 0.8
    cell_w = (trim_w - 2 * margin_x) / cols
    cell_h = (trim_h - 2 * margin_y) / rows
    size = min(cell_w, cell_h) * 0.85
    offset_x = (cell_w - size) / 2
    offset_y = (cell_h - size) / 2

    for idx, puzzle in enumerate(puzzles[: rows * cols]):
        r, c = divmod(idx, cols)
        left = margin_x + c * cell_w + offset_x
        bottom = margin_y + (rows - 1 - r) * cell_h + offset_y
        draw_board_at(ax, puzzle, left, bottom, size)
        clues = len(puzzle.prefilled) + len(puzzle.constraints)
        ax.text(left + size / 2, bottom - 0.1, f"#{puzzle.id} — {clues} indices", ha="center", va="top", fontsize=8)

    ax.text(trim_w / 2, trim_h - 0.3, title, ha="center", va="top", fontsize=12, fontweight="bold")
    return fig


def draw_histogram_figure(puzzles: List[Puzzle], trim_w: float, trim_h: float, title: str):
    hist = difficulty_histogram(puzzles)
    fig, ax = plt.subplots(figsize=(trim_w, trim_h / 2))
    ax.bar(list(hist.keys()), list(hist.values()), color=MOON_COLOR)
    ax.set_xticks(list(hist.keys()))
    ax.set_xlabel("Difficulté")
    ax.set_ylabel("Puzzles")
    ax.set_title(f"{title} — {len(puzzles)} puzzles")
    for level, count in hist.items():
        ax.text(level, count, str(count), ha="center", va="bottom", fontsize=8)
    return fig


def build_report_pdf(
    puzzles: List[Puzzle],
    output_path: str,
    title: str = "Tango",
    samples_per_level: int = 6,
    sample_rows: int = 3,
    sample_cols: int = 2,
    trim_w: float = TRIM_W_DEFAULT,
    trim_h: float = TRIM_H_DEFAULT,
) -> Dict[int, int]:
    """Écrit le rapport PDF et retourne l'histogramme des difficultés."""
    with PdfPages(output_path) as pdf:
        fig = draw_histogram_figure(puzzles, trim_w, trim_h, title)
        pdf.savefig(fig, bbox_inches="tight")
        plt.close(fig)

        for level in range(1, 8):
            samples = [p for p in puzzles if p.difficulty == level][:samples_per_level]
            if not samples:
                continue
            for page in chunk(samples, sample_rows * sample_cols):
                fig = draw_samples_page_figure(
                    page, trim_w, trim_h, sample_rows, sample_cols, f"{title} — Niveau {level}"
                )
                pdf.savefig(fig, bbox_inches="tight")
                plt.close(fig)

    return difficulty_histogram(puzzles)
