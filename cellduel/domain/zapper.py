"""Zapper resolution: one randomized conversion near a firing zapper.

This is the only nondeterministic rule of the duel. The random pick goes
through a ``UniformPicker`` so callers can inject a seeded or scripted one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple, TypeVar

import numpy as np

from cellduel.domain.duel_rules import BASIC, GENERATOR, HARDENED, ZAPPER_RADIUS
from cellduel.domain.grid import Cell, Grid

T = TypeVar("T")


class UniformPicker(Protocol):
    def pick(self, candidates: Sequence[T]) -> T:
        ...


class RandomPicker:
    """Uniform picker backed by a numpy random generator."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def pick(self, candidates: Sequence[T]) -> T:
        if not candidates:
            raise ValueError("cannot pick from an empty candidate set")
        return candidates[int(self.rng.integers(len(candidates)))]


@dataclass(frozen=True)
class ZapResult:
    target: Tuple[int, int]
    cell: Optional[Cell]  # None when the hit changed nothing

    @property
    def changed(self) -> bool:
        return self.cell is not None


def zapper_candidates(row: int, col: int) -> List[Tuple[int, int]]:
    """Up to 24 targets in the 5x5 box around the zapper, clipped to the board."""
    return Grid.box(row, col, ZAPPER_RADIUS)


def zap_outcome(target: Cell, owner: str, now: int) -> Optional[Cell]:
    """New state of a zapped cell, or None if the hit is a no-op."""
    if target.owner == owner:
        if target.type == GENERATOR:
            return None
        return Cell.owned(owner, GENERATOR, now)
    if target.owner is not None and target.type == HARDENED:
        return None
    # Neutral cells and capturable opponent cells become the zapper owner's Basic.
    return Cell.owned(owner, BASIC, now)


def resolve_zapper(grid: Grid, row: int, col: int, owner: str, now: int, picker: UniformPicker) -> ZapResult:
    """Pick one target for the zapper at (row, col) and apply the hit to ``grid``."""
    target = picker.pick(zapper_candidates(row, col))
    new_cell = zap_outcome(grid[target], owner, now)
    if new_cell is not None:
        logging.debug(f"zapper at ({row}, {col}) converted {target} to {new_cell.type}")
        grid[target] = new_cell
    return ZapResult(target=target, cell=new_cell)
