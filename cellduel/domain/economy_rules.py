"""Economy rules: cell prices and energy production.

Every function here is pure; cell counts are the requester's owned cells
before the purchase being priced.
"""

from typing import Iterable

import numpy as np

from cellduel.domain.duel_rules import (
    BASE_CELL_COST,
    BASIC,
    CAPTURE_MULTIPLIER,
    CELL_COST_GROWTH,
    FLAT_RATE,
    GENERATOR,
    GENERATOR_BONUS_BASE,
    GENERATOR_BONUS_GROWTH,
    PURCHASABLE_TYPES,
    TYPE_SURCHARGE,
)
from cellduel.domain.game_state import PlayerTotals
from cellduel.domain.grid import Grid


def cell_cost(cell_count: int) -> int:
    """Base expansion price for a player who owns ``cell_count`` cells."""
    if cell_count < 0:
        raise ValueError("cell_count must be >= 0")
    if cell_count == 0:
        return BASE_CELL_COST
    return int(np.floor(BASE_CELL_COST * np.power(CELL_COST_GROWTH, cell_count)))


def type_cost(cell_count: int, cell_type: str, is_capture: bool) -> tuple[int, str]:
    """Price of a purchase and the type the target cell resolves to.

    Args:
        cell_count (int): Requester's owned cells before the purchase
        cell_type (str): Requested type, ignored for captures
        is_capture (bool): Target is owned by the opponent

    Returns:
        tuple[int, str]: Cost and resolved cell type
    """
    base = cell_cost(cell_count)
    if is_capture:
        return base * CAPTURE_MULTIPLIER, BASIC
    if cell_type not in PURCHASABLE_TYPES:
        raise ValueError(f"{cell_type} cannot be purchased")
    return base + TYPE_SURCHARGE[cell_type], cell_type


def generator_bonus(generator_count: int) -> int:
    """Synergy bonus paid once for all of a player's generators."""
    if generator_count <= 0:
        return 0
    return int(
        np.floor(
            GENERATOR_BONUS_BASE
            * generator_count
            * np.power(GENERATOR_BONUS_GROWTH, generator_count - 1)
        )
    )


def production_rate(cell_types: Iterable[str]) -> int:
    """Energy per second produced by a set of owned cells."""
    cell_types = list(cell_types)
    flat = sum(FLAT_RATE.get(cell_type, 0) for cell_type in cell_types)
    return flat + generator_bonus(cell_types.count(GENERATOR))


def tally_player(grid: Grid, owner: str) -> PlayerTotals:
    owned_types = [grid[position].type for position in grid.positions() if grid[position].owner == owner]
    return PlayerTotals(
        cells=len(owned_types),
        generators=owned_types.count(GENERATOR),
        rate=production_rate(owned_types),
    )
