"""Purchase validation: a player buys one cell with energy.

Preconditions are checked in a fixed order and the first failure wins:
duel active, not already owned, not an opponent's hardened cell, adjacency
(waived while the requester owns nothing), then the energy balance.
"""

import logging
from dataclasses import dataclass

from cellduel.domain.duel_rules import BASIC, HARDENED, PLAYER1, STARTING_TIMER_MS
from cellduel.domain.economy_rules import type_cost
from cellduel.domain.errors import (
    AlreadyOwned,
    InsufficientResources,
    InvalidState,
    NotAdjacent,
    Uncapturable,
)
from cellduel.domain.game_state import EngineState
from cellduel.domain.grid import Cell, Grid


@dataclass
class PurchaseOutcome:
    state: EngineState
    cost: int
    new_energy: float
    cell_type: str


def apply_purchase(
    state: EngineState,
    duel_status: str,
    slot: int,
    player_id: str,
    row: int,
    col: int,
    now: int,
    cell_type: str = BASIC,
) -> PurchaseOutcome:
    """Validate a purchase and return the state after it.

    Args:
        state (EngineState): Current state, left untouched
        duel_status (str): Status of the duel, must be "active"
        slot (int): PLAYER1 or PLAYER2, the requester's side
        player_id (str): Requester's id as stored in the grid
        row (int): Target row
        col (int): Target column
        now (int): Purchase time in epoch ms
        cell_type (str): Requested type, ignored for captures

    Returns:
        PurchaseOutcome: New state, charged cost, remaining energy, resolved type
    """
    if duel_status != "active":
        raise InvalidState("Duel is not active")
    Grid.check_bounds(row, col)

    grid = state.grid
    target = grid[row, col]
    if target.owner == player_id:
        raise AlreadyOwned(f"({row}, {col}) is already yours")

    is_capture = target.owner is not None
    if is_capture and target.type == HARDENED:
        raise Uncapturable(f"({row}, {col}) is hardened")

    owned = grid.owned_count(player_id)
    if owned > 0 and not grid.owns_adjacent(player_id, row, col):
        raise NotAdjacent(f"({row}, {col}) does not border your territory")

    cost, resolved_type = type_cost(owned, cell_type, is_capture)
    energy = state.energy_of(slot)
    if energy < cost:
        raise InsufficientResources(f"{cost} energy needed, {int(energy)} available")

    new_grid = grid.copy()
    new_grid[row, col] = Cell.owned(player_id, resolved_type, now)
    new_energy = energy - cost

    new_state = EngineState(
        player1_energy=state.player1_energy,
        player2_energy=state.player2_energy,
        player1_timer=state.player1_timer,
        player2_timer=state.player2_timer,
        last_energy_update=state.last_energy_update,
        last_timer_update=now,
        grid=new_grid,
    )
    if slot == PLAYER1:
        new_state.player1_energy = new_energy
        new_state.player1_timer = STARTING_TIMER_MS
    else:
        new_state.player2_energy = new_energy
        new_state.player2_timer = STARTING_TIMER_MS

    logging.debug(f"player {player_id} bought ({row}, {col}) as {resolved_type} for {cost}")
    return PurchaseOutcome(state=new_state, cost=cost, new_energy=new_energy, cell_type=resolved_type)
