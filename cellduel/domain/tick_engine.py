"""Tick engine: advance one duel by the time elapsed since its anchors.

Order of a tick:
    1. elapsed energy/timer time, clamped to >= 0
    2. grid maintenance (generator expiry, zapper firing marks)
    3. zapper resolution, in row-major order, against the evolving grid
    4. per-player totals from the resolved grid
    5. energy accumulation (fractional, never rounded here)
    6. timer countdown, floored at 0
    7. winner decision (see win_condition.evaluate_winner)
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from cellduel.domain.duel_rules import GENERATOR, GENERATOR_LIFETIME_MS, ZAPPER, ZAPPER_COOLDOWN_MS
from cellduel.domain.economy_rules import tally_player
from cellduel.domain.game_state import EngineState, PlayerTotals
from cellduel.domain.grid import Cell, Grid
from cellduel.domain.win_condition import evaluate_winner
from cellduel.domain.zapper import UniformPicker, resolve_zapper


@dataclass
class TickOutcome:
    state: EngineState
    player1: PlayerTotals
    player2: PlayerTotals
    winner: Optional[int]
    grid_changed: bool


def elapsed(anchor: int, now: int) -> int:
    return max(0, now - anchor)


def maintain_grid(grid: Grid, now: int) -> Tuple[bool, List[Tuple[int, int]]]:
    """Expire old generators and mark zappers whose cooldown is over.

    Returns whether any generator expired and the positions of the zappers
    that fire this tick. Firing zappers get ``last_zap_at = now``.
    """
    changed = False
    firing = []
    for position in grid.positions():
        cell = grid[position]
        if cell.type == GENERATOR and cell.acquired_at is not None:
            if now - cell.acquired_at >= GENERATOR_LIFETIME_MS:
                grid[position] = Cell.neutral()
                changed = True
        elif cell.type == ZAPPER and cell.acquired_at is not None:
            last_action = cell.acquired_at
            if cell.last_zap_at is not None:
                last_action = max(cell.last_zap_at, cell.acquired_at)
            if now - last_action >= ZAPPER_COOLDOWN_MS:
                grid[position] = cell.fired(now)
                firing.append(position)
    return changed, firing


def advance(
    state: EngineState,
    player1_id: str,
    player2_id: str,
    now: int,
    last_seen1: Optional[int],
    last_seen2: Optional[int],
    picker: UniformPicker,
) -> TickOutcome:
    """Compute the state of a duel at ``now``. ``state`` itself is not modified."""
    energy_delta = elapsed(state.last_energy_update, now)
    timer_delta = elapsed(state.last_timer_update, now)

    grid = state.grid.copy()
    grid_changed, firing = maintain_grid(grid, now)
    # A fired zapper changes last_zap_at, which has to be persisted too.
    grid_changed = grid_changed or bool(firing)

    for row, col in firing:
        zapper = grid[row, col]
        # Skip zappers that an earlier hit in this tick converted or captured.
        if zapper.type != ZAPPER or zapper.last_zap_at != now:
            continue
        resolve_zapper(grid, row, col, zapper.owner, now, picker)

    player1 = tally_player(grid, player1_id)
    player2 = tally_player(grid, player2_id)

    new_state = EngineState(
        player1_energy=state.player1_energy + (player1.rate / 1000) * energy_delta,
        player2_energy=state.player2_energy + (player2.rate / 1000) * energy_delta,
        player1_timer=max(0, state.player1_timer - timer_delta),
        player2_timer=max(0, state.player2_timer - timer_delta),
        last_energy_update=max(state.last_energy_update, now),
        last_timer_update=max(state.last_timer_update, now),
        grid=grid,
    )
    winner = evaluate_winner(
        new_state.player1_timer,
        new_state.player2_timer,
        player1.cells,
        player2.cells,
        last_seen1,
        last_seen2,
        now,
    )
    return TickOutcome(
        state=new_state,
        player1=player1,
        player2=player2,
        winner=winner,
        grid_changed=grid_changed,
    )
