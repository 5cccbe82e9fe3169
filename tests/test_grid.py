import pytest

from cellduel.domain.duel_rules import BASIC, BOARD_SIZE, GENERATOR, NEUTRAL
from cellduel.domain.errors import InvalidState
from cellduel.domain.grid import Cell, Grid


def test_initial_grid_seeds_one_basic_cell_per_player():
    grid = Grid.initial("p1", "p2", 1234)

    assert grid[0, 4] == Cell(type=BASIC, owner="p1", acquired_at=1234)
    assert grid[9, 5] == Cell(type=BASIC, owner="p2", acquired_at=1234)
    owned = [position for position in grid.positions() if grid[position].owner is not None]
    assert sorted(owned) == [(0, 4), (9, 5)]


def test_neutral_cells_never_have_owners():
    with pytest.raises(ValueError):
        Cell(type=NEUTRAL, owner="p1")
    with pytest.raises(ValueError):
        Cell(type=BASIC)


def test_unknown_cell_type_rejected():
    with pytest.raises(ValueError):
        Cell(type="castle", owner="p1")


def test_data_round_trip_keeps_every_field():
    grid = Grid.initial("p1", "p2", 10)
    grid[3, 3] = Cell(type="zapper", owner="p1", acquired_at=20, last_zap_at=25)

    restored = Grid.from_data(grid.to_data())

    assert restored == grid
    assert restored.to_data()[3][3] == {"type": "zapper", "owner": "p1", "acquired_at": 20, "last_zap_at": 25}


def test_grid_shape_is_enforced():
    with pytest.raises(ValueError):
        Grid([[Cell.neutral()] * BOARD_SIZE] * (BOARD_SIZE - 1))


def test_copy_is_independent():
    grid = Grid.initial("p1", "p2", 0)
    copied = grid.copy()
    copied[5, 5] = Cell.owned("p1", GENERATOR, 0)

    assert grid[5, 5].type == NEUTRAL


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (10, 0), (0, 10)])
def test_check_bounds(row, col):
    with pytest.raises(InvalidState):
        Grid.check_bounds(row, col)


def test_neighbors4_are_clipped_at_corners():
    grid = Grid.empty()
    assert sorted(grid.neighbors4(0, 0)) == [(0, 1), (1, 0)]
    assert len(grid.neighbors4(5, 5)) == 4


def test_owns_adjacent_ignores_diagonals():
    grid = Grid.initial("p1", "p2", 0)
    assert grid.owns_adjacent("p1", 1, 4)
    assert not grid.owns_adjacent("p1", 1, 5)
