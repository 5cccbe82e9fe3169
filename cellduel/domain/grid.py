"""Grid model: a fixed 10x10 matrix of cells.

Coordinates are validated once at the boundary (``Grid.check_bounds``);
the rule modules index the grid freely after that.
"""

from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from cellduel.domain.duel_rules import (
    BASIC,
    BOARD_SIZE,
    CELL_TYPES,
    NEUTRAL,
    PLAYER1_SEED,
    PLAYER2_SEED,
)
from cellduel.domain.errors import InvalidState


@dataclass(frozen=True)
class Cell:
    type: str = NEUTRAL
    owner: Optional[str] = None
    acquired_at: Optional[int] = None
    last_zap_at: Optional[int] = None

    def __post_init__(self):
        if self.type not in CELL_TYPES:
            raise ValueError(f"unknown cell type: {self.type}")
        if (self.type == NEUTRAL) != (self.owner is None):
            raise ValueError("a neutral cell has no owner and an owned cell is never neutral")

    @classmethod
    def neutral(cls) -> "Cell":
        return cls()

    @classmethod
    def owned(cls, owner: str, cell_type: str, acquired_at: int) -> "Cell":
        return cls(type=cell_type, owner=owner, acquired_at=acquired_at)

    def fired(self, now: int) -> "Cell":
        return replace(self, last_zap_at=now)

    def to_data(self) -> dict:
        return {
            "type": self.type,
            "owner": self.owner,
            "acquired_at": self.acquired_at,
            "last_zap_at": self.last_zap_at,
        }

    @classmethod
    def from_data(cls, data: dict) -> "Cell":
        owner = data.get("owner")
        return cls(
            type=data.get("type", NEUTRAL),
            owner=str(owner) if owner is not None else None,
            acquired_at=data.get("acquired_at"),
            last_zap_at=data.get("last_zap_at"),
        )


class Grid:
    """Board of ``BOARD_SIZE`` x ``BOARD_SIZE`` cells indexed by (row, col)."""

    def __init__(self, rows: List[List[Cell]]):
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise ValueError(f"grid must be {BOARD_SIZE}x{BOARD_SIZE}")
        self._rows = rows

    @classmethod
    def empty(cls) -> "Grid":
        return cls([[Cell.neutral() for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)])

    @classmethod
    def initial(cls, player1_id: str, player2_id: str, now: int) -> "Grid":
        """Neutral board with one Basic seed cell per player."""
        grid = cls.empty()
        grid[PLAYER1_SEED] = Cell.owned(player1_id, BASIC, now)
        grid[PLAYER2_SEED] = Cell.owned(player2_id, BASIC, now)
        return grid

    @classmethod
    def from_data(cls, data: List[List[dict]]) -> "Grid":
        return cls([[Cell.from_data(cell) for cell in row] for row in data])

    def to_data(self) -> List[List[dict]]:
        return [[cell.to_data() for cell in row] for row in self._rows]

    def copy(self) -> "Grid":
        # Cells are immutable, copying the rows is enough.
        return Grid([list(row) for row in self._rows])

    def __getitem__(self, position: Tuple[int, int]) -> Cell:
        row, col = position
        return self._rows[row][col]

    def __setitem__(self, position: Tuple[int, int], cell: Cell) -> None:
        row, col = position
        self._rows[row][col] = cell

    def __eq__(self, other) -> bool:
        return isinstance(other, Grid) and self._rows == other._rows

    def positions(self) -> Iterator[Tuple[int, int]]:
        """Row-major iteration over every coordinate."""
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                yield row, col

    @staticmethod
    def in_bounds(row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    @classmethod
    def check_bounds(cls, row: int, col: int) -> None:
        if not cls.in_bounds(row, col):
            raise InvalidState(f"({row}, {col}) is outside the {BOARD_SIZE}x{BOARD_SIZE} board")

    def neighbors4(self, row: int, col: int) -> List[Tuple[int, int]]:
        candidates = [(row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)]
        return [(r, c) for r, c in candidates if self.in_bounds(r, c)]

    @staticmethod
    def box(row: int, col: int, radius: int) -> List[Tuple[int, int]]:
        """Cells within Chebyshev distance ``radius`` of (row, col), itself excluded."""
        return [
            (r, c)
            for r in range(max(0, row - radius), min(BOARD_SIZE - 1, row + radius) + 1)
            for c in range(max(0, col - radius), min(BOARD_SIZE - 1, col + radius) + 1)
            if (r, c) != (row, col)
        ]

    def owned_count(self, owner: str) -> int:
        return sum(1 for position in self.positions() if self[position].owner == owner)

    def owns_adjacent(self, owner: str, row: int, col: int) -> bool:
        return any(self[position].owner == owner for position in self.neighbors4(row, col))
