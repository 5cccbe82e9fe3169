from dataclasses import dataclass

from cellduel.domain.grid import Grid


@dataclass
class EngineState:
    """Mutable simulation values of one duel, detached from persistence."""

    player1_energy: float
    player2_energy: float
    player1_timer: float
    player2_timer: float
    last_energy_update: int
    last_timer_update: int
    grid: Grid

    def energy_of(self, slot: int) -> float:
        return self.player1_energy if slot == 1 else self.player2_energy

    def timer_of(self, slot: int) -> float:
        return self.player1_timer if slot == 1 else self.player2_timer


@dataclass(frozen=True)
class PlayerTotals:
    cells: int = 0
    generators: int = 0
    rate: int = 0
