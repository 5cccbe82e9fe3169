from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID


class PlayerSchema(BaseModel):
    player_id: UUID
    player_name: str
    is_online: bool
    last_seen: int

    class Config:
        from_attributes = True


class CellSchema(BaseModel):
    type: str
    owner: Optional[UUID] = None
    acquired_at: Optional[int] = None
    last_zap_at: Optional[int] = None


class GameStateSchema(BaseModel):
    game_state_id: UUID
    duel_id: UUID
    player1_energy: float
    player2_energy: float
    player1_timer: float
    player2_timer: float
    last_energy_update: int
    last_timer_update: int
    grid: List[List[CellSchema]]

    class Config:
        from_attributes = True


class DuelSchema(BaseModel):
    duel_id: UUID
    player1_id: UUID
    player2_id: UUID
    status: str
    winner_id: UUID | None
    created_at: int
    started_at: int | None
    completed_at: int | None
    game_state: Optional[GameStateSchema] = None

    class Config:
        from_attributes = True


class ActiveDuelSchema(BaseModel):
    duel: DuelSchema
    game_state: GameStateSchema | None
    player1: PlayerSchema | None
    player2: PlayerSchema | None
