from pydantic import BaseModel, Field
from enum import Enum
from uuid import UUID
from typing import List, Optional

from cellduel.domain.duel_rules import BOARD_SIZE
from cellduel.models.schema_models import CellSchema


class CellTypeModel(str, Enum):
    basic = "basic"
    hardened = "hardened"
    generator = "generator"
    zapper = "zapper"


class DuelStatusModel(str, Enum):
    pending = "pending"
    active = "active"
    completed = "completed"


class PlayerNameModel(BaseModel):
    player_name: str = Field(min_length=1)


class StartDuelModel(BaseModel):
    player1_id: UUID
    player2_id: UUID


class TickRequestModel(BaseModel):
    player_id: Optional[UUID] = None


class PurchaseModel(BaseModel):
    player_id: UUID
    row: int = Field(ge=0, lt=BOARD_SIZE)
    col: int = Field(ge=0, lt=BOARD_SIZE)
    cell_type: CellTypeModel = CellTypeModel.basic


class TickResultModel(BaseModel):
    player1_energy: float
    player2_energy: float
    player1_timer: float
    player2_timer: float
    player1_cells: int
    player2_cells: int
    player1_rate: int
    player2_rate: int
    player1_generators: int
    player2_generators: int
    winner_id: UUID | None = None
    grid: Optional[List[List[CellSchema]]] = None  # only set when the grid changed


class PurchaseResultModel(BaseModel):
    success: bool
    cost: int
    new_energy: float
    cell_type: CellTypeModel


class CellTypeInfoModel(BaseModel):
    cell_type: CellTypeModel
    surcharge: int
    energy_rate: int
    description: str
