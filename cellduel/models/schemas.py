from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import JSON, BigInteger, Boolean, Float, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from uuid import uuid4
from uuid6 import uuid7


class Base(DeclarativeBase):
    pass


class Player(Base):
    __tablename__ = "player"
    player_id = Column(Uuid, primary_key=True, default=uuid4)
    player_name = Column(String)
    is_online = Column(Boolean, default=True)
    last_seen = Column(BigInteger)  # epoch ms


class Duel(Base):
    __tablename__ = "duel"
    duel_id = Column(Uuid, primary_key=True, default=uuid7)
    player1_id = Column(Uuid, index=True)
    player2_id = Column(Uuid, index=True)
    status = Column(String, index=True)  # "pending" | "active" | "completed"
    winner_id = Column(Uuid, nullable=True)
    created_at = Column(BigInteger)
    started_at = Column(BigInteger, nullable=True)
    completed_at = Column(BigInteger, nullable=True)

    game_state = relationship(
        "GameState",
        primaryjoin="Duel.duel_id == foreign(GameState.duel_id)",
        back_populates="duel",
        cascade="all, delete",
        uselist=False  # one game state per duel
    )
    player1 = relationship(
        "Player",
        primaryjoin="foreign(Duel.player1_id) == Player.player_id",
        viewonly=True,
    )
    player2 = relationship(
        "Player",
        primaryjoin="foreign(Duel.player2_id) == Player.player_id",
        viewonly=True,
    )


class GameState(Base):
    __tablename__ = "game_state"
    game_state_id = Column(Uuid, primary_key=True, default=uuid7)
    duel_id = Column(Uuid, unique=True, index=True)
    player1_energy = Column(Float)
    player2_energy = Column(Float)
    player1_timer = Column(Float)
    player2_timer = Column(Float)
    last_energy_update = Column(BigInteger)
    last_timer_update = Column(BigInteger)
    # 10x10 list of {"type", "owner", "acquired_at", "last_zap_at"}
    grid = Column(JSON().with_variant(JSONB, "postgresql"))

    duel = relationship(
        "Duel",
        primaryjoin="foreign(GameState.duel_id) == Duel.duel_id",
        back_populates="game_state",
        uselist=False
    )
