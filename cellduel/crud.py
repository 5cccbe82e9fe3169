"""CRUD helpers.

None of these commit: the service layer owns the transaction
(``async with session.begin()``) and commits or rolls back as a whole.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from cellduel.models.schema_models import DuelSchema, GameStateSchema, PlayerSchema
from cellduel.models.schemas import Duel, GameState, Player


class ReadData:
    @staticmethod
    async def read_player_data(player_id: UUID, session: AsyncSession) -> PlayerSchema | None:
        """Read player data from database

        Args:
            player_id (UUID): To identify the player

        Returns:
            PlayerSchema: Player name and presence
        """
        try:
            stmt = select(Player).where(Player.player_id == player_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return PlayerSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read player data: {e}")
            raise

    @staticmethod
    async def read_online_players(seen_since: int, session: AsyncSession) -> List[PlayerSchema]:
        """Read players flagged online and seen at or after ``seen_since`` (epoch ms)"""
        try:
            stmt = (
                select(Player)
                .where(Player.is_online.is_(True), Player.last_seen >= seen_since)
                .order_by(Player.player_name)
            )
            result = await session.execute(stmt)
            return [PlayerSchema.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logging.error(f"Failed to read online players: {e}")
            raise

    @staticmethod
    async def read_duel_data(duel_id: UUID, session: AsyncSession) -> DuelSchema | None:
        """Read duel data and its game state from database

        Args:
            duel_id (UUID): To identify the duel

        Returns:
            DuelSchema: Duel data with game state
        """
        try:
            stmt = (
                select(Duel)
                .where(Duel.duel_id == duel_id)
                .options(joinedload(Duel.game_state))
            )
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return DuelSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read duel data: {e}")
            raise

    @staticmethod
    async def read_active_duel_id(player_id: UUID, session: AsyncSession) -> UUID | None:
        """Read the id of the active duel the player takes part in"""
        try:
            stmt = (
                select(Duel.duel_id)
                .where(
                    Duel.status == "active",
                    or_(Duel.player1_id == player_id, Duel.player2_id == player_id),
                )
                .order_by(Duel.created_at.desc())
                .limit(1)
            )
            result = await session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Failed to read active duel id: {e}")
            raise

    @staticmethod
    async def read_active_duel_ids(session: AsyncSession) -> List[UUID]:
        try:
            stmt = select(Duel.duel_id).where(Duel.status == "active")
            result = await session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logging.error(f"Failed to read active duel ids: {e}")
            raise

    @staticmethod
    async def read_duel_row(duel_id: UUID, session: AsyncSession) -> Duel | None:
        """Read the duel row itself, to be patched in the same transaction"""
        try:
            stmt = select(Duel).where(Duel.duel_id == duel_id).with_for_update()
            result = await session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Failed to read duel row: {e}")
            raise

    @staticmethod
    async def read_game_state_row(duel_id: UUID, session: AsyncSession) -> GameState | None:
        """Read and lock the game state row of a duel (1:1 lookup by duel id)"""
        try:
            stmt = select(GameState).where(GameState.duel_id == duel_id).with_for_update()
            result = await session.execute(stmt)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Failed to read game state row: {e}")
            raise


class CreateData:
    @staticmethod
    async def add_player_data(player: PlayerSchema, session: AsyncSession) -> None:
        try:
            session.add(
                Player(
                    player_id=player.player_id,
                    player_name=player.player_name,
                    is_online=player.is_online,
                    last_seen=player.last_seen,
                )
            )
            await session.flush()
        except SQLAlchemyError as e:
            logging.error(f"Failed to add player data: {e}")
            raise

    @staticmethod
    async def add_duel_data(duel: DuelSchema, session: AsyncSession) -> None:
        try:
            session.add(
                Duel(
                    duel_id=duel.duel_id,
                    player1_id=duel.player1_id,
                    player2_id=duel.player2_id,
                    status=duel.status,
                    winner_id=duel.winner_id,
                    created_at=duel.created_at,
                    started_at=duel.started_at,
                    completed_at=duel.completed_at,
                )
            )
            await session.flush()
        except SQLAlchemyError as e:
            logging.error(f"Failed to add duel data: {e}")
            raise

    @staticmethod
    async def add_game_state_data(game_state: GameStateSchema, session: AsyncSession) -> None:
        try:
            data = game_state.model_dump(mode="json")
            session.add(
                GameState(
                    game_state_id=game_state.game_state_id,
                    duel_id=game_state.duel_id,
                    player1_energy=game_state.player1_energy,
                    player2_energy=game_state.player2_energy,
                    player1_timer=game_state.player1_timer,
                    player2_timer=game_state.player2_timer,
                    last_energy_update=game_state.last_energy_update,
                    last_timer_update=game_state.last_timer_update,
                    grid=data["grid"],
                )
            )
            await session.flush()
        except SQLAlchemyError as e:
            logging.error(f"Failed to add game state data: {e}")
            raise


class UpdateData:
    @staticmethod
    def patch_game_state(game_state: GameState, **fields) -> None:
        """Partial patch: only the given columns are written on flush"""
        for name, value in fields.items():
            setattr(game_state, name, value)

    @staticmethod
    def complete_duel(duel: Duel, winner_id: UUID, completed_at: int) -> None:
        duel.status = "completed"
        duel.winner_id = winner_id
        duel.completed_at = completed_at

    @staticmethod
    async def touch_player(player_id: UUID, is_online: bool, now: int, session: AsyncSession) -> bool:
        """Update presence of a player

        Args:
            player_id (UUID): To identify the player
            is_online (bool): New online flag
            now (int): Epoch ms stored as last_seen

        Returns:
            bool: False if the player does not exist
        """
        try:
            stmt = select(Player).where(Player.player_id == player_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return False

            result.is_online = is_online
            result.last_seen = now
            await session.flush()
            return True
        except SQLAlchemyError as e:
            logging.error(f"Failed to update player presence: {e}")
            raise
