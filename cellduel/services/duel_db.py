"""DB service layer for duel use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries and the per-duel lock.
- Every use case computes its whole result before the transaction commits,
  so a failed call leaves nothing behind.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID, uuid4

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import async_sessionmaker
from uuid6 import uuid7

from cellduel.crud import CreateData, ReadData, UpdateData
from cellduel.domain.duel_rules import (
    BASIC,
    ONLINE_WINDOW_MS,
    PLAYER1,
    PLAYER2,
    STARTING_ENERGY,
    STARTING_TIMER_MS,
)
from cellduel.domain.economy_rules import tally_player
from cellduel.domain.errors import DuelError, InvalidState, NotFound
from cellduel.domain.game_state import EngineState, PlayerTotals
from cellduel.domain.grid import Grid
from cellduel.domain.purchase_rules import apply_purchase
from cellduel.domain.tick_engine import advance
from cellduel.domain.zapper import RandomPicker, UniformPicker
from cellduel.duel_lock_manager import DuelLockManager
from cellduel.models.dc_models import PurchaseResultModel, TickResultModel
from cellduel.models.schema_models import (
    ActiveDuelSchema,
    DuelSchema,
    GameStateSchema,
    PlayerSchema,
)
from cellduel.models.schemas import GameState
from cellduel.redis_notifier import DuelNotifier


def current_millis() -> int:
    return int(datetime.now().timestamp() * 1000)


def to_engine_state(game_state: GameState) -> EngineState:
    return EngineState(
        player1_energy=game_state.player1_energy,
        player2_energy=game_state.player2_energy,
        player1_timer=game_state.player1_timer,
        player2_timer=game_state.player2_timer,
        last_energy_update=game_state.last_energy_update,
        last_timer_update=game_state.last_timer_update,
        grid=Grid.from_data(game_state.grid),
    )


def build_tick_result(
    state: EngineState,
    player1: PlayerTotals,
    player2: PlayerTotals,
    winner_id: UUID | None,
    grid: Optional[Grid] = None,
) -> TickResultModel:
    return TickResultModel(
        player1_energy=state.player1_energy,
        player2_energy=state.player2_energy,
        player1_timer=state.player1_timer,
        player2_timer=state.player2_timer,
        player1_cells=player1.cells,
        player2_cells=player2.cells,
        player1_rate=player1.rate,
        player2_rate=player2.rate,
        player1_generators=player1.generators,
        player2_generators=player2.generators,
        winner_id=winner_id,
        grid=grid.to_data() if grid is not None else None,
    )


class DuelService:
    def __init__(
        self,
        Session: async_sessionmaker,
        notifier: Optional[DuelNotifier] = None,
        picker: Optional[UniformPicker] = None,
        lock_manager: Optional[DuelLockManager] = None,
        clock: Callable[[], int] = current_millis,
    ):
        self.Session = Session
        self.notifier = notifier
        self.picker = picker if picker is not None else RandomPicker()
        self.lock_manager = lock_manager if lock_manager is not None else DuelLockManager()
        self.clock = clock

    async def notify(self, duel_id: UUID) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.publish(duel_id)
        except RedisError as e:
            logging.error(f"Failed to publish update of duel {duel_id}: {e}")

    # ==== Players =============================================================

    async def create_player(self, player_name: str) -> PlayerSchema:
        player = PlayerSchema(
            player_id=uuid4(),
            player_name=player_name,
            is_online=True,
            last_seen=self.clock(),
        )
        async with self.Session() as session:
            async with session.begin():
                await CreateData.add_player_data(player, session)
        logging.info(f"Created player {player.player_name} ({player.player_id})")
        return player

    async def heartbeat(self, player_id: UUID, is_online: bool = True) -> PlayerSchema:
        async with self.Session() as session:
            async with session.begin():
                found = await UpdateData.touch_player(player_id, is_online, self.clock(), session)
                if not found:
                    raise NotFound(f"Player {player_id} not found")
                return await ReadData.read_player_data(player_id, session)

    async def online_players(self) -> List[PlayerSchema]:
        async with self.Session() as session:
            return await ReadData.read_online_players(self.clock() - ONLINE_WINDOW_MS, session)

    # ==== Duels ===============================================================

    async def start_duel(self, player1_id: UUID, player2_id: UUID) -> DuelSchema:
        """Create an active duel and its seeded game state."""
        if player1_id == player2_id:
            raise InvalidState("A player cannot duel themself")

        now = self.clock()
        duel_id = uuid7()
        grid = Grid.initial(str(player1_id), str(player2_id), now)
        game_state = GameStateSchema(
            game_state_id=uuid7(),
            duel_id=duel_id,
            player1_energy=STARTING_ENERGY,
            player2_energy=STARTING_ENERGY,
            player1_timer=STARTING_TIMER_MS,
            player2_timer=STARTING_TIMER_MS,
            last_energy_update=now,
            last_timer_update=now,
            grid=grid.to_data(),
        )
        duel = DuelSchema(
            duel_id=duel_id,
            player1_id=player1_id,
            player2_id=player2_id,
            status="active",
            winner_id=None,
            created_at=now,
            started_at=now,
            completed_at=None,
            game_state=game_state,
        )

        async with self.Session() as session:
            async with session.begin():
                for player_id in (player1_id, player2_id):
                    if await ReadData.read_player_data(player_id, session) is None:
                        raise NotFound(f"Player {player_id} not found")
                await CreateData.add_duel_data(duel, session)
                await CreateData.add_game_state_data(game_state, session)

        logging.info(f"Started duel {duel_id}: {player1_id} vs {player2_id}")
        await self.notify(duel_id)
        return duel

    async def read_duel(self, duel_id: UUID) -> DuelSchema:
        async with self.Session() as session:
            duel = await ReadData.read_duel_data(duel_id, session)
        if duel is None:
            raise NotFound(f"Duel {duel_id} not found")
        return duel

    async def read_active_duel(self, player_id: UUID) -> ActiveDuelSchema | None:
        async with self.Session() as session:
            duel_id = await ReadData.read_active_duel_id(player_id, session)
            if duel_id is None:
                return None
            duel = await ReadData.read_duel_data(duel_id, session)
            player1 = await ReadData.read_player_data(duel.player1_id, session)
            player2 = await ReadData.read_player_data(duel.player2_id, session)
        return ActiveDuelSchema(
            duel=duel,
            game_state=duel.game_state,
            player1=player1,
            player2=player2,
        )

    async def tick(self, duel_id: UUID, player_id: UUID | None = None, now: int | None = None) -> TickResultModel:
        """Advance the duel to ``now`` and finalize it if someone won.

        ``player_id`` only identifies the caller in the logs; both sides are
        advanced together.
        """
        completed = False
        async with self.lock_manager.hold(duel_id):
            async with self.Session() as session:
                async with session.begin():
                    duel = await ReadData.read_duel_row(duel_id, session)
                    if duel is None:
                        raise NotFound(f"Duel {duel_id} not found")
                    game_state = await ReadData.read_game_state_row(duel_id, session)
                    if game_state is None:
                        raise NotFound(f"Game state of duel {duel_id} not found")

                    state = to_engine_state(game_state)
                    player1_key, player2_key = str(duel.player1_id), str(duel.player2_id)

                    if duel.status != "active":
                        # Completion happens once; later ticks only report the final state.
                        return build_tick_result(
                            state,
                            tally_player(state.grid, player1_key),
                            tally_player(state.grid, player2_key),
                            duel.winner_id,
                        )

                    now = now if now is not None else self.clock()
                    player1 = await ReadData.read_player_data(duel.player1_id, session)
                    player2 = await ReadData.read_player_data(duel.player2_id, session)

                    outcome = advance(
                        state,
                        player1_key,
                        player2_key,
                        now,
                        player1.last_seen if player1 else None,
                        player2.last_seen if player2 else None,
                        self.picker,
                    )
                    new_state = outcome.state

                    fields = dict(
                        player1_energy=new_state.player1_energy,
                        player2_energy=new_state.player2_energy,
                        player1_timer=new_state.player1_timer,
                        player2_timer=new_state.player2_timer,
                        last_energy_update=new_state.last_energy_update,
                        last_timer_update=new_state.last_timer_update,
                    )
                    if outcome.grid_changed:
                        fields["grid"] = new_state.grid.to_data()
                    UpdateData.patch_game_state(game_state, **fields)

                    winner_id = None
                    if outcome.winner is not None:
                        winner_id = duel.player1_id if outcome.winner == PLAYER1 else duel.player2_id
                        UpdateData.complete_duel(duel, winner_id, now)
                        completed = True
                        logging.info(f"Duel {duel_id} completed, winner {winner_id}")

        logging.debug(f"Tick of duel {duel_id} by {player_id} at {now}")
        await self.notify(duel_id)
        if completed:
            await self.lock_manager.cleanup(duel_id)
        return build_tick_result(
            new_state,
            outcome.player1,
            outcome.player2,
            winner_id,
            new_state.grid if outcome.grid_changed else None,
        )

    async def purchase(
        self,
        duel_id: UUID,
        player_id: UUID,
        row: int,
        col: int,
        cell_type: str = BASIC,
        now: int | None = None,
    ) -> PurchaseResultModel:
        """Buy the cell at (row, col) for ``player_id``."""
        async with self.lock_manager.hold(duel_id):
            async with self.Session() as session:
                async with session.begin():
                    duel = await ReadData.read_duel_row(duel_id, session)
                    if duel is None:
                        raise NotFound(f"Duel {duel_id} not found")
                    game_state = await ReadData.read_game_state_row(duel_id, session)
                    if game_state is None:
                        raise NotFound(f"Game state of duel {duel_id} not found")

                    if player_id == duel.player1_id:
                        slot = PLAYER1
                    elif player_id == duel.player2_id:
                        slot = PLAYER2
                    else:
                        raise InvalidState(f"Player {player_id} is not part of duel {duel_id}")

                    now = now if now is not None else self.clock()
                    try:
                        outcome = apply_purchase(
                            to_engine_state(game_state),
                            duel.status,
                            slot,
                            str(player_id),
                            row,
                            col,
                            now,
                            cell_type,
                        )
                    except DuelError as e:
                        logging.debug(f"Rejected purchase of ({row}, {col}) in duel {duel_id}: {e}")
                        raise

                    new_state = outcome.state
                    fields = dict(grid=new_state.grid.to_data(), last_timer_update=new_state.last_timer_update)
                    if slot == PLAYER1:
                        fields.update(player1_energy=new_state.player1_energy, player1_timer=new_state.player1_timer)
                    else:
                        fields.update(player2_energy=new_state.player2_energy, player2_timer=new_state.player2_timer)
                    UpdateData.patch_game_state(game_state, **fields)

        await self.notify(duel_id)
        return PurchaseResultModel(
            success=True,
            cost=outcome.cost,
            new_energy=outcome.new_energy,
            cell_type=outcome.cell_type,
        )

    async def tick_active_duels(self) -> int:
        """Tick every active duel once; used by the server-side cadence."""
        async with self.Session() as session:
            duel_ids = await ReadData.read_active_duel_ids(session)

        ticked = 0
        for duel_id in duel_ids:
            try:
                await self.tick(duel_id)
                ticked += 1
            except DuelError as e:
                logging.error(f"Scheduled tick of duel {duel_id} failed: {e}")
        logging.debug(f"Scheduled tick sweep: {ticked}/{len(duel_ids)} duels")
        return ticked
