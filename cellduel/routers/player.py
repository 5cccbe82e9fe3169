from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from cellduel.domain.errors import DuelError
from cellduel.models.dc_models import PlayerNameModel
from cellduel.models.schema_models import PlayerSchema
from cellduel.routers.dependencies import get_duel_service, to_http_exception
from cellduel.services.duel_db import DuelService

player_router = APIRouter(prefix="/players", tags=["players"])


class PlayerAPI:
    @staticmethod
    @player_router.post("", response_model=PlayerSchema)
    async def create_player(
        player: PlayerNameModel,
        service: DuelService = Depends(get_duel_service),
    ) -> PlayerSchema:
        return await service.create_player(player.player_name)

    @staticmethod
    @player_router.get("/online", response_model=List[PlayerSchema])
    async def online_players(service: DuelService = Depends(get_duel_service)):
        return await service.online_players()

    @staticmethod
    @player_router.post("/{player_id}/heartbeat", response_model=PlayerSchema)
    async def heartbeat(
        player_id: UUID,
        is_online: bool = True,
        service: DuelService = Depends(get_duel_service),
    ) -> PlayerSchema:
        """Refresh the presence (last_seen) of a player

        Args:
            player_id (UUID): To identify the player
            is_online (bool): False when the client is going away
        """
        try:
            return await service.heartbeat(player_id, is_online)
        except DuelError as e:
            raise to_http_exception(e)
