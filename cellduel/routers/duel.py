import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from cellduel.domain.duel_rules import CELL_TYPE_DESCRIPTIONS, FLAT_RATE, PURCHASABLE_TYPES, TYPE_SURCHARGE
from cellduel.domain.errors import DuelError
from cellduel.models.dc_models import (
    CellTypeInfoModel,
    PurchaseModel,
    PurchaseResultModel,
    StartDuelModel,
    TickRequestModel,
    TickResultModel,
)
from cellduel.models.schema_models import ActiveDuelSchema, DuelSchema
from cellduel.redis_notifier import DuelNotifier
from cellduel.routers.dependencies import get_duel_service, get_notifier, to_http_exception
from cellduel.services.duel_db import DuelService

duel_router = APIRouter(tags=["duels"])


class DuelServer:
    @staticmethod
    @duel_router.post("/duels", response_model=DuelSchema)
    async def start_duel(
        request: StartDuelModel,
        service: DuelService = Depends(get_duel_service),
    ) -> DuelSchema:
        """Start an active duel between two players

        Args:
            request (StartDuelModel): player1 (seed at row 0) and player2 (seed at row 9)

        Returns:
            DuelSchema: The new duel with its initial game state
        """
        try:
            return await service.start_duel(request.player1_id, request.player2_id)
        except DuelError as e:
            raise to_http_exception(e)

    @staticmethod
    @duel_router.get("/duels/active/{player_id}", response_model=ActiveDuelSchema | None)
    async def get_active_duel(
        player_id: UUID,
        service: DuelService = Depends(get_duel_service),
    ):
        return await service.read_active_duel(player_id)

    @staticmethod
    @duel_router.get("/duels/{duel_id}", response_model=DuelSchema)
    async def get_duel(
        duel_id: UUID,
        service: DuelService = Depends(get_duel_service),
    ) -> DuelSchema:
        try:
            return await service.read_duel(duel_id)
        except DuelError as e:
            raise to_http_exception(e)

    @staticmethod
    @duel_router.post("/duels/{duel_id}/tick", response_model=TickResultModel)
    async def tick(
        duel_id: UUID,
        request: TickRequestModel | None = None,
        service: DuelService = Depends(get_duel_service),
    ) -> TickResultModel:
        """Advance the duel by the time elapsed since the previous tick

        Clients poll this about once per second.

        Args:
            duel_id (UUID): To identify the duel
            request (TickRequestModel): The calling player, optional

        Returns:
            TickResultModel: Energies, timers, cell counts, rates, generators,
                winner if the duel just ended, grid if it changed
        """
        player_id = request.player_id if request is not None else None
        try:
            return await service.tick(duel_id, player_id)
        except DuelError as e:
            raise to_http_exception(e)

    @staticmethod
    @duel_router.post("/duels/{duel_id}/purchase", response_model=PurchaseResultModel)
    async def purchase(
        duel_id: UUID,
        request: PurchaseModel,
        service: DuelService = Depends(get_duel_service),
    ) -> PurchaseResultModel:
        """Buy a cell: expand onto a neutral cell or capture an opponent's cell

        Args:
            duel_id (UUID): To identify the duel
            request (PurchaseModel): Buyer, coordinates and requested cell type

        Returns:
            PurchaseResultModel: Charged cost, remaining energy and resolved cell type
        """
        try:
            return await service.purchase(
                duel_id,
                request.player_id,
                request.row,
                request.col,
                request.cell_type.value,
            )
        except DuelError as e:
            raise to_http_exception(e)

    @staticmethod
    @duel_router.get("/duels/{duel_id}/stream")
    async def stream_duel(
        duel_id: UUID,
        notifier: DuelNotifier = Depends(get_notifier),
    ):
        logging.info(f"Streaming duel {duel_id}")
        return StreamingResponse(
            notifier.event_generator(duel_id),
            media_type="text/event-stream; charset=utf-8",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )


class CellTypeAPI:
    @staticmethod
    @duel_router.get("/cell-types", response_model=List[CellTypeInfoModel])
    async def get_cell_types():
        return [
            CellTypeInfoModel(
                cell_type=cell_type,
                surcharge=TYPE_SURCHARGE[cell_type],
                energy_rate=FLAT_RATE.get(cell_type, 0),
                description=CELL_TYPE_DESCRIPTIONS[cell_type],
            )
            for cell_type in PURCHASABLE_TYPES
        ]
