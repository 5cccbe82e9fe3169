from fastapi import HTTPException, Request, status

from cellduel.domain.errors import DuelError, InsufficientResources, NotFound
from cellduel.redis_notifier import DuelNotifier
from cellduel.services.duel_db import DuelService


def get_duel_service(request: Request) -> DuelService:
    return request.app.state.duel_service


def get_notifier(request: Request) -> DuelNotifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notifications are disabled.",
        )
    return notifier


def to_http_exception(error: DuelError) -> HTTPException:
    """NotFound -> 404, InsufficientResources -> 402, other rule violations -> 409"""
    if isinstance(error, NotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InsufficientResources):
        status_code = status.HTTP_402_PAYMENT_REQUIRED
    else:
        status_code = status.HTTP_409_CONFLICT
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": str(error)},
    )
