"""REST endpoints for match scoring."""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies.auth import CurrentUser
from app.dependencies.matches import MatchServiceDep
from app.schemas.match import CreateMatchRequest, MatchEventRequest, MatchListResponse
from app.schemas.snooker import MatchPlayer, MatchStatus
from app.services.match.service import MatchServiceResult
from app.services.snooker.engine import MatchEventData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["matches"])

ERROR_STATUS_MAP = {
    "MATCH_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "INVALID_MATCH": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "NO_EVENTS": status.HTTP_409_CONFLICT,
    "REPLAY_FAILED": status.HTTP_409_CONFLICT,
}


def _unwrap(result: MatchServiceResult) -> dict:
    """Match document on success, HTTPException otherwise.

    Engine rejections map to 422 with the engine's message as detail.
    """
    if result.success and result.match is not None:
        return result.match.to_document()

    http_status = ERROR_STATUS_MAP.get(
        result.error_code or "", status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    raise HTTPException(
        status_code=http_status,
        detail=result.error_message or "Request failed",
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_match(
    current_user: CurrentUser,
    request: CreateMatchRequest,
    service: MatchServiceDep,
):
    """Create a scheduled match between two players.

    Raises:
        HTTPException 400: If the players or format are invalid.
        HTTPException 403: If the user may not score matches.
    """
    logger.info(
        "POST /matches - user: %s, players: %s vs %s",
        current_user.id,
        request.player1.player_id,
        request.player2.player_id,
    )
    result = await service.create_match(
        current_user,
        MatchPlayer(**request.player1.model_dump()),
        MatchPlayer(**request.player2.model_dump()),
        request.format,
        venue=request.venue,
        referee=request.referee,
    )
    return _unwrap(result)


@router.get("", response_model=MatchListResponse)
async def list_matches(
    service: MatchServiceDep,
    match_status: MatchStatus | None = Query(None, alias="status"),
    limit: int | None = Query(None, ge=1, le=100),
):
    """List matches by status, or the most recently updated ones."""
    if match_status is not None:
        matches = await service.list_matches_by_status(match_status)
        if limit is not None:
            matches = matches[:limit]
    else:
        matches = await service.list_recent_matches(limit)
    return MatchListResponse(matches=[m.to_document() for m in matches])


@router.get("/{match_id}")
async def get_match(match_id: str, service: MatchServiceDep):
    return _unwrap(await service.get_match(match_id))


@router.post("/{match_id}/start")
async def start_match(match_id: str, current_user: CurrentUser, service: MatchServiceDep):
    logger.info("POST /matches/%s/start - user: %s", match_id, current_user.id)
    return _unwrap(await service.start_match(match_id, current_user))


@router.post("/{match_id}/events")
async def submit_event(
    match_id: str,
    current_user: CurrentUser,
    request: MatchEventRequest,
    service: MatchServiceDep,
):
    """Apply one scoring event.

    Raises:
        HTTPException 403: If the user may not score matches.
        HTTPException 404: If the match does not exist.
        HTTPException 422: If the engine rejects the event (detail is the engine message).
    """
    logger.info(
        "POST /matches/%s/events - user: %s, action: %s, ball: %s",
        match_id,
        current_user.id,
        request.action,
        request.ball.value if request.ball else None,
    )
    event_data = MatchEventData(action=request.action, ball=request.ball, note=request.note)
    return _unwrap(await service.apply_match_event(match_id, event_data, current_user))


@router.post("/{match_id}/undo")
async def undo_event(match_id: str, current_user: CurrentUser, service: MatchServiceDep):
    logger.info("POST /matches/%s/undo - user: %s", match_id, current_user.id)
    return _unwrap(await service.undo_last_event(match_id, current_user))


@router.post("/{match_id}/abandon")
async def abandon_match(match_id: str, current_user: CurrentUser, service: MatchServiceDep):
    logger.info("POST /matches/%s/abandon - user: %s", match_id, current_user.id)
    return _unwrap(await service.abandon_match(match_id, current_user))
