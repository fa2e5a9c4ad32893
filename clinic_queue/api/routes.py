from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from ..service.queue_engine import QueueEngine
from .models import (
    QueueSummary,
    QueueSummaryResponse,
    StatusUpdateRequest,
    TokenCreateRequest,
    TokenListResponse,
    TokenResponse,
    VipUpdateRequest,
)

router = APIRouter(prefix="/api/tokens", tags=["tokens"])


def get_queue_engine(request: Request) -> QueueEngine:
    """Engine bound to the running app by `create_app`."""
    return request.app.state.engine


# Handlers are plain `def`: the engine blocks on locks, so FastAPI runs them in
# its threadpool.


@router.get("", response_model=TokenListResponse, summary="List all tokens")
def list_tokens(engine: QueueEngine = Depends(get_queue_engine)) -> TokenListResponse:
    """Return every token ordered by token number."""
    return TokenListResponse(data=engine.list_tokens())


@router.get("/current", response_model=TokenResponse, summary="Currently serving token")
def current_token(engine: QueueEngine = Depends(get_queue_engine)) -> TokenResponse:
    """Return the serving token; `data` is null when nobody is being served."""
    return TokenResponse(data=engine.get_current())


@router.get("/summary", response_model=QueueSummaryResponse, summary="Queue counts and next up")
def queue_summary(engine: QueueEngine = Depends(get_queue_engine)) -> QueueSummaryResponse:
    snap = engine.snapshot()
    return QueueSummaryResponse(
        data=QueueSummary(counts=snap.counts, total=snap.total, current=snap.current, next_up=snap.next_up)
    )


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a token",
)
def create_token(req: TokenCreateRequest, engine: QueueEngine = Depends(get_queue_engine)) -> TokenResponse:
    token = engine.create_token(
        patient_name=req.patient_name,
        phone_number=req.phone_number,
        is_vip=req.is_vip,
    )
    return TokenResponse(data=token, message="Token created successfully")


@router.patch("/next", response_model=TokenResponse, summary="Advance to the next token")
def advance_next(engine: QueueEngine = Depends(get_queue_engine)) -> TokenResponse:
    """Complete the serving token and promote the next one (VIPs first)."""
    token = engine.advance_next()
    if token is None:
        return TokenResponse(data=None, message="No more patients in queue")
    return TokenResponse(data=token)


@router.patch("/reorder/{token_id}", response_model=TokenResponse, summary="Set the VIP flag")
def set_vip(
    token_id: str,
    req: VipUpdateRequest,
    engine: QueueEngine = Depends(get_queue_engine),
) -> TokenResponse:
    token = engine.set_vip(token_id, req.is_vip)
    return TokenResponse(data=token, message="VIP status updated successfully")


@router.patch("/{token_id}", response_model=TokenResponse, summary="Update a token's status")
def update_status(
    token_id: str,
    req: StatusUpdateRequest,
    engine: QueueEngine = Depends(get_queue_engine),
) -> TokenResponse:
    return TokenResponse(data=engine.update_status(token_id, req.status))
