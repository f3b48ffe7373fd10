from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import WalletError

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class HealthOut(BaseModel):
    ok: bool
    node_ok: bool
    synced: bool
    version: str | None = None
    network: str | None = None
    latest_block_height: int | None = None


@router.get("/healthz", response_model=HealthOut, include_in_schema=False)
def health(request: Request):
    service = request.app.state.wallet_service
    try:
        info = service.get_node_info()
    except (WalletError, ValueError) as exc:
        LOGGER.warning("health.node_unreachable", extra={"error": str(exc)})
        payload = HealthOut(ok=False, node_ok=False, synced=False)
    else:
        payload = HealthOut(
            ok=info.synced,
            node_ok=True,
            synced=info.synced,
            version=info.version,
            network=info.network,
            latest_block_height=info.latest_block_height,
        )
    if payload.ok:
        return payload
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=payload.model_dump(),
    )
