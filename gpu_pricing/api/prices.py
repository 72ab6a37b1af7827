# gpu_pricing/api/prices.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from gpu_pricing.models.prices import (
    PriceSnapshotResponse,
    PriceUpdateRequest,
    PriceUpdateResponse,
)
from gpu_pricing.registry import RECENT_LOG_LIMIT, get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["prices"])


def validation_details(exc: ValidationError) -> List[dict]:
    return [
        {
            "path": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


@router.post(
    "/prices",
    response_model=PriceUpdateResponse,
    response_model_exclude_none=True,
)
async def update_prices(request: Request):
    """
    Apply a batch of price changes to the registry.

    The whole batch is rejected (400, nothing applied) if any item fails
    validation. Unknown instance ids are reported per item and do not
    stop the rest of the batch.
    """
    try:
        body = await request.json()
        payload = PriceUpdateRequest.model_validate(body)

        results, updated_at = get_registry().apply_updates(payload.updates)
    except ValidationError as exc:
        logger.warning("Rejected price update request: %s", exc.error_count())
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request data",
                "details": validation_details(exc),
            },
        )
    except Exception:
        logger.exception("Price update error")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "message": "Failed to update prices",
            },
        )

    n_updated = sum(1 for r in results if r.success)

    return PriceUpdateResponse(
        message=f"{n_updated} instance price(s) updated.",
        results=results,
        updated_at=updated_at,
    )


@router.get(
    "/prices",
    response_model=PriceSnapshotResponse,
    response_model_exclude_none=True,
)
def get_prices(
    logs: Optional[str] = Query(None, description="\"true\" to include the most recent update log entries"),
):
    """
    Current price of every instance, optionally with the last 50 log entries.
    """
    try:
        registry = get_registry()
        response = PriceSnapshotResponse(
            prices=registry.snapshot(),
            last_updated=datetime.now(timezone.utc),
        )
        if logs == "true":
            response.logs = registry.recent_logs(RECENT_LOG_LIMIT)
    except Exception:
        logger.exception("Price retrieval error")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to retrieve prices"},
        )

    return response
