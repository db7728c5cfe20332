"""
USSD gateway routes — POST /api/ussd, GET /api/ussd

The gateway calls POST /api/ussd once per keystroke with
{sessionId, phoneNumber, userInput} and shows `data.message` to the
subscriber, closing the dialog when `data.shouldEnd` is true.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.config import settings
from wethrift.database import get_db
from wethrift.schemas import make_error_response, make_success_response
from wethrift.ussd.directory import ThriftDirectory
from wethrift.ussd.engine import UssdEngine
from wethrift.ussd.schemas import UssdRequest
from wethrift.ussd.session_store import UssdSessionStore
from wethrift.ussd.validator import mask_phone

router = APIRouter(prefix="/api", tags=["USSD"])
logger = logging.getLogger(__name__)


def get_ussd_engine(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UssdEngine:
    """Engine bound to this request's database session and the shared Redis pool."""
    store = UssdSessionStore(request.app.state.redis, db)
    return UssdEngine(store, ThriftDirectory(db))


def _validation_details(exc: ValidationError) -> list[dict]:
    return [
        {"field": ".".join(str(loc) for loc in error["loc"]) or None, "issue": error["msg"]}
        for error in exc.errors()
    ]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/ussd")
async def handle_ussd(
    request_body: dict,
    engine: UssdEngine = Depends(get_ussd_engine),
) -> JSONResponse:
    """
    Process one USSD keystroke.

    Returns:
      200: {success: true, data: {message, shouldEnd, nextMenu}}
      400: VALIDATION_ERROR when sessionId / phoneNumber / userInput are invalid
    """
    try:
        ussd_request = UssdRequest.model_validate(request_body)
    except ValidationError as exc:
        return make_error_response(
            code="VALIDATION_ERROR",
            message="Invalid input data",
            details=_validation_details(exc),
            status_code=400,
        )

    logger.debug(
        "USSD request session_id=%s phone=%s",
        ussd_request.session_id,
        mask_phone(ussd_request.phone_number),
    )
    response = await engine.process_request(
        ussd_request.session_id,
        ussd_request.phone_number,
        ussd_request.user_input,
    )
    return make_success_response(response.to_wire())


@router.get("/ussd")
async def ussd_health() -> dict:
    return {
        "success": True,
        "message": f"{settings.ussd_service_name} USSD Service is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
