"""
Commission routes — POST /api/commissions/calculate
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.commissions.calculator import calculate_commission
from wethrift.commissions.schemas import CommissionRequest
from wethrift.database import get_db
from wethrift.schemas import make_success_response

router = APIRouter(prefix="/api/commissions", tags=["Commissions"])
logger = logging.getLogger(__name__)


@router.post("/calculate")
async def calculate(
    body: CommissionRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Returns:
      200: {success: true, data: CommissionCalculation | null}
      422: VALIDATION_ERROR for an unknown service type or non-positive amount
    """
    calculation = await calculate_commission(
        db,
        body.service_type,
        body.amount,
        group_id=body.group_id,
        user_id=body.user_id,
    )
    data = calculation.model_dump(mode="json", by_alias=True) if calculation else None
    return make_success_response(data)
