"""
schemas.py — commission request/result contracts (camelCase on the wire).
"""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ServiceType(str, Enum):
    savings = "savings"
    loans = "loans"
    contributions = "contributions"
    escrow = "escrow"
    general = "general"


class CommissionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service_type: ServiceType
    amount: Decimal = Field(..., gt=0, description="Transaction amount in naira")
    group_id: Optional[str] = None
    user_id: Optional[str] = None


class CommissionCalculation(BaseModel):
    """Commission owed on one transaction under the tier that applies to it."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service_type: ServiceType
    amount: Decimal
    rate_percentage: Decimal
    commission_amount: Decimal
    group_id: Optional[str] = None
    user_id: Optional[str] = None
