"""Subscription Routes: CRUD, filtered listing and cost calculation.

Invariants:
    - /subscriptions/cost is declared before /subscriptions/{subscription_id}
    - Domain errors propagate to the global handler (api/error_handlers.py)
    - Responses never expose ORM objects, only SubscriptionResponse/CostResponse
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from subscription_service.core.domain_types import SubscriptionId, UserId
from subscription_service.core.subscription import SubscriptionRecord
from subscription_service.infrastructure.database import get_db
from subscription_service.infrastructure.subscription_repository import (
    SqlSubscriptionRepository,
)
from subscription_service.schemas.subscription import (
    CostParams, CostResponse, SubscriptionCreate, SubscriptionListParams,
    SubscriptionResponse, SubscriptionUpdate,
)
from subscription_service.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


def get_subscription_service(
    db: AsyncSession = Depends(get_db),
) -> SubscriptionService:
    return SubscriptionService(SqlSubscriptionRepository(db))


def _to_response(record: SubscriptionRecord) -> SubscriptionResponse:
    return SubscriptionResponse.model_validate(record)


@router.post(
    "", response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    body: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service),
):
    record = SubscriptionRecord(
        service_name=body.service_name,
        price=body.price,
        user_id=UserId(body.user_id),
        start_date=body.start_date,
        end_date=body.end_date,
    )
    return _to_response(await service.create(record))


@router.get("", response_model=list[SubscriptionResponse])
async def list_subscriptions(
    params: Annotated[SubscriptionListParams, Query()],
    service: SubscriptionService = Depends(get_subscription_service),
):
    """List subscriptions, newest first. Out-of-range paging is clamped."""
    records = await service.list_subscriptions(
        owner_id=UserId(params.user_id) if params.user_id else None,
        service_name=params.service_name,
        limit=params.limit,
        offset=params.offset,
    )
    return [_to_response(r) for r in records]


@router.get("/cost", response_model=CostResponse)
async def calculate_cost(
    params: Annotated[CostParams, Query()],
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Total cost in minor units over [start_date, end_date], whole months."""
    total = await service.calculate_cost(
        owner_id=UserId(params.user_id) if params.user_id else None,
        service_name=params.service_name,
        period_start=params.start_date,
        period_end=params.end_date,
    )
    return CostResponse(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: UUID,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return _to_response(await service.read(SubscriptionId(subscription_id)))


@router.put("/{subscription_id}", response_model=SubscriptionResponse)
async def update_subscription(
    subscription_id: UUID,
    body: SubscriptionUpdate,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Partial update: only fields present in the body change."""
    updated = await service.update(SubscriptionId(subscription_id), body.changes())
    return _to_response(updated)


@router.delete(
    "/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_subscription(
    subscription_id: UUID,
    service: SubscriptionService = Depends(get_subscription_service),
):
    await service.delete(SubscriptionId(subscription_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
