import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import ORDER_RATE_LIMIT
from shared.pagination import PagedResponse, PageParams, page_params
from shared.security import CurrentUser, get_current_user, limiter, require_admin
from .models import OrderStatus
from .schemas import OrderCreate, OrderResponse, OrderStatusUpdate, SortDirection
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_RATE_LIMIT)
async def create_order(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.create_order(db, payload, user.id)


@router.get("/", response_model=PagedResponse[OrderResponse], dependencies=[Depends(require_admin)])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    sort: SortDirection = Query(default="desc", description="Creation date order when no status filter is given"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    if status_filter is not None:
        return await OrderService.get_orders_by_status(db, status_filter, params)
    return await OrderService.get_all_orders(db, params, newest_first=sort == "desc")


@router.get("/me", response_model=PagedResponse[OrderResponse])
async def list_my_orders(
    params: PageParams = Depends(page_params),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_orders_by_user(db, user.id, params)


@router.get("/me/active", response_model=Optional[OrderResponse])
async def get_my_active_order(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_latest_active_order(db, user.id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order_by_id(db, order_id, user)


@router.patch("/{order_id}/status", response_model=OrderResponse, dependencies=[Depends(require_admin)])
async def change_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.change_status(db, order_id, payload.status)


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.cancel_order(db, order_id, user.id)
