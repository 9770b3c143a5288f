"""Paid order routes"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.responses import ErrorResponse
from app.exceptions import NotFoundError
from domain.mappers import OrderMapper
from domain.schemas.order_schemas import OrderResponse
from repositories.order_repository import OrderRepository

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_order(order_id: UUID, db: Session = Depends(get_db)):
    order = OrderRepository(db).get_with_lines(order_id)
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return OrderMapper.to_response(order)
