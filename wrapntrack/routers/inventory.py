# wrapntrack/routers/inventory.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from wrapntrack.core.auth import require_employee
from wrapntrack.database import get_session
from wrapntrack.models.user import User
from wrapntrack.repositories.inventory_repo import InventoryRepository
from wrapntrack.schemas.inventory import (
    AvailableInventoryRead,
    AvailableInventoryUpdate,
    InventoryItemCreate,
    InventoryItemRead,
)
from wrapntrack.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])
available_router = APIRouter(prefix="/available-inventory", tags=["Inventory"])

repo = InventoryRepository()
service = InventoryService(repo)


# -------- Public catalog --------


@router.get("", response_model=list[InventoryItemRead])
def list_inventory(
    session: Session = Depends(get_session),
    category: str | None = None,
    skip: int = 0,
    limit: int = 200,
):
    """
    List catalog items, optionally filtered by inventory category.
    """
    return service.list_items(session, category=category, skip=skip, limit=limit)


@router.get("/{sku}", response_model=InventoryItemRead)
def get_inventory_item(
    sku: str,
    session: Session = Depends(get_session),
):
    return service.get_item(session, sku)


@router.post(
    "",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_employee)],
)
def create_inventory_item(
    payload: InventoryItemCreate,
    session: Session = Depends(get_session),
):
    return service.create_item(session, payload)


# -------- Curated availability --------


@available_router.get("", response_model=AvailableInventoryRead)
def get_available_inventory(session: Session = Depends(get_session)):
    """
    Staff-curated products offered to customers, grouped by category.
    Public.
    """
    return service.get_available(session)


@available_router.put("", response_model=AvailableInventoryRead)
def replace_available_inventory(
    payload: AvailableInventoryUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_employee),
):
    """
    Replace the curated SKUs of every category present in the payload.
    """
    return service.replace_available(session, payload, current_user.id)
