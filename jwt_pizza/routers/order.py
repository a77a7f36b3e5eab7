# jwt_pizza/routers/order.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from jwt_pizza.core.identity import Identity, Role
from jwt_pizza.deps import (
    get_menu_store,
    get_order_store,
    get_order_workflow,
    require_identity,
    require_role,
)
from jwt_pizza.services.menu import MenuStore
from jwt_pizza.services.order_workflow import OrderWorkflow
from jwt_pizza.services.orders import OrderStore

router = APIRouter(prefix="/api/order", tags=["order"])


class MenuItemPayload(BaseModel):
    title: str
    description: str = ""
    image: str = ""
    price: float


class OrderItemPayload(BaseModel):
    menuId: int
    description: str
    price: float


class OrderPayload(BaseModel):
    franchiseId: int
    storeId: int
    items: List[OrderItemPayload]


@router.get("/menu")
def get_menu(menu: MenuStore = Depends(get_menu_store)):
    return menu.get_menu()


@router.put("/menu")
def add_menu_item(
    payload: MenuItemPayload,
    _admin: Identity = Depends(require_role(Role.ADMIN, "unable to add menu item")),
    menu: MenuStore = Depends(get_menu_store),
):
    menu.add_menu_item(
        title=payload.title,
        description=payload.description,
        image=payload.image,
        price=payload.price,
    )
    return menu.get_menu()


@router.get("")
def get_orders(
    page: int = Query(1, ge=1),
    identity: Identity = Depends(require_identity),
    orders: OrderStore = Depends(get_order_store),
):
    return orders.get_orders(identity.id, page)


@router.post("")
def create_order(
    payload: OrderPayload,
    identity: Identity = Depends(require_identity),
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    outcome = workflow.place_order(
        identity,
        franchise_id=payload.franchiseId,
        store_id=payload.storeId,
        items=[
            {"menuId": item.menuId, "description": item.description, "price": item.price}
            for item in payload.items
        ],
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_response())
