# jwt_pizza/routers/franchise.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from jwt_pizza.core.identity import Identity, ResolvedIdentity, Role, has_role
from jwt_pizza.deps import (
    get_franchise_store,
    get_identity,
    require_franchise_manager,
    require_identity,
    require_role,
)
from jwt_pizza.services.franchises import FranchiseStore

router = APIRouter(prefix="/api/franchise", tags=["franchise"])


class FranchiseAdminPayload(BaseModel):
    email: str


class FranchisePayload(BaseModel):
    name: str
    admins: List[FranchiseAdminPayload] = []


class StorePayload(BaseModel):
    name: str


@router.get("")
def list_franchises(
    identity: ResolvedIdentity = Depends(get_identity),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    # só Admin enxerga admins e faturamento
    return franchises.list_franchises(include_details=has_role(identity, Role.ADMIN))


@router.get("/{user_id}")
def list_user_franchises(
    user_id: int,
    identity: Identity = Depends(require_identity),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    if identity.id != user_id and not has_role(identity, Role.ADMIN):
        return []
    return franchises.get_user_franchises(user_id)


@router.post("")
def create_franchise(
    payload: FranchisePayload,
    _admin: Identity = Depends(require_role(Role.ADMIN, "unable to create a franchise")),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    return franchises.create_franchise(name=payload.name, admin_emails=[admin.email for admin in payload.admins])


@router.delete("/{franchise_id}")
def delete_franchise(
    franchise_id: int,
    _admin: Identity = Depends(require_role(Role.ADMIN, "unable to delete a franchise")),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    franchises.delete_franchise(franchise_id)
    return {"message": "franchise deleted"}


@router.post("/{franchise_id}/store")
def create_store(
    franchise_id: int,
    payload: StorePayload,
    _manager: Identity = Depends(require_franchise_manager("unable to create a store")),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    return franchises.create_store(franchise_id, name=payload.name)


@router.delete("/{franchise_id}/store/{store_id}")
def delete_store(
    franchise_id: int,
    store_id: int,
    _manager: Identity = Depends(require_franchise_manager("unable to delete a store")),
    franchises: FranchiseStore = Depends(get_franchise_store),
):
    franchises.delete_store(franchise_id, store_id)
    return {"message": "store deleted"}
