# jwt_pizza/routers/auth.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from jwt_pizza.core.identity import Identity
from jwt_pizza.deps import get_auth_manager, get_bearer_token, require_identity
from jwt_pizza.services.auth_session import AuthSessionManager

router = APIRouter(prefix="/api/auth", tags=["auth"])


# campos opcionais: a ausência vira 400 com a mensagem do domínio, não 422
class RegisterPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateUserPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("")
def register(payload: RegisterPayload, auth: AuthSessionManager = Depends(get_auth_manager)):
    return auth.register(payload.name, payload.email, payload.password).to_dict()


@router.put("")
def login(payload: LoginPayload, auth: AuthSessionManager = Depends(get_auth_manager)):
    return auth.login(payload.email, payload.password).to_dict()


@router.delete("")
def logout(
    _identity: Identity = Depends(require_identity),
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthSessionManager = Depends(get_auth_manager),
):
    auth.logout(token)
    return {"message": "logout successful"}


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UpdateUserPayload,
    identity: Identity = Depends(require_identity),
    auth: AuthSessionManager = Depends(get_auth_manager),
):
    user = auth.update_user(identity, user_id, email=payload.email, password=payload.password)
    return user.to_public_dict()
