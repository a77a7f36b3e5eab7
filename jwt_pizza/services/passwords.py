from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


def _normalize_password_for_bcrypt(password: str) -> bytes:
    """
    bcrypt só considera até 72 bytes.
    Se a senha passar disso, truncamos para não quebrar (bcrypt 5.x levanta erro).
    """
    pw = (password or "").encode("utf-8")
    if len(pw) <= 72:
        return pw
    return pw[:72]


def hash_password(password: str) -> str:
    pw = _normalize_password_for_bcrypt(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw, salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_normalize_password_for_bcrypt(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("stored password hash is malformed")
        return False
