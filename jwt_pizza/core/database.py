from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from jwt_pizza.core.errors import InfrastructureError, PizzaServiceError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in {"sqlite://", "sqlite:///"}:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


class Database:
    """Engine + session factory com ciclo de vida explícito (start/dispose)."""

    def __init__(self, database_url: str, engine: Engine | None = None):
        self.database_url = database_url
        self.engine = engine or _build_engine(database_url)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """One unit of work: commit on success, rollback on any error, always close."""
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except PizzaServiceError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("database error: %s", exc.__class__.__name__)
            raise InfrastructureError("database error") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        import jwt_pizza.models  # noqa: F401  garante que os models estão registrados

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import jwt_pizza.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
