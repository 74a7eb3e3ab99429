"""
Unit of Work pattern implementation.

One unit of work is one session and one transaction: everything done
through its repositories commits together on a clean exit and rolls
back on any exception.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_ledger.services.common.errors import TransactionError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository")


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    Usage:
        >>> with UnitOfWork(session_factory) as uow:
        ...     rooms = uow.get_repo(RoomRepository)
        ...     room = rooms.lock_by_id(room_id)
        ...     room.status = RoomStatus.OCCUPIED
        ...     # Auto-commits on __exit__ if no exception

    ORM objects loaded here are expired by the commit and detached when
    the session closes; copy what is needed afterwards inside the block.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._repo_cache: dict[type, Any] = {}

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")
        self.session = self._session_factory()
        self._repo_cache.clear()
        logger.debug("UnitOfWork session started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False

        try:
            if exc_type is None:
                try:
                    self.session.commit()
                    logger.debug("UnitOfWork committed")
                except SQLAlchemyError as exc:
                    logger.error(f"Commit failed: {exc}")
                    self.session.rollback()
                    raise TransactionError("Failed to commit transaction", exc) from exc
            else:
                self.session.rollback()
                logger.debug(f"UnitOfWork rolled back due to {exc_type.__name__}")
        finally:
            self.session.close()
            self.session = None
            self._repo_cache.clear()

        return False

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """Return a repository bound to this unit's session, cached per class."""
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")
        repo = self._repo_cache.get(repo_cls)
        if repo is None:
            repo = repo_cls(self.session)
            self._repo_cache[repo_cls] = repo
        return repo
