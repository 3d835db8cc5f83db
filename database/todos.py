"""
Todo persistence, always filtered by a request scope.

A row that exists but belongs to another scope is reported exactly like a
row that does not exist, so callers cannot probe for other users' todos.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import Settings
from database.models import Todo, utcnow
from database.scope import GUEST, Owned, RequestScope
from utils.errors import ErrorKind, Result

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Todo not found or access denied"


def owner_clause(scope: RequestScope) -> ColumnElement[bool]:
    """Translate a request scope into the ownership predicate on ``todos``."""
    if isinstance(scope, Owned):
        return Todo.user_id == scope.user_id
    return Todo.user_id.is_(None)


class TodoStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> None:
        self._session_factory = session_factory
        self.guest_limit = settings.guest_todo_limit

    async def list_todos(self, scope: RequestScope) -> Result[List[Todo]]:
        stmt = (
            select(Todo)
            .where(owner_clause(scope))
            .order_by(Todo.created_at.desc(), Todo.id.desc())
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError:
            logger.exception("Error fetching todos")
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to fetch todos")
        return Result.success(list(rows))

    async def count_guest_todos(self) -> Result[int]:
        stmt = select(func.count()).select_from(Todo).where(owner_clause(GUEST))
        try:
            async with self._session_factory() as session:
                count = (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError:
            logger.exception("Error counting guest todos")
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to get guest todo count")
        return Result.success(int(count))

    async def get_todo(self, todo_id: int, scope: RequestScope) -> Result[Todo]:
        try:
            async with self._session_factory() as session:
                todo = await self._fetch(session, todo_id, scope)
        except SQLAlchemyError:
            logger.exception("Error fetching todo %s", todo_id)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to fetch todo")
        if todo is None:
            return Result.failure(ErrorKind.NOT_FOUND_OR_FORBIDDEN, "Todo not found")
        return Result.success(todo)

    async def create_todo(
        self,
        name: str,
        image_path: Optional[str],
        description: Optional[str],
        scope: RequestScope,
    ) -> Result[Todo]:
        now = utcnow()
        todo = Todo(
            name=name,
            image_path=image_path,
            description=description,
            completed=False,
            user_id=scope.owner_id,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(todo)
                await session.commit()
                await session.refresh(todo)
        except SQLAlchemyError:
            logger.exception("Error adding todo")
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to add todo")
        logger.info("Created todo %s (owner=%s)", todo.id, todo.user_id)
        return Result.success(todo)

    async def update_todo(
        self,
        todo_id: int,
        name: str,
        description: Optional[str],
        completed: bool,
        scope: RequestScope,
    ) -> Result[Todo]:
        stmt = (
            update(Todo)
            .where(Todo.id == todo_id, owner_clause(scope))
            .values(
                name=name,
                description=description,
                completed=completed,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    await session.rollback()
                    return Result.failure(ErrorKind.NOT_FOUND_OR_FORBIDDEN, NOT_FOUND_MESSAGE)
                await session.commit()
                todo = await self._fetch(session, todo_id, scope)
        except SQLAlchemyError:
            logger.exception("Error updating todo %s", todo_id)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to edit todo")
        if todo is None:
            # deleted between the update and the re-read
            return Result.failure(ErrorKind.NOT_FOUND_OR_FORBIDDEN, NOT_FOUND_MESSAGE)
        return Result.success(todo)

    async def delete_todo(self, todo_id: int, scope: RequestScope) -> Result[None]:
        stmt = (
            delete(Todo)
            .where(Todo.id == todo_id, owner_clause(scope))
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    await session.rollback()
                    return Result.failure(ErrorKind.NOT_FOUND_OR_FORBIDDEN, NOT_FOUND_MESSAGE)
                await session.commit()
        except SQLAlchemyError:
            logger.exception("Error deleting todo %s", todo_id)
            return Result.failure(ErrorKind.UNEXPECTED, "Failed to delete todo")
        logger.info("Deleted todo %s", todo_id)
        return Result.success(None)

    @staticmethod
    async def _fetch(session: AsyncSession, todo_id: int, scope: RequestScope) -> Optional[Todo]:
        result = await session.execute(
            select(Todo).where(Todo.id == todo_id, owner_clause(scope))
        )
        return result.scalar_one_or_none()
