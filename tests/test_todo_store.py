"""
Tests for scope-filtered todo persistence.
"""

import pytest

from database.scope import GUEST, Owned
from utils.errors import ErrorKind


async def _make_user(auth_service, name: str) -> int:
    result = await auth_service.register(name, f"{name}@x.com", "secret1")
    assert result.ok
    return result.value.user.id


class TestTodoStoreScopes:
    @pytest.mark.asyncio
    async def test_create_sets_defaults_and_owner(self, todo_store, auth_service):
        alice = await _make_user(auth_service, "alice")
        todo = (await todo_store.create_todo("buy milk", None, "2 litres", Owned(alice))).value
        assert todo.id is not None
        assert todo.completed is False
        assert todo.user_id == alice
        assert todo.created_at is not None and todo.updated_at is not None

    @pytest.mark.asyncio
    async def test_guest_todo_has_no_owner(self, todo_store):
        todo = (await todo_store.create_todo("guest task", "/uploads/a.png", None, GUEST)).value
        assert todo.user_id is None
        assert todo.image_path == "/uploads/a.png"

    @pytest.mark.asyncio
    async def test_list_is_scoped_and_newest_first(self, todo_store, auth_service):
        alice = await _make_user(auth_service, "alice")
        bob = await _make_user(auth_service, "bob")
        first = (await todo_store.create_todo("a1", None, None, Owned(alice))).value
        second = (await todo_store.create_todo("a2", None, None, Owned(alice))).value
        await todo_store.create_todo("b1", None, None, Owned(bob))
        await todo_store.create_todo("g1", None, None, GUEST)

        alice_todos = (await todo_store.list_todos(Owned(alice))).value
        assert [t.id for t in alice_todos] == [second.id, first.id]

        guest_todos = (await todo_store.list_todos(GUEST)).value
        assert [t.name for t in guest_todos] == ["g1"]

    @pytest.mark.asyncio
    async def test_count_guest_todos_ignores_owned(self, todo_store, auth_service):
        alice = await _make_user(auth_service, "alice")
        await todo_store.create_todo("mine", None, None, Owned(alice))
        assert (await todo_store.count_guest_todos()).value == 0
        await todo_store.create_todo("g1", None, None, GUEST)
        await todo_store.create_todo("g2", None, None, GUEST)
        assert (await todo_store.count_guest_todos()).value == 2


class TestOwnershipMismatchLooksLikeAbsence:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("intruder", ["bob", "guest"])
    async def test_foreign_todo_same_as_missing(self, todo_store, auth_service, intruder):
        alice = await _make_user(auth_service, "alice")
        bob = await _make_user(auth_service, "bob")
        scope = Owned(bob) if intruder == "bob" else GUEST
        todo = (await todo_store.create_todo("private", None, None, Owned(alice))).value
        missing_id = todo.id + 1000

        for todo_id in (todo.id, missing_id):
            got = await todo_store.get_todo(todo_id, scope)
            updated = await todo_store.update_todo(todo_id, "x", None, True, scope)
            deleted = await todo_store.delete_todo(todo_id, scope)
            assert got.error.kind is ErrorKind.NOT_FOUND_OR_FORBIDDEN
            assert updated.error.kind is ErrorKind.NOT_FOUND_OR_FORBIDDEN
            assert deleted.error.kind is ErrorKind.NOT_FOUND_OR_FORBIDDEN
            assert updated.error == deleted.error

        # untouched
        still_there = (await todo_store.get_todo(todo.id, Owned(alice))).value
        assert still_there.name == "private"
        assert still_there.completed is False

    @pytest.mark.asyncio
    async def test_user_cannot_reach_guest_todo(self, todo_store, auth_service):
        alice = await _make_user(auth_service, "alice")
        todo = (await todo_store.create_todo("guest", None, None, GUEST)).value
        result = await todo_store.get_todo(todo.id, Owned(alice))
        assert result.error.kind is ErrorKind.NOT_FOUND_OR_FORBIDDEN


class TestUpdateDelete:
    @pytest.mark.asyncio
    async def test_update_in_scope(self, todo_store):
        todo = (await todo_store.create_todo("old", None, "desc", GUEST)).value
        updated = (await todo_store.update_todo(todo.id, "new", None, True, GUEST)).value
        assert updated.id == todo.id
        assert updated.name == "new"
        assert updated.description is None
        assert updated.completed is True
        assert updated.updated_at >= todo.updated_at

    @pytest.mark.asyncio
    async def test_delete_in_scope(self, todo_store, auth_service):
        alice = await _make_user(auth_service, "alice")
        todo = (await todo_store.create_todo("bye", None, None, Owned(alice))).value
        assert (await todo_store.delete_todo(todo.id, Owned(alice))).ok
        again = await todo_store.delete_todo(todo.id, Owned(alice))
        assert again.error.kind is ErrorKind.NOT_FOUND_OR_FORBIDDEN
        assert (await todo_store.list_todos(Owned(alice))).value == []
