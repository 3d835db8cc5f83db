"""
Todo routes, shared by guests and signed-in users.

Every handler runs in the scope resolved from the request: guests see and
touch only guest todos, users only their own.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import PlainTextResponse

from api.dependencies import get_image_storage, get_todo_store
from auth.dependencies import resolve_scope
from database.scope import Guest, RequestScope
from database.todos import TodoStore
from utils.errors import ApiError, AppError, ErrorKind
from utils.schemas import GuestTodoCount, MessageResponse, TodoOut, TodoUpdateRequest
from utils.uploads import ImageStorage

logger = logging.getLogger(__name__)

GUEST_LIMIT_MESSAGE = "Guest limit reached. Please sign up or login to create more todos."

router = APIRouter(tags=["todos"])


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return "Welcome to the To-Do API with Authentication"


@router.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/todos", response_model=List[TodoOut])
async def list_todos(
    scope: RequestScope = Depends(resolve_scope),
    store: TodoStore = Depends(get_todo_store),
) -> List[TodoOut]:
    todos = (await store.list_todos(scope)).unwrap()
    return [TodoOut.model_validate(t) for t in todos]


@router.get("/api/todos/{todo_id}", response_model=TodoOut)
async def get_todo(
    todo_id: int,
    scope: RequestScope = Depends(resolve_scope),
    store: TodoStore = Depends(get_todo_store),
) -> TodoOut:
    return TodoOut.model_validate((await store.get_todo(todo_id, scope)).unwrap())


@router.post("/todo", response_model=TodoOut, status_code=status.HTTP_201_CREATED)
async def create_todo(
    text: str = Form(..., min_length=1, max_length=100),
    description: Optional[str] = Form(None, max_length=255),
    image: Optional[UploadFile] = File(None),
    scope: RequestScope = Depends(resolve_scope),
    store: TodoStore = Depends(get_todo_store),
    images: ImageStorage = Depends(get_image_storage),
) -> TodoOut:
    """Create a todo; guests are capped at ``guest_todo_limit`` todos in total."""
    if isinstance(scope, Guest):
        guest_count = (await store.count_guest_todos()).unwrap()
        if guest_count >= store.guest_limit:
            logger.info("Guest todo limit reached (%d)", guest_count)
            raise ApiError(AppError(ErrorKind.GUEST_LIMIT_REACHED, GUEST_LIMIT_MESSAGE))

    image_path = None
    if image is not None and image.filename:
        image_path = (await images.save(image)).unwrap()

    created = await store.create_todo(text, image_path, description, scope)
    if not created.ok and image_path is not None:
        await images.discard(image_path)
    return TodoOut.model_validate(created.unwrap())


@router.put("/todo/{todo_id}", response_model=TodoOut)
async def update_todo(
    todo_id: int,
    body: TodoUpdateRequest,
    scope: RequestScope = Depends(resolve_scope),
    store: TodoStore = Depends(get_todo_store),
) -> TodoOut:
    changes = body.data
    todo = (
        await store.update_todo(todo_id, changes.name, changes.description, changes.completed, scope)
    ).unwrap()
    return TodoOut.model_validate(todo)


@router.delete("/todo/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: int,
    scope: RequestScope = Depends(resolve_scope),
    store: TodoStore = Depends(get_todo_store),
) -> MessageResponse:
    (await store.delete_todo(todo_id, scope)).unwrap()
    return MessageResponse(message="Todo deleted successfully")


@router.get("/guest/todo-count", response_model=GuestTodoCount)
async def guest_todo_count(store: TodoStore = Depends(get_todo_store)) -> GuestTodoCount:
    count = (await store.count_guest_todos()).unwrap()
    return GuestTodoCount(
        count=count,
        limit=store.guest_limit,
        remaining=max(0, store.guest_limit - count),
    )
