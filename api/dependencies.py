"""
FastAPI dependencies (shared across routes).

The application factory stores every component on ``app.state``; these
small accessors hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Request

from auth.jwt import TokenIssuer
from auth.service import AuthService
from database.todos import TodoStore
from utils.uploads import ImageStorage


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_todo_store(request: Request) -> TodoStore:
    return request.app.state.todo_store


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
