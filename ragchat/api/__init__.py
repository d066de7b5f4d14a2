"""API router for the chat endpoints."""

from fastapi import APIRouter

from ragchat.api import chat, chat_debug

router = APIRouter()

router.include_router(chat.router, tags=["chat"])

router.include_router(chat_debug.router, tags=["debug"])
