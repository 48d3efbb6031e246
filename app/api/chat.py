"""Streaming chat endpoint backed by the upstream model."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat")
async def chat(request: Request):
    """
    Relays the conversation to the upstream model and streams the reply.
    Failures are returned as an error envelope with the matching status code.
    """
    return await request.app.state.chat_relay.handle(request)
