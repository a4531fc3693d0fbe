from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from silicon_oracle.config import settings
from silicon_oracle.exceptions import GenerationServiceError, SpeechServiceError
from silicon_oracle.models.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    ReindexResponse,
    SpeechRequest,
)
from silicon_oracle.rag.prompt import ChatMessage, ConversationTurnContext
from silicon_oracle.speech.markdown import strip_markdown

router = APIRouter()
logger = logging.getLogger(__name__)


def _check_admin_token(x_admin_token: str | None) -> None:
    if not settings.admin_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin token is not configured",
        )
    if x_admin_token != settings.admin_token.get_secret_value():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def to_turn_context(request: ChatRequest) -> ConversationTurnContext:
    history = tuple(
        ChatMessage(role="assistant" if item.sender == "bot" else "user", content=item.text)
        for item in request.history
    )
    is_first_message = request.is_first_message
    if is_first_message is None:
        is_first_message = not history
    return ConversationTurnContext(query=request.message.strip(), is_first_message=is_first_message, history=history)


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    index_service = request.app.state.services.index_service
    return HealthResponse(index_state=index_service.state.value, indexed_chunks=index_service.indexed_chunks)


@router.post("/admin/reindex", response_model=ReindexResponse, summary="Rebuild lore index")
async def admin_reindex(
    request: Request,
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> ReindexResponse:
    _check_admin_token(x_admin_token)

    logger.info("Admin reindex requested")
    summary = await request.app.state.services.index_service.rebuild()
    response = ReindexResponse(
        state=summary.state.value,
        documents=summary.documents,
        skipped_documents=summary.skipped_documents,
        indexed_chunks=summary.indexed_chunks,
        elapsed_sec=round(summary.elapsed_sec, 2),
        error=summary.error,
    )
    logger.info(
        "Admin reindex completed",
        extra={"state": response.state, "indexed_chunks": response.indexed_chunks, "elapsed_sec": response.elapsed_sec},
    )
    return response


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ask the Oracolo del Silicio",
)
async def chat(chat_request: ChatRequest, request: Request):
    turn = to_turn_context(chat_request)
    if not turn.query:
        return _error("Il messaggio non può essere vuoto.", status.HTTP_400_BAD_REQUEST)

    logger.info("Chat request", extra={"len": len(turn.query), "history": len(turn.history)})
    try:
        reply = await request.app.state.services.chat_service.reply(turn)
    except GenerationServiceError as exc:
        logger.error("Generation failed", extra={"status_code": exc.status_code})
        return _error(exc.message, exc.status_code)
    return ChatResponse(reply=reply)


@router.post(
    "/api/tts",
    response_class=Response,
    responses={200: {"content": {"audio/mpeg": {}}}, 400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Read a reply aloud",
)
async def tts(speech_request: SpeechRequest, request: Request):
    if not speech_request.text:
        return _error("Il testo è obbligatorio per il TTS", status.HTTP_400_BAD_REQUEST)

    plain_text = strip_markdown(speech_request.text)
    if not plain_text:
        return _error("Il testo pulito risulta vuoto.", status.HTTP_400_BAD_REQUEST)
    if len(plain_text) > settings.speech_max_chars:
        return _error(
            f"Il testo pulito supera la lunghezza massima consentita ({settings.speech_max_chars} caratteri)",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    try:
        audio = await request.app.state.services.speech_client.synthesize(
            plain_text,
            voice=speech_request.voice,
            speed=speech_request.speed,
        )
    except SpeechServiceError as exc:
        return _error(exc.message, exc.status_code)
    return Response(content=audio, media_type="audio/mpeg")


__all__ = ["router", "to_turn_context"]
