import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from silicon_oracle.api.routes import router as api_router
from silicon_oracle.config import public_settings, settings, setup_logging
from silicon_oracle.embeddings.client import EmbeddingsClient
from silicon_oracle.indexing.pipeline import IndexService
from silicon_oracle.llm.client import LLMClient
from silicon_oracle.rag.pipeline import ChatService
from silicon_oracle.rag.retriever import Retriever
from silicon_oracle.speech.client import SpeechClient

logger = setup_logging()


@dataclass
class OracleServices:
    index_service: IndexService
    chat_service: ChatService
    speech_client: SpeechClient


def build_services() -> OracleServices:
    embeddings_client = EmbeddingsClient()
    index_service = IndexService(embeddings_client)
    retriever = Retriever(index_service, embeddings_client)
    return OracleServices(
        index_service=index_service,
        chat_service=ChatService(retriever, LLMClient()),
        speech_client=SpeechClient(),
    )


def create_app(services_factory: Callable[[], OracleServices] = build_services) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = services_factory()
        app.state.services = services
        # Requests served while this runs see an inactive index.
        build_task = asyncio.create_task(services.index_service.build_once())
        yield
        if not build_task.done():
            build_task.cancel()
        # build_once shields the build itself, so cancel it separately.
        await services.index_service.aclose()

    app = FastAPI(title="Oracolo del Silicio", lifespan=lifespan)

    # CORS/OPTIONS support for the chat frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "I miei sensori percepiscono un disturbo nel flusso dati... Riprova."},
        )

    app.include_router(api_router)
    return app


logger.info("Application starting")
logger.info("Loaded settings: %s", public_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "silicon_oracle.main:app",
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )
