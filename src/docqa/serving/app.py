"""FastAPI application exposing upload and chat over HTTP."""

from __future__ import annotations

import logging
import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from docqa.answering.service import validate_question
from docqa.config import settings
from docqa.exceptions import ClientError, IngestionError, MissingFileError, ProcessingError
from docqa.ingestion.loader import resolve_extension
from docqa.logging_config import configure_logging
from docqa.serving.dependencies import ServiceCache, get_service_cache

logger = logging.getLogger(__name__)


def _upload_dir() -> Path:
    path = Path(settings.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    logger.info("Uploads directory: %s", _upload_dir().resolve())
    yield


app = FastAPI(
    title="Document QA API",
    version=settings.app_version,
    description="Upload a document, then ask questions answered from its content.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request / Response schemas ────────────────────────────────────────
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(_CamelModel):
    """Question about a previously uploaded document.

    Both fields are optional at the schema level so that a missing value
    is reported as a 400 by the service rather than a validation error.
    """

    question: str | None = None
    document_id: str | None = None


class ChatResponse(_CamelModel):
    answer: str
    sources_used: int


class UploadResponse(_CamelModel):
    message: str = "File processed successfully"
    document_id: str
    chunks_processed: int
    page_count: int


# ── Error handlers ────────────────────────────────────────────────────
@app.exception_handler(ClientError)
async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(ProcessingError)
async def processing_error_handler(request: Request, exc: ProcessingError) -> JSONResponse:
    logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s invalid body", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {
        "status": "Server is running",
        "version": settings.app_version,
        "uploadsDirectory": str(Path(settings.upload_dir).resolve()),
    }


@app.post("/upload", response_model=UploadResponse)
def upload(
    file: UploadFile | None = File(None),
    services: ServiceCache = Depends(get_service_cache),
) -> UploadResponse:
    """Store the upload transiently, ingest it, and return its document id."""
    if file is None or not file.filename:
        raise MissingFileError("No file uploaded")

    # Reject before touching disk or the index so an unsupported upload leaves no trace.
    extension = resolve_extension(file.filename)
    pipeline = services.ingestion_pipeline
    destination = _upload_dir() / f"{uuid4().hex}{extension}"
    try:
        with destination.open("wb") as fh:
            shutil.copyfileobj(file.file, fh)
    except OSError as exc:
        destination.unlink(missing_ok=True)
        raise IngestionError(str(exc)) from exc

    result = pipeline.ingest(destination, file.filename)
    return UploadResponse(
        document_id=result.document_id,
        chunks_processed=result.chunks_processed,
        page_count=result.page_count,
    )


@app.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    services: ServiceCache = Depends(get_service_cache),
) -> ChatResponse:
    """Answer a question from the chunks of one document."""
    question, document_id = validate_question(request.question, request.document_id)
    result = services.qa_service.ask(question, document_id)
    return ChatResponse(answer=result.answer, sources_used=result.sources_used)


def main() -> None:
    """Run the API with uvicorn."""
    uvicorn.run("docqa.serving.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
