"""
HTTP API for card generation and browsing.

Run with:
    uvicorn jpanki.api.app:create_app --factory --port 3000
or via main_server.py.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ..config import Config
from ..prompts import load_system_prompt
from ..services import CardPipeline, CardRepository
from ..utils.parsing import TextParser
from .schemas import CardsPage, ProcessRequest, Stats

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _int_param(value: Optional[str], default: int) -> int:
    """Lenient integer query parameter: anything unusable falls back to default."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def create_app(
    pipeline: Optional[CardPipeline] = None,
    repository: Optional[CardRepository] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline: Card pipeline (built from Config when omitted)
        repository: Card store used by the read endpoints

    Returns:
        Configured FastAPI app
    """
    Config.ensure_dirs()

    repository = repository or (pipeline.repository if pipeline else CardRepository())
    pipeline = pipeline or CardPipeline(repository=repository)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("jpanki API ready (media: %s, out: %s)", Config.MEDIA_DIR, Config.OUTPUT_DIR)
        yield
        await pipeline.close()

    app = FastAPI(title="jpanki", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.mount("/media", StaticFiles(directory=Config.MEDIA_DIR), name="media")
    app.mount("/out", StaticFiles(directory=Config.OUTPUT_DIR), name="out")

    app.state.pipeline = pipeline
    app.state.repository = repository

    @app.post("/api/process")
    async def process(body: ProcessRequest):
        if not body.input or not body.input.strip():
            return _error(400, "Input is required")

        try:
            record = await pipeline.process_input(body.input, credentials=body.credentials)
        except Exception as e:
            logger.exception("Error processing input %r", body.input)
            return _error(500, str(e))

        if record is None:
            return _error(400, "Processing failed: empty input")
        return record.to_dict()

    @app.post("/api/bulk-upload")
    async def bulk_upload(
        file: Optional[UploadFile] = File(None),
        credentials: Optional[str] = Form(None)
    ):
        if file is None:
            return _error(400, "File is required")

        creds: Optional[Dict[str, Any]] = None
        if credentials:
            try:
                creds = json.loads(credentials)
            except ValueError:
                return _error(400, "Invalid credentials JSON")
            if not isinstance(creds, dict):
                return _error(400, "Invalid credentials JSON")

        raw = await file.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            return _error(400, "File must be UTF-8 text")

        lines = TextParser.split_input_lines(content)
        if not lines:
            return _error(400, "No valid inputs found in file")

        logger.info("Bulk upload %s: %d inputs", file.filename, len(lines))
        result = await pipeline.process_bulk(lines, credentials=creds)
        return result.to_dict()

    @app.get("/api/cards", response_model=CardsPage)
    def list_cards(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None
    ):
        return repository.paginate(
            page=_int_param(page, 1),
            limit=_int_param(limit, 20),
            search=search or None,
        )

    @app.get("/api/cards/{card_id}")
    def get_card(card_id: str):
        card = repository.get_by_id(card_id)
        if card is None:
            return _error(404, "Card not found")
        return card

    @app.get("/api/stats", response_model=Stats)
    def stats():
        return repository.get_stats()

    @app.get("/api/default-prompt")
    def default_prompt():
        try:
            return {"prompt": load_system_prompt()}
        except OSError as e:
            logger.error("Error reading default prompt: %s", e)
            return _error(500, str(e))

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app
