import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from .._version import __version__
from ..config import Settings, load_settings
from ..errors import AdapterError, ExtractionError, OptionalDependencyError
from ..export import CSV_FILENAME, PdfLayout, entries_to_csv, pdf_filename, render_pdf
from ..extraction import (
    CaseMode,
    Engine,
    Entry,
    ExtractionOptions,
    ImageInput,
    MeaningLang,
    OpenAIVisionAnalyzer,
    VisionAnalyzer,
    WordbookSession,
)
from ..utils.json_utils import json_ready

_UPLOAD_CHUNK_BYTES = 1024 * 1024
_IMAGE_FIELDS = ("image", "images", "file", "upload")


class ExportRequest(BaseModel):
    entries: List[Entry]


def _parse_word_list(raw: Any) -> List[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(value, list):
        return []
    seen = set()
    words: List[str] = []
    for w in value:
        if not isinstance(w, str) or not w.strip():
            continue
        word = w.strip()
        if word.lower() in seen:
            continue
        seen.add(word.lower())
        words.append(word)
    return words


def create_app(
    settings: Optional[Settings] = None,
    *,
    session_factory: Optional[Callable[[], WordbookSession]] = None,
    analyzer: Optional[VisionAnalyzer] = None,
):
    """Return the FastAPI app.

    ``session_factory`` and ``analyzer`` let tests and embedding services swap
    in their own adapters; by default both are built from ``settings``.
    """
    try:
        from fastapi import FastAPI, HTTPException, Request
        from fastapi.responses import Response
    except ImportError as exc:  # pragma: no cover
        raise OptionalDependencyError("api", "the HTTP service") from exc

    try:
        import python_multipart  # noqa: F401
    except ImportError as exc:  # pragma: no cover
        raise OptionalDependencyError("api", "multipart image uploads") from exc

    settings = settings or load_settings()
    if session_factory is None:
        from ..cli import build_session

        def session_factory() -> WordbookSession:
            return build_session(settings)

    analyzer = analyzer or OpenAIVisionAnalyzer.from_settings(settings)
    max_upload_bytes = settings.max_upload_bytes

    logger = logging.getLogger("vocabscan.api")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.propagate = False

    def _utc_now_iso() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    def _log(event: str, payload: Dict[str, Any], *, level: str = "info") -> None:
        record = {"ts": _utc_now_iso(), "event": event, **payload}
        if settings.log_format == "json":
            msg = json.dumps(record, ensure_ascii=False)
        else:
            msg = f"{record.get('ts')} {event} {payload}"
        fn = getattr(logger, level, logger.info)
        fn(msg)

    async def _read_upload(upload: Any) -> bytes:
        chunks: List[bytes] = []
        written = 0
        try:
            while True:
                chunk = await upload.read(_UPLOAD_CHUNK_BYTES)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_upload_bytes:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large (>{settings.max_upload_mb} MB).",
                    )
                chunks.append(chunk)
        finally:
            await upload.close()
        return b"".join(chunks)

    async def _collect_images(form: Any) -> List[ImageInput]:
        images: List[ImageInput] = []
        for name in _IMAGE_FIELDS:
            for upload in form.getlist(name):
                if isinstance(upload, str):
                    continue
                data = await _read_upload(upload)
                if not data:
                    continue
                images.append(
                    ImageInput(
                        index=len(images),
                        filename=upload.filename or f"image-{len(images) + 1}",
                        data=data,
                        mime=upload.content_type or "image/png",
                    )
                )
        return images

    app = FastAPI(
        title="VocabScan API",
        version=__version__,
        description="Extract vocabulary entries from word-list images and export wordbooks.",
    )

    @app.middleware("http")
    async def _request_observability(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        t0 = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            dt = time.perf_counter() - t0
            status_code = int(getattr(response, "status_code", 500)) if response is not None else 500
            if response is not None:
                response.headers["X-Request-ID"] = request_id
            _log(
                "http_request",
                {
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "duration_ms": int(round(dt * 1000.0)),
                    "client": request.client.host if request.client else None,
                },
                level="info" if status_code < 500 else "error",
            )

    @app.get("/healthz")
    async def healthz() -> Dict[str, Any]:
        return {
            "ok": True,
            "version": __version__,
            "limits": {
                "max_upload_mb": settings.max_upload_mb,
                "call_timeout_sec": settings.call_timeout_sec,
            },
            "ai": {"configured": bool(settings.openai_api_key), "model": settings.openai_model},
        }

    @app.post("/api/analyze")
    async def analyze(request: Request, mode: str = "analyze") -> Dict[str, Any]:
        if mode not in {"analyze", "recheck"}:
            raise HTTPException(status_code=400, detail=f"Unknown mode: {mode!r}")
        form = await request.form()
        images = await _collect_images(form)
        if not images:
            raise HTTPException(status_code=400, detail="No image files")

        try:
            if mode == "recheck":
                words = _parse_word_list(form.get("lowWords"))
                items = await analyzer.recheck(words, images) if words else []
            else:
                items = await analyzer.analyze(images)
        except AdapterError as exc:
            _log("analyze_failed", {"mode": mode, "error": str(exc)}, level="warning")
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"items": [item.model_dump() for item in items]}

    @app.post("/v1/extract")
    async def extract(
        request: Request,
        engine: str = Engine.OCR.value,
        min_length: int = 2,
        case_mode: str = CaseMode.LOWER.value,
        recheck: bool = True,
        fill_meanings: bool = False,
        meaning_lang: str = MeaningLang.KO.value,
    ) -> Dict[str, Any]:
        try:
            options = ExtractionOptions(
                min_length=max(1, int(min_length)),
                case_mode=CaseMode(case_mode),
                recheck=bool(recheck),
                fill_meanings=bool(fill_meanings),
                meaning_lang=MeaningLang(meaning_lang),
            )
            engine_value = Engine(engine)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        form = await request.form()
        images = await _collect_images(form)
        if not images:
            raise HTTPException(status_code=400, detail="No image files")

        session = session_factory()
        try:
            result = await session.analyze(images, engine=engine_value, options=options)
        except ExtractionError as exc:
            _log("extract_failed", {"engine": engine_value.value, "error": str(exc)}, level="warning")
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        _log(
            "extract_done",
            {
                "engine": engine_value.value,
                "images": len(images),
                "entries": len(result.entries),
                "warnings": len(result.warnings),
                "state": result.state.value if result.state else None,
            },
        )
        return json_ready(result)

    @app.post("/v1/export/csv")
    async def export_csv(payload: ExportRequest) -> Response:
        if not payload.entries:
            raise HTTPException(status_code=400, detail="No entries to export")
        return Response(
            entries_to_csv(payload.entries),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
        )

    @app.post("/v1/export/pdf")
    async def export_pdf(payload: ExportRequest, layout: str = PdfLayout.LIST.value) -> Response:
        try:
            pdf_layout = PdfLayout(layout)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown layout: {layout!r}") from exc
        if not payload.entries:
            raise HTTPException(status_code=400, detail="No entries to export")
        return Response(
            render_pdf(payload.entries, pdf_layout),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{pdf_filename(pdf_layout)}"'},
        )

    return app
