"""``vocabscan-api``: serve :func:`vocabscan.service.app.create_app` with uvicorn."""
from __future__ import annotations

import argparse
import os
from typing import Sequence

from ..config import _env_int, load_settings


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser("vocabscan-api")
    parser.add_argument("--host", default=os.environ.get("VOCABSCAN_API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=_env_int("VOCABSCAN_API_PORT", 8000))
    parser.add_argument("--log-level", default=settings.log_level.lower())
    parser.add_argument("--workers", type=int, default=_env_int("VOCABSCAN_API_WORKERS", 1))
    parser.add_argument("--reload", action="store_true", help="Restart on source changes (single worker only)")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    workers = max(1, int(args.workers))
    if args.reload and workers > 1:
        raise SystemExit("--reload cannot be used with --workers > 1")

    try:
        import uvicorn  # type: ignore
    except ImportError as exc:  # pragma: no cover
        raise SystemExit(
            "uvicorn is not installed. Install with `pip install -e '.[api]'` "
            "(or `pip install 'vocabscan[api]'`)."
        ) from exc

    # Each worker builds its own app (and adapters) from the environment.
    uvicorn.run(
        "vocabscan.service.app:create_app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        workers=workers,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
