"""HTTP service exposing the extraction pipeline and exporters."""

from .app import create_app

__all__ = ["create_app"]
