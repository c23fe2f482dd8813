"""HTTP service exposing the portfolio calculation engine."""

from .main import create_app

__all__ = ["create_app"]
