"""Delivery pricing engine CLI package."""

from .app import app

__all__ = ["app"]
