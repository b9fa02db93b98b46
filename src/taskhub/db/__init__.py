"""Database related helpers."""

from __future__ import annotations

from .session import get_engine, get_session, get_session_maker

__all__ = ["get_engine", "get_session", "get_session_maker"]
