"""
Database infrastructure for the billing engine.
"""

from .database import engine, SessionLocal, init_db, build_engine, Base
from .models import *

__all__ = [
    "engine",
    "SessionLocal",
    "init_db",
    "build_engine",
    "Base",
]
