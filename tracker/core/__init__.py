"""
Core module for Outcome Tracker
Contains the row store, configuration, date helpers and model definitions
"""

from .config import Config
from .database import (
    RowStore,
    SQLiteDatabase,
    InMemoryDatabase,
    RecordNotFoundError,
    ConstraintViolationError,
    get_database,
)
from .models import Outcome, Output, ActionLog, SkillItem, SkillLog

__all__ = [
    'Config',
    'RowStore',
    'SQLiteDatabase',
    'InMemoryDatabase',
    'RecordNotFoundError',
    'ConstraintViolationError',
    'get_database',
    'Outcome',
    'Output',
    'ActionLog',
    'SkillItem',
    'SkillLog',
]
