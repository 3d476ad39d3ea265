"""
Data models for Outcome Tracker
Defines core data structures for outcomes, outputs, action logs and skills
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any
import json
import math

from dateutil import parser as date_parser

SKILL_STAGES = ('active', 'review', 'archived')
FREQUENCY_TYPES = ('daily', 'fixed_weekly', 'flexible_weekly')
OUTPUT_STATUSES = ('active', 'paused', 'archived')


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse datetime value from a store row"""
    if isinstance(value, datetime):
        return value
    if value:
        try:
            return date_parser.isoparse(value)
        except (ValueError, TypeError):
            return None
    return None


def _parse_number(value: Any) -> Optional[float]:
    """Parse an optional numeric column, mapping NaN to None"""
    if value is None or value == '':
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(number):
        return None
    return number


def _parse_int_list(value: Any) -> List[int]:
    """Parse a list column stored either natively or as JSON text"""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, (list, tuple)):
        return []
    return [int(item) for item in value]


@dataclass
class Outcome:
    """User-level goal grouping outputs and skills"""
    id: str = ""
    title: str = ""
    category: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Outcome':
        """Create Outcome from store row dictionary"""
        return cls(
            id=data.get('id', ''),
            title=data.get('title', ''),
            category=data.get('category'),
            created_at=_parse_datetime(data.get('created_at')),
        )


@dataclass
class Output:
    """Recurring trackable action under an outcome"""
    id: str = ""
    outcome_id: str = ""
    description: str = ""
    frequency_type: str = "daily"  # 'daily', 'fixed_weekly', 'flexible_weekly'
    frequency_value: int = 1
    schedule_weekdays: List[int] = field(default_factory=list)  # 0=Sun..6=Sat
    is_starter: bool = False
    status: str = "active"  # 'active', 'paused', 'archived'
    sort_order: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Output':
        """Create Output from store row dictionary"""
        return cls(
            id=data.get('id', ''),
            outcome_id=data.get('outcome_id', ''),
            description=data.get('description', ''),
            frequency_type=data.get('frequency_type', 'daily'),
            frequency_value=int(data.get('frequency_value') or 0),
            schedule_weekdays=_parse_int_list(data.get('schedule_weekdays')),
            is_starter=bool(data.get('is_starter', False)),
            status=data.get('status', 'active'),
            sort_order=int(data.get('sort_order') or 0),
            created_at=_parse_datetime(data.get('created_at')),
        )


@dataclass
class ActionLog:
    """Dated completion record for an output (one per output per day)"""
    id: str = ""
    output_id: str = ""
    action_date: str = ""  # YYYY-MM-DD
    completed: float = 0
    total: float = 0
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ActionLog':
        """Create ActionLog from store row dictionary"""
        return cls(
            id=data.get('id', ''),
            output_id=data.get('output_id', ''),
            action_date=str(data.get('action_date', '')),
            completed=data.get('completed') or 0,
            total=data.get('total') or 0,
            notes=data.get('notes'),
        )


@dataclass
class SkillItem:
    """Sub-competency tied to an outcome, progressed via confidence logs"""
    id: str = ""
    outcome_id: str = ""
    name: str = ""
    stage: str = "active"  # 'active', 'review', 'archived'
    target_label: Optional[str] = None
    target_value: Optional[float] = None
    initial_confidence: int = 3  # 1-5
    graduation_suppressed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SkillItem':
        """Create SkillItem from store row dictionary"""
        return cls(
            id=data.get('id', ''),
            outcome_id=data.get('outcome_id', ''),
            name=data.get('name', ''),
            stage=data.get('stage', 'active'),
            target_label=data.get('target_label'),
            target_value=_parse_number(data.get('target_value')),
            initial_confidence=int(data.get('initial_confidence', 3)),
            graduation_suppressed_at=_parse_datetime(data.get('graduation_suppressed_at')),
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API and CLI output"""
        return {
            "id": self.id,
            "outcome_id": self.outcome_id,
            "name": self.name,
            "stage": self.stage,
            "target_label": self.target_label,
            "target_value": self.target_value,
            "initial_confidence": self.initial_confidence,
            "graduation_suppressed_at": (
                self.graduation_suppressed_at.isoformat()
                if self.graduation_suppressed_at else None
            ),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class SkillLog:
    """Dated confidence / target-result record for a skill"""
    id: str = ""
    skill_item_id: str = ""
    action_log_id: Optional[str] = None
    confidence: int = 3  # 1-5
    target_result: Optional[float] = None
    logged_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SkillLog':
        """Create SkillLog from store row dictionary"""
        return cls(
            id=data.get('id', ''),
            skill_item_id=data.get('skill_item_id', ''),
            action_log_id=data.get('action_log_id'),
            confidence=int(data.get('confidence', 3)),
            target_result=_parse_number(data.get('target_result')),
            logged_at=_parse_datetime(data.get('logged_at')),
            created_at=_parse_datetime(data.get('created_at')),
        )
