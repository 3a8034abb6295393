"""Entity change events - the signal that any cached projection is stale"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

ENTITY_TYPES = (
    "account",
    "project",
    "single_shot_income",
    "fixed_expense",
    "single_shot_expense",
    "credit_card",
    "future_statement",
)

ACTIONS = ("created", "updated", "deleted")


@dataclass(frozen=True)
class EntityChange:
    """One insert/update/delete of a finance entity"""

    entity_type: str
    entity_id: str
    action: str
    occurred_at: datetime

    def __post_init__(self):
        if self.entity_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown entity type: {self.entity_type}")
        if self.action not in ACTIONS:
            raise ValueError(f"Unknown action: {self.action}")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "event": "FINANCE_DATA_CHANGED",
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "occurred_at": self.occurred_at.isoformat(),
        }
