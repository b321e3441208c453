from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from kojo.components.game_state import Activity


@dataclass(slots=True)
class RunningTotal:
    """Session score shared by every activity. Only ever grows."""

    value: int = 0
    # Per-activity subtotals; they always sum to ``value``.
    by_source: Dict[Activity, int] = field(default_factory=dict)

    def subtotal(self, source: Activity) -> int:
        return self.by_source.get(source, 0)
