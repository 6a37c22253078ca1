"""
Process-local counters for the RtF engine.

One RtfStats instance is created per app and shared by the forecast
service, the TM ledger and the metrics collector. Counters only grow;
rates are derived on read.
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Dict


@dataclass
class RtfStats:
    week_goals_hits: int = 0
    week_goals_misses: int = 0
    week_goals_sets: int = 0
    forecast_hits: int = 0
    forecast_misses: int = 0
    forecast_sets: int = 0
    tm_adjustments: int = 0
    tm_auto_adjustments: int = 0
    tm_guardrail_rejections: int = 0
    tm_unknown_exercise_rejections: int = 0
    tm_routine_access_rejections: int = 0
    started_at: float = field(default_factory=time.time)

    @staticmethod
    def _rate(hits: int, misses: int) -> float:
        total = hits + misses
        return hits / total if total else 0.0

    @property
    def week_goals_hit_rate(self) -> float:
        return self._rate(self.week_goals_hits, self.week_goals_misses)

    @property
    def forecast_hit_rate(self) -> float:
        return self._rate(self.forecast_hits, self.forecast_misses)

    def snapshot(self) -> Dict[str, float]:
        data = asdict(self)
        data["uptime_sec"] = time.time() - self.started_at
        data["week_goals_hit_rate"] = self.week_goals_hit_rate
        data["forecast_hit_rate"] = self.forecast_hit_rate
        return data
