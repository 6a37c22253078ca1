"""
RtF schedule tables and program snapshot builder.

Two canonical 21-week curricula:
- STANDARD: strength leaning, 4 fixed sets + AMRAP on set 5
- HYPERTROPHY: higher reps at moderate intensity, 3 fixed sets + AMRAP on set 4

Deload weeks sit at 7, 14 and 21. The no-deload variant drops them and
renumbers the remaining 18 training weeks from 1.

Snapshots are versioned. A change to these tables that alters the meaning
of an existing week must bump SNAPSHOT_VERSION instead of rewriting
snapshots already pinned to routines.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from domain.models import ProgramSnapshot, ProgramStyle, ScheduleWeek


SNAPSHOT_VERSION = 1

DELOAD_WEEKS = (7, 14, 21)
WEEKS_WITH_DELOADS = 21
WEEKS_WITHOUT_DELOADS = WEEKS_WITH_DELOADS - len(DELOAD_WEEKS)


@dataclass(frozen=True)
class DeloadPrescription:
    """Fixed load prescription used on deload weeks."""

    sets: int
    reps: int
    intensity: float
    rpe: Optional[int] = None


# Fixed (non-AMRAP) sets per style; the AMRAP set follows them.
FIXED_SET_COUNT: Dict[ProgramStyle, int] = {
    ProgramStyle.STANDARD: 4,
    ProgramStyle.HYPERTROPHY: 3,
}

DELOAD_PRESCRIPTION: Dict[ProgramStyle, DeloadPrescription] = {
    ProgramStyle.STANDARD: DeloadPrescription(sets=3, reps=5, intensity=0.6, rpe=6),
    ProgramStyle.HYPERTROPHY: DeloadPrescription(sets=4, reps=5, intensity=0.6),
}


def _training(week: int, intensity: float, fixed_reps: int, amrap_target: int) -> ScheduleWeek:
    return ScheduleWeek(
        week=week,
        intensity=intensity,
        fixed_reps=fixed_reps,
        amrap_target=amrap_target,
    )


def _deload(week: int) -> ScheduleWeek:
    return ScheduleWeek(week=week, is_deload=True)


# ===== Canonical tables (with deloads) =====

STANDARD_WITH_DELOADS: Tuple[ScheduleWeek, ...] = (
    _training(1, 0.70, 5, 10),
    _training(2, 0.75, 4, 8),
    _training(3, 0.80, 3, 6),
    _training(4, 0.725, 5, 9),
    _training(5, 0.775, 4, 7),
    _training(6, 0.825, 3, 5),
    _deload(7),
    _training(8, 0.75, 4, 8),
    _training(9, 0.80, 3, 6),
    _training(10, 0.85, 2, 4),
    _training(11, 0.775, 4, 7),
    _training(12, 0.825, 3, 5),
    _training(13, 0.875, 2, 3),
    _deload(14),
    _training(15, 0.80, 3, 6),
    _training(16, 0.85, 2, 4),
    _training(17, 0.90, 1, 2),
    _training(18, 0.85, 2, 4),
    _training(19, 0.90, 1, 2),
    _training(20, 0.95, 1, 2),
    _deload(21),
)

HYPERTROPHY_WITH_DELOADS: Tuple[ScheduleWeek, ...] = (
    _training(1, 0.70, 10, 12),
    _training(2, 0.725, 9, 11),
    _training(3, 0.75, 8, 10),
    _training(4, 0.725, 9, 11),
    _training(5, 0.75, 8, 10),
    _training(6, 0.775, 7, 9),
    _deload(7),
    _training(8, 0.725, 9, 11),
    _training(9, 0.75, 8, 10),
    _training(10, 0.775, 7, 9),
    _training(11, 0.75, 8, 10),
    _training(12, 0.775, 7, 9),
    _training(13, 0.80, 6, 8),
    _deload(14),
    _training(15, 0.75, 8, 10),
    _training(16, 0.775, 7, 9),
    _training(17, 0.80, 6, 8),
    _training(18, 0.775, 7, 9),
    _training(19, 0.80, 6, 8),
    _training(20, 0.825, 5, 6),
    _deload(21),
)


def _without_deloads(table: Tuple[ScheduleWeek, ...]) -> Tuple[ScheduleWeek, ...]:
    training = [w for w in table if not w.is_deload]
    return tuple(
        w.model_copy(update={"week": index}) for index, w in enumerate(training, start=1)
    )


_TABLES: Dict[Tuple[ProgramStyle, bool], Tuple[ScheduleWeek, ...]] = {
    (ProgramStyle.STANDARD, True): STANDARD_WITH_DELOADS,
    (ProgramStyle.HYPERTROPHY, True): HYPERTROPHY_WITH_DELOADS,
    (ProgramStyle.STANDARD, False): _without_deloads(STANDARD_WITH_DELOADS),
    (ProgramStyle.HYPERTROPHY, False): _without_deloads(HYPERTROPHY_WITH_DELOADS),
}


# ===== Lookups =====


def get_schedule(style: ProgramStyle, with_deloads: bool) -> Tuple[ScheduleWeek, ...]:
    """Return the live table for a style and deload variant."""
    return _TABLES[(ProgramStyle(style), bool(with_deloads))]


def total_weeks(with_deloads: bool) -> int:
    return WEEKS_WITH_DELOADS if with_deloads else WEEKS_WITHOUT_DELOADS


def is_deload_week(week: int, with_deloads: bool) -> bool:
    """Deloads exist only in the 21-week variant."""
    return bool(with_deloads) and week in DELOAD_WEEKS


def amrap_set_number(style: ProgramStyle) -> int:
    return FIXED_SET_COUNT[ProgramStyle(style)] + 1


def build_program_snapshot(
    with_deloads: bool,
    created_at: Optional[datetime] = None,
) -> ProgramSnapshot:
    """
    Freeze both style tables for a deload variant.

    Args:
        with_deloads: True for the 21-week variant, False for the 18-week
            variant with deloads removed and weeks renumbered.
        created_at: Snapshot timestamp (defaults to now, UTC).

    Returns:
        Immutable ProgramSnapshot at the current SNAPSHOT_VERSION.
    """
    return ProgramSnapshot(
        version=SNAPSHOT_VERSION,
        created_at=created_at or datetime.now(timezone.utc),
        with_deloads=bool(with_deloads),
        weeks=total_weeks(with_deloads),
        standard=get_schedule(ProgramStyle.STANDARD, with_deloads),
        hypertrophy=get_schedule(ProgramStyle.HYPERTROPHY, with_deloads),
    )
