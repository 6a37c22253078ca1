"""
Per-routine invalidation generations.

Every invalidate_prefix call bumps the routine's generation, whether or not
keys were removed. A computation that read the generation before loading
the routine compares it again before storing its result; a changed value
means an invalidation ran in between and the result must not be written
back. Counters are process-local, so writes racing on other instances stay
last-write-wins until the TTL expires.
"""
from typing import Dict


class RoutineGenerations:
    def __init__(self):
        self._by_routine: Dict[str, int] = {}

    def current(self, routine_id: str) -> int:
        return self._by_routine.get(routine_id, 0)

    def bump(self, routine_id: str) -> int:
        generation = self._by_routine.get(routine_id, 0) + 1
        self._by_routine[routine_id] = generation
        return generation
