"""
Derived views of a snapshot for the public waiting-room display.

Everything here is a pure function of the snapshot it is given; callers
recompute on every snapshot instead of keeping sorted state around.
"""
from typing import Iterable, Sequence
from ed_tracker.modules.patients.models import Patient, Stage, CATEGORY_PRIORITY, UNKNOWN_PRIORITY

DISPLAY_STAGES: tuple[Stage, ...] = (Stage.WAITING, Stage.BOX, Stage.EXAMS)

def _stage_value(patient: Patient) -> str:
    stage = patient.stage
    return stage.value if isinstance(stage, Stage) else str(stage)

def category_priority(category) -> int:
    if category is None:
        return UNKNOWN_PRIORITY
    value = category.value if hasattr(category, "value") else str(category)
    return CATEGORY_PRIORITY.get(value, UNKNOWN_PRIORITY)

def queue_key(patient: Patient) -> tuple[int, int]:
    # urgency first, then arrival order
    return category_priority(patient.category), patient.id

def stage_group(snapshot: Iterable[Patient], stage: Stage) -> list[Patient]:
    return [p for p in snapshot if _stage_value(p) == stage.value]

def waiting_queue(snapshot: Iterable[Patient]) -> list[Patient]:
    return sorted(stage_group(snapshot, Stage.WAITING), key=queue_key)

def display_columns(snapshot: Sequence[Patient]) -> dict[Stage, list[Patient]]:
    return {
        Stage.WAITING: waiting_queue(snapshot),
        Stage.BOX: stage_group(snapshot, Stage.BOX),
        Stage.EXAMS: stage_group(snapshot, Stage.EXAMS),
    }
