"""
Waiting-room board: the state behind one public display surface.

The board consumes the hub's outbound events, keeps the three public
columns derived from the latest snapshot, and pages each column with its
own rotation controller. Rotation phase never leaves the board.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from ed_tracker.modules.display.rotation import RotationController
from ed_tracker.modules.patients.models import CATEGORY_INFO, Category, Patient, Stage
from ed_tracker.modules.queue.ordering import DISPLAY_STAGES, display_columns
from ed_tracker.modules.realtime.hub import INIT_DATA, UPDATE_ALERT_MODE, UPDATE_PATIENTS

log = logging.getLogger("display.board")

COLUMN_TITLES: dict[Stage, str] = {
    Stage.WAITING: "En Sala de Espera",
    Stage.BOX: "En Box de Atención",
    Stage.EXAMS: "En Exámenes",
}

def initials(name: str | None) -> str:
    """'Juan Pérez' -> 'J.P.'"""
    if not name:
        return ""
    parts = [part for part in name.split(" ") if part]
    return ".".join(part[0].upper() for part in parts) + "."


class WaitingRoomBoard:
    def __init__(self, page_size: int = 3):
        self.alert_mode = False
        self._columns: dict[Stage, list[Patient]] = {stage: [] for stage in DISPLAY_STAGES}
        self._rotation = {stage: RotationController(page_size) for stage in DISPLAY_STAGES}

    def apply_snapshot(self, snapshot: Iterable[Patient]) -> None:
        for stage, items in display_columns(list(snapshot)).items():
            self._columns[stage] = items
            self._rotation[stage].observe(len(items))

    def handle_event(self, event: str, data: Any) -> None:
        if event in (INIT_DATA, UPDATE_PATIENTS):
            self.apply_snapshot(Patient.model_validate(row) for row in data)
        elif event == UPDATE_ALERT_MODE:
            self.alert_mode = bool(data)
        else:
            log.debug("Board ignores event %s", event)

    def tick(self) -> None:
        for rotation in self._rotation.values():
            rotation.tick()

    def page(self, stage: Stage) -> int:
        return self._rotation[stage].page

    def visible(self, stage: Stage) -> list[Patient]:
        return self._rotation[stage].window(self._columns[stage])

    def render(self) -> dict:
        columns = []
        for stage in DISPLAY_STAGES:
            rotation = self._rotation[stage]
            columns.append({
                "stage": stage.value,
                "title": COLUMN_TITLES[stage],
                "total": len(self._columns[stage]),
                "page": rotation.page,
                "page_count": rotation.page_count,
                "patients": [_card(p) for p in self.visible(stage)],
            })
        return {"alert_mode": self.alert_mode, "columns": columns}


def _card(patient: Patient) -> dict:
    info = CATEGORY_INFO.get(patient.category) if isinstance(patient.category, Category) else None
    return {
        "code": patient.code,
        "initials": initials(patient.name),
        "category": patient.category.value if info else None,
        "label": info["label"] if info else None,
        "color": info["color"] if info else None,
    }


async def run_rotation(board: WaitingRoomBoard, interval: float, on_render: Callable[[dict], Awaitable[None]]) -> None:
    """Advance every column on a fixed cadence until cancelled."""
    log.info("Board rotation started every %.1fs", interval)
    try:
        while True:
            await asyncio.sleep(interval)
            board.tick()
            await on_render(board.render())
    except asyncio.CancelledError:
        log.info("Board rotation cancelled")
        raise
