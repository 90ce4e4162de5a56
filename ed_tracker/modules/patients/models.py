from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class Stage(str, Enum):
    ADMISSION = "admission"
    TRIAGE = "triage"
    WAITING = "waiting"
    BOX = "box"
    EXAMS = "exams"
    DISCHARGE = "discharge"

    @property
    def order(self) -> int:
        return list(Stage).index(self)


STAGE_TITLES: dict[Stage, str] = {
    Stage.ADMISSION: "Admisión",
    Stage.TRIAGE: "Triage",
    Stage.WAITING: "Sala de Espera",
    Stage.BOX: "Atención Médica",
    Stage.EXAMS: "Exámenes",
    Stage.DISCHARGE: "Alta",
}


class Category(str, Enum):
    C1 = "C1"
    C2 = "C2"
    C3 = "C3"
    C4 = "C4"
    C5 = "C5"


# lower value = more urgent
CATEGORY_PRIORITY: dict[str, int] = {c.value: i for i, c in enumerate(Category, start=1)}
UNKNOWN_PRIORITY = len(CATEGORY_PRIORITY) + 1

CATEGORY_INFO: dict[Category, dict[str, str]] = {
    Category.C1: {"label": "C1 - Emergencia Vital", "color": "red"},
    Category.C2: {"label": "C2 - Emergencia", "color": "orange"},
    Category.C3: {"label": "C3 - Urgencia", "color": "yellow"},
    Category.C4: {"label": "C4 - Leve", "color": "green"},
    Category.C5: {"label": "C5 - Consulta General", "color": "blue"},
}


class Patient(BaseModel):
    """A patient record as held by the store and sent on the wire."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    code: str
    national_id: str = Field(alias="rut")
    name: str
    stage: Stage = Stage.ADMISSION
    status: str
    category: Category
    admission_reason: str | None = Field(default=None, alias="admissionReason")
    comment: str = ""
    last_update: str = Field(alias="lastUpdate")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
