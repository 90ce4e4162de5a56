from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from ed_tracker.modules.patients.models import Stage, Category

PatientCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=16)]

# Fields the store owns (id, lastUpdate) are ignored if a client sends them.
class PatientCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: PatientCode | None = None
    national_id: str = Field(..., alias="rut", min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=200)
    stage: Stage = Stage.ADMISSION
    status: str = "EN ADMISIÓN"
    category: Category = Category.C5
    admission_reason: str | None = Field(default="Consulta General", alias="admissionReason")
    comment: str = "Ingreso reciente."

class PatientUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: PatientCode | None = None
    national_id: str | None = Field(default=None, alias="rut", min_length=1, max_length=32)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    stage: Stage | None = None
    status: str | None = None
    category: Category | None = None
    admission_reason: str | None = Field(default=None, alias="admissionReason")
    comment: str | None = None

class UpdatePatientRequest(BaseModel):
    id: int
    updates: PatientUpdate

class LookupRequest(BaseModel):
    code: str = Field(..., min_length=1)
    rut: str = Field(..., min_length=1)

class AlertState(BaseModel):
    enabled: bool
