import hmac
import itertools
import logging
import random
import string
from datetime import datetime
from typing import Callable
from ed_tracker.core.errors import DuplicateCode
from ed_tracker.modules.patients.models import Patient
from ed_tracker.modules.patients.schemas import PatientCreate, PatientUpdate

log = logging.getLogger("patients.store")

_CODE_ATTEMPTS = 1000

# optional on the record, so an explicit null clears them
_CLEARABLE = {"admission_reason"}

class PatientStore:
    """
    The authoritative in-memory set of patient records, kept in creation order.

    Not thread-safe. The hub serializes every mutation on the event loop, and
    nothing else should write to a store it hands out.
    """
    def __init__(self, clock: Callable[[], datetime] = datetime.now, time_format: str = "%H:%M", rng: random.Random | None = None):
        self._records: dict[int, Patient] = {}
        self._ids = itertools.count(1)
        self._clock = clock
        self._time_format = time_format
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._records)

    def _stamp(self) -> str:
        return self._clock().strftime(self._time_format)

    def create(self, data: PatientCreate) -> Patient:
        code = data.code.strip().upper() if data.code else None
        if code and self._code_taken(code):
            raise DuplicateCode(code)
        patient_id = next(self._ids)
        code = code or self._generate_code(patient_id)
        fields = data.model_dump(exclude={"code"})
        obj = Patient(id=patient_id, code=code, last_update=self._stamp(), **fields)
        self._records[obj.id] = obj
        log.debug("Created patient id=%s code=%s", obj.id, obj.code)
        return obj

    def get(self, patient_id: int) -> Patient | None:
        return self._records.get(patient_id)

    def snapshot(self) -> list[Patient]:
        return list(self._records.values())

    def update(self, patient_id: int, data: PatientUpdate) -> Patient | None:
        obj = self._records.get(patient_id)
        if obj is None:
            return None
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in _CLEARABLE
        }
        if "code" in changes:
            changes["code"] = changes["code"].strip().upper()
            if self._code_taken(changes["code"], exclude_id=patient_id):
                raise DuplicateCode(changes["code"])
        changes["last_update"] = self._stamp()
        # dict assignment keeps the record's creation-order slot
        self._records[patient_id] = obj.model_copy(update=changes)
        return self._records[patient_id]

    def delete(self, patient_id: int) -> bool:
        return self._records.pop(patient_id, None) is not None

    def find_by_code(self, code: str) -> Patient | None:
        wanted = code.strip().upper()
        for obj in self._records.values():
            if obj.code.upper() == wanted:
                return obj
        return None

    def lookup(self, code: str, national_id: str) -> Patient | None:
        """Patient self-lookup: both the code and the national id must match."""
        obj = self.find_by_code(code)
        if obj is None:
            return None
        given = national_id.strip().encode()
        if not hmac.compare_digest(obj.national_id.strip().encode(), given):
            return None
        return obj

    def _code_taken(self, code: str, exclude_id: int | None = None) -> bool:
        found = self.find_by_code(code)
        return found is not None and found.id != exclude_id

    def _generate_code(self, patient_id: int) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = f"{self._rng.choice(string.ascii_uppercase)}X-{self._rng.randint(100, 999)}"
            if not self._code_taken(code):
                return code
        # random space exhausted; the id is unique anyway
        return f"PX-{patient_id}"
