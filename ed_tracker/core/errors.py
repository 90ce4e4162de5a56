from pydantic import ValidationError


class TrackerError(Exception):
    """Base class for errors raised while applying a mutation."""


class PatientNotFound(TrackerError):
    def __init__(self, patient_id):
        super().__init__(f"patient {patient_id} not found")
        self.patient_id = patient_id


class MalformedPayload(TrackerError):
    @classmethod
    def from_validation(cls, exc: ValidationError) -> "MalformedPayload":
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "payload" for err in exc.errors())
        return cls(f"invalid fields: {fields}")


class DuplicateCode(MalformedPayload):
    def __init__(self, code: str):
        super().__init__(f"code {code!r} is already in use")
        self.code = code
