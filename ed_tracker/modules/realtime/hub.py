import asyncio
import logging
import uuid
from typing import Any
from pydantic import ValidationError

from ed_tracker.core.errors import TrackerError, MalformedPayload, PatientNotFound
from ed_tracker.modules.patients.models import Patient
from ed_tracker.modules.patients.repository import PatientStore
from ed_tracker.modules.patients.schemas import PatientCreate, PatientUpdate, UpdatePatientRequest
from ed_tracker.platform.ports.session_transport import SessionTransport

log = logging.getLogger("realtime.hub")

# client -> hub
ADD_PATIENT = "add_patient"
UPDATE_PATIENT = "update_patient"
DELETE_PATIENT = "delete_patient"
TOGGLE_ALERT = "toggle_alert"

# hub -> client
INIT_DATA = "init_data"
UPDATE_PATIENTS = "update_patients"
UPDATE_ALERT_MODE = "update_alert_mode"
ERROR = "error"

def message(event: str, data: Any) -> dict:
    return {"event": event, "data": data}


class Session:
    """One connected observer. Outbound messages go through its own bounded queue."""

    def __init__(self, transport: SessionTransport, maxsize: int):
        self.id = uuid.uuid4().hex[:12]
        self.transport = transport
        self.outbox: asyncio.Queue[dict] = asyncio.Queue(maxsize=maxsize)
        self.task: asyncio.Task | None = None

    def push(self, msg: dict) -> bool:
        try:
            self.outbox.put_nowait(msg)
        except asyncio.QueueFull:
            return False
        return True


class BroadcastHub:
    """
    Owns the connected sessions and the alert flag, and is the only writer
    of the patient store.

    Mutation methods are synchronous: the store change and the enqueueing of
    the resulting broadcast happen without yielding to the event loop, so
    mutations apply one at a time in arrival order and every session sees
    the same sequence of snapshots. Network writes happen later, in each
    session's delivery task.
    """
    def __init__(self, store: PatientStore, *, session_queue_maxsize: int = 256):
        if session_queue_maxsize < 2:
            raise ValueError("session_queue_maxsize must hold the two connect messages")
        self.store = store
        self.alert_mode = False
        self.sessions: dict[str, Session] = {}
        self._queue_maxsize = session_queue_maxsize
        self._closing: set[asyncio.Task] = set()

    # ---- Sessions ----

    async def connect(self, transport: SessionTransport) -> Session:
        session = Session(transport, self._queue_maxsize)
        self.sessions[session.id] = session
        session.task = asyncio.create_task(self._deliver(session), name=f"session-{session.id}")
        if not (session.push(message(INIT_DATA, self._snapshot_payload()))
                and session.push(message(UPDATE_ALERT_MODE, self.alert_mode))):
            log.warning("Session %s could not take its initial state; evicting it", session.id)
            self._drop(session)
            return session
        log.info("Session %s connected (%d active)", session.id, len(self.sessions))
        return session

    async def disconnect(self, session: Session) -> None:
        if self.sessions.pop(session.id, None) is None:
            return
        task = session.task
        if task and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        log.info("Session %s disconnected (%d active)", session.id, len(self.sessions))

    async def close(self) -> None:
        """Close every session, used on application shutdown."""
        for session in list(self.sessions.values()):
            await self.disconnect(session)
            await session.transport.close(code=1001)

    async def flush(self, timeout: float = 5.0) -> None:
        """Wait until every live session has written out its queued messages."""
        waits = [s.outbox.join() for s in self.sessions.values()]
        if waits:
            await asyncio.wait_for(asyncio.gather(*waits), timeout)

    async def _deliver(self, session: Session) -> None:
        while True:
            msg = await session.outbox.get()
            try:
                await session.transport.send(msg)
            except asyncio.CancelledError:
                raise
            except Exception:
                log.warning("Delivery to session %s failed; dropping it", session.id, exc_info=True)
                self._drop(session)
                return
            finally:
                session.outbox.task_done()

    def _drop(self, session: Session) -> None:
        if self.sessions.pop(session.id, None) is None:
            return
        if session.task and session.task is not asyncio.current_task():
            session.task.cancel()
        # closing lets the client reconnect and pick up a fresh snapshot
        task = asyncio.get_running_loop().create_task(session.transport.close(code=1011))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    # ---- Broadcast ----

    def _snapshot_payload(self) -> list[dict]:
        return [p.to_wire() for p in self.store.snapshot()]

    def _broadcast(self, event: str, data: Any) -> None:
        msg = message(event, data)
        for session in list(self.sessions.values()):
            if not session.push(msg):
                log.warning("Session %s is not keeping up; evicting it", session.id)
                self._drop(session)

    def _broadcast_patients(self) -> None:
        self._broadcast(UPDATE_PATIENTS, self._snapshot_payload())

    # ---- Mutations ----

    def add_patient(self, data: PatientCreate) -> Patient:
        obj = self.store.create(data)
        log.info("Admitted patient id=%s code=%s", obj.id, obj.code)
        self._broadcast_patients()
        return obj

    def update_patient(self, patient_id: int, data: PatientUpdate) -> Patient:
        obj = self.store.update(patient_id, data)
        if obj is None:
            raise PatientNotFound(patient_id)
        log.info("Updated patient id=%s fields=%s", patient_id, sorted(data.model_fields_set))
        self._broadcast_patients()
        return obj

    def delete_patient(self, patient_id: int) -> None:
        if not self.store.delete(patient_id):
            raise PatientNotFound(patient_id)
        log.info("Deleted patient id=%s", patient_id)
        self._broadcast_patients()

    def toggle_alert(self, enabled: bool | None = None) -> bool:
        self.alert_mode = (not self.alert_mode) if enabled is None else bool(enabled)
        log.info("Alert mode set to %s", self.alert_mode)
        self._broadcast(UPDATE_ALERT_MODE, self.alert_mode)
        return self.alert_mode

    # ---- Client messages ----

    def dispatch(self, session: Session | None, event: str, data: Any) -> bool:
        """
        Apply one client event. Returns True when the mutation was accepted.

        Rejections never reach other sessions; the originator gets an error
        event for malformed payloads. An unknown patient id is a silent no-op.
        """
        try:
            self._apply(event, data)
        except PatientNotFound as e:
            log.info("Ignoring %s: %s", event, e)
            return False
        except TrackerError as e:
            log.warning("Rejected %s from session %s: %s", event, session.id if session else "-", e)
            if session is not None:
                session.push(message(ERROR, {"event": event, "detail": str(e)}))
            return False
        return True

    def _apply(self, event: str, data: Any) -> None:
        try:
            if event == ADD_PATIENT:
                self.add_patient(PatientCreate.model_validate(data))
            elif event == UPDATE_PATIENT:
                req = UpdatePatientRequest.model_validate(data)
                self.update_patient(req.id, req.updates)
            elif event == DELETE_PATIENT:
                self.delete_patient(_patient_id(data))
            elif event == TOGGLE_ALERT:
                if data is not None and not isinstance(data, bool):
                    raise MalformedPayload("toggle_alert expects a boolean")
                self.toggle_alert(data)
            else:
                raise MalformedPayload(f"unknown event {event!r}")
        except ValidationError as e:
            raise MalformedPayload.from_validation(e) from e


def _patient_id(data: Any) -> int:
    # accepts a bare id or {"id": ...}
    if isinstance(data, dict):
        data = data.get("id")
    if isinstance(data, bool) or not isinstance(data, (int, str)):
        raise MalformedPayload("delete_patient expects a patient id")
    try:
        return int(data)
    except ValueError:
        raise MalformedPayload(f"invalid patient id {data!r}")
