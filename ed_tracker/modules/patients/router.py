from fastapi import APIRouter, Depends, HTTPException, status
from ed_tracker.api.deps import get_hub
from ed_tracker.core.errors import DuplicateCode, PatientNotFound
from ed_tracker.modules.patients.models import Patient, Stage, STAGE_TITLES
from ed_tracker.modules.patients.schemas import PatientCreate, PatientUpdate, LookupRequest
from ed_tracker.modules.realtime.hub import BroadcastHub

router = APIRouter()

# Mutations go through the hub so every connected session sees them.

@router.get("", response_model=list[Patient])
async def list_patients(hub: BroadcastHub = Depends(get_hub)):
    return hub.store.snapshot()

@router.post("", response_model=Patient, status_code=201)
async def create_patient(payload: PatientCreate, hub: BroadcastHub = Depends(get_hub)):
    try:
        return hub.add_patient(payload)
    except DuplicateCode as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.post("/lookup", response_model=Patient)
async def lookup_patient(payload: LookupRequest, hub: BroadcastHub = Depends(get_hub)):
    obj = hub.store.lookup(payload.code, payload.rut)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid code or RUT")
    return obj

@router.get("/{patient_id}", response_model=Patient)
async def get_patient(patient_id: int, hub: BroadcastHub = Depends(get_hub)):
    obj = hub.store.get(patient_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return obj

@router.patch("/{patient_id}", response_model=Patient)
async def update_patient(patient_id: int, payload: PatientUpdate, hub: BroadcastHub = Depends(get_hub)):
    try:
        return hub.update_patient(patient_id, payload)
    except PatientNotFound:
        raise HTTPException(status_code=404, detail="Patient not found")
    except DuplicateCode as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/{patient_id}", status_code=204)
async def delete_patient(patient_id: int, hub: BroadcastHub = Depends(get_hub)):
    try:
        hub.delete_patient(patient_id)
    except PatientNotFound:
        raise HTTPException(status_code=404, detail="Patient not found")
    return

stages_router = APIRouter()

@stages_router.get("/stages")
async def list_stages():
    return [{"id": s.value, "title": STAGE_TITLES[s], "order": s.order} for s in Stage]
