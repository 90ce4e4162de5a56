import logging
from ed_tracker.modules.patients.repository import PatientStore
from ed_tracker.modules.patients.schemas import PatientCreate

log = logging.getLogger("patients.seed")

DEMO_PATIENTS: list[dict] = [
    {"code": "VG-200", "rut": "22.102.520-2", "name": "Vicente García", "stage": "box", "status": "EN UCI", "category": "C1",
     "admissionReason": "Insuficiencia cardíaca severa", "comment": "Pronóstico reservado."},
    {"code": "WJ-300", "rut": "20.525.065-4", "name": "Wilson Jara", "stage": "exams", "status": "EN IMAGENOLOGÍA", "category": "C4",
     "admissionReason": "Traumatismo en rodilla derecha", "comment": "Chequeo de meniscos."},
    {"code": "DA-500", "rut": "19.622.479-3", "name": "Diego Allendes", "stage": "waiting", "status": "EN SALA DE ESPERA", "category": "C5",
     "admissionReason": "Reacción alérgica cutánea", "comment": "Consulta general por alergia estacional."},
    {"code": "AX-381", "rut": "12.345.678-9", "name": "Juan Parra", "stage": "waiting", "status": "EN SALA DE ESPERA", "category": "C3",
     "admissionReason": "Hipertensión descompensada", "comment": "Signos vitales estables."},
    {"code": "BX-202", "rut": "9.876.543-2", "name": "María González", "stage": "box", "status": "EN BOX 3", "category": "C2",
     "admissionReason": "Sospecha de apendicitis", "comment": "Evaluación médica en curso."},
    {"code": "EX-112", "rut": "15.111.222-3", "name": "Pedro Pascal", "stage": "waiting", "status": "EN SALA DE ESPERA", "category": "C4",
     "admissionReason": "Gastroenteritis aguda", "comment": "Dolor abdominal leve."},
    {"code": "HX-778", "rut": "10.999.000-1", "name": "Gabriela Mistral", "stage": "waiting", "status": "EN SALA DE ESPERA", "category": "C2",
     "admissionReason": "Crisis asmática", "comment": "Dificultad respiratoria."},
]

def seed_demo_patients(store: PatientStore) -> int:
    for row in DEMO_PATIENTS:
        store.create(PatientCreate.model_validate(row))
    log.info("Seeded %d demo patients", len(DEMO_PATIENTS))
    return len(DEMO_PATIENTS)
