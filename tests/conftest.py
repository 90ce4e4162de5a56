from __future__ import annotations

import random
from datetime import datetime

import pytest

from ed_tracker.modules.patients.repository import PatientStore
from ed_tracker.modules.patients.schemas import PatientCreate


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2024, 5, 6, 9, 15))


@pytest.fixture
def store(clock: Clock) -> PatientStore:
    return PatientStore(clock=clock, rng=random.Random(7))


@pytest.fixture
def new_patient():
    def factory(**overrides) -> PatientCreate:
        data = {"rut": "12.345.678-9", "name": "Juan Parra"}
        data.update(overrides)
        return PatientCreate.model_validate(data)

    return factory
