from __future__ import annotations

from typing import Dict, List

import numpy as np
import pytest

from carbon_atlas.scene import Scene, build_scene


def make_row(
    dept: str | None,
    emission,
    *,
    trip_id: str | None = None,
    purpose: str | None = "Training",
    mode: str | None = "Air",
    origin: str | None = "NYC",
    dest: str | None = "SF",
    cost=None,
) -> Dict[str, object]:
    return {
        "Business Dept": dept,
        "Carbon Emission": emission,
        "Trip ID": trip_id,
        "Purpose": purpose,
        "Shipping Type": mode,
        "Departure City": origin,
        "Arrival City": dest,
        "Net Costs": cost,
    }


@pytest.fixture
def sample_rows() -> List[Dict[str, object]]:
    return [
        make_row("Sales", 100, trip_id="T1", purpose="Customer Visit", mode="Air", cost=800),
        make_row("Sales", 300, trip_id="T2", purpose="Customer Visit", mode="Rail", origin="Berlin", dest="Paris"),
        make_row("Sales", 50, trip_id="T3", purpose="Training", mode="Air", origin="Berlin", dest="Munich"),
        make_row("Engineering", 500, trip_id="T4", purpose="Training", mode="Air"),
        make_row("Engineering", 2500, trip_id="T5", purpose="Internal Meeting", mode="Car", origin=None, dest="Lyon"),
        make_row("Legal", 0, trip_id="T6", purpose=None, mode=None),
    ]


@pytest.fixture
def scene(sample_rows) -> Scene:
    return build_scene(sample_rows, rng=np.random.default_rng(7))


class FakeClock:
    def __init__(self, t: float = 0.0) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
