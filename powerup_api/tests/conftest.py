"""
Shared fixtures.

Run with: pytest powerup_api/tests -v
"""
import os

# Keep the module-level app in powerup_api.main off the filesystem.
os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest

from powerup_api.adapters.memory import MemoryAdapter
from powerup_api.core.cache import MergeCache
from powerup_api.core.preferences import ProjectPreferences
from powerup_api.schemas.records import RFI, Drawing


@pytest.fixture
def store():
    return MemoryAdapter()


@pytest.fixture
def cache(store):
    return MergeCache(store)


@pytest.fixture
def preferences(store):
    return ProjectPreferences(store)


@pytest.fixture
def discipline_map():
    return {
        "1": {"name": "Architectural", "index": 0},
        "2": {"name": "Mechanical", "index": 1},
        "3": {"name": "Electrical", "index": 2},
    }


@pytest.fixture
def drawings():
    return [
        Drawing(id=10, num="A-10", title="Enlarged Plan", discipline=1),
        Drawing(id=11, num="A-2", title="Floor Plan", discipline=1),
        Drawing(id=12, num="M-101", title="HVAC Layout", discipline=2),
        Drawing(id=13, num="M-102", title="Ductwork", discipline=2),
        Drawing(id=14, num="E-1", title="Lighting", discipline=3),
        Drawing(id=15, num="G-001", title="Cover Sheet", discipline_name="General"),
    ]


@pytest.fixture
def rfis():
    return [
        RFI(id=101, number="12", subject="Beam clash", status="open"),
        RFI(id=102, number="3", subject="Door hardware", status="closed"),
        RFI(id=103, number="7", subject="Roof drain", status="open"),
        RFI(id=104, number="1", subject="Slab edge", status="closed"),
        RFI(id=105, number="20", subject="Duct routing", status="open"),
    ]
