import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import init_db
from app.main import app
from app.routers.irrigation import get_run_store
from app.services.irrigation_calculator import PlanInput
from app.services.run_store import InMemoryKeyValueBackend, RunStore


@pytest.fixture
def memory_backend():
    return InMemoryKeyValueBackend()


@pytest.fixture
def run_store(memory_backend):
    return RunStore(memory_backend)


@pytest.fixture
def wheat_mid_input():
    """Wheat at mid season, 5 mm/day ET0, dry loam, 70 % efficiency, 1 ha."""
    return PlanInput(
        crop="wheat",
        stage="mid",
        area_ha=1.0,
        et0=5.0,
        rain=0.0,
        soil_pct=0.0,
        soil_type="loam",
        eff_pct=70.0,
    )


@pytest.fixture
def sample_runs():
    return [
        {"date": "2024-05-03 07:00", "crop": "rice", "stage": "late", "areaHa": 2, "et0": 4,
         "rain": 0, "etc": 3.8, "net": 3.8, "grossL": 108571},
        {"date": "2024-05-02 07:00", "crop": "maize", "stage": "mid", "areaHa": 0.5, "et0": 6,
         "rain": 2, "etc": 7.2, "net": 5.6, "grossL": 40000},
        {"date": "2024-05-01 07:00", "crop": "wheat", "stage": "mid", "areaHa": 1, "et0": 5,
         "rain": 0, "etc": 5.75, "net": 5.75, "grossL": 82143},
    ]


@pytest.fixture
def sql_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(run_store):
    app.dependency_overrides[get_run_store] = lambda: run_store
    yield TestClient(app)
    app.dependency_overrides.clear()
