import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "tests"))

os.environ.setdefault("ENV", "test")

from tikky.main import create_app
from doubles import RecordingStore


@pytest.fixture(scope="function")
def store():
    return RecordingStore()


@pytest.fixture(scope="function")
def client(store):
    with TestClient(create_app(store)) as test_client:
        yield test_client
