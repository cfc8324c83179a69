import pytest
from fastapi.testclient import TestClient
from simple_ksef.core.config import ServiceConfig
from simple_ksef.main import create_app


@pytest.fixture()
def client() -> TestClient:
    """
    Creates a fresh FastAPI app and TestClient for each test.
    This avoids shared state between tests.
    """
    app = create_app(ServiceConfig())
    return TestClient(app)
