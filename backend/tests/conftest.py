import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture(name="client")
def client_fixture():
    """Provide a test client for the round plan API

    No dependency overrides are needed: every endpoint works on the plan
    sent in the request body and keeps no state between requests.
    """
    with TestClient(app) as client:
        yield client
