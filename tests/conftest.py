import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from src.core.jmrl_client import JMRLClient
from src.core.models import JMRLBib, JMRLResult
from src.web.main import app
from src.web.dependencies import get_jmrl_client


# --- Record Fixtures ---

def make_var_field(tag, *subfields):
    """Build an upstream varFields entry from (code, content) pairs."""
    return {
        "marcTag": tag,
        "subfields": [{"tag": code, "content": content} for code, content in subfields],
    }


def make_bib_data(**overrides):
    """Upstream JSON for a typical JMRL bib."""
    data = {
        "id": "1234567",
        "publishYear": 1851,
        "lang": {"code": "eng", "name": "English", "value": "English"},
        "materialType": {"code": "a", "value": "BOOK"},
        "locations": [{"code": "cent", "name": "Central Library"}],
        "available": True,
        "varFields": [
            make_var_field("245", ("a", "Moby Dick :"), ("b", "or, The whale /"), ("c", "Herman Melville.")),
            make_var_field("020", ("a", "9780142437247")),
            make_var_field("092", ("a", "FIC"), ("b", "MELVILLE.")),
            make_var_field("100", ("a", "Melville, Herman,"), ("d", "1819-1891.")),
            make_var_field("650", ("a", "Whaling"), ("v", "Fiction.")),
            make_var_field("650", ("a", "Sea stories.")),
            make_var_field("520", ("a", "A sailor's account of Captain Ahab's hunt.")),
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def bib_data():
    return make_bib_data()


@pytest.fixture
def bib(bib_data):
    return JMRLBib.model_validate(bib_data)


@pytest.fixture
def make_bib():
    """Factory for bibs with some upstream keys replaced."""
    def _make(**overrides):
        return JMRLBib.model_validate(make_bib_data(**overrides))
    return _make


@pytest.fixture
def var_field():
    return make_var_field


@pytest.fixture
def search_result(bib_data):
    """A one-hit JMRL search page."""
    return JMRLResult.model_validate({
        "count": 1,
        "total": 1,
        "start": 0,
        "entries": [{"relevance": 0.9, "bib": bib_data}],
    })


# --- App Fixtures ---

@pytest.fixture(name="client")
def client_fixture():
    """Create a TestClient with a mocked JMRL client."""
    mock_jmrl = MagicMock(spec=JMRLClient)

    app.dependency_overrides[get_jmrl_client] = lambda: mock_jmrl

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_jmrl_client(client):
    """Access to the mocked JMRL client."""
    return app.dependency_overrides[get_jmrl_client]()
