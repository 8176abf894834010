"""Shared pytest configuration and fixtures for caridentmedix tests."""

import json
import tempfile
from pathlib import Path
from typing import List
from unittest.mock import MagicMock, Mock

import pytest

from caridentmedix.matching import Clinic, Dentist, FuzzyMatcher
from caridentmedix.sql_interface import SQLInterface
from caridentmedix.sql_interface.query_manager import QueryManager


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_clinics() -> List[Clinic]:
    """Three clinics in Berlin/Potsdam and one without coordinates."""
    return [
        Clinic(
            id=1,
            name="Bright Smile Clinic",
            email="info@brightsmile.de",
            phone_number="+49301234567",
            address="Friedrichstrasse 10, Berlin",
            description="Family dentistry and orthodontics",
            website="https://brightsmile.de",
            latitude=52.5200,
            longitude=13.4050,
            dentists=(
                Dentist(id=11, clinic_id=1, name="Anna Weber", email="anna@brightsmile.de", phone_number="+49301234568"),
                Dentist(id=12, clinic_id=1, name="Jonas Klein", email="jonas@brightsmile.de", phone_number="+49301234569"),
            ),
        ),
        Clinic(
            id=2,
            name="Downtown Dental",
            email="contact@downtown-dental.de",
            phone_number="+49307654321",
            address="Alexanderplatz 1, Berlin",
            description="Implants and oral surgery",
            website="https://downtown-dental.de",
            latitude=52.5219,
            longitude=13.4132,
            dentists=(
                Dentist(id=21, clinic_id=2, name="Mehmet Yilmaz", email="mehmet@downtown-dental.de", phone_number="+49307654322"),
            ),
        ),
        Clinic(
            id=3,
            name="Potsdam Zahnarzt",
            email="praxis@potsdam-zahn.de",
            phone_number="+49331555000",
            address="Brandenburger Strasse 5, Potsdam",
            description=None,
            website=None,
            latitude=52.3906,
            longitude=13.0645,
            dentists=(),
        ),
        Clinic(
            id=4,
            name="Mobile Dentist",
            email=None,
            phone_number=None,
            address="",
            dentists=(Dentist(id=41, clinic_id=4, name="Sofia Rossi"),),
        ),
    ]


@pytest.fixture
def sample_clinics_json(temp_dir):
    """JSON export of two clinics using the web API's camelCase keys."""
    payload = [
        {
            "id": 1,
            "name": "Bright Smile Clinic",
            "email": "info@brightsmile.de",
            "phoneNumber": "+49301234567",
            "address": "Friedrichstrasse 10, Berlin",
            "latitude": 52.52,
            "longitude": 13.405,
            "dentists": [
                {"id": 11, "clinicId": 1, "name": "Anna Weber", "email": "anna@brightsmile.de"},
            ],
        },
        {
            "id": 2,
            "name": "Downtown Dental",
            "phoneNumber": "+49307654321",
            "address": "Alexanderplatz 1, Berlin",
            "latitude": 52.5219,
            "longitude": 13.4132,
            "dentists": [],
        },
    ]
    path = temp_dir / "clinics.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def clinic_rows():
    """Rows as SQLInterface.fetch_results returns them for get_all_clinics."""
    return [
        {
            "Id": 1, "Name": "Bright Smile Clinic", "Email": "info@brightsmile.de",
            "PhoneNumber": "+49301234567", "Address": "Friedrichstrasse 10, Berlin",
            "Description": "Family dentistry", "Website": "https://brightsmile.de",
            "Latitude": 52.52, "Longitude": 13.405, "ImagePath": None,
        },
        {
            "Id": 2, "Name": "Downtown Dental", "Email": None,
            "PhoneNumber": "+49307654321", "Address": "Alexanderplatz 1, Berlin",
            "Description": None, "Website": None,
            "Latitude": 52.5219, "Longitude": 13.4132, "ImagePath": "images/2.png",
        },
    ]


@pytest.fixture
def dentist_rows():
    """Rows as SQLInterface.fetch_results returns them for get_all_dentists."""
    return [
        {"Id": 11, "ClinicId": 1, "Name": "Jonas Klein", "Email": "jonas@brightsmile.de", "PhoneNumber": None},
        {"Id": 12, "ClinicId": 1, "Name": "Anna Weber", "Email": "anna@brightsmile.de", "PhoneNumber": None},
    ]


@pytest.fixture
def mock_sql_interface():
    """Mock SQLInterface for testing without database connection."""
    mock = Mock(spec=SQLInterface)
    mock.connect.return_value = True
    mock.connection = MagicMock()
    mock.cursor = MagicMock()
    mock.execute_query.return_value = True
    mock.fetch_results.return_value = []
    mock.close_connection.return_value = None
    return mock


@pytest.fixture
def mock_query_manager():
    """Mock QueryManager for testing without SQL templates."""
    mock = Mock(spec=QueryManager)
    mock.get_all_clinics_query.return_value = ("SELECT * FROM dbo.Clinics", ())
    mock.get_all_dentists_query.return_value = ("SELECT * FROM dbo.Dentists", ())
    mock.get_clinic_by_id_query.side_effect = lambda clinic_id: (
        "SELECT * FROM dbo.Clinics WHERE Id = ?", (clinic_id,),
    )
    mock.get_dentists_by_clinic_id_query.side_effect = lambda clinic_id: (
        "SELECT * FROM dbo.Dentists WHERE ClinicId = ?", (clinic_id,),
    )
    return mock


@pytest.fixture
def fuzzy_matcher():
    """Create a FuzzyMatcher instance with the default threshold."""
    return FuzzyMatcher()


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables so no .env file is needed."""
    test_env = {
        "SQL_SERVER": "test_server",
        "DATABASE": "test_db",
        "USERNAME_SQL": "test_user",
        "PASSWORD": "test_pass",
        "SQL_DRIVER": "{ODBC Driver 18 for SQL Server}",
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("CARIDENT_LOGFILE", raising=False)

    yield


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "database: mark test as requiring database")
