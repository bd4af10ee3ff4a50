from unittest.mock import MagicMock, patch

import pytest
import requests

from enrichment_client import EnrichmentError, ReceptionClient


def _mock_resp(payload=None, status_code: int = 200, text: str = "") -> MagicMock:
    """Return a mock requests.Response."""
    mock = MagicMock()
    mock.status_code = status_code
    mock.ok = status_code < 400
    mock.content = b"" if payload is None and not text else b"x"
    mock.text = text
    if isinstance(payload, Exception):
        mock.json.side_effect = payload
    else:
        mock.json.return_value = payload
    return mock


def _session(*responses) -> MagicMock:
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = [_mock_resp({"status": "ok"}), *responses]
    return session


def test_fetch_receptions_returns_totals() -> None:
    session = _session(_mock_resp({"reception_total": 1500, "reception_accepted": 1320.5}))

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com/", api_key="secret") as client:
            result = client.fetch_receptions(week=24, year=2023, orchard_code=1234)

    assert result == {"reception_total": 1500.0, "reception_accepted": 1320.5}
    _, kwargs = session.get.call_args
    assert kwargs["params"] == {"semana": 24, "anio": 2023, "idHuerto": 1234}
    assert session.get.call_args[0][0] == "https://receptions.example.com/receptions"
    assert session.headers["Authorization"] == "Bearer secret"


def test_fetch_receptions_accepts_legacy_column_names() -> None:
    session = _session(_mock_resp([{"ReceptionTotal": 10, "ReceptionAceptada": 8}]))

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com") as client:
            result = client.fetch_receptions(1, 2023, 7)

    assert result == {"reception_total": 10.0, "reception_accepted": 8.0}


def test_fetch_receptions_no_aggregate_returns_zeros() -> None:
    session = _session(
        _mock_resp({"reception_total": None, "reception_accepted": None}),
        _mock_resp(None),
    )

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com") as client:
            nulls = client.fetch_receptions(1, 2023, 7)
            empty = client.fetch_receptions(2, 2023, 7)

    assert nulls == {"reception_total": 0.0, "reception_accepted": 0.0}
    assert empty == {"reception_total": 0.0, "reception_accepted": 0.0}


def test_fetch_receptions_surfaces_server_error_message() -> None:
    session = _session(_mock_resp({"error": "Date record already exists"}, status_code=409))

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com") as client:
            with pytest.raises(EnrichmentError, match="Date record already exists"):
                client.fetch_receptions(1, 2023, 7)


def test_fetch_receptions_falls_back_to_response_text() -> None:
    session = _session(_mock_resp(ValueError("no json"), status_code=500, text="upstream down"))

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com") as client:
            with pytest.raises(EnrichmentError, match="upstream down"):
                client.fetch_receptions(1, 2023, 7)


def test_fetch_receptions_wraps_transport_errors() -> None:
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = [_mock_resp({"status": "ok"}), requests.ConnectionError("reset")]

    with patch("enrichment_client.requests.Session", return_value=session):
        with ReceptionClient("https://receptions.example.com") as client:
            with pytest.raises(EnrichmentError, match="reset"):
                client.fetch_receptions(1, 2023, 7)


def test_open_raises_and_closes_session_when_unreachable() -> None:
    session = MagicMock()
    session.headers = {}
    session.get.side_effect = requests.ConnectionError("refused")

    with patch("enrichment_client.requests.Session", return_value=session):
        with pytest.raises(EnrichmentError, match="unreachable"):
            with ReceptionClient("https://receptions.example.com"):
                pass

    session.close.assert_called_once()


def test_session_closed_on_exit_even_after_error() -> None:
    session = _session()

    with patch("enrichment_client.requests.Session", return_value=session):
        with pytest.raises(KeyError):
            with ReceptionClient("https://receptions.example.com"):
                raise KeyError("boom")

    session.close.assert_called_once()


def test_fetch_receptions_requires_open_client() -> None:
    with pytest.raises(EnrichmentError, match="not open"):
        ReceptionClient("https://receptions.example.com").fetch_receptions(1, 2023, 7)
