"""
Tests for the Nominatim geocoding client.

The HTTP session is mocked; no network access.
"""

from unittest.mock import MagicMock

import pytest
import requests

from antipode_globe.acquisition.nominatim_client import GeocodeResult, NominatimClient
from antipode_globe.common.config import Config
from antipode_globe.common.exceptions import GeocodingError, NoResultsError


LONDON_RECORD = {
    "lat": "51.5074456",
    "lon": "-0.1277653",
    "display_name": "London, Greater London, England, United Kingdom",
}


def make_session(payload=None, status_error=None, get_error=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    if get_error is not None:
        session.get.side_effect = get_error
    return session


# ============== Fixtures ==============

@pytest.fixture
def session():
    return make_session([LONDON_RECORD])


@pytest.fixture
def client(session):
    return NominatimClient(base_url="https://geo.test/search", user_agent="tests", timeout=3.0, session=session)


# ============== Search Tests ==============

class TestSearch:
    """Test request building and response parsing."""

    def test_parses_results(self, client):
        results = client.search("London")
        assert results == [GeocodeResult(
            lat=51.5074456,
            lng=-0.1277653,
            display_name=LONDON_RECORD["display_name"]
        )]

    def test_request_parameters(self, client, session):
        client.search("  London ")
        session.get.assert_called_once_with(
            "https://geo.test/search",
            params={"format": "json", "q": "London"},
            timeout=3.0
        )

    def test_user_agent_header(self, client, session):
        assert session.headers["User-Agent"] == "tests"

    def test_from_config(self, session):
        config = Config(geocoder_url="https://other.test/search", user_agent="ua", request_timeout_s=7.0)
        client = NominatimClient.from_config(config, session=session)
        assert client.base_url == "https://other.test/search"
        assert client.timeout == 7.0
        assert session.headers["User-Agent"] == "ua"

    def test_empty_list(self):
        client = NominatimClient(session=make_session([]))
        assert client.search("Atlantis") == []

    @pytest.mark.parametrize("place", ["", "   "])
    def test_blank_place_rejected(self, client, session, place):
        with pytest.raises(ValueError):
            client.search(place)
        session.get.assert_not_called()

    def test_http_error(self):
        client = NominatimClient(session=make_session(status_error=requests.HTTPError("503 Server Error")))
        with pytest.raises(GeocodingError):
            client.search("London")

    def test_connection_error(self):
        client = NominatimClient(session=make_session(get_error=requests.ConnectionError("down")))
        with pytest.raises(GeocodingError):
            client.search("London")

    def test_invalid_json(self):
        session = make_session()
        session.get.return_value.json.side_effect = ValueError("Expecting value")
        with pytest.raises(GeocodingError):
            NominatimClient(session=session).search("London")

    def test_non_list_payload(self):
        client = NominatimClient(session=make_session({"error": "nope"}))
        with pytest.raises(GeocodingError):
            client.search("London")

    def test_malformed_record(self):
        client = NominatimClient(session=make_session([{"display_name": "no coords"}]))
        with pytest.raises(GeocodingError):
            client.search("London")


# ============== Top Result Tests ==============

class TestGeocodeTop:
    """Test best-match selection."""

    def test_returns_first(self):
        second = dict(LONDON_RECORD, lat="42.98", lon="-81.24", display_name="London, Ontario")
        client = NominatimClient(session=make_session([LONDON_RECORD, second]))
        assert client.geocode_top("London").display_name == LONDON_RECORD["display_name"]

    def test_no_results(self):
        client = NominatimClient(session=make_session([]))
        with pytest.raises(NoResultsError) as exc_info:
            client.geocode_top("Atlantis")
        assert isinstance(exc_info.value, GeocodingError)
        assert exc_info.value.code == "NO_RESULTS"
        assert "Atlantis" in str(exc_info.value)

    def test_to_coordinate(self, client):
        coord = client.geocode_top("London").to_coordinate()
        assert coord.lat == 51.5074456
        assert coord.lng == -0.1277653
        assert coord.label == LONDON_RECORD["display_name"]
