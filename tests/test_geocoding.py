"""
Tests for reverse geocoding and place naming.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from photo_clusters.error_handling import NamingError
from photo_clusters.geocoding import (
    GeocodeResult,
    NominatimGeocoder,
    compose_place_name,
    name_place_clusters,
)
from photo_clusters.models import PlaceCluster


def place(cluster_id, lat, lon):
    return PlaceCluster(id=cluster_id, start_ts=0, end_ts=0, cover_asset_id="a",
                        asset_ids=["a"], lat=lat, lon=lon)


def response_with(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestComposePlaceName:
    def test_city_and_country(self):
        assert compose_place_name(GeocodeResult("Paris", "France")) == "Paris, France"

    def test_only_one_part(self):
        assert compose_place_name(GeocodeResult(city_name="Paris")) == "Paris"
        assert compose_place_name(GeocodeResult(country_name="France")) == "France"

    def test_nothing_resolved(self):
        assert compose_place_name(GeocodeResult()) is None
        assert compose_place_name(GeocodeResult("", "")) is None
        assert compose_place_name(None) is None


class TestNamePlaceClusters:
    def test_names_each_cluster(self):
        geocoder = MagicMock()
        geocoder.reverse_geocode.side_effect = [
            GeocodeResult("New York", "United States"),
            GeocodeResult(),
        ]
        clusters = [place("1", 40.7, -74.0), place("2", 0.0, 0.0)]

        name_place_clusters(clusters, geocoder)

        assert clusters[0].name == "New York, United States"
        assert clusters[1].name is None
        geocoder.reverse_geocode.assert_any_call(40.7, -74.0)

    def test_failure_leaves_cluster_unnamed_and_continues(self):
        geocoder = MagicMock()
        geocoder.reverse_geocode.side_effect = [
            NamingError("offline"),
            GeocodeResult("Chicago", "United States"),
        ]
        clusters = [place("1", 40.7, -74.0), place("2", 41.8, -87.6)]

        name_place_clusters(clusters, geocoder)

        assert clusters[0].name is None
        assert clusters[1].name == "Chicago, United States"


class TestNominatimGeocoder:
    def test_parses_city_and_country(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response_with({
            "address": {"city": "Paris", "country": "France", "postcode": "75001"}
        })

        result = NominatimGeocoder(session=session).reverse_geocode(48.8566, 2.3522)

        assert result == GeocodeResult("Paris", "France")
        params = session.get.call_args.kwargs["params"]
        assert params["lat"] == 48.8566
        assert params["lon"] == 2.3522
        assert "User-Agent" in session.headers

    def test_falls_back_to_town(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response_with({"address": {"town": "Hallstatt", "country": "Austria"}})

        result = NominatimGeocoder(session=session).reverse_geocode(47.56, 13.65)

        assert result.city_name == "Hallstatt"

    def test_ocean_has_no_address(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response_with({"error": "Unable to geocode"})

        with pytest.raises(NamingError):
            NominatimGeocoder(session=session).reverse_geocode(0.0, -30.0)

    def test_request_failure_raises_naming_error(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(NamingError):
            NominatimGeocoder(session=session).reverse_geocode(48.8566, 2.3522)

    def test_results_are_cached(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response_with({"address": {"city": "Paris", "country": "France"}})
        geocoder = NominatimGeocoder(session=session)

        geocoder.reverse_geocode(48.85661, 2.35221)
        geocoder.reverse_geocode(48.85659, 2.35219)

        assert session.get.call_count == 1

    def test_requests_are_rate_limited(self):
        session = MagicMock()
        session.headers = {}
        session.get.return_value = response_with({"address": {"country": "France"}})
        geocoder = NominatimGeocoder(session=session)

        with patch("photo_clusters.geocoding.time.sleep") as sleep:
            geocoder.reverse_geocode(48.0, 2.0)
            geocoder.reverse_geocode(43.0, 5.0)

        assert sleep.call_count == 1
        assert 0 < sleep.call_args.args[0] <= NominatimGeocoder.MIN_REQUEST_INTERVAL
