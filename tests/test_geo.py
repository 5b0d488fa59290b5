# tests/test_geo.py
"""Unit tests for distance, nearby search and location masking."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.utils.geo import haversine_km, mask_location
from app.services.safe_zone_service import find_nearby_zones

LAPD = (34.0522, -118.2437)
BEVERLY_HILLS = (34.0736, -118.4004)
SANTA_MONICA = (34.0195, -118.4912)


class TestHaversine:
    def test_identical_points(self):
        assert haversine_km(*LAPD, *LAPD) == 0

    def test_symmetric(self):
        assert haversine_km(*LAPD, *SANTA_MONICA) == pytest.approx(haversine_km(*SANTA_MONICA, *LAPD))

    def test_known_distance(self):
        assert haversine_km(*LAPD, *SANTA_MONICA) == pytest.approx(23.1, abs=0.5)

    def test_antipodal_is_half_circumference(self):
        assert haversine_km(0, 0, 0, 180) == pytest.approx(20015, abs=5)


class TestNearbyZones:
    @pytest.fixture
    def zones(self, make_zone):
        return {
            "lapd": make_zone(name="LAPD Downtown", latitude=LAPD[0], longitude=LAPD[1]),
            "library": make_zone(name="Beverly Hills Public Library", latitude=BEVERLY_HILLS[0],
                                 longitude=BEVERLY_HILLS[1], zone_type="library"),
            "mall": make_zone(name="Santa Monica Place Mall", latitude=SANTA_MONICA[0],
                              longitude=SANTA_MONICA[1], zone_type="mall"),
            "closed": make_zone(name="Closed Station", latitude=LAPD[0], longitude=LAPD[1], status="inactive"),
        }

    def test_sorted_by_distance_within_radius(self, db_session, zones):
        found = find_nearby_zones(db_session, *LAPD, radius_km=25)
        assert [z.name for z in found] == ["LAPD Downtown", "Beverly Hills Public Library", "Santa Monica Place Mall"]
        assert found[0].distance_km == 0
        assert found[1].distance_km < found[2].distance_km

    def test_radius_excludes_far_zones(self, db_session, zones):
        found = find_nearby_zones(db_session, *LAPD, radius_km=10)
        assert [z.name for z in found] == ["LAPD Downtown"]

    def test_limit_and_type_filter(self, db_session, zones):
        assert len(find_nearby_zones(db_session, *LAPD, radius_km=25, limit=2)) == 2
        found = find_nearby_zones(db_session, *LAPD, radius_km=25, zone_type="mall")
        assert [z.name for z in found] == ["Santa Monica Place Mall"]


class TestMaskLocation:
    def test_major_city(self):
        assert mask_location("Newark", "07102")["masked"] == "Newark area"

    def test_known_town_maps_to_county(self):
        loc = mask_location("Weehawken", "07086")
        assert loc["masked"] == "Hudson County"
        assert loc["vicinity"] == "Hudson County, NJ"

    @pytest.mark.parametrize("zip_code,region", [("07401", "North"), ("08540", "Central"), ("08002", "South")])
    def test_region_from_zip(self, zip_code, region):
        assert mask_location("Smallville", zip_code)["masked"] == f"{region} Jersey area"

    def test_unknown_everything(self):
        assert mask_location("Smallville", "90210")["masked"] == "New Jersey area"
        assert mask_location(None)["masked"] == "Location not specified"

    def test_never_echoes_the_zip(self):
        loc = mask_location("Smallville", "08540")
        assert all("08540" not in value for value in loc.values())
