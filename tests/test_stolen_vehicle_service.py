# tests/test_stolen_vehicle_service.py
"""Unit tests for the lookup providers, the aggregator and the VIN verification flow."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
import requests
from datetime import datetime
from unittest.mock import MagicMock, patch

from app.models.stolen_vehicle import StolenVehicle, VinVerification
from app.services.stolen_vehicle_service import StolenVehicleAggregator, verify_vin, build_alerts
from app.services.vin_lookup_providers import (
    LookupProvider, PartialResult, LocalRegistryProvider, VehicleDecodeProvider, TheftCheckProvider,
)

STOLEN_VIN = "1HD1KBC10EB123457"
CLEAN_VIN = "1M8GDM9AXKP042788"


class StubProvider(LookupProvider):
    def __init__(self, name, result):
        self.name = name
        self.result = result
        self.calls = 0

    def lookup(self, vin):
        self.calls += 1
        return self.result


def ok_response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


class TestAggregator:
    def test_first_stolen_hit_ends_the_walk(self):
        local = StubProvider("local_db", PartialResult("local_db", is_stolen=True, source="local_db", report_id="R-1"))
        remote = StubProvider("nicb", PartialResult("nicb", is_stolen=False, source="nicb"))

        report = StolenVehicleAggregator([local, remote]).check(STOLEN_VIN)

        assert report.is_stolen
        assert report.source == "local_db"
        assert report.report_id == "R-1"
        assert report.sources_checked == ["local_db"]
        assert remote.calls == 0

    def test_provider_errors_do_not_stop_later_providers(self):
        decode = StubProvider("nhtsa", PartialResult("nhtsa", vehicle_info={"error": "Failed to fetch vehicle data"},
                                                     error="timeout"))
        theft = StubProvider("nicb", PartialResult("nicb", is_stolen=False, source="simulated"))

        report = StolenVehicleAggregator([decode, theft]).check(CLEAN_VIN)

        assert not report.is_stolen
        assert report.source == "simulated"
        assert report.errors == {"nhtsa": "timeout"}
        assert report.vehicle_info == {"error": "Failed to fetch vehicle data"}
        assert theft.calls == 1
        assert report.last_checked


class TestProviders:
    def test_local_registry_hit(self, db_session):
        db_session.add(StolenVehicle(vin=STOLEN_VIN, report_id="LAPD-1", reporting_agency="LAPD",
                                     reported_date=datetime(2024, 1, 13)))
        db_session.commit()

        result = LocalRegistryProvider(db_session).lookup(STOLEN_VIN)
        assert result.is_stolen is True
        assert result.source == "local_db"
        assert result.reporting_agency == "LAPD"
        assert result.reported_date.startswith("2024-01-13")

    def test_local_registry_miss(self, db_session):
        result = LocalRegistryProvider(db_session).lookup(CLEAN_VIN)
        assert result.is_stolen is False

    def test_local_registry_query_failure_is_soft(self):
        db = MagicMock()
        db.query.side_effect = RuntimeError("connection lost")
        result = LocalRegistryProvider(db).lookup(CLEAN_VIN)
        assert result.is_stolen is None
        assert result.error == "Local stolen vehicle check failed"

    def test_decode_maps_fields_and_fills_unknowns(self):
        payload = {"Results": [
            {"Variable": "Make", "Value": "HARLEY DAVIDSON"},
            {"Variable": "Model Year", "Value": "2019"},
            {"Variable": "Model", "Value": None},
            {"Variable": "Plant Country", "Value": "UNITED STATES (USA)"},
        ]}
        with patch("app.services.vin_lookup_providers.requests.get", return_value=ok_response(payload)) as get:
            result = VehicleDecodeProvider(base_url="https://vpic.test/api/vehicles").lookup(CLEAN_VIN)

        assert get.call_args[0][0] == f"https://vpic.test/api/vehicles/DecodeVin/{CLEAN_VIN}"
        info = result.vehicle_info
        assert info["make"] == "HARLEY DAVIDSON"
        assert info["year"] == "2019"
        assert info["model"] == "Unknown"
        assert info["vehicle_type"] == "Unknown"
        assert info["plant_country"] == "UNITED STATES (USA)"
        assert result.is_stolen is None

    def test_decode_timeout_is_soft(self):
        with patch("app.services.vin_lookup_providers.requests.get", side_effect=requests.exceptions.Timeout()):
            result = VehicleDecodeProvider().lookup(CLEAN_VIN)
        assert result.vehicle_info == {"error": "Failed to fetch vehicle data"}

    def test_decode_empty_results(self):
        with patch("app.services.vin_lookup_providers.requests.get", return_value=ok_response({"Results": []})):
            result = VehicleDecodeProvider().lookup(CLEAN_VIN)
        assert result.vehicle_info == {"error": "No vehicle data found"}

    def test_simulated_theft_check(self):
        provider = TheftCheckProvider(api_key="", allow_simulation=True)
        assert provider.lookup(STOLEN_VIN).is_stolen is True
        assert provider.lookup(CLEAN_VIN).is_stolen is False
        assert provider.lookup(CLEAN_VIN).source == "simulated"

    def test_first_simulated_answer_is_logged_once(self):
        provider = TheftCheckProvider(api_key="", allow_simulation=True)
        with patch("app.services.vin_lookup_providers._simulation_warned", False), \
                patch("app.services.vin_lookup_providers.logger") as log:
            provider.lookup(CLEAN_VIN)
            provider.lookup(STOLEN_VIN)
        log.warning.assert_called_once()
        assert "simulated list" in log.warning.call_args[0][0]

    def test_simulation_refused_in_production(self):
        result = TheftCheckProvider(api_key="", allow_simulation=False).lookup(STOLEN_VIN)
        assert result.is_stolen is None
        assert result.error == "Stolen vehicle check is not configured"

    def test_live_theft_check(self):
        resp = ok_response({"stolen": True, "reportId": "NICB-9", "reportedDate": "2024-02-01"})
        with patch("app.services.vin_lookup_providers.requests.post", return_value=resp) as post:
            result = TheftCheckProvider(api_key="secret", api_url="https://nicb.test/check").lookup(CLEAN_VIN)

        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"
        assert result.is_stolen is True
        assert result.source == "nicb"
        assert result.report_id == "NICB-9"

    def test_live_theft_check_failure_is_soft(self):
        with patch("app.services.vin_lookup_providers.requests.post",
                   side_effect=requests.exceptions.ConnectionError()):
            result = TheftCheckProvider(api_key="secret").lookup(CLEAN_VIN)
        assert result.is_stolen is None
        assert result.error == "Could not complete stolen vehicle check"


class TestVerifyVin:
    def test_stolen_report_is_persisted_with_alert(self, db_session):
        aggregator = StolenVehicleAggregator([
            StubProvider("local_db", PartialResult("local_db", is_stolen=True, source="local_db", report_id="R-7")),
        ])

        report = verify_vin(db_session, STOLEN_VIN.lower(), aggregator=aggregator)

        assert report["vin"] == STOLEN_VIN
        assert report["is_stolen"]
        assert report["stolen_check"]["source"] == "local_db"
        assert {"level": "critical", "message": "Vehicle reported stolen", "action": "block_listing"} in report["alerts"]
        assert report["vehicle_info"]["make"] == "Harley-Davidson"

        row = db_session.query(VinVerification).filter(VinVerification.vin == STOLEN_VIN).first()
        assert row.is_stolen is True
        assert row.verification_data["stolen_check"]["report_id"] == "R-7"

    def test_reverification_overwrites_history(self, db_session):
        stolen = StolenVehicleAggregator([StubProvider("nicb", PartialResult("nicb", is_stolen=True, source="nicb"))])
        clean = StolenVehicleAggregator([StubProvider("nicb", PartialResult("nicb", is_stolen=False, source="nicb"))])

        verify_vin(db_session, CLEAN_VIN, aggregator=stolen)
        verify_vin(db_session, CLEAN_VIN, aggregator=clean)

        rows = db_session.query(VinVerification).all()
        assert len(rows) == 1
        assert rows[0].is_stolen is False

    def test_invalid_characters_flag_manual_review(self, db_session):
        aggregator = StolenVehicleAggregator([StubProvider("nicb", PartialResult("nicb", is_stolen=False))])
        report = verify_vin(db_session, "1HD1KBO10EB12345Q", aggregator=aggregator)

        assert report["is_valid"] is False
        assert report["alerts"] == [{"level": "warning", "message": "VIN format validation failed",
                                     "action": "manual_review"}]

    def test_history_write_failure_does_not_fail_verification(self):
        db = MagicMock()
        db.commit.side_effect = RuntimeError("disk full")
        aggregator = StolenVehicleAggregator([StubProvider("nicb", PartialResult("nicb", is_stolen=False))])

        report = verify_vin(db, CLEAN_VIN, aggregator=aggregator)

        assert report["is_stolen"] is False
        db.rollback.assert_called_once()


@pytest.mark.parametrize("is_valid,is_stolen,actions", [
    (True, False, []),
    (True, True, ["block_listing"]),
    (False, True, ["block_listing", "manual_review"]),
])
def test_build_alerts(is_valid, is_stolen, actions):
    assert [a["action"] for a in build_alerts(is_valid, is_stolen)] == actions
