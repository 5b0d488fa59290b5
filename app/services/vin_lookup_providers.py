# app/services/vin_lookup_providers.py
"""
Lookup providers consulted by the stolen-vehicle aggregator, in order:

  1. LocalRegistryProvider  - stolen_vehicles table (exact VIN match)
  2. VehicleDecodeProvider  - NHTSA vPIC DecodeVin (make / model / year ...)
  3. TheftCheckProvider     - NICB VINCheck when NICB_API_KEY is set,
                              otherwise the simulated test list (never in production)

Every provider returns a PartialResult and never raises: failures become
an `error` field so the aggregator can keep going with partial data.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import requests
from sqlalchemy.orm import Session

from app.config import settings
from app.models.stolen_vehicle import StolenVehicle
from app.utils.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "SafeTrade-Platform/1.0"

# Simulation mode only - VINs treated as stolen when no NICB credential is configured
SIMULATED_STOLEN_VINS = frozenset({
    "1HD1KBC10EB123457",   # Harley-Davidson
    "JH2RC5006JM200124",   # Honda
    "JYARN23E1JA123457",   # Yamaha
})

_simulation_warned = False

# vPIC "Variable" name → vehicle_info key
NHTSA_FIELDS = {
    "Make": "make",
    "Model": "model",
    "Model Year": "year",
    "Vehicle Type": "vehicle_type",
    "Engine Number of Cylinders": "engine_cylinders",
    "Fuel Type - Primary": "fuel_type",
    "Body Class": "body_class",
    "Plant Country": "plant_country",
}
NHTSA_REQUIRED = ("make", "model", "year", "vehicle_type")


@dataclass
class PartialResult:
    """What one provider contributes. is_stolen=None means 'no opinion'."""
    provider: str
    is_stolen: Optional[bool] = None
    source: Optional[str] = None          # local_db | nicb | simulated
    report_id: Optional[str] = None
    reported_date: Optional[str] = None
    reporting_agency: Optional[str] = None
    vehicle_info: Optional[dict] = None
    message: Optional[str] = None
    error: Optional[str] = None


class LookupProvider:
    name = "provider"

    def lookup(self, vin: str) -> PartialResult:
        raise NotImplementedError


class LocalRegistryProvider(LookupProvider):
    name = "local_db"

    def __init__(self, db: Session):
        self.db = db

    def lookup(self, vin: str) -> PartialResult:
        try:
            record = self.db.query(StolenVehicle).filter(StolenVehicle.vin == vin).first()
        except Exception as e:
            logger.error(f"Local stolen DB check failed for {vin}: {e}", exc_info=True)
            return PartialResult(provider=self.name, error="Local stolen vehicle check failed")

        if not record:
            return PartialResult(provider=self.name, is_stolen=False, source="local_db")

        logger.warning(f"[VIN] {vin} found in local stolen registry (report {record.report_id})")
        return PartialResult(
            provider=self.name,
            is_stolen=True,
            source="local_db",
            report_id=record.report_id,
            reported_date=record.reported_date.isoformat() if record.reported_date else None,
            reporting_agency=record.reporting_agency,
        )


class VehicleDecodeProvider(LookupProvider):
    """Descriptive data only - never decides stolen status."""
    name = "nhtsa"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.NHTSA_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS

    def lookup(self, vin: str) -> PartialResult:
        try:
            resp = requests.get(
                f"{self.base_url}/DecodeVin/{vin}",
                params={"format": "json"},
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            if resp.status_code != 200:
                raise RuntimeError(f"NHTSA API error: {resp.status_code}")
            results = resp.json().get("Results")
        except Exception as e:
            logger.error(f"NHTSA decode failed for {vin}: {e}")
            return PartialResult(provider=self.name, vehicle_info={"error": "Failed to fetch vehicle data"},
                                 error=str(e))

        if not results:
            return PartialResult(provider=self.name, vehicle_info={"error": "No vehicle data found"})

        info = {}
        for row in results:
            key = NHTSA_FIELDS.get(row.get("Variable"))
            if key:
                info[key] = row.get("Value")
        for key in NHTSA_REQUIRED:
            info[key] = info.get(key) or "Unknown"
        info["last_updated"] = datetime.utcnow().isoformat()
        return PartialResult(provider=self.name, vehicle_info=info)


class TheftCheckProvider(LookupProvider):
    name = "nicb"

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 timeout: Optional[float] = None, allow_simulation: Optional[bool] = None):
        self.api_key = api_key if api_key is not None else settings.NICB_API_KEY
        self.api_url = api_url or settings.NICB_API_URL
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS
        self.allow_simulation = (not settings.IS_PRODUCTION) if allow_simulation is None else allow_simulation

    def lookup(self, vin: str) -> PartialResult:
        if not self.api_key:
            return self._simulated(vin)
        try:
            resp = requests.post(
                self.api_url,
                json={"vin": vin},
                headers={"Authorization": f"Bearer {self.api_key}", "User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except Exception as e:
            logger.error(f"NICB check failed for {vin}: {e}")
            return PartialResult(provider=self.name, error="Could not complete stolen vehicle check")

        return PartialResult(
            provider=self.name,
            is_stolen=bool(data.get("stolen", False)),
            source="nicb",
            report_id=data.get("reportId"),
            reported_date=data.get("reportedDate"),
        )

    def _simulated(self, vin: str) -> PartialResult:
        if not self.allow_simulation:
            logger.error("NICB_API_KEY is not configured and simulated theft checks are disabled in production")
            return PartialResult(provider=self.name, error="Stolen vehicle check is not configured")

        global _simulation_warned
        if not _simulation_warned:
            _simulation_warned = True
            logger.warning(f"NICB_API_KEY is not set: theft checks answered from the simulated list "
                           f"(ENVIRONMENT={settings.ENVIRONMENT})")

        stolen = vin in SIMULATED_STOLEN_VINS
        return PartialResult(
            provider=self.name,
            is_stolen=stolen,
            source="simulated",
            message="Vehicle in test stolen database" if stolen else "Not in stolen database",
        )
