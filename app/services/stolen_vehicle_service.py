# app/services/stolen_vehicle_service.py
"""
Stolen-vehicle aggregation and the full VIN verification flow.

The aggregator walks an ordered list of lookup providers and merges their
partial results into one StolenVehicleReport. The first positive stolen hit
ends the walk; provider errors are kept as soft fields.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.stolen_vehicle import VinVerification
from app.services.vin_lookup_providers import (
    LookupProvider, LocalRegistryProvider, VehicleDecodeProvider, TheftCheckProvider,
)
from app.services.vin_validator import clean_vin, validate_vin, decode_make, decode_model_year
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StolenVehicleReport:
    vin: str
    is_stolen: bool = False
    source: Optional[str] = None
    report_id: Optional[str] = None
    reported_date: Optional[str] = None
    reporting_agency: Optional[str] = None
    vehicle_info: Optional[dict] = None
    sources_checked: list = field(default_factory=list)
    errors: dict = field(default_factory=dict)
    last_checked: str = ""


class StolenVehicleAggregator:
    def __init__(self, providers: list):
        self.providers: list[LookupProvider] = providers

    def check(self, vin: str) -> StolenVehicleReport:
        report = StolenVehicleReport(vin=vin)
        for provider in self.providers:
            result = provider.lookup(vin)
            report.sources_checked.append(provider.name)

            if result.vehicle_info is not None:
                report.vehicle_info = result.vehicle_info
            if result.error:
                report.errors[provider.name] = result.error
            if result.is_stolen is not None and not report.is_stolen:
                report.source = result.source

            if result.is_stolen:
                report.is_stolen = True
                report.report_id = result.report_id
                report.reported_date = result.reported_date
                report.reporting_agency = result.reporting_agency
                logger.warning(f"[VIN] {vin} reported stolen by {result.source} - remaining lookups skipped")
                break

        report.last_checked = datetime.utcnow().isoformat()
        return report


def default_providers(db: Session) -> list:
    return [LocalRegistryProvider(db), VehicleDecodeProvider(), TheftCheckProvider()]


def build_alerts(is_valid: bool, is_stolen: bool) -> list:
    alerts = []
    if is_stolen:
        alerts.append({"level": "critical", "message": "Vehicle reported stolen", "action": "block_listing"})
    if not is_valid:
        alerts.append({"level": "warning", "message": "VIN format validation failed", "action": "manual_review"})
    return alerts


def verify_vin(db: Session, raw_vin: str, aggregator: Optional[StolenVehicleAggregator] = None) -> dict:
    """
    Validate + aggregate + persist. Returns the merged verification report
    (snake_case keys; the router converts to the wire schema).
    """
    vin = clean_vin(raw_vin)
    validation = validate_vin(vin)
    aggregator = aggregator or StolenVehicleAggregator(default_providers(db))
    stolen = aggregator.check(vin)

    vehicle_info = stolen.vehicle_info or {}
    if "error" not in vehicle_info:
        vehicle_info.setdefault("make", decode_make(vin))
        year = decode_model_year(vin)
        vehicle_info.setdefault("year", str(year) if year else None)

    report = {
        "vin": vin,
        "is_valid": validation.is_valid,
        "is_stolen": stolen.is_stolen,
        "vehicle_info": vehicle_info,
        "stolen_check": {
            "checked": True,
            "sources": stolen.sources_checked,
            "is_stolen": stolen.is_stolen,
            "source": stolen.source,
            "report_id": stolen.report_id,
            "reported_date": stolen.reported_date,
            "last_checked": stolen.last_checked,
            "errors": stolen.errors,
        },
        "validation": {"errors": validation.errors, "warnings": validation.warnings},
        "alerts": build_alerts(validation.is_valid, stolen.is_stolen),
    }

    store_verification_result(db, vin, report)
    return report


def store_verification_result(db: Session, vin: str, report: dict):
    """Upsert keyed by VIN. Failure is logged, never raised."""
    try:
        row = db.query(VinVerification).filter(VinVerification.vin == vin).first()
        if not row:
            row = VinVerification(vin=vin)
            db.add(row)
        row.verification_data = report
        row.is_stolen = report["is_stolen"]
        row.is_valid = report["is_valid"]
        row.last_checked = datetime.utcnow()
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to store verification result for {vin}: {e}", exc_info=True)


