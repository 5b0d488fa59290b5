# app/schemas/vin.py
from pydantic import Field
from typing import Optional
from app.schemas.common import CamelModel


class VinCheckRequest(CamelModel):
    vin: str = Field(..., min_length=1, max_length=64)


class VehicleInfo(CamelModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    vehicle_type: Optional[str] = None
    engine_cylinders: Optional[str] = None
    fuel_type: Optional[str] = None
    body_class: Optional[str] = None
    plant_country: Optional[str] = None
    last_updated: Optional[str] = None
    error: Optional[str] = None


class StolenCheckOut(CamelModel):
    checked: bool
    sources: list[str]
    is_stolen: bool
    source: Optional[str] = None       # local_db | nicb | simulated
    report_id: Optional[str] = None
    reported_date: Optional[str] = None
    last_checked: str
    errors: dict[str, str] = {}


class ValidationOut(CamelModel):
    errors: list[str]
    warnings: list[str]


class VinAlert(CamelModel):
    level: str
    message: str
    action: str


class VinVerificationOut(CamelModel):
    vin: str
    is_valid: bool
    is_stolen: bool
    vehicle_info: VehicleInfo
    stolen_check: StolenCheckOut
    validation: ValidationOut
    alerts: list[VinAlert]
