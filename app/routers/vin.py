# app/routers/vin.py
"""VIN verification: structure check, stolen-vehicle lookups, vehicle decode."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import Envelope
from app.schemas.vin import VinCheckRequest, VinVerificationOut
from app.services.stolen_vehicle_service import verify_vin
from app.services.vin_validator import clean_vin
from app.utils.errors import ValidationError
from app.utils.rate_limiter import rate_limit, STANDARD

router = APIRouter()


@router.post("/verify-vin", response_model=Envelope[VinVerificationOut],
             dependencies=[Depends(rate_limit(STANDARD))])
def verify_vehicle(body: VinCheckRequest, db: Session = Depends(get_db)):
    """
    Full verification report for a VIN. Only a wrong length is rejected
    outright; other format problems come back as is_valid=false with alerts.
    """
    vin = clean_vin(body.vin)
    if len(vin) != 17:
        raise ValidationError("VIN must be exactly 17 characters")
    report = verify_vin(db, vin)
    return Envelope[VinVerificationOut](data=VinVerificationOut.model_validate(report),
                                        message="VIN verification completed")
