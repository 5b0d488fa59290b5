# app/models/stolen_vehicle.py
"""
Local stolen-vehicle registry and VIN verification history.
stolen_vehicles is the first source the stolen-vehicle aggregator consults.
vin_verification_history keeps the latest merged report per VIN (upsert, last write wins).
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from app.database import Base


class StolenVehicle(Base):
    __tablename__ = "stolen_vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vin = Column(String(17), unique=True, nullable=False, index=True)
    report_id = Column(String(100))
    reported_date = Column(DateTime)
    reporting_agency = Column(String(200))
    status = Column(String(50), default="active")

    def __repr__(self):
        return f"<StolenVehicle {self.vin} report={self.report_id}>"


class VinVerification(Base):
    __tablename__ = "vin_verification_history"

    vin = Column(String(17), primary_key=True)
    verification_data = Column(JSON, nullable=False)
    is_stolen = Column(Boolean, default=False, nullable=False)
    is_valid = Column(Boolean, default=False, nullable=False)
    last_checked = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<VinVerification {self.vin} stolen={self.is_stolen} valid={self.is_valid}>"
