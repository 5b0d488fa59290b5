# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + external provider reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Reachability of the vehicle decode service and the auth provider
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "environment": settings.ENVIRONMENT,
        "database": "unknown",
        "providers": {},
        "theftCheck": "live" if settings.NICB_API_KEY else ("disabled" if settings.IS_PRODUCTION else "simulated"),
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Ping each external provider
    providers = {
        "nhtsa": f"{settings.NHTSA_BASE_URL.rstrip('/')}/GetMakesForVehicleType/motorcycle?format=json",
        "auth": f"{settings.AUTH_PROVIDER_URL.rstrip('/')}/auth/v1/health",
    }
    for name, url in providers.items():
        try:
            resp = requests.get(url, timeout=3)
            result["providers"][name] = "ok" if resp.status_code < 500 else f"http_{resp.status_code}"
        except requests.exceptions.ConnectionError:
            result["providers"][name] = "unreachable"
            result["status"] = "degraded"
        except Exception as e:
            result["providers"][name] = f"error: {str(e)}"

    return result
