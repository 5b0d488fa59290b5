# app/routers/fraud.py
from dataclasses import asdict
from fastapi import APIRouter, Depends
from app.schemas.common import Envelope
from app.schemas.fraud import FraudAnalyzeRequest, FraudAnalysisOut
from app.services.fraud_service import analyze_message
from app.services.auth_service import AuthenticatedUser, get_current_user
from app.utils.rate_limiter import rate_limit, STANDARD

router = APIRouter()


@router.post("/fraud-detection/analyze", response_model=Envelope[FraudAnalysisOut],
             dependencies=[Depends(rate_limit(STANDARD))])
def analyze(body: FraudAnalyzeRequest, user: AuthenticatedUser = Depends(get_current_user)):
    """Score a message for scam indicators. Critical scores set shouldBlock."""
    analysis = analyze_message(body.content)
    return Envelope[FraudAnalysisOut](data=FraudAnalysisOut.model_validate(asdict(analysis)))
