# app/schemas/fraud.py
from pydantic import Field
from typing import Optional
from app.schemas.common import CamelModel


class FraudAnalyzeRequest(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)
    conversation_id: Optional[str] = None


class FraudAnalysisOut(CamelModel):
    risk_score: int
    risk_level: str       # low | medium | high | critical
    flags: list[str]
    patterns: list[str]
    recommendations: list[str]
    should_block: bool
    confidence: float
