# app/services/fraud_service.py
"""
Rule-based scam scoring for marketplace messages.

Each category pattern that matches adds the category weight. Extra heuristics
add fixed bonuses. Score → level: <30 low, <60 medium, <80 high, else critical
(critical messages should be blocked).
"""

import hashlib
import re
from dataclasses import dataclass, field

from app.utils.logger import get_logger

logger = get_logger(__name__)

FRAUD_PATTERNS = {
    "FINANCIAL_SCAMS": [
        r"wire\s+transfer", r"send\s+money", r"western\s+union", r"moneygram", r"cashapp",
        r"venmo", r"paypal\s+friends", r"gift\s+card", r"itunes\s+card", r"google\s+play\s+card",
        r"steam\s+card", r"amazon\s+gift", r"bitcoin", r"cryptocurrency", r"crypto",
        r"escrow\s+service", r"advance\s+payment", r"upfront\s+payment",
    ],
    "URGENCY_PRESSURE": [
        r"urgent", r"\basap\b", r"immediately", r"right\s+now", r"time\s+sensitive",
        r"limited\s+time", r"expires\s+soon", r"act\s+fast", r"don't\s+wait", r"hurry",
        r"quick\s+sale", r"must\s+sell",
    ],
    "CONTACT_REDIRECTION": [
        r"contact\s+me\s+at", r"text\s+me", r"call\s+me", r"whatsapp", r"telegram",
        r"\bsignal\b", r"email\s+me", r"reach\s+out", r"communicate\s+outside", r"off\s+platform",
    ],
    "SHIPPING_SCAMS": [
        r"shipping\s+agent", r"delivery\s+company", r"fedex", r"\bups\b", r"\bdhl\b", r"\busps\b",
        r"international\s+shipping", r"overseas\s+shipping", r"customs", r"import\s+tax", r"duty\s+fee",
    ],
    "FAKE_VERIFICATION": [
        r"verified\s+buyer", r"certified\s+seller", r"premium\s+member", r"trusted\s+dealer",
        r"authorized\s+dealer", r"official\s+representative",
    ],
    "TOO_GOOD_TO_BE_TRUE": [
        r"below\s+market", r"wholesale\s+price", r"dealer\s+price", r"liquidation", r"clearance",
        r"must\s+go", r"motivated\s+seller", r"divorce\s+sale", r"estate\s+sale",
    ],
}

RISK_WEIGHTS = {
    "FINANCIAL_SCAMS": 25,
    "URGENCY_PRESSURE": 15,
    "CONTACT_REDIRECTION": 20,
    "SHIPPING_SCAMS": 20,
    "FAKE_VERIFICATION": 15,
    "TOO_GOOD_TO_BE_TRUE": 10,
}

GRAMMAR_PATTERNS = [r"\b(am|is|are)\s+been\b", r"\bwas\s+went\b", r"\bmore\s+better\b",
                    r"\byour\s+welcome\b", r"\bits\s+important\b"]
MANIPULATION_PATTERNS = [r"trust\s+me", r"honest\s+person", r"god\s+fearing", r"christian",
                         r"family\s+emergency", r"sick\s+child", r"medical\s+emergency", r"help\s+me",
                         r"desperate", r"please\s+understand"]
PRICE_PATTERN = re.compile(r"\$[\d,]+")


@dataclass
class FraudAnalysis:
    risk_score: int = 0
    risk_level: str = "low"
    flags: list = field(default_factory=list)
    patterns: list = field(default_factory=list)
    recommendations: list = field(default_factory=list)
    should_block: bool = False
    confidence: float = 0.0


def _category_flag(category: str) -> str:
    return category.lower().replace("_", " ", 1)


def count_grammar_issues(content: str) -> int:
    return sum(len(re.findall(p, content, re.IGNORECASE)) for p in GRAMMAR_PATTERNS)


def has_emotional_manipulation(content: str) -> bool:
    return any(re.search(p, content, re.IGNORECASE) for p in MANIPULATION_PATTERNS)


def has_price_inconsistency(content: str) -> bool:
    prices = []
    for match in PRICE_PATTERN.findall(content):
        digits = match.replace("$", "").replace(",", "")
        if digits:
            prices.append(int(digits))
    return len(prices) > 1 and max(prices) > min(prices) * 2


def analyze_message(content: str) -> FraudAnalysis:
    analysis = FraudAnalysis()
    total_matches = 0

    for category, patterns in FRAUD_PATTERNS.items():
        matched = [p for p in patterns if re.search(p, content, re.IGNORECASE)]
        if matched:
            analysis.risk_score += RISK_WEIGHTS[category] * len(matched)
            analysis.flags.append(_category_flag(category))
            analysis.patterns.extend(matched)
            total_matches += len(matched)

    if count_grammar_issues(content) > 3:
        analysis.risk_score += 10
        analysis.flags.append("poor grammar")
        analysis.recommendations.append("Message contains multiple grammatical errors")
    if has_emotional_manipulation(content):
        analysis.risk_score += 15
        analysis.flags.append("emotional manipulation")
        analysis.recommendations.append("Message uses emotional pressure tactics")
    if has_price_inconsistency(content):
        analysis.risk_score += 20
        analysis.flags.append("inconsistent information")
        analysis.recommendations.append("Message contains contradictory information")

    analysis.confidence = min(100, total_matches * 20 + min(len(content) / 10, 30))

    if analysis.risk_score >= 80:
        analysis.risk_level = "critical"
        analysis.should_block = True
        analysis.recommendations.append("Message blocked due to extremely high fraud risk")
    elif analysis.risk_score >= 60:
        analysis.risk_level = "high"
        analysis.recommendations.append("Exercise extreme caution with this message")
    elif analysis.risk_score >= 30:
        analysis.risk_level = "medium"
        analysis.recommendations.append("Be cautious and verify any claims independently")

    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()[:12]
    logger.info(f"[FRAUD] message {digest}: score={analysis.risk_score} level={analysis.risk_level}")
    return analysis
