"""
Hand-authored substitutes used whenever a generation call yields nothing usable.

Compromise kinds fall back to plain text; structured kinds fall back to a
complete default object, which also supplies per-field defaults when a
generated object is only partially valid.
"""
import json
from typing import Dict

from negotiator.models import (
    AnalysisKind, RiskLevel, Sentiment,
    RiskAssessment, EmpathyInsight, SentimentAnalysis, PowerBalanceReport, CulturalBridge,
)


# ===== Compromise Text =====
BASIC_COMPROMISE_FALLBACKS: Dict[AnalysisKind, str] = {
    AnalysisKind.ECONOMIC: (
        "Economic compromise: Allocate resources based on ROI projections, implement cost-sharing "
        "mechanisms, and establish performance-based incentives to maximize financial efficiency "
        "for both parties."
    ),
    AnalysisKind.SOCIAL: (
        "Social compromise: Prioritize fair labor practices, ensure equitable benefit distribution, "
        "invest in community development programs, and establish transparent governance structures "
        "that benefit all stakeholders."
    ),
    AnalysisKind.BALANCED: (
        "Balanced sustainable compromise: Implement a phased approach that balances immediate economic "
        "needs with long-term sustainability goals, ensuring environmental protection, social equity, "
        "and good governance practices throughout the agreement."
    ),
}

COMPROMISE_FALLBACKS: Dict[AnalysisKind, str] = {
    AnalysisKind.ECONOMIC: (
        "Economic compromise: Implement a phased investment approach with clear ROI milestones, "
        "establish cost-sharing mechanisms based on benefit distribution, and create performance-based "
        "incentives to maximize financial efficiency while ensuring sustainable operations for all "
        "parties involved."
    ),
    AnalysisKind.SOCIAL: (
        "Social compromise: Prioritize stakeholder welfare through equitable benefit distribution, "
        "establish transparent governance structures with regular community engagement, invest in "
        "workforce development and fair labor practices, and ensure that all parties have meaningful "
        "representation in decision-making processes."
    ),
    AnalysisKind.BALANCED: (
        "Balanced sustainable compromise: Adopt an integrated approach that phases economic investments "
        "to align with environmental protection timelines, implements social equity measures throughout "
        "all operations, and establishes multi-stakeholder governance to ensure accountability and "
        "long-term sustainability for all parties."
    ),
}


# ===== Structured Defaults =====
DEFAULT_RISK_ASSESSMENT = RiskAssessment(
    risk_level=RiskLevel.MEDIUM,
    potential_risks=[
        "Misalignment of stakeholder priorities",
        "Budget or resource constraints",
        "Timeline execution challenges",
        "Regulatory or compliance issues",
    ],
    mitigation_strategies=[
        "Establish regular alignment meetings and clear communication channels",
        "Create contingency budgets and resource buffer pools",
        "Implement flexible milestone scheduling with early warning systems",
        "Conduct thorough regulatory review and engage compliance experts",
    ],
    confidence_score=75,
)

DEFAULT_EMPATHY_INSIGHT = EmpathyInsight(
    emotional_needs=[
        "Recognition and respect",
        "Clear communication",
        "Fair treatment",
    ],
    communication_recommendations=[
        "Use active listening techniques",
        "Acknowledge their perspective",
        "Be transparent about constraints",
    ],
    conflict_risks=[
        "Misalignment of expectations",
        "Communication breakdowns",
        "Trust issues",
    ],
    bridging_strategies=[
        "Establish common ground early",
        "Create safe space for concerns",
        "Use collaborative problem-solving",
    ],
)

DEFAULT_SENTIMENT = SentimentAnalysis(
    overall_sentiment=Sentiment.NEUTRAL,
    emotional_tone="Professional and balanced",
    empathy_score=70,
    inclusivity_score=70,
    recommendations=[
        "Consider acknowledging emotional stakes",
        "Ensure all parties feel heard",
        "Use inclusive language",
    ],
)

DEFAULT_POWER_BALANCE = PowerBalanceReport(
    current_dynamics="Power distribution appears relatively balanced",
    imbalances=[
        "Some parties may have more resources",
        "Experience levels may vary",
    ],
    balancing_strategies=[
        "Ensure equal voice in discussions",
        "Provide information access to all parties",
        "Use neutral facilitation",
    ],
    equity_score=70,
)

DEFAULT_CULTURAL_BRIDGE = CulturalBridge(
    cultural_tensions=[
        "Different communication styles",
        "Varying decision-making norms",
    ],
    communication_adjustments=[
        "Be explicit about expectations",
        "Allow time for consensus building",
        "Respect cultural protocols",
    ],
    protocol_recommendations=[
        "Establish clear meeting structures",
        "Use culturally neutral language",
        "Build personal relationships",
    ],
    success_factors=[
        "Mutual respect and understanding",
        "Patience with different styles",
        "Focus on shared goals",
    ],
)

STRUCTURED_DEFAULTS = {
    AnalysisKind.RISK: DEFAULT_RISK_ASSESSMENT,
    AnalysisKind.EMPATHY: DEFAULT_EMPATHY_INSIGHT,
    AnalysisKind.SENTIMENT: DEFAULT_SENTIMENT,
    AnalysisKind.POWER: DEFAULT_POWER_BALANCE,
    AnalysisKind.CULTURAL: DEFAULT_CULTURAL_BRIDGE,
}


def fallback_text(kind: AnalysisKind, basic: bool = False) -> str:
    """Fallback generation output for a kind (structured kinds as JSON)"""
    if kind in STRUCTURED_DEFAULTS:
        default = STRUCTURED_DEFAULTS[kind]
        return json.dumps(default.model_dump(mode="json", by_alias=True, exclude={"party_name"}))
    table = BASIC_COMPROMISE_FALLBACKS if basic else COMPROMISE_FALLBACKS
    return table[kind]


def missing_profile_insight(party_name: str) -> EmpathyInsight:
    """Placeholder for a party that has no empathy profile (no generation call)"""
    return EmpathyInsight(
        party_name=party_name,
        emotional_needs=["Not specified"],
        communication_recommendations=["Use standard professional communication"],
        conflict_risks=["Unknown - no empathy profile provided"],
        bridging_strategies=["Establish rapport through open dialogue"],
    )
