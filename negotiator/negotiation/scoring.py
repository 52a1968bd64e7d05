# negotiator/negotiation/scoring.py
import math
import random
from typing import Dict, List, Optional, Protocol, Sequence

from negotiator.models import (
    ESG, Scores, AdvancedParty, AdvancedNegotiationRequest,
    CustomMetric, CustomMetricScore, RiskAssessment, RiskLevel,
)


NEUTRAL_SCORE = 70
MAX_PHASES = 5
MAX_ALTERNATIVES = 3
MIN_CONSTRAINT_FACTOR = 0.8


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(high, max(low, value))


class ScoringEngine:
    def __init__(self, rng: Optional[RandomSource] = None):
        """
        rng: anything with random() -> [0, 1); pin it to make jitter reproducible
        """
        self.rng = rng or random.Random()

    def jitter(self, spread: float = 15) -> float:
        """Uniform value in [-spread/2, +spread/2)"""
        return (self.rng.random() - 0.5) * spread

    # ========= Basic mode =========
    @staticmethod
    def basic_scores(esg: ESG) -> Scores:
        total = esg.total

        # No priorities at all: neutral scores
        if total == 0:
            return Scores(economic=NEUTRAL_SCORE, social=NEUTRAL_SCORE, environmental=NEUTRAL_SCORE)

        # Economic focus shrinks as overall ESG emphasis grows
        economic = max(50, 100 - total / 3)
        social = min(95, (esg.social + esg.governance) / 2 * 0.9 + 20)
        environmental = min(95, esg.environmental * 0.9 + 10)

        return Scores(
            economic=round_half_up(economic),
            social=round_half_up(social),
            environmental=round_half_up(environmental)
        )

    # ========= Advanced mode =========
    @staticmethod
    def complexity_factor(party_count: int) -> float:
        """More parties, lower scores"""
        return 1 - (party_count - 2) * 0.05

    @staticmethod
    def constraint_complexity(parties: Sequence[AdvancedParty]) -> float:
        complexity = 1.0

        for party in parties:
            limits = party.advanced_constraints
            if not limits:
                continue
            if limits.deal_breakers:
                complexity *= 0.95
            if limits.budget_max:
                complexity *= 0.97
            if limits.timeline_months and limits.timeline_months < 12:
                complexity *= 0.96

        return max(MIN_CONSTRAINT_FACTOR, complexity)

    @staticmethod
    def weighted_bases(esg: ESG) -> Dict[str, float]:
        """Unrounded per-dimension bases before complexity adjustments"""
        return {
            "economic": esg.governance * 0.6 + esg.environmental * 0.2 + esg.social * 0.2,
            "social": esg.social * 0.7 + esg.governance * 0.2 + esg.environmental * 0.1,
            "environmental": esg.environmental * 0.7 + esg.social * 0.2 + esg.governance * 0.1,
        }

    def advanced_scores(self, request: AdvancedNegotiationRequest) -> Scores:
        bases = self.weighted_bases(request.esg)
        factor = self.complexity_factor(len(request.parties)) * self.constraint_complexity(request.parties)

        return Scores(**{
            dimension: round_half_up(clamp(base * factor + self.jitter()))
            for dimension, base in bases.items()
        })

    # ========= Custom metrics =========
    def custom_metric_scores(self, request: AdvancedNegotiationRequest) -> List[CustomMetricScore]:
        esg_influence = request.esg.total / 6

        results = []
        for metric in request.custom_metrics:
            base = 50 + metric.priority / 2
            score = min(100, round_half_up(base + esg_influence + self.jitter(10)))
            results.append(CustomMetricScore(
                name=metric.name,
                score=score,
                explanation=self.metric_explanation(metric, score, len(request.parties))
            ))
        return results

    @staticmethod
    def metric_explanation(metric: CustomMetric, score: int, party_count: int) -> str:
        if score >= 80:
            performance = "Strong"
        elif score >= 60:
            performance = "Moderate"
        else:
            performance = "Needs improvement"
        return (
            f"{performance} alignment with {metric.name} goals across all {party_count} parties. "
            f"Priority weight of {metric.priority:g}/100 considered."
        )

    # ========= Plans & options =========
    @staticmethod
    def implementation_phases(esg: ESG) -> List[str]:
        phases = [
            "Phase 1: Stakeholder alignment and agreement finalization (Weeks 1-2)",
            "Phase 2: Resource allocation and infrastructure setup (Weeks 3-6)",
        ]

        if esg.environmental > 60:
            phases.append("Phase 3: Environmental impact assessment and sustainability measures (Weeks 7-10)")

        if esg.social > 60:
            n = len(phases)
            phases.append(
                f"Phase {n + 1}: Social programs and community engagement initiatives "
                f"(Weeks {n * 4 + 3}-{n * 4 + 6})"
            )

        n = len(phases)
        phases.append(f"Phase {n + 1}: Pilot program launch and initial monitoring (Month {math.ceil(n * 1.5)})")
        n = len(phases)
        phases.append(
            f"Phase {n + 1}: Full-scale implementation and ongoing evaluation "
            f"(Month {math.ceil(n * 1.5) + 2} onwards)"
        )

        return phases[:MAX_PHASES]

    @staticmethod
    def alternative_options(
        request: AdvancedNegotiationRequest,
        risk_assessment: Optional[RiskAssessment] = None
    ) -> List[str]:
        alternatives = []

        if len(request.parties) > 2:
            alternatives.append("Consider bilateral sub-agreements between specific parties before full multi-party agreement")
        if request.custom_metrics:
            alternatives.append("Adjust custom metric priorities to explore different optimization paths")
        if request.esg.environmental > 70:
            alternatives.append("Explore carbon offset programs or renewable energy partnerships")
        if request.esg.social > 70:
            alternatives.append("Implement pilot social programs with selected communities before full rollout")
        if risk_assessment and risk_assessment.risk_level == RiskLevel.HIGH:
            alternatives.append("Break negotiation into smaller, lower-risk phases with go/no-go decision points")

        return alternatives[:MAX_ALTERNATIVES]

    @staticmethod
    def improvement_suggestions(request: AdvancedNegotiationRequest) -> List[str]:
        """Only for a later round that carries feedback"""
        if not (request.negotiation_round and request.negotiation_round > 1 and request.previous_round_feedback):
            return []

        suggestions = ["Consider feedback from previous round and adjust party priorities accordingly"]
        if request.custom_metrics:
            suggestions.append("Fine-tune custom metric weights based on stakeholder input")
        suggestions.append("Explore additional compromise options that address unresolved concerns")
        suggestions.append("Strengthen risk mitigation strategies for identified high-priority risks")
        return suggestions
