"""
Carbon accounting for generation calls.

Estimates CO2 and energy per call from the model tier and token volume,
rates efficiency with a 0-100 green score, and aggregates caller-held
history into trends and badges. Nothing here is persisted.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from negotiator.models import (
    AIModel, Trend, CarbonMetrics, EquivalentMetrics, CarbonHistoryEntry,
    CumulativeFootprint, TraditionalComparison, GreenAIRecommendation, GreenBadge,
    OffsetOptions, TreePlantingOffset, RenewableEnergyOffset, DirectCaptureOffset,
)


@dataclass(frozen=True)
class ModelTier:
    carbon_intensity: float   # g CO2 per 1000 tokens
    energy_intensity: float   # kWh per 1000 tokens
    score_penalty: int
    rank: int                 # 0 = most carbon-intensive


MODEL_TIERS: Dict[str, ModelTier] = {
    AIModel.GPT_4.value: ModelTier(0.0052, 0.0047, 20, 0),
    AIModel.GPT_4O_MINI.value: ModelTier(0.0028, 0.0025, 10, 1),
    AIModel.GPT_35_TURBO.value: ModelTier(0.0015, 0.0013, 5, 2),
}
# Unknown models are rated as the middle tier, not as the most efficient one
DEFAULT_TIER = MODEL_TIERS[AIModel.GPT_4O_MINI.value]

CALL_OVERHEAD_CO2 = 0.5               # g per call: API overhead, data transfer
TRADITIONAL_MEETING_CO2 = 5000        # g per participant: travel, venue
HISTORY_PARTICIPANTS = 2
CO2_PER_KWH = 475                     # g, global grid average

# Equivalences
TREE_ABSORPTION_PER_HOUR = 21         # g
CAR_CO2_PER_METER = 0.12              # g
PHONE_CHARGE_CO2 = 8                  # g
LIGHT_BULB_WATTS = 60

TREND_SLICE = 0.3
TREND_TOLERANCE = 0.1

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def model_tier(model: str) -> ModelTier:
    return MODEL_TIERS.get(model, DEFAULT_TIER)


class CarbonAccountant:

    # ========= Per-call estimate =========
    def estimate(
        self,
        model: str,
        token_count: int,
        execution_time_ms: float,
        participant_count: int = 2
    ) -> CarbonMetrics:
        tier = model_tier(model)

        total_co2 = token_count / 1000 * tier.carbon_intensity + CALL_OVERHEAD_CO2
        energy_kwh = token_count / 1000 * tier.energy_intensity
        green_score = self.green_score(model, token_count, execution_time_ms)

        return CarbonMetrics(
            total_co2_grams=total_co2,
            energy_kwh=energy_kwh,
            token_count=token_count,
            model_used=model,
            execution_time_ms=execution_time_ms,
            green_score=green_score,
            equivalent_metrics=EquivalentMetrics(
                tree_hours_needed=total_co2 / TREE_ABSORPTION_PER_HOUR,
                driving_meters=total_co2 / CAR_CO2_PER_METER,
                smartphone_charges=total_co2 / PHONE_CHARGE_CO2,
                light_bulb_hours=energy_kwh * 1000 / LIGHT_BULB_WATTS,
            ),
            recommendations=self.recommendations(model, token_count, green_score),
            carbon_savings_vs_traditional=TRADITIONAL_MEETING_CO2 * participant_count - total_co2,
        )

    @staticmethod
    def green_score(model: str, token_count: int, execution_time_ms: float) -> int:
        score = 100 - model_tier(model).score_penalty

        if token_count > 2000:
            score -= 30
        elif token_count > 1000:
            score -= 15
        elif token_count > 500:
            score -= 5

        if execution_time_ms > 60000:
            score -= 20
        elif execution_time_ms > 30000:
            score -= 10
        elif execution_time_ms > 10000:
            score -= 5

        return max(0, min(100, score))

    @staticmethod
    def recommendations(model: str, token_count: int, green_score: int) -> List[str]:
        tips = []

        rank = model_tier(model).rank
        if rank == 0:
            tips.append("🌱 Switch to gpt-4o-mini to reduce CO2 emissions by 46% with similar quality")
            tips.append("💡 Use gpt-3.5-turbo for simple negotiations to reduce emissions by 71%")
        elif rank == 1:
            tips.append("✅ Good choice! Consider gpt-3.5-turbo for simpler scenarios to save 46% more CO2")
        else:
            tips.append("🌟 Excellent! You're using the most carbon-efficient model")

        if token_count > 1500:
            tips.append("📉 Reduce token usage by being more concise in prompts and limiting response length")
            tips.append("⚡ Consider caching repeated analyses to avoid redundant API calls")
        elif token_count > 800:
            tips.append("👍 Reasonable token usage. Fine-tune prompts to optimize further")
        else:
            tips.append("🎯 Excellent token efficiency!")

        if green_score < 70:
            tips.append("🌍 Run simulations during off-peak hours when renewable energy is more available")
            tips.append("♻️ Batch multiple simulations together to reduce overhead")

        tips.append(f"🌳 Plant {math.ceil(token_count / 10000)} tree(s) to offset your AI carbon footprint")
        return tips

    def detailed_recommendations(self, metrics: CarbonMetrics) -> List[GreenAIRecommendation]:
        co2 = metrics.total_co2_grams
        recommendations = []

        if model_tier(metrics.model_used).rank == 0:
            recommendations.append(GreenAIRecommendation(
                category="model-selection",
                priority="high",
                title="Switch to More Efficient Model",
                description="Use gpt-4o-mini for 46% carbon reduction or gpt-3.5-turbo for 71% reduction",
                potential_savings_co2_grams=co2 * 0.46,
                implementation_difficulty="easy",
            ))

        if metrics.token_count > 1000:
            recommendations.append(GreenAIRecommendation(
                category="optimization",
                priority="medium",
                title="Optimize Prompt Length",
                description="Reduce token usage by writing more concise prompts and limiting max_tokens",
                potential_savings_co2_grams=co2 * 0.3,
                implementation_difficulty="easy",
            ))

        recommendations.append(GreenAIRecommendation(
            category="caching",
            priority="medium",
            title="Implement Response Caching",
            description="Cache similar negotiations to avoid redundant API calls",
            potential_savings_co2_grams=co2 * 0.5,
            implementation_difficulty="medium",
        ))
        recommendations.append(GreenAIRecommendation(
            category="timing",
            priority="low",
            title="Use Renewable Energy Hours",
            description="Schedule batch operations during peak renewable energy production (10am-4pm)",
            potential_savings_co2_grams=co2 * 0.2,
            implementation_difficulty="easy",
        ))
        recommendations.append(GreenAIRecommendation(
            category="offset",
            priority="high",
            title="Purchase Carbon Offsets",
            description=f"Offset {co2:.2f}g CO2 through verified carbon credit programs",
            potential_savings_co2_grams=co2,
            implementation_difficulty="easy",
        ))

        return sorted(recommendations, key=lambda r: _PRIORITY_ORDER[r.priority])

    @staticmethod
    def history_entry(
        metrics: CarbonMetrics,
        simulation_type: str,
        timestamp: Optional[datetime] = None
    ) -> CarbonHistoryEntry:
        """Record form of an estimate, for the caller's history store"""
        return CarbonHistoryEntry(
            timestamp=timestamp or datetime.now(),
            co2_grams=metrics.total_co2_grams,
            energy_kwh=metrics.energy_kwh,
            model_used=metrics.model_used,
            simulation_type=simulation_type,
            green_score=metrics.green_score,
        )

    # ========= History =========
    @staticmethod
    def trend(history: Sequence[CarbonHistoryEntry]) -> Trend:
        """Mean CO2 of the latest 30% against the earliest 30%"""
        window = math.floor(len(history) * TREND_SLICE)
        if window == 0:
            return Trend.STABLE

        recent_avg = sum(e.co2_grams for e in history[-window:]) / window
        old_avg = sum(e.co2_grams for e in history[:window]) / window

        if recent_avg < old_avg * (1 - TREND_TOLERANCE):
            return Trend.IMPROVING
        if recent_avg > old_avg * (1 + TREND_TOLERANCE):
            return Trend.WORSENING
        return Trend.STABLE

    def aggregate(self, history: Sequence[CarbonHistoryEntry]) -> CumulativeFootprint:
        count = len(history)
        total_co2 = sum(e.co2_grams for e in history)
        total_energy = sum(e.energy_kwh for e in history)
        average_green = sum(e.green_score for e in history) / count if count else 0.0

        traditional_kg = count * TRADITIONAL_MEETING_CO2 * HISTORY_PARTICIPANTS / 1000
        ai_kg = total_co2 / 1000
        savings = (traditional_kg - ai_kg) / traditional_kg * 100 if traditional_kg else 0.0

        return CumulativeFootprint(
            total_co2_kg=ai_kg,
            total_energy_kwh=total_energy,
            total_simulations=count,
            average_green_score=average_green,
            trend=self.trend(history),
            comparison_to_traditional=TraditionalComparison(
                traditional_co2_kg=traditional_kg,
                ai_co2_kg=ai_kg,
                savings_percentage=savings,
            ),
        )

    @staticmethod
    def offset_options(co2_grams: float) -> OffsetOptions:
        co2_kg = co2_grams / 1000
        trees = math.ceil(co2_kg / 20)     # ~20 kg CO2 per tree per year
        renewable_kwh = co2_kg / (CO2_PER_KWH / 1000)

        return OffsetOptions(
            tree_planting=TreePlantingOffset(
                trees=trees,
                cost_usd=trees * 1.5,
                description="Plant trees through verified reforestation programs",
            ),
            renewable_energy=RenewableEnergyOffset(
                kwh=renewable_kwh,
                cost_usd=renewable_kwh * 0.05,
                description="Fund renewable energy projects (solar, wind)",
            ),
            direct_capture=DirectCaptureOffset(
                grams=co2_grams,
                cost_usd=co2_kg * 0.6,
                description="Support direct air capture technology",
            ),
        )

    @staticmethod
    def badges(footprint: CumulativeFootprint) -> List[GreenBadge]:
        badges = []

        savings = footprint.comparison_to_traditional.savings_percentage
        if savings > 99:
            badges.append(GreenBadge(
                badge="🌍", title="Planet Protector", level=5,
                description=f"Saved {savings:.1f}% CO2 vs traditional meetings",
            ))
        elif savings > 95:
            badges.append(GreenBadge(
                badge="🌿", title="Eco Warrior", level=4,
                description=f"Saved {savings:.1f}% CO2 vs traditional meetings",
            ))

        average = footprint.average_green_score
        if average > 90:
            badges.append(GreenBadge(
                badge="⭐", title="Green AI Master", level=5,
                description=f"Average Green Score: {average:.1f}",
            ))
        elif average > 80:
            badges.append(GreenBadge(
                badge="✨", title="Green AI Expert", level=4,
                description=f"Average Green Score: {average:.1f}",
            ))

        if footprint.trend == Trend.IMPROVING:
            badges.append(GreenBadge(
                badge="📈", title="Continuous Improver", level=3,
                description="Your carbon footprint is decreasing over time",
            ))

        simulations = footprint.total_simulations
        if simulations > 100:
            badges.append(GreenBadge(
                badge="🏆", title="Green AI Champion", level=4,
                description=f"{simulations} sustainable simulations completed",
            ))
        elif simulations > 50:
            badges.append(GreenBadge(
                badge="🥇", title="Sustainability Leader", level=3,
                description=f"{simulations} sustainable simulations completed",
            ))

        return badges
