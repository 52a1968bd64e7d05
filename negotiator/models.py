from datetime import datetime
from typing import List, Dict, Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum


class WireModel(BaseModel):
    """Frozen model exchanged with the front end (camelCase on the wire)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )


# ===== Enums =====
class AIModel(str, Enum):
    GPT_4 = "gpt-4"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_35_TURBO = "gpt-3.5-turbo"


class ToneType(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"
    DIPLOMATIC = "diplomatic"


class IndustryType(str, Enum):
    TECHNOLOGY = "technology"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    REAL_ESTATE = "real-estate"
    MANUFACTURING = "manufacturing"
    GOVERNMENT = "government"
    RETAIL = "retail"
    ENERGY = "energy"
    GENERAL = "general"


class EmotionalState(str, Enum):
    COLLABORATIVE = "collaborative"
    DEFENSIVE = "defensive"
    AGGRESSIVE = "aggressive"
    ANXIOUS = "anxious"
    OPTIMISTIC = "optimistic"
    SKEPTICAL = "skeptical"
    DESPERATE = "desperate"
    CONFIDENT = "confident"


class PowerDynamic(str, Enum):
    EQUAL = "equal"
    DOMINANT = "dominant"
    SUBORDINATE = "subordinate"
    DEPENDENT = "dependent"
    INDEPENDENT = "independent"


class NegotiationStyle(str, Enum):
    COMPETING = "competing"
    COLLABORATING = "collaborating"
    COMPROMISING = "compromising"
    AVOIDING = "avoiding"
    ACCOMMODATING = "accommodating"


class CulturalContext(str, Enum):
    WESTERN_DIRECT = "western-direct"
    EASTERN_INDIRECT = "eastern-indirect"
    MIDDLE_EASTERN = "middle-eastern"
    LATIN_AMERICAN = "latin-american"
    AFRICAN = "african"
    SCANDINAVIAN = "scandinavian"
    MULTICULTURAL = "multicultural"


class CompromiseFocus(str, Enum):
    """Optimization focus of a compromise proposal"""
    ECONOMIC = "economic"
    SOCIAL = "social"
    BALANCED = "balanced"


class AnalysisKind(str, Enum):
    """Every kind of generation call; selects prompts and fallbacks"""
    ECONOMIC = "economic"
    SOCIAL = "social"
    BALANCED = "balanced"
    RISK = "risk"
    EMPATHY = "empathy"
    SENTIMENT = "sentiment"
    POWER = "power"
    CULTURAL = "cultural"

    @classmethod
    def for_focus(cls, focus: CompromiseFocus) -> "AnalysisKind":
        return cls(focus.value)


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class Stage(str, Enum):
    """Workflow stages of one simulation request"""
    RECEIVED = "received"
    PROMPTS_BUILT = "prompts_built"
    GENERATION_IN_FLIGHT = "generation_in_flight"
    SCORED = "scored"
    ASSEMBLED = "assembled"
    RETURNED = "returned"
    FAILED = "failed"


# ===== ESG =====
class ESG(WireModel):
    environmental: float
    social: float
    governance: float

    @field_validator("environmental", "social", "governance")
    @classmethod
    def clamp_priority(cls, value: float) -> float:
        return min(100.0, max(0.0, value))

    @property
    def total(self) -> float:
        return self.environmental + self.social + self.governance


# ===== Basic Request / Response =====
class Party(WireModel):
    name: str = Field(min_length=1)
    goals: str = Field(min_length=1)
    constraints: str = Field(min_length=1)


class NegotiationRequest(WireModel):
    party_a: Party
    party_b: Party
    esg: ESG


class Scores(WireModel):
    economic: int
    social: int
    environmental: int


class NegotiationResponse(WireModel):
    economic_compromise: str = Field(alias="economic_compromise")
    social_compromise: str = Field(alias="social_compromise")
    balanced_compromise: str = Field(alias="balanced_compromise")
    scores: Scores


# ===== Advanced Request =====
class PartyConstraints(WireModel):
    deal_breakers: List[str] = Field(default_factory=list)
    budget_max: Optional[float] = Field(default=None, ge=0)
    timeline_months: Optional[float] = Field(default=None, ge=0)
    regulatory_requirements: Optional[str] = None


class EmpathyProfile(WireModel):
    emotional_state: Optional[EmotionalState] = None
    power_dynamic: Optional[PowerDynamic] = None
    negotiation_style: Optional[NegotiationStyle] = None
    cultural_context: Optional[CulturalContext] = None
    emotional_triggers: List[str] = Field(default_factory=list)
    core_values: List[str] = Field(default_factory=list)
    past_experiences: Optional[str] = None
    trust_level: Optional[float] = Field(default=None, ge=0, le=100)
    stress_level: Optional[float] = Field(default=None, ge=0, le=100)


class AdvancedParty(Party):
    advanced_constraints: Optional[PartyConstraints] = None
    individual_esg_priorities: Optional[ESG] = None
    empathy_profile: Optional[EmpathyProfile] = None


class CustomMetric(WireModel):
    name: str = Field(min_length=1)
    priority: float = Field(ge=0, le=100)
    description: str = Field(min_length=1)


class AIConfig(WireModel):
    model: Optional[AIModel] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    creativity: Optional[float] = Field(default=None, ge=0, le=100)
    tone: Optional[ToneType] = None
    max_tokens: Optional[int] = Field(default=None, ge=100, le=2000)


class AdvancedNegotiationRequest(WireModel):
    parties: List[AdvancedParty] = Field(min_length=2, max_length=5)
    esg: ESG
    ai_config: Optional[AIConfig] = None
    industry: IndustryType = IndustryType.GENERAL
    custom_metrics: List[CustomMetric] = Field(default_factory=list)

    # Feature flags
    include_risk_analysis: bool = False
    include_mitigation_strategies: bool = False
    enable_empathy_mapping: bool = False
    enable_sentiment_analysis: bool = False
    enable_power_balancing: bool = False
    enable_cultural_bridging: bool = False
    enable_carbon_tracking: bool = False

    # Iterative rounds
    negotiation_round: Optional[int] = Field(default=None, ge=1, le=5)
    previous_round_feedback: Optional[str] = None

    @property
    def wants_risk_assessment(self) -> bool:
        return self.include_risk_analysis or self.include_mitigation_strategies


# ===== Structured Analyses =====
class RiskAssessment(WireModel):
    risk_level: RiskLevel
    potential_risks: List[str]
    mitigation_strategies: List[str]
    confidence_score: int


class CustomMetricScore(WireModel):
    name: str
    score: int
    explanation: str


class EmpathyInsight(WireModel):
    party_name: str = ""
    emotional_needs: List[str]
    communication_recommendations: List[str]
    conflict_risks: List[str]
    bridging_strategies: List[str]


class SentimentAnalysis(WireModel):
    overall_sentiment: Sentiment
    emotional_tone: str
    empathy_score: int
    inclusivity_score: int
    recommendations: List[str]


class PowerBalanceReport(WireModel):
    current_dynamics: str
    imbalances: List[str]
    balancing_strategies: List[str]
    equity_score: int


class CulturalBridge(WireModel):
    cultural_tensions: List[str]
    communication_adjustments: List[str]
    protocol_recommendations: List[str]
    success_factors: List[str]


# ===== Carbon =====
class EquivalentMetrics(WireModel):
    tree_hours_needed: float
    driving_meters: float
    smartphone_charges: float
    light_bulb_hours: float


class CarbonMetrics(WireModel):
    total_co2_grams: float = Field(alias="totalCO2Grams")
    energy_kwh: float = Field(alias="energyKWh")
    token_count: int
    model_used: str
    execution_time_ms: float
    green_score: int
    equivalent_metrics: EquivalentMetrics
    recommendations: List[str]
    carbon_savings_vs_traditional: float


class CarbonHistoryEntry(WireModel):
    timestamp: datetime
    co2_grams: float
    energy_kwh: float = Field(alias="energyKWh")
    model_used: str
    simulation_type: str
    green_score: float


class TraditionalComparison(WireModel):
    traditional_co2_kg: float = Field(alias="traditionalCO2Kg")
    ai_co2_kg: float = Field(alias="aiCO2Kg")
    savings_percentage: float


class CumulativeFootprint(WireModel):
    total_co2_kg: float = Field(alias="totalCO2Kg")
    total_energy_kwh: float = Field(alias="totalEnergyKWh")
    total_simulations: int
    average_green_score: float
    trend: Trend
    comparison_to_traditional: TraditionalComparison


class GreenAIRecommendation(WireModel):
    category: Literal["model-selection", "optimization", "caching", "timing", "offset"]
    priority: Literal["high", "medium", "low"]
    title: str
    description: str
    potential_savings_co2_grams: float = Field(alias="potentialSavingsCO2Grams")
    implementation_difficulty: Literal["easy", "medium", "hard"]


class TreePlantingOffset(WireModel):
    trees: int
    cost_usd: float = Field(alias="costUSD")
    description: str


class RenewableEnergyOffset(WireModel):
    kwh: float = Field(alias="kWh")
    cost_usd: float = Field(alias="costUSD")
    description: str


class DirectCaptureOffset(WireModel):
    grams: float
    cost_usd: float = Field(alias="costUSD")
    description: str


class OffsetOptions(WireModel):
    tree_planting: TreePlantingOffset
    renewable_energy: RenewableEnergyOffset
    direct_capture: DirectCaptureOffset


class GreenBadge(WireModel):
    badge: str
    title: str
    description: str
    level: int


# ===== Carbon Requests =====
class CarbonEstimateRequest(WireModel):
    model: str = AIModel.GPT_4O_MINI.value
    token_count: int = Field(ge=0)
    execution_time_ms: float = Field(default=0, ge=0)
    participant_count: int = Field(default=2, ge=1)


class CarbonHistoryRequest(WireModel):
    history: List[CarbonHistoryEntry] = Field(default_factory=list)


class OffsetRequest(WireModel):
    co2_grams: float = Field(ge=0)


# ===== Advanced Response =====
class AdvancedNegotiationResponse(NegotiationResponse):
    risk_assessment: Optional[RiskAssessment] = None
    custom_metric_scores: Optional[List[CustomMetricScore]] = None
    implementation_phases: Optional[List[str]] = None
    alternative_options: Optional[List[str]] = None
    negotiation_round_number: Optional[int] = None
    improvement_suggestions: Optional[List[str]] = None

    # Empathy mode
    empathy_insights: Optional[List[EmpathyInsight]] = None
    sentiment_analysis: Optional[SentimentAnalysis] = None
    power_balance_report: Optional[PowerBalanceReport] = None
    cultural_bridge: Optional[CulturalBridge] = None

    carbon_footprint: Optional[CarbonMetrics] = None

    def to_wire(self) -> Dict[str, Any]:
        """JSON body with absent sections omitted"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ===== Templates =====
class NegotiationTemplate(WireModel):
    id: str
    name: str
    description: str
    category: Literal["business", "environmental", "social", "technology", "government"]
    icon: str
    data: NegotiationRequest


# ===== Trace Event =====
class TraceEvent(WireModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    stage: Stage
    message: str
    data: Optional[Dict[str, Any]] = None
    # Set on the final event only; not part of the streamed payload
    response: Optional[AdvancedNegotiationResponse] = Field(default=None, exclude=True)
