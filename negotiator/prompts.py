"""
Prompt construction for every generation call.

All builders are pure: they render a request into a (system, user) pair.
Parties are labelled A, B, C... by list position.
"""
from typing import Dict, List, Tuple

from negotiator.models import (
    NegotiationRequest, AdvancedNegotiationRequest, AdvancedParty, Party,
    CompromiseFocus, ToneType, IndustryType,
)


PromptPair = Tuple[str, str]


# ===== Lookup Tables =====
SYSTEM_PERSONAS: Dict[CompromiseFocus, str] = {
    CompromiseFocus.ECONOMIC: (
        "You are an expert negotiation AI specialized in finding economically optimal solutions.\n"
        "Your goal is to maximize financial efficiency, cost reduction, and revenue generation "
        "while maintaining fairness."
    ),
    CompromiseFocus.SOCIAL: (
        "You are an expert negotiation AI specialized in socially responsible solutions.\n"
        "Your goal is to maximize social impact, fairness, worker welfare, community benefit, "
        "and ethical considerations."
    ),
    CompromiseFocus.BALANCED: (
        "You are an expert negotiation AI specialized in sustainable, balanced solutions.\n"
        "Your goal is to find compromises that harmonize economic viability, social responsibility, "
        "and environmental sustainability (ESG principles)."
    ),
}

TONE_INSTRUCTIONS: Dict[ToneType, str] = {
    ToneType.FORMAL: "Use formal, professional language suitable for corporate or legal contexts. Avoid colloquialisms.",
    ToneType.CASUAL: "Use clear, conversational language that is easy to understand. Be friendly but professional.",
    ToneType.TECHNICAL: "Use precise, technical language with specific terminology. Include metrics and data-driven reasoning.",
    ToneType.DIPLOMATIC: "Use balanced, neutral language that respects all parties. Be tactful and considerate of sensitivities.",
}

INDUSTRY_CONTEXT: Dict[IndustryType, str] = {
    IndustryType.TECHNOLOGY: "Consider factors like intellectual property, innovation timelines, scalability, and tech infrastructure.",
    IndustryType.HEALTHCARE: "Consider regulatory compliance (FDA, HIPAA), patient safety, clinical outcomes, and healthcare accessibility.",
    IndustryType.FINANCE: "Consider risk management, regulatory compliance (SEC, Basel), liquidity, and fiduciary responsibilities.",
    IndustryType.REAL_ESTATE: "Consider property valuation, zoning regulations, environmental assessments, and community impact.",
    IndustryType.MANUFACTURING: "Consider supply chain efficiency, production capacity, quality standards, and worker safety.",
    IndustryType.GOVERNMENT: "Consider public policy, transparency, accountability, stakeholder engagement, and long-term sustainability.",
    IndustryType.RETAIL: "Consider customer experience, supply chain, inventory management, and market competition.",
    IndustryType.ENERGY: "Consider environmental impact, renewable vs. fossil, grid infrastructure, and energy transition timelines.",
    IndustryType.GENERAL: "",
}

FOCUS_PRIORITIES: Dict[CompromiseFocus, str] = {
    CompromiseFocus.ECONOMIC: "economic efficiency, cost optimization, and financial sustainability",
    CompromiseFocus.SOCIAL: "social impact, fairness, equity, and stakeholder welfare",
    CompromiseFocus.BALANCED: (
        "a harmonious balance between economic, social, and environmental factors "
        "according to the ESG priorities"
    ),
}

BASIC_FOCUS_PRIORITIES: Dict[CompromiseFocus, str] = {
    CompromiseFocus.ECONOMIC: "economic efficiency and financial optimization",
    CompromiseFocus.SOCIAL: "social impact, fairness, and ethical considerations",
}

RISK_SYSTEM_PROMPT = (
    "You are an expert risk analyst specializing in negotiation and business strategy.\n"
    "Analyze negotiations for potential risks and provide mitigation strategies."
)

EMPATHY_SYSTEM_PROMPT = (
    "You are an expert negotiation psychologist and emotional intelligence consultant.\n"
    "Your specialty is understanding human motivations, emotional dynamics, and interpersonal "
    "psychology in high-stakes negotiations.\n"
    "Analyze the emotional and psychological profile provided and give actionable insights."
)

SENTIMENT_SYSTEM_PROMPT = (
    "You are an expert in emotional intelligence and communication analysis.\n"
    "Analyze the sentiment, emotional tone, empathy level, and inclusivity of negotiation proposals.\n"
    "Your goal is to ensure proposals are emotionally intelligent and considerate of all parties' feelings."
)

POWER_SYSTEM_PROMPT = (
    "You are an expert in organizational psychology and power dynamics in negotiations.\n"
    "Analyze power imbalances, dependencies, and suggest strategies to create more equitable negotiations.\n"
    "Focus on empowering disadvantaged parties while maintaining productive dialogue."
)

CULTURAL_SYSTEM_PROMPT = (
    "You are an expert in cross-cultural communication and international negotiations.\n"
    "Identify cultural tensions, communication style differences, and provide specific recommendations\n"
    "for bridging cultural gaps to ensure mutual understanding and respect."
)


# ===== Formatting Helpers =====
def party_label(index: int) -> str:
    return chr(ord("A") + index)


def format_number(value: float) -> str:
    """80.0 -> '80', 12.5 -> '12.5'"""
    return f"{value:g}"


def format_money(value: float) -> str:
    """Thousands-separated amount: 1500000 -> '1,500,000'"""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def _esg_block(request, title: str) -> str:
    esg = request.esg
    return (
        f"**{title} (0-100 scale):**\n"
        f"- Environmental: {format_number(esg.environmental)}\n"
        f"- Social: {format_number(esg.social)}\n"
        f"- Governance: {format_number(esg.governance)}\n"
    )


def _party_header(index: int, party: Party) -> str:
    return f"**Party {party_label(index)}: {party.name}**\n"


# ===== Basic Mode =====
def build_basic_prompts(request: NegotiationRequest, focus: CompromiseFocus) -> PromptPair:
    parties = ""
    for index, party in enumerate([request.party_a, request.party_b]):
        parties += _party_header(index, party)
        parties += f"- Goals: {party.goals}\n"
        parties += f"- Constraints: {party.constraints}\n\n"

    if focus == CompromiseFocus.BALANCED:
        intro = "Analyze this negotiation between two parties and provide a balanced, sustainable compromise proposal."
        closing = (
            "Provide a concise compromise proposal (3-5 sentences) that balances economic, social, and "
            "environmental factors according to the ESG priorities. The proposal should be sustainable "
            "and fair to both parties. Be specific and actionable."
        )
    else:
        intro = (
            f"Analyze this negotiation between two parties and provide a {focus.value}-optimized "
            f"compromise proposal."
        )
        closing = (
            f"Provide a concise compromise proposal (3-5 sentences) that prioritizes "
            f"{BASIC_FOCUS_PRIORITIES[focus]} while respecting both parties' constraints. "
            f"Be specific and actionable."
        )

    user_prompt = f"{intro}\n\n{parties}{_esg_block(request, 'ESG Priorities')}\n{closing}"
    return SYSTEM_PERSONAS[focus], user_prompt


# ===== Advanced Mode =====
def build_system_prompt(request: AdvancedNegotiationRequest, focus: CompromiseFocus) -> str:
    tone = request.ai_config.tone if request.ai_config and request.ai_config.tone else ToneType.DIPLOMATIC

    system_prompt = SYSTEM_PERSONAS[focus]

    industry_context = INDUSTRY_CONTEXT[request.industry]
    if industry_context:
        system_prompt += f"\n\n{industry_context}"

    system_prompt += f"\n\n{TONE_INSTRUCTIONS[tone]}"

    if request.negotiation_round and request.negotiation_round > 1:
        system_prompt += (
            f"\n\nThis is negotiation round {request.negotiation_round}. "
            f"Consider the feedback from previous rounds and show improvement."
        )

    return system_prompt


def _describe_party(index: int, party: AdvancedParty) -> str:
    text = _party_header(index, party)
    text += f"- Goals: {party.goals}\n"
    text += f"- Constraints: {party.constraints}\n"

    limits = party.advanced_constraints
    if limits:
        if limits.deal_breakers:
            text += f"- Deal Breakers: {', '.join(limits.deal_breakers)}\n"
        if limits.budget_max:
            text += f"- Budget Limit: ${format_money(limits.budget_max)}\n"
        if limits.timeline_months:
            text += f"- Timeline: {format_number(limits.timeline_months)} months\n"
        if limits.regulatory_requirements:
            text += f"- Regulatory: {limits.regulatory_requirements}\n"

    esg = party.individual_esg_priorities
    if esg:
        text += (
            f"- Individual ESG Priorities: Environmental {format_number(esg.environmental)}, "
            f"Social {format_number(esg.social)}, Governance {format_number(esg.governance)}\n"
        )

    return text + "\n"


def build_compromise_prompts(request: AdvancedNegotiationRequest, focus: CompromiseFocus) -> PromptPair:
    prompt = (
        f"Analyze this {len(request.parties)}-party negotiation and provide a "
        f"{focus.value}-optimized compromise proposal.\n\n"
    )

    for index, party in enumerate(request.parties):
        prompt += _describe_party(index, party)

    prompt += _esg_block(request, "Global ESG Priorities") + "\n"

    if request.custom_metrics:
        prompt += "**Custom Success Metrics:**\n"
        for metric in request.custom_metrics:
            prompt += f"- {metric.name} (Priority: {format_number(metric.priority)}/100): {metric.description}\n"
        prompt += "\n"

    if request.industry != IndustryType.GENERAL:
        prompt += f"**Industry Context:** {request.industry.value}\n\n"

    if request.previous_round_feedback:
        prompt += f"**Feedback from Previous Round:**\n{request.previous_round_feedback}\n\n"

    prompt += (
        f"Provide a comprehensive compromise proposal (5-8 sentences) that prioritizes "
        f"{FOCUS_PRIORITIES[focus]} while respecting all parties' constraints and deal-breakers. "
    )
    if request.custom_metrics:
        prompt += "Address the custom metrics in your proposal. "
    prompt += "Be specific, actionable, and realistic."
    if request.include_mitigation_strategies:
        prompt += " Include risk mitigation strategies."

    return build_system_prompt(request, focus), prompt


# ===== Structured Analyses =====
def build_risk_prompts(request: AdvancedNegotiationRequest) -> PromptPair:
    prompt = "Analyze the risks in this negotiation and provide a structured risk assessment.\n\n"

    for index, party in enumerate(request.parties):
        prompt += _party_header(index, party)
        prompt += f"- Goals: {party.goals}\n"
        prompt += f"- Constraints: {party.constraints}\n\n"

    prompt += """Provide your assessment in the following JSON format:
{
  "riskLevel": "low|medium|high",
  "potentialRisks": ["risk1", "risk2", "risk3"],
  "mitigationStrategies": ["strategy1", "strategy2", "strategy3"],
  "confidenceScore": 85
}

Identify 3-5 key risks and provide practical mitigation strategies for each."""

    return RISK_SYSTEM_PROMPT, prompt


def build_empathy_prompts(party: AdvancedParty) -> PromptPair:
    profile = party.empathy_profile

    prompt = "Analyze the emotional and psychological profile of this negotiating party:\n\n"
    prompt += f"**Party: {party.name}**\n"
    prompt += f"Goals: {party.goals}\n\n"

    if profile:
        if profile.emotional_state:
            prompt += f"Emotional State: {profile.emotional_state.value}\n"
        if profile.power_dynamic:
            prompt += f"Power Dynamic: {profile.power_dynamic.value}\n"
        if profile.negotiation_style:
            prompt += f"Negotiation Style: {profile.negotiation_style.value}\n"
        if profile.cultural_context:
            prompt += f"Cultural Context: {profile.cultural_context.value}\n"
        if profile.trust_level is not None:
            prompt += f"Trust Level: {format_number(profile.trust_level)}/100\n"
        if profile.stress_level is not None:
            prompt += f"Stress Level: {format_number(profile.stress_level)}/100\n"
        if profile.emotional_triggers:
            prompt += f"Emotional Triggers: {', '.join(profile.emotional_triggers)}\n"
        if profile.core_values:
            prompt += f"Core Values: {', '.join(profile.core_values)}\n"
        if profile.past_experiences:
            prompt += f"Past Experiences: {profile.past_experiences}\n"

    prompt += """
Provide your analysis in JSON format:
{
  "emotionalNeeds": ["need1", "need2", "need3"],
  "communicationRecommendations": ["recommendation1", "recommendation2"],
  "conflictRisks": ["risk1", "risk2"],
  "bridgingStrategies": ["strategy1", "strategy2", "strategy3"]
}

Be specific and actionable. Consider their emotional state, power position, and cultural context."""

    return EMPATHY_SYSTEM_PROMPT, prompt


def build_sentiment_prompts(proposal: str, request: AdvancedNegotiationRequest) -> PromptPair:
    prompt = "Analyze the emotional intelligence and sentiment of this negotiation proposal:\n\n"
    prompt += f'"{proposal}"\n\n'
    prompt += "Consider the negotiating parties:\n"

    for party in request.parties:
        prompt += f"- {party.name}"
        if party.empathy_profile and party.empathy_profile.emotional_state:
            prompt += f" ({party.empathy_profile.emotional_state.value})"
        prompt += "\n"

    prompt += """
Provide analysis in JSON format:
{
  "overallSentiment": "positive|neutral|negative",
  "emotionalTone": "brief description of tone",
  "empathyScore": 85,
  "inclusivityScore": 78,
  "recommendations": ["recommendation1", "recommendation2"]
}

Rate empathy (how well it considers feelings) and inclusivity (how well it addresses all parties) on 0-100 scale."""

    return SENTIMENT_SYSTEM_PROMPT, prompt


def build_power_balance_prompts(request: AdvancedNegotiationRequest) -> PromptPair:
    prompt = f"Analyze the power dynamics in this {len(request.parties)}-party negotiation:\n\n"

    for index, party in enumerate(request.parties):
        prompt += _party_header(index, party)
        prompt += f"Goals: {party.goals}\n"

        profile = party.empathy_profile
        if profile and profile.power_dynamic:
            prompt += f"Power Dynamic: {profile.power_dynamic.value}\n"
        if profile and profile.negotiation_style:
            prompt += f"Negotiation Style: {profile.negotiation_style.value}\n"
        if party.advanced_constraints and party.advanced_constraints.budget_max:
            prompt += f"Budget: ${format_money(party.advanced_constraints.budget_max)}\n"
        prompt += "\n"

    prompt += """Provide analysis in JSON format:
{
  "currentDynamics": "description of power distribution",
  "imbalances": ["imbalance1", "imbalance2"],
  "balancingStrategies": ["strategy1", "strategy2", "strategy3"],
  "equityScore": 75
}

Rate equity (fairness of power distribution) on 0-100 scale. Suggest concrete strategies to balance power."""

    return POWER_SYSTEM_PROMPT, prompt


def build_cultural_bridge_prompts(request: AdvancedNegotiationRequest) -> PromptPair:
    prompt = "Analyze cultural communication differences in this negotiation:\n\n"

    cultures: List[str] = [
        f"{party.name}: {party.empathy_profile.cultural_context.value}"
        for party in request.parties
        if party.empathy_profile and party.empathy_profile.cultural_context
    ]

    if not cultures:
        prompt += "No specific cultural contexts provided. Assume multicultural business setting.\n\n"
    else:
        prompt += "Cultural Contexts:\n"
        for culture in cultures:
            prompt += f"- {culture}\n"
        prompt += "\n"

    prompt += """Provide analysis in JSON format:
{
  "culturalTensions": ["tension1", "tension2"],
  "communicationAdjustments": ["adjustment1", "adjustment2"],
  "protocolRecommendations": ["protocol1", "protocol2"],
  "successFactors": ["factor1", "factor2", "factor3"]
}

Identify potential misunderstandings and provide specific communication adaptations."""

    return CULTURAL_SYSTEM_PROMPT, prompt
