"""
Negotiation simulation workflow.

Fans the three compromise generations out concurrently, runs whichever
optional analyses the request enables, scores the outcome and assembles
one immutable response. The advanced path is an async generator of stage
events so it can be streamed as SSE.
"""
import asyncio
import logging
import time
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from negotiator import prompts
from negotiator.carbon import CarbonAccountant
from negotiator.config import settings
from negotiator.fallbacks import missing_profile_insight
from negotiator.llm_client import LLMClient, GenerationConfig, Completion, resolve_temperature
from negotiator.models import (
    AIModel, AnalysisKind, CompromiseFocus, Stage, TraceEvent,
    NegotiationRequest, NegotiationResponse,
    AdvancedNegotiationRequest, AdvancedNegotiationResponse,
    EmpathyInsight,
)
from negotiator.negotiation.scoring import ScoringEngine
from negotiator.parser import parse


logger = logging.getLogger(__name__)

FOCUSES = (CompromiseFocus.ECONOMIC, CompromiseFocus.SOCIAL, CompromiseFocus.BALANCED)

# Empathy-mode analyses always run on the small model
ANALYSIS_MODEL = AIModel.GPT_4O_MINI.value
ANALYSIS_PARAMS: Dict[AnalysisKind, Tuple[float, int]] = {
    AnalysisKind.EMPATHY: (0.8, 400),
    AnalysisKind.SENTIMENT: (0.6, 300),
    AnalysisKind.POWER: (0.7, 400),
    AnalysisKind.CULTURAL: (0.7, 400),
}


class NegotiationWorkflow:
    """Per-request coordinator; holds no state between requests"""

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        scoring: Optional[ScoringEngine] = None,
        carbon: Optional[CarbonAccountant] = None
    ):
        self.llm = llm or LLMClient()
        self.scoring = scoring or ScoringEngine()
        self.carbon = carbon or CarbonAccountant()

    # ========= Basic mode =========
    async def simulate(self, request: NegotiationRequest) -> NegotiationResponse:
        logger.info("Basic simulation: %s vs %s", request.party_a.name, request.party_b.name)

        config = GenerationConfig(
            model=settings.default_model,
            temperature=settings.default_temperature,
            max_tokens=settings.basic_max_tokens,
            timeout=settings.basic_timeout_sec
        )

        async def generate(focus: CompromiseFocus) -> Completion:
            system_prompt, user_prompt = prompts.build_basic_prompts(request, focus)
            return await self.llm.complete(
                system_prompt, user_prompt, config, AnalysisKind.for_focus(focus), basic=True
            )

        economic, social, balanced = await asyncio.gather(*(generate(focus) for focus in FOCUSES))

        return NegotiationResponse(
            economic_compromise=economic.text,
            social_compromise=social.text,
            balanced_compromise=balanced.text,
            scores=self.scoring.basic_scores(request.esg)
        )

    # ========= Advanced mode =========
    @staticmethod
    def generation_config(request: AdvancedNegotiationRequest) -> GenerationConfig:
        ai_config = request.ai_config
        model = ai_config.model.value if ai_config and ai_config.model else settings.default_model
        temperature = resolve_temperature(
            ai_config.temperature if ai_config else None,
            ai_config.creativity if ai_config else None
        )
        max_tokens = ai_config.max_tokens if ai_config and ai_config.max_tokens else settings.advanced_max_tokens

        return GenerationConfig(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=settings.advanced_timeout_sec
        )

    @staticmethod
    def analysis_config(kind: AnalysisKind) -> GenerationConfig:
        temperature, max_tokens = ANALYSIS_PARAMS[kind]
        return GenerationConfig(
            model=ANALYSIS_MODEL,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=settings.advanced_timeout_sec
        )

    @staticmethod
    def enabled_analyses(request: AdvancedNegotiationRequest) -> List[str]:
        flags = {
            "risk": request.wants_risk_assessment,
            "empathy": request.enable_empathy_mapping,
            "sentiment": request.enable_sentiment_analysis,
            "power": request.enable_power_balancing,
            "cultural": request.enable_cultural_bridging,
            "carbon": request.enable_carbon_tracking,
        }
        return [name for name, enabled in flags.items() if enabled]

    async def run_advanced(
        self,
        request: AdvancedNegotiationRequest
    ) -> AsyncGenerator[TraceEvent, None]:
        """
        Run one advanced simulation, yielding a TraceEvent per stage.

        The final RETURNED event carries the response. An unexpected error
        yields a FAILED event and is then re-raised.
        """
        analyses = self.enabled_analyses(request)
        yield TraceEvent(
            stage=Stage.RECEIVED,
            message=f"Advanced simulation with {len(request.parties)} parties",
            data={"parties": [p.name for p in request.parties], "analyses": analyses}
        )
        logger.info(
            "Advanced simulation: %d parties (%s), analyses=%s",
            len(request.parties), ", ".join(p.name for p in request.parties), analyses or "none"
        )

        try:
            config = self.generation_config(request)
            compromise_prompts = {
                focus: prompts.build_compromise_prompts(request, focus) for focus in FOCUSES
            }
            yield TraceEvent(
                stage=Stage.PROMPTS_BUILT,
                message="Compromise prompts ready",
                data={"model": config.model, "temperature": config.temperature, "maxTokens": config.max_tokens}
            )

            yield TraceEvent(stage=Stage.GENERATION_IN_FLIGHT, message="Generating compromise proposals")
            started = time.perf_counter()
            completions: List[Completion] = []

            compromises = await asyncio.gather(*(
                self.llm.complete(*compromise_prompts[focus], config, AnalysisKind.for_focus(focus))
                for focus in FOCUSES
            ))
            completions.extend(compromises)
            economic, social, balanced = (c.text for c in compromises)

            sections = await self._optional_analyses(request, config, balanced, completions)
            elapsed_ms = (time.perf_counter() - started) * 1000

            scores = self.scoring.advanced_scores(request)
            risk = sections.get("risk_assessment")
            custom_metric_scores = (
                self.scoring.custom_metric_scores(request) if request.custom_metrics else None
            )
            carbon_footprint = None
            if request.enable_carbon_tracking:
                carbon_footprint = self.carbon.estimate(
                    config.model,
                    sum(c.tokens_used for c in completions if not c.fallback),
                    elapsed_ms,
                    len(request.parties)
                )
            yield TraceEvent(
                stage=Stage.SCORED,
                message="Scores computed",
                data={"scores": scores.model_dump(), "fallbacks": sum(c.fallback for c in completions)}
            )

            response = AdvancedNegotiationResponse(
                economic_compromise=economic,
                social_compromise=social,
                balanced_compromise=balanced,
                scores=scores,
                custom_metric_scores=custom_metric_scores,
                implementation_phases=self.scoring.implementation_phases(request.esg),
                alternative_options=self.scoring.alternative_options(request, risk),
                negotiation_round_number=request.negotiation_round,
                improvement_suggestions=self.scoring.improvement_suggestions(request) or None,
                carbon_footprint=carbon_footprint,
                **sections
            )
            yield TraceEvent(stage=Stage.ASSEMBLED, message="Response assembled")
        except Exception:
            logger.exception("Advanced simulation failed")
            yield TraceEvent(stage=Stage.FAILED, message="Advanced simulation failed")
            raise

        logger.info("Advanced simulation completed in %.0f ms", elapsed_ms)
        yield TraceEvent(stage=Stage.RETURNED, message="Simulation complete", response=response)

    async def simulate_advanced(self, request: AdvancedNegotiationRequest) -> AdvancedNegotiationResponse:
        response = None
        async for event in self.run_advanced(request):
            if event.stage == Stage.RETURNED:
                response = event.response
        return response

    # ========= Optional analyses =========
    async def _optional_analyses(
        self,
        request: AdvancedNegotiationRequest,
        config: GenerationConfig,
        balanced_text: str,
        completions: List[Completion]
    ) -> Dict[str, object]:
        """Run enabled analyses concurrently; keys are response field names"""
        tasks = {}

        if request.wants_risk_assessment:
            tasks["risk_assessment"] = self._structured(
                AnalysisKind.RISK, prompts.build_risk_prompts(request), config, completions
            )
        if request.enable_empathy_mapping:
            tasks["empathy_insights"] = self._empathy_insights(request, completions)
        if request.enable_sentiment_analysis:
            tasks["sentiment_analysis"] = self._structured(
                AnalysisKind.SENTIMENT,
                prompts.build_sentiment_prompts(balanced_text, request),
                self.analysis_config(AnalysisKind.SENTIMENT),
                completions
            )
        if request.enable_power_balancing:
            tasks["power_balance_report"] = self._structured(
                AnalysisKind.POWER,
                prompts.build_power_balance_prompts(request),
                self.analysis_config(AnalysisKind.POWER),
                completions
            )
        if request.enable_cultural_bridging:
            tasks["cultural_bridge"] = self._structured(
                AnalysisKind.CULTURAL,
                prompts.build_cultural_bridge_prompts(request),
                self.analysis_config(AnalysisKind.CULTURAL),
                completions
            )

        if not tasks:
            return {}
        results = await asyncio.gather(*tasks.values())
        return dict(zip(tasks.keys(), results))

    async def _structured(
        self,
        kind: AnalysisKind,
        prompt_pair: prompts.PromptPair,
        config: GenerationConfig,
        completions: List[Completion]
    ):
        system_prompt, user_prompt = prompt_pair
        result = await self.llm.complete(system_prompt, user_prompt, config, kind)
        completions.append(result)
        return parse(result.text, kind)

    async def _empathy_insights(
        self,
        request: AdvancedNegotiationRequest,
        completions: List[Completion]
    ) -> List[EmpathyInsight]:
        config = self.analysis_config(AnalysisKind.EMPATHY)
        insights = []

        # One call per profiled party, in order
        for party in request.parties:
            if not party.empathy_profile:
                insights.append(missing_profile_insight(party.name))
                continue
            insight = await self._structured(
                AnalysisKind.EMPATHY, prompts.build_empathy_prompts(party), config, completions
            )
            insights.append(insight.model_copy(update={"party_name": party.name}))

        return insights
