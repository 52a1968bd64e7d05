"""Tests for the simulation workflow (basic and advanced)."""
import json
import unittest
from unittest.mock import MagicMock

from negotiator.config import settings
from negotiator.fallbacks import (
    BASIC_COMPROMISE_FALLBACKS, COMPROMISE_FALLBACKS, DEFAULT_RISK_ASSESSMENT,
    DEFAULT_SENTIMENT, DEFAULT_POWER_BALANCE, DEFAULT_CULTURAL_BRIDGE,
)
from negotiator.llm_client import LLMClient
from negotiator.models import (
    AIConfig, AIModel, AnalysisKind, CustomMetric, EmpathyProfile, EmotionalState, RiskLevel, Stage,
)
from negotiator.negotiation import ScoringEngine
from negotiator.workflow import NegotiationWorkflow
from tests.stubs import FixedRandom, advanced_party, advanced_request, basic_request, stub_openai


ALL_FLAGS = dict(
    include_risk_analysis=True,
    enable_empathy_mapping=True,
    enable_sentiment_analysis=True,
    enable_power_balancing=True,
    enable_cultural_bridging=True,
    enable_carbon_tracking=True,
)

RISK_JSON = json.dumps({
    "riskLevel": "high",
    "potentialRisks": ["Permit delays"],
    "mitigationStrategies": ["Early regulator engagement"],
    "confidenceScore": 64,
})


def offline_workflow():
    return NegotiationWorkflow(llm=LLMClient(api_key=""), scoring=ScoringEngine(FixedRandom(0.5)))


class TestBasicSimulation(unittest.IsolatedAsyncioTestCase):

    async def test_offline_uses_basic_fallbacks(self):
        response = await offline_workflow().simulate(basic_request())

        self.assertEqual(response.economic_compromise, BASIC_COMPROMISE_FALLBACKS[AnalysisKind.ECONOMIC])
        self.assertEqual(response.social_compromise, BASIC_COMPROMISE_FALLBACKS[AnalysisKind.SOCIAL])
        self.assertEqual(response.balanced_compromise, BASIC_COMPROMISE_FALLBACKS[AnalysisKind.BALANCED])
        self.assertEqual(
            (response.scores.economic, response.scores.social, response.scores.environmental),
            (60, 38, 82),
        )

    async def test_basic_generation_parameters(self):
        stub = stub_openai(content="Shared funding model.")
        workflow = NegotiationWorkflow(llm=LLMClient(api_key="", client=stub))
        response = await workflow.simulate(basic_request())

        self.assertEqual(response.balanced_compromise, "Shared funding model.")
        self.assertEqual(stub.chat.completions.create.await_count, 3)
        for call in stub.chat.completions.create.await_args_list:
            self.assertEqual(call.kwargs["model"], settings.default_model)
            self.assertEqual(call.kwargs["max_tokens"], settings.basic_max_tokens)
            self.assertEqual(call.kwargs["temperature"], settings.default_temperature)


class TestAdvancedSimulation(unittest.IsolatedAsyncioTestCase):

    async def test_no_flags_minimal_response(self):
        response = await offline_workflow().simulate_advanced(advanced_request())

        self.assertEqual(response.balanced_compromise, COMPROMISE_FALLBACKS[AnalysisKind.BALANCED])
        self.assertEqual(
            (response.scores.economic, response.scores.social, response.scores.environmental),
            (50, 50, 50),
        )
        self.assertIsNone(response.risk_assessment)
        self.assertIsNone(response.custom_metric_scores)
        self.assertIsNone(response.empathy_insights)
        self.assertIsNone(response.carbon_footprint)
        self.assertIsNone(response.negotiation_round_number)
        self.assertEqual(len(response.implementation_phases), 4)
        self.assertEqual(response.alternative_options, [])

        wire = response.to_wire()
        self.assertNotIn("riskAssessment", wire)
        self.assertNotIn("negotiationRoundNumber", wire)
        self.assertIn("implementationPhases", wire)
        self.assertIn("balanced_compromise", wire)

    async def test_all_flags_offline(self):
        profiled = advanced_party(
            "River Council",
            empathy_profile=EmpathyProfile(emotional_state=EmotionalState.ANXIOUS, trust_level=30),
        )
        request = advanced_request(
            parties=[profiled, advanced_party("Builder Co"), advanced_party("City Hall")],
            custom_metrics=[CustomMetric(name="Jobs", priority=60, description="Local jobs")],
            negotiation_round=2,
            previous_round_feedback="Too little on housing",
            **ALL_FLAGS
        )
        response = await offline_workflow().simulate_advanced(request)

        self.assertEqual(response.risk_assessment, DEFAULT_RISK_ASSESSMENT)
        self.assertEqual(response.sentiment_analysis, DEFAULT_SENTIMENT)
        self.assertEqual(response.power_balance_report, DEFAULT_POWER_BALANCE)
        self.assertEqual(response.cultural_bridge, DEFAULT_CULTURAL_BRIDGE)

        insights = response.empathy_insights
        self.assertEqual([i.party_name for i in insights], ["River Council", "Builder Co", "City Hall"])
        self.assertEqual(insights[1].emotional_needs, ["Not specified"])
        self.assertNotEqual(insights[0].emotional_needs, ["Not specified"])

        self.assertEqual(len(response.custom_metric_scores), 1)
        self.assertEqual(response.negotiation_round_number, 2)
        self.assertEqual(len(response.improvement_suggestions), 4)

        footprint = response.carbon_footprint
        self.assertEqual(footprint.token_count, 0)
        self.assertEqual(footprint.model_used, settings.default_model)
        self.assertEqual(footprint.total_co2_grams, 0.5)
        self.assertEqual(footprint.carbon_savings_vs_traditional, 5000 * 3 - 0.5)

    async def test_mitigation_flag_triggers_risk(self):
        request = advanced_request(include_mitigation_strategies=True)
        response = await offline_workflow().simulate_advanced(request)
        self.assertEqual(response.risk_assessment, DEFAULT_RISK_ASSESSMENT)

    async def test_generated_analyses_and_token_accounting(self):
        stub = stub_openai(content=f"Assessment follows. {RISK_JSON}", total_tokens=100)
        workflow = NegotiationWorkflow(llm=LLMClient(api_key="", client=stub), scoring=ScoringEngine(FixedRandom(0.5)))
        request = advanced_request(
            ai_config=AIConfig(model=AIModel.GPT_4, creativity=60, max_tokens=800),
            include_risk_analysis=True,
            enable_sentiment_analysis=True,
            enable_carbon_tracking=True,
            environmental=80,
        )
        response = await workflow.simulate_advanced(request)

        self.assertEqual(response.risk_assessment.risk_level, RiskLevel.HIGH)
        self.assertEqual(response.risk_assessment.confidence_score, 64)
        self.assertIn("Break negotiation into smaller", response.alternative_options[-1])

        # Three compromises, risk, sentiment
        self.assertEqual(stub.chat.completions.create.await_count, 5)
        self.assertEqual(response.carbon_footprint.token_count, 500)
        self.assertEqual(response.carbon_footprint.model_used, "gpt-4")

        models = [call.kwargs["model"] for call in stub.chat.completions.create.await_args_list]
        self.assertEqual(models.count("gpt-4"), 4)
        self.assertEqual(models.count("gpt-4o-mini"), 1)
        first = stub.chat.completions.create.await_args_list[0].kwargs
        self.assertAlmostEqual(first["temperature"], 0.9)
        self.assertEqual(first["max_tokens"], 800)

    async def test_sentiment_reads_balanced_proposal(self):
        stub = stub_openai(content="Invest jointly in a solar co-op.")
        workflow = NegotiationWorkflow(llm=LLMClient(api_key="", client=stub))
        await workflow.simulate_advanced(advanced_request(enable_sentiment_analysis=True))

        last = stub.chat.completions.create.await_args_list[-1].kwargs
        self.assertEqual(last["max_tokens"], 300)
        self.assertIn('"Invest jointly in a solar co-op."', last["messages"][1]["content"])

    async def test_fallback_tokens_not_counted(self):
        stub = stub_openai(content="", total_tokens=30)
        workflow = NegotiationWorkflow(llm=LLMClient(api_key="", client=stub))
        response = await workflow.simulate_advanced(advanced_request(enable_carbon_tracking=True))
        self.assertEqual(response.carbon_footprint.token_count, 0)


class TestAdvancedEvents(unittest.IsolatedAsyncioTestCase):

    async def test_stage_sequence(self):
        events = [event async for event in offline_workflow().run_advanced(advanced_request())]

        self.assertEqual(
            [event.stage for event in events],
            [Stage.RECEIVED, Stage.PROMPTS_BUILT, Stage.GENERATION_IN_FLIGHT,
             Stage.SCORED, Stage.ASSEMBLED, Stage.RETURNED],
        )
        self.assertIsNotNone(events[-1].response)
        self.assertTrue(all(event.response is None for event in events[:-1]))
        self.assertNotIn("response", events[-1].model_dump())

    async def test_failure_emits_failed_then_raises(self):
        scoring = MagicMock()
        scoring.advanced_scores.side_effect = RuntimeError("scoring exploded")
        workflow = NegotiationWorkflow(llm=LLMClient(api_key=""), scoring=scoring)

        events = []
        with self.assertRaises(RuntimeError):
            async for event in workflow.run_advanced(advanced_request()):
                events.append(event)

        self.assertEqual(events[-1].stage, Stage.FAILED)
        self.assertNotIn(Stage.RETURNED, [event.stage for event in events])


if __name__ == "__main__":
    unittest.main()
