"""HTTP-level tests for the FastAPI application."""
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from negotiator import main
from negotiator.llm_client import LLMClient
from negotiator.negotiation import ScoringEngine
from negotiator.workflow import NegotiationWorkflow
from tests.stubs import FixedRandom


BASIC_BODY = {
    "partyA": {"name": "TechGlobal Inc.", "goals": "Expand capacity", "constraints": "Budget $15M"},
    "partyB": {"name": "Green Future Alliance", "goals": "Zero emissions", "constraints": "No offsets"},
    "esg": {"environmental": 80, "social": 20, "governance": 20},
}

ADVANCED_BODY = {
    "parties": [
        {"name": "TechGlobal Inc.", "goals": "Expand capacity", "constraints": "Budget $15M"},
        {
            "name": "Green Future Alliance",
            "goals": "Zero emissions",
            "constraints": "No offsets",
            "empathyProfile": {"emotionalState": "skeptical", "culturalContext": "scandinavian"},
        },
    ],
    "esg": {"environmental": 50, "social": 50, "governance": 50},
    "aiConfig": {"model": "gpt-3.5-turbo", "tone": "diplomatic"},
    "industry": "technology",
}


class TestApi(unittest.TestCase):

    def setUp(self):
        workflow = NegotiationWorkflow(llm=LLMClient(api_key=""), scoring=ScoringEngine(FixedRandom(0.5)))
        patcher = patch.object(main, "workflow", workflow)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = TestClient(main.app)

    # ===== Simulation =====

    def test_simulate(self):
        response = self.client.post("/simulate", json=BASIC_BODY)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["scores"], {"economic": 60, "social": 38, "environmental": 82})
        self.assertTrue(body["economic_compromise"].startswith("Economic compromise"))
        self.assertIn("social_compromise", body)
        self.assertIn("balanced_compromise", body)

    def test_simulate_rejects_missing_party(self):
        body = {key: value for key, value in BASIC_BODY.items() if key != "partyB"}
        self.assertEqual(self.client.post("/simulate", json=body).status_code, 422)

    def test_simulate_rejects_empty_goals(self):
        body = dict(BASIC_BODY, partyA={"name": "A", "goals": "", "constraints": "c"})
        self.assertEqual(self.client.post("/simulate", json=body).status_code, 422)

    def test_advanced_omits_absent_sections(self):
        response = self.client.post("/simulate/advanced", json=ADVANCED_BODY)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["scores"], {"economic": 50, "social": 50, "environmental": 50})
        self.assertIn("implementationPhases", body)
        self.assertIn("alternativeOptions", body)
        for absent in ("riskAssessment", "empathyInsights", "carbonFootprint", "negotiationRoundNumber"):
            self.assertNotIn(absent, body)

    def test_advanced_with_empathy_and_carbon(self):
        body = dict(
            ADVANCED_BODY,
            enableEmpathyMapping=True,
            enableCarbonTracking=True,
            includeRiskAnalysis=True,
            negotiationRound=3,
        )
        result = self.client.post("/simulate/advanced", json=body).json()
        self.assertEqual(result["riskAssessment"]["riskLevel"], "medium")
        self.assertEqual(
            [insight["partyName"] for insight in result["empathyInsights"]],
            ["TechGlobal Inc.", "Green Future Alliance"],
        )
        self.assertEqual(result["carbonFootprint"]["modelUsed"], "gpt-3.5-turbo")
        self.assertEqual(result["carbonFootprint"]["totalCO2Grams"], 0.5)
        self.assertEqual(result["negotiationRoundNumber"], 3)
        self.assertNotIn("improvementSuggestions", result)

    def test_advanced_party_count_bounds(self):
        body = dict(ADVANCED_BODY, parties=ADVANCED_BODY["parties"][:1])
        self.assertEqual(self.client.post("/simulate/advanced", json=body).status_code, 422)
        body = dict(ADVANCED_BODY, parties=ADVANCED_BODY["parties"] * 3)
        self.assertEqual(self.client.post("/simulate/advanced", json=body).status_code, 422)

    def test_advanced_rejects_out_of_range_round(self):
        body = dict(ADVANCED_BODY, negotiationRound=6)
        self.assertEqual(self.client.post("/simulate/advanced", json=body).status_code, 422)

    def test_advanced_event_stream(self):
        response = self.client.post("/simulate/advanced/events", json=ADVANCED_BODY)
        self.assertEqual(response.status_code, 200)
        text = response.text
        self.assertIn("event: received", text)
        self.assertIn("event: scored", text)
        self.assertIn("event: returned", text)
        self.assertLess(text.index("event: received"), text.index("event: returned"))
        self.assertIn('"balanced_compromise"', text)

    # ===== Carbon =====

    def test_carbon_estimate(self):
        response = self.client.post(
            "/carbon/estimate", json={"model": "gpt-4", "tokenCount": 0, "executionTimeMs": 0}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalCO2Grams"], 0.5)
        self.assertEqual(body["greenScore"], 80)
        self.assertIn("equivalentMetrics", body)

    def test_carbon_recommendations_from_estimate(self):
        metrics = self.client.post("/carbon/estimate", json={"model": "gpt-4", "tokenCount": 1500}).json()
        response = self.client.post("/carbon/recommendations", json=metrics)
        self.assertEqual(response.status_code, 200)
        recommendations = response.json()
        self.assertEqual(recommendations[0]["category"], "model-selection")
        self.assertIn("potentialSavingsCO2Grams", recommendations[0])

    def test_footprint_and_badges(self):
        entry = {
            "timestamp": "2026-01-01T09:00:00",
            "co2Grams": 1.0,
            "energyKWh": 0.001,
            "modelUsed": "gpt-4o-mini",
            "simulationType": "basic",
            "greenScore": 95,
        }
        footprint = self.client.post("/carbon/footprint", json={"history": [entry, entry]}).json()
        self.assertEqual(footprint["totalSimulations"], 2)
        self.assertEqual(footprint["trend"], "stable")
        self.assertEqual(footprint["comparisonToTraditional"]["traditionalCO2Kg"], 20)

        badges = self.client.post("/carbon/badges", json={"history": [entry, entry]}).json()
        self.assertEqual([b["title"] for b in badges], ["Planet Protector", "Green AI Master"])

    def test_empty_footprint(self):
        footprint = self.client.post("/carbon/footprint", json={"history": []}).json()
        self.assertEqual(footprint["totalSimulations"], 0)
        self.assertEqual(footprint["totalCO2Kg"], 0)

    def test_offsets(self):
        body = self.client.post("/carbon/offsets", json={"co2Grams": 50000}).json()
        self.assertEqual(body["treePlanting"]["trees"], 3)
        self.assertEqual(body["treePlanting"]["costUSD"], 4.5)
        self.assertIn("kWh", body["renewableEnergy"])

    # ===== Templates & health =====

    def test_templates(self):
        templates = self.client.get("/templates").json()
        self.assertEqual(len(templates), 6)
        self.assertTrue(all("partyA" in t["data"] for t in templates))

        business = self.client.get("/templates", params={"category": "business"}).json()
        self.assertEqual(
            sorted(t["id"] for t in business),
            ["corporate-merger", "manufacturing-community", "supply-chain"],
        )
        self.assertEqual(len(self.client.get("/templates", params={"category": "all"}).json()), 6)

    def test_template_payload_simulates(self):
        template = self.client.get("/templates", params={"category": "environmental"}).json()[0]
        response = self.client.post("/simulate", json=template["data"])
        self.assertEqual(response.status_code, 200)

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok", "llmConfigured": False})


if __name__ == "__main__":
    unittest.main()
