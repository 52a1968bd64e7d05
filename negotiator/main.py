import json
import logging
from pathlib import Path
from typing import List, Optional
from fastapi import FastAPI
from sse_starlette.sse import EventSourceResponse

from negotiator.carbon import CarbonAccountant
from negotiator.config import settings
from negotiator.models import (
    Stage, TraceEvent,
    NegotiationRequest, NegotiationResponse,
    AdvancedNegotiationRequest, AdvancedNegotiationResponse,
    NegotiationTemplate,
    CarbonMetrics, CarbonEstimateRequest, CarbonHistoryRequest, OffsetRequest,
    CumulativeFootprint, GreenAIRecommendation, GreenBadge, OffsetOptions,
)
from negotiator.workflow import NegotiationWorkflow


logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ESG Negotiation Simulator")

TEMPLATES_DIR = Path(__file__).resolve().parent / "data" / "templates"

workflow = NegotiationWorkflow()
carbon = CarbonAccountant()


# ===== Scenario templates =====
def load_templates(templates_dir: Path = TEMPLATES_DIR) -> List[NegotiationTemplate]:
    templates = []
    for template_file in sorted(templates_dir.glob("*.json")):
        with open(template_file, "r", encoding="utf-8") as f:
            templates.append(NegotiationTemplate(**json.load(f)))
    return templates


TEMPLATES = load_templates()


# ===== Simulation =====

@app.post("/simulate", response_model=NegotiationResponse)
async def simulate(request: NegotiationRequest):
    return await workflow.simulate(request)


@app.post(
    "/simulate/advanced",
    response_model=AdvancedNegotiationResponse,
    response_model_exclude_none=True
)
async def simulate_advanced(request: AdvancedNegotiationRequest):
    return await workflow.simulate_advanced(request)


def _sse_payload(event: TraceEvent) -> dict:
    payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
    if event.response is not None:
        payload["response"] = event.response.to_wire()
    return {
        "event": event.stage.value,
        "data": json.dumps(payload, ensure_ascii=False)
    }


@app.post("/simulate/advanced/events")
async def simulate_advanced_events(request: AdvancedNegotiationRequest):
    """SSE stream of workflow stages; the last event carries the response"""

    async def event_generator():
        async for event in workflow.run_advanced(request):
            yield _sse_payload(event)
            # The error is already logged; end the stream here
            if event.stage == Stage.FAILED:
                return

    return EventSourceResponse(event_generator())


# ===== Carbon accounting =====

@app.post("/carbon/estimate", response_model=CarbonMetrics)
async def estimate_carbon(request: CarbonEstimateRequest):
    return carbon.estimate(
        request.model,
        request.token_count,
        request.execution_time_ms,
        request.participant_count
    )


@app.post("/carbon/recommendations", response_model=List[GreenAIRecommendation])
async def carbon_recommendations(metrics: CarbonMetrics):
    return carbon.detailed_recommendations(metrics)


@app.post("/carbon/footprint", response_model=CumulativeFootprint)
async def carbon_footprint(request: CarbonHistoryRequest):
    return carbon.aggregate(request.history)


@app.post("/carbon/badges", response_model=List[GreenBadge])
async def carbon_badges(request: CarbonHistoryRequest):
    return carbon.badges(carbon.aggregate(request.history))


@app.post("/carbon/offsets", response_model=OffsetOptions)
async def carbon_offsets(request: OffsetRequest):
    return carbon.offset_options(request.co2_grams)


# ===== Templates & health =====

@app.get("/templates", response_model=List[NegotiationTemplate])
async def list_templates(category: Optional[str] = None):
    if not category or category == "all":
        return TEMPLATES
    return [t for t in TEMPLATES if t.category == category]


@app.get("/health")
async def health():
    return {"status": "ok", "llmConfigured": workflow.llm.configured}


# ===== Startup =====

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("negotiator.main:app", host="0.0.0.0", port=8000, reload=True)
