"""Structured-result extraction from free-text generation output."""
import json
import logging
import math
from typing import Any, Callable, Dict, Iterator, Optional, Type

from pydantic import BaseModel

from negotiator.fallbacks import STRUCTURED_DEFAULTS
from negotiator.models import AnalysisKind, RiskLevel, Sentiment

logger = logging.getLogger(__name__)


# ===== JSON Extraction =====
def iter_brace_blocks(text: str) -> Iterator[str]:
    """Yield every top-level balanced ``{...}`` span, left to right.

    Braces inside JSON string literals do not count toward the balance.
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"' and depth > 0:
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[start:index + 1]


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """First brace block in *text* that decodes to a JSON object, else None"""
    if not text:
        return None
    for block in iter_brace_blocks(text):
        try:
            decoded = json.loads(block)
        except json.JSONDecodeError:
            continue
        if isinstance(decoded, dict):
            return decoded
    return None


# ===== Field Coercion =====
# Each coercer returns None when the value has the wrong type.
def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _text_list(value: Any) -> Optional[list]:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return [item.strip() for item in value if item.strip()]
    return None


def _score(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return int(min(100, max(0, round(value))))


def _choice(enum_cls) -> Callable[[Any], Optional[str]]:
    allowed = {member.value for member in enum_cls}

    def coerce(value: Any) -> Optional[str]:
        if isinstance(value, str) and value.strip().lower() in allowed:
            return value.strip().lower()
        return None

    return coerce


FIELD_COERCERS: Dict[AnalysisKind, Dict[str, Callable[[Any], Any]]] = {
    AnalysisKind.RISK: {
        "risk_level": _choice(RiskLevel),
        "potential_risks": _text_list,
        "mitigation_strategies": _text_list,
        "confidence_score": _score,
    },
    AnalysisKind.EMPATHY: {
        "emotional_needs": _text_list,
        "communication_recommendations": _text_list,
        "conflict_risks": _text_list,
        "bridging_strategies": _text_list,
    },
    AnalysisKind.SENTIMENT: {
        "overall_sentiment": _choice(Sentiment),
        "emotional_tone": _text,
        "empathy_score": _score,
        "inclusivity_score": _score,
        "recommendations": _text_list,
    },
    AnalysisKind.POWER: {
        "current_dynamics": _text,
        "imbalances": _text_list,
        "balancing_strategies": _text_list,
        "equity_score": _score,
    },
    AnalysisKind.CULTURAL: {
        "cultural_tensions": _text_list,
        "communication_adjustments": _text_list,
        "protocol_recommendations": _text_list,
        "success_factors": _text_list,
    },
}


def _lookup(decoded: Dict[str, Any], model_cls: Type[BaseModel], field: str) -> Any:
    """Value under the camelCase wire name, or the snake_case field name"""
    alias = model_cls.model_fields[field].alias or field
    if alias in decoded:
        return decoded[alias]
    return decoded.get(field)


def parse(raw_text: Optional[str], kind: AnalysisKind) -> BaseModel:
    """
    Parse a structured analysis out of generation output.

    Valid fields of the embedded object are merged over the kind's default;
    missing or mistyped fields keep their default. With no decodable object
    the whole default is returned.
    """
    if kind not in FIELD_COERCERS:
        raise ValueError(f"{kind.value} output is free text, not structured")

    default = STRUCTURED_DEFAULTS[kind]
    decoded = extract_json_object(raw_text)
    if decoded is None:
        logger.warning("No JSON object found in %s output; using default", kind.value)
        return default

    model_cls = type(default)
    updates = {}
    for field, coerce in FIELD_COERCERS[kind].items():
        value = coerce(_lookup(decoded, model_cls, field))
        if value is not None:
            updates[field] = value

    if not updates:
        return default
    return model_cls.model_validate({**default.model_dump(), **updates})
