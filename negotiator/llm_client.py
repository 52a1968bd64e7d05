import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from openai import AsyncOpenAI, APIError
from negotiator.config import settings
from negotiator.fallbacks import fallback_text
from negotiator.models import AnalysisKind


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationConfig:
    model: str
    temperature: float
    max_tokens: int
    timeout: float


@dataclass(frozen=True)
class Completion:
    """Outcome of one generation call: text on success, error otherwise"""
    text: Optional[str] = None
    error: Optional[str] = None
    tokens_used: int = 0
    fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)

    def or_fallback(self, fallback: str) -> "Completion":
        """Substitute fallback text for a failed call"""
        if self.ok:
            return self
        return Completion(
            text=fallback,
            error=self.error,
            tokens_used=self.tokens_used,
            fallback=True
        )


def resolve_temperature(
    temperature: Optional[float] = None,
    creativity: Optional[float] = None
) -> float:
    """Explicit temperature wins, then the 0-100 creativity slider, then the default"""
    if temperature is not None:
        return min(max(temperature, 0.0), 2.0)
    if creativity is not None:
        return creativity / 100 * 1.5
    return settings.default_temperature


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self.api_key = settings.openai_api_key if api_key is None else api_key
        self.base_url = base_url or settings.openai_base_url
        self.client = client

        # Without a key no client is created and every call falls back
        if self.client is None and self.api_key:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=0
            )

        if not self.configured:
            logger.warning("OPENAI_API_KEY not configured; using fallback responses only")

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        config: GenerationConfig
    ) -> Completion:
        """
        Single chat completion call.

        Network errors, non-2xx statuses, timeouts and empty content come
        back as a failed Completion instead of raising.
        """
        if not self.configured:
            return Completion(error="API key not configured")

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=config.model,
                    messages=messages,
                    temperature=config.temperature,
                    max_tokens=config.max_tokens,
                    timeout=config.timeout
                ),
                timeout=config.timeout
            )
        except asyncio.TimeoutError:
            return Completion(error=f"timed out after {config.timeout:g}s")
        except APIError as e:
            return Completion(error=f"{type(e).__name__}: {e}")

        usage = getattr(response, "usage", None)
        tokens_used = usage.total_tokens if usage else 0

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            return Completion(error="empty response content", tokens_used=tokens_used)

        return Completion(text=content.strip(), tokens_used=tokens_used)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        config: GenerationConfig,
        kind: AnalysisKind,
        basic: bool = False
    ) -> Completion:
        """Generation call whose text is never empty: failures get the kind's fallback"""
        result = await self.generate(system_prompt, user_prompt, config)
        if not result.ok:
            logger.warning("Using fallback response for %s: %s", kind.value, result.error)
        return result.or_fallback(fallback_text(kind, basic=basic))
