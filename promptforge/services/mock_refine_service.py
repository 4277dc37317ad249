"""Template-based refinement used until a real provider is wired in.

No external call is made. The simulated latency is the only await.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random

from promptforge.core.config import settings
from promptforge.core.ids import generate_request_id
from promptforge.services.ai_service import (
    DEFAULT_SHORTEN_LENGTH,
    RefinementProvider,
    RefineRequest,
    RefineResult,
)


logger = logging.getLogger("promptforge.services.refine")


ENHANCE_TEMPLATE = """**Enhanced Prompt:**

{prompt_text}

**Improvements:**
- Added clearer structure and context
- Enhanced specificity for better AI responses  
- Included measurable success criteria
- Optimized for {provider} model characteristics

**Usage Tips:**
- Use this enhanced version for more consistent results
- Adjust temperature settings based on desired creativity level
- Consider adding examples for complex tasks"""

SHORTEN_TEMPLATE = """**Shortened Prompt ({target_length} chars):**

{shortened}{ellipsis}

**Key points preserved:**
- Core instruction maintained
- Essential context retained
- Optimized for brevity while preserving meaning"""


def estimate_tokens(request: RefineRequest) -> int:
    if request.command == "enhance":
        return math.floor(len(request.prompt_text) * 0.75) + 50
    if request.command == "shorten":
        return math.floor(_target_length(request) * 0.5) + 20
    return math.floor(len(request.prompt_text) * 0.25)


def render(request: RefineRequest) -> str:
    if request.command == "enhance":
        return ENHANCE_TEMPLATE.format(prompt_text=request.prompt_text, provider=request.provider)
    if request.command == "shorten":
        target = _target_length(request)
        # Cuts at a raw character count and may split a word.
        return SHORTEN_TEMPLATE.format(
            target_length=target,
            shortened=request.prompt_text[:max(target, 0)],
            ellipsis="..." if len(request.prompt_text) > target else "",
        )
    return request.prompt_text


def _target_length(request: RefineRequest) -> int:
    return request.shorten_length or DEFAULT_SHORTEN_LENGTH


class MockRefinementProvider(RefinementProvider):
    """Synthesises an "improved" or "shortened" prompt after a fake delay."""

    def __init__(self, min_delay_ms: int | None = None, jitter_ms: int | None = None) -> None:
        self.min_delay_ms = settings.REFINE_DELAY_MIN_MS if min_delay_ms is None else min_delay_ms
        self.jitter_ms = settings.REFINE_DELAY_JITTER_MS if jitter_ms is None else jitter_ms

    async def refine(self, request: RefineRequest) -> RefineResult:
        delay_ms = self.min_delay_ms + random.random() * self.jitter_ms
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

        result = RefineResult(
            refined_text=render(request),
            tokens_used=estimate_tokens(request),
            provider=request.provider,
            request_id=generate_request_id(),
        )
        logger.info(
            "Refined prompt with %s (%d tokens)", request.command, result.tokens_used,
            extra={"request_id": result.request_id, "provider": result.provider},
        )
        return result
