"""
LLM client for curriculum analysis.

Uses the OpenAI API (or any OpenAI-compatible endpoint) with JSON responses
validated by Pydantic. Only rate-limit errors are retried, with exponential
backoff and jitter.
"""

import json
import logging
import random
import time
from typing import Callable, Dict, List, Optional, Sequence

import openai
from openai import OpenAI
from pydantic import ValidationError

from ..config import LessonLensSettings
from ..errors import AnalysisError, ErrorKind
from .models import ChatMessage, CurriculumAnalysisRequest, CurriculumAnalysisResult
from .prompts import get_analysis_prompt, get_chat_messages, get_prompt_version

logger = logging.getLogger(__name__)

CHAT_FALLBACK_REPLY = "I couldn't generate a response. Please try again."


def _strip_code_fence(content: str) -> str:
    """Remove a markdown code block wrapper if the model added one."""
    content = content.strip()
    if content.startswith("```"):
        content = content.strip("`").strip()
        if content.startswith("json"):
            content = content[4:].strip()
    return content


class AnalysisClient:
    """Client for LLM curriculum analysis."""

    def __init__(
        self,
        config: LessonLensSettings,
        client: Optional[OpenAI] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client with configuration."""
        self.config = config
        self.client = client or OpenAI(
            base_url=config.llm.base_url,
            api_key=config.llm.api_key,
            timeout=config.llm.timeout,
            # Only rate limits are retried, in _complete_with_backoff
            max_retries=0,
        )
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number attempt (0-based), with jitter."""
        return self.config.llm.initial_delay * (2 ** attempt) * (0.5 + random.random())

    def _complete(self, messages: List[Dict[str, str]], **kwargs) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.config.llm.model,
            messages=messages,
            **kwargs,
        )
        return response.choices[0].message.content

    def _complete_with_backoff(self, messages: List[Dict[str, str]], **kwargs) -> Optional[str]:
        max_retries = self.config.llm.max_retries
        attempt = 0
        while True:
            try:
                return self._complete(messages, **kwargs)
            except openai.RateLimitError as e:
                if getattr(e, "code", None) == "insufficient_quota":
                    raise AnalysisError(
                        "API quota has been exceeded. Please check your billing details.",
                        kind=ErrorKind.ANALYSIS_FAILURE,
                    ) from e
                if attempt >= max_retries:
                    raise AnalysisError(
                        "API rate limit exceeded. Please try again later.",
                        kind=ErrorKind.RATE_LIMITED,
                    ) from e
                delay = self.backoff_delay(attempt)
                logger.warning("Rate limit hit, retrying in %.1fs (retry %d/%d)", delay, attempt + 1, max_retries)
                self._sleep(delay)
                attempt += 1
            except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
                raise AnalysisError(
                    "Authentication error with the LLM API. Please check your API key.",
                    kind=ErrorKind.AUTHENTICATION,
                ) from e
            except openai.OpenAIError as e:
                raise AnalysisError(f"LLM call failed: {e}", kind=ErrorKind.ANALYSIS_FAILURE) from e

    def analyze(self, request: CurriculumAnalysisRequest) -> CurriculumAnalysisResult:
        """
        Analyze curriculum materials.

        Args:
            request: Grade, subject, unit and extracted document text

        Returns:
            CurriculumAnalysisResult parsed from the model's JSON

        Raises:
            AnalysisError: tagged with the ErrorKind of the failure
        """
        system_prompt, user_prompt = get_analysis_prompt(request, self.config.llm.standards_body)
        content = self._complete_with_backoff(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        ) or ""

        try:
            return CurriculumAnalysisResult.model_validate(json.loads(_strip_code_fence(content)))
        except (json.JSONDecodeError, ValidationError) as e:
            raise AnalysisError(
                "Failed to parse the analysis results. The API returned invalid JSON.",
                kind=ErrorKind.INVALID_RESPONSE,
                details={"error": str(e)[:500]},
            ) from e

    def chat(
        self,
        message: str,
        request: CurriculumAnalysisRequest,
        result: CurriculumAnalysisResult,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        """
        Answer a follow-up question about a finished analysis.

        The analysis result and the earlier conversation go into the prompt
        context. Same retry policy as analyze().
        """
        messages = get_chat_messages(message, request, result, history)
        content = self._complete_with_backoff(messages, max_tokens=self.config.llm.chat_max_tokens)
        return content or CHAT_FALLBACK_REPLY

    def get_prompt_version(self) -> str:
        """Get current prompt version hash for tracking."""
        return get_prompt_version()
