"""
Completion Client for AgentFit

Thin async wrapper around an OpenRouter-compatible chat completions
endpoint. One call in, one reply out: no retries here (the prompt
executor owns the retry policy).

Integrated with Langfuse for observability and tracing.
"""

import logging
from typing import Any

import httpx
from langfuse import Langfuse
from pydantic import BaseModel

from agentfit.config.settings import Settings, get_settings
from agentfit.core.errors import (
    CompletionTimeoutError,
    ResponseValidationError,
    TransportError,
)

logger = logging.getLogger(__name__)


class CompletionReply(BaseModel):
    """Text and token counts returned by one completion call."""

    content: str
    model: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cached_tokens: int = 0
    total_tokens: int = 0


class CompletionClient:
    """
    Client for the chat completions endpoint.

    Error mapping:
    - timeout -> CompletionTimeoutError
    - non-2xx status or transport failure -> TransportError
    - 2xx body that is not a completion -> ResponseValidationError

    Observability:
    - Every call is recorded as a Langfuse generation when tracing is enabled
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Settings to use (defaults to the cached application settings)
            transport: Optional httpx transport, used to fake the endpoint in tests
        """
        self.settings = settings or get_settings()
        self.headers = {
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.settings.openrouter_app_url,
            "X-Title": self.settings.openrouter_app_title,
        }

        self.client = httpx.AsyncClient(
            base_url=self.settings.openrouter_base_url.rstrip("/"),
            headers=self.headers,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                try:
                    self.langfuse = Langfuse(
                        secret_key=self.settings.langfuse_secret_key,
                        public_key=self.settings.langfuse_public_key,
                        host=self.settings.langfuse_base_url,
                    )
                    logger.info("Langfuse initialized for LLM observability")
                except Exception as e:
                    logger.warning(f"Failed to initialize Langfuse: {e}")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    async def close(self):
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # COMPLETION CALL
    # =========================================================================

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
        user: str | None = None,
        trace_name: str = "completion",
        trace_metadata: dict[str, Any] | None = None,
    ) -> CompletionReply:
        """
        Send one chat completion request.

        Args:
            messages: System and user messages
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Output token ceiling
            user: Caller identity tag forwarded to the provider
            trace_name: Name for the Langfuse generation
            trace_metadata: Additional metadata for the trace

        Returns:
            CompletionReply with content and usage
        """
        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if user:
            payload["user"] = user

        generation = self._start_generation(trace_name, model, messages, temperature, max_tokens, trace_metadata)

        try:
            response = await self.client.post(
                self.settings.openrouter_completions_path,
                json=payload,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Completion request timed out ({model}): {e}")
            self._end_generation(generation, error=f"timeout: {e}")
            raise CompletionTimeoutError(f"Completion request timed out after {self.settings.request_timeout_seconds}s") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Completion endpoint returned {status} ({model})")
            self._end_generation(generation, error=f"status {status}")
            raise TransportError(f"Completion endpoint returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"Completion API error ({model}): {e}")
            self._end_generation(generation, error=str(e))
            raise TransportError(f"Completion request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            self._end_generation(generation, error="non-JSON body")
            raise ResponseValidationError("Completion endpoint returned a non-JSON body") from e

        if not isinstance(body, dict) or not body.get("choices"):
            self._end_generation(generation, error="missing choices")
            raise ResponseValidationError("Completion reply has no choices")

        reply = self._build_reply(body, model)
        self._end_generation(generation, reply=reply)
        return reply

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        content = result.get("choices", [{}])[0].get("message", {}).get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        if content is None:
            return ""
        return content if isinstance(content, str) else str(content)

    def _build_reply(self, body: dict, requested_model: str) -> CompletionReply:
        usage = body.get("usage") or {}
        details = usage.get("prompt_tokens_details") or {}
        prompt_tokens = int(usage.get("prompt_tokens") or 0)
        completion_tokens = int(usage.get("completion_tokens") or 0)
        return CompletionReply(
            content=self._extract_content(body),
            model=body.get("model") or requested_model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cached_tokens=int(details.get("cached_tokens") or 0),
            total_tokens=int(usage.get("total_tokens") or prompt_tokens + completion_tokens),
        )

    # =========================================================================
    # TRACING
    # =========================================================================

    def _start_generation(
        self,
        name: str,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        metadata: dict[str, Any] | None,
    ):
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_generation(
                name=name,
                model=model,
                input=messages,
                metadata=metadata or {},
                model_parameters={"temperature": temperature, "max_tokens": max_tokens},
            )
        except Exception as lf_err:
            logger.warning(f"Langfuse generation start failed: {lf_err}")
            return None

    def _end_generation(self, generation, reply: CompletionReply | None = None, error: str | None = None):
        if generation is None:
            return
        try:
            if reply is not None:
                generation.update(
                    output=reply.content,
                    usage_details={
                        "input": reply.prompt_tokens,
                        "output": reply.completion_tokens,
                        "cache_read_input_tokens": reply.cached_tokens,
                    },
                )
            else:
                generation.update(level="ERROR", status_message=error or "failed")
            generation.end()
        except Exception as lf_err:
            logger.warning(f"Langfuse generation end failed: {lf_err}")
