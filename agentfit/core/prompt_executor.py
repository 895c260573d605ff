"""
Prompt Executor for AgentFit

Renders a template, calls the completion endpoint and parses the reply,
retrying transport and validation failures a bounded number of times.
Never synthesizes data: after the last attempt the caller gets
success=False with the cause.
"""

import asyncio
import logging
import time
from typing import Any, Mapping

from pydantic import BaseModel, Field

from agentfit.config.settings import Settings, get_settings
from agentfit.core.completion_client import CompletionClient, CompletionReply
from agentfit.core.errors import (
    CompletionTimeoutError,
    ResponseValidationError,
    TemplateError,
    TransportError,
)
from agentfit.core.response_parser import parse_reply
from agentfit.models.usage import TokenUsage
from agentfit.prompts.base import TemplateTable

logger = logging.getLogger(__name__)


class ExecutionOptions(BaseModel):
    """Per-call overrides of template defaults."""

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    max_retries: int | None = Field(default=None, ge=0)
    user_id: str | None = None
    trace_metadata: dict[str, Any] = Field(default_factory=dict)


class PromptResponse(BaseModel):
    """Outcome of executing one template."""

    success: bool
    data: Any = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
    error: str | None = None
    error_type: str | None = None  # "timeout", "transport", "validation" or "unexpected"
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def timed_out(self) -> bool:
        return self.error_type == "timeout"


class PromptExecutor:
    """
    Executes templates against the completion endpoint.

    Retry policy:
    - max_retries re-attempts after the first, fixed delay between them
    - TransportError, CompletionTimeoutError and ResponseValidationError are retried
    - TemplateError is raised before any network call
    """

    def __init__(
        self,
        client: CompletionClient,
        templates: TemplateTable,
        settings: Settings | None = None,
    ):
        self.client = client
        self.templates = templates
        self.settings = settings or get_settings()

    async def execute(
        self,
        template_id: str,
        variables: Mapping[str, Any],
        options: ExecutionOptions | None = None,
    ) -> PromptResponse:
        """
        Execute a template.

        Args:
            template_id: Template to execute
            variables: Values for the template placeholders
            options: Per-call overrides

        Returns:
            PromptResponse with parsed data on success, the last error otherwise.
            Usage covers every attempt that reached the endpoint.

        Raises:
            TemplateError: Unknown template or missing variable
        """
        options = options or ExecutionOptions()
        template = self.templates[template_id]
        messages = template.build_messages(variables)

        model = options.model or template.model or self.settings.default_model
        temperature = options.temperature if options.temperature is not None else template.temperature
        max_tokens = options.max_tokens or template.max_tokens or self.settings.default_max_tokens
        max_retries = options.max_retries if options.max_retries is not None else self.settings.max_retries
        max_attempts = max_retries + 1

        usage = TokenUsage()
        last_error: Exception | None = None
        started = time.perf_counter()

        for attempt in range(max_attempts):
            try:
                reply = await self.client.complete(
                    messages=messages,
                    model=model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    user=options.user_id,
                    trace_name=template.id,
                    trace_metadata={**options.trace_metadata, "attempt": attempt + 1},
                )
            except (TransportError, ResponseValidationError) as e:
                # non-JSON or choice-less 2xx bodies are retried like transport failures
                last_error = e
                logger.warning(f"{template.id} attempt {attempt + 1}/{max_attempts} failed: {e}")
            else:
                usage = usage + self.estimate_usage(reply)
                try:
                    data = parse_reply(reply.content, template.response_shape, template.response_model)
                except ResponseValidationError as e:
                    last_error = e
                    logger.warning(
                        f"{template.id} attempt {attempt + 1}/{max_attempts} returned an invalid reply: {e}"
                    )
                else:
                    return PromptResponse(
                        success=True,
                        data=data,
                        usage=usage,
                        metadata=self._metadata(template.id, model, attempt + 1, started),
                    )

            if attempt < max_attempts - 1:
                await asyncio.sleep(self.settings.retry_delay_seconds)

        logger.error(f"{template.id} failed after {max_attempts} attempts: {last_error}")
        return PromptResponse(
            success=False,
            usage=usage,
            error=str(last_error),
            error_type=self._error_type(last_error),
            metadata=self._metadata(template.id, model, max_attempts, started),
        )

    async def execute_guarded(
        self,
        template_id: str,
        variables: Mapping[str, Any],
        options: ExecutionOptions | None = None,
    ) -> PromptResponse:
        """
        Like execute(), but any unexpected error becomes a failed response.

        TemplateError still propagates.
        """
        try:
            return await self.execute(template_id, variables, options)
        except TemplateError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error executing {template_id}: {e}")
            return PromptResponse(success=False, error=str(e), error_type="unexpected")

    def estimate_usage(self, reply: CompletionReply) -> TokenUsage:
        """
        Price one reply.

        Cached prompt tokens are billed at (1 - cached_prompt_discount) of
        the prompt price; the difference is reported as savings.
        """
        prompt_price = self.settings.prompt_price_per_million
        completion_price = self.settings.completion_price_per_million
        discount = self.settings.cached_prompt_discount

        cached = min(reply.cached_tokens, reply.prompt_tokens)
        uncached = reply.prompt_tokens - cached
        cost = (
            uncached * prompt_price
            + cached * prompt_price * (1 - discount)
            + reply.completion_tokens * completion_price
        ) / 1_000_000
        savings = cached * prompt_price * discount / 1_000_000

        return TokenUsage(
            prompt_tokens=reply.prompt_tokens,
            completion_tokens=reply.completion_tokens,
            cached_tokens=reply.cached_tokens,
            total_tokens=reply.total_tokens,
            estimated_cost=cost,
            cost_savings=savings,
        )

    @staticmethod
    def _error_type(error: Exception | None) -> str | None:
        if isinstance(error, CompletionTimeoutError):
            return "timeout"
        if isinstance(error, TransportError):
            return "transport"
        if isinstance(error, ResponseValidationError):
            return "validation"
        return None

    @staticmethod
    def _metadata(template_id: str, model: str, attempts: int, started: float) -> dict[str, Any]:
        return {
            "template_id": template_id,
            "model": model,
            "attempts": attempts,
            "duration_ms": int((time.perf_counter() - started) * 1000),
        }
