"""
Token usage models for AgentFit

Per-call token accounting and the per-request roll-up across every
agent and orchestration call.
"""

from pydantic import BaseModel, ConfigDict, Field


class TokenUsage(BaseModel):
    """Token counts and cost estimate for one completion call (or several retries of it)."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    cached_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    estimated_cost: float = Field(default=0.0, ge=0, description="USD")
    cost_savings: float = Field(default=0.0, ge=0, description="USD saved by cached prompt tokens")

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            cached_tokens=self.cached_tokens + other.cached_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            estimated_cost=self.estimated_cost + other.estimated_cost,
            cost_savings=self.cost_savings + other.cost_savings,
        )

    @property
    def cache_hit_rate(self) -> float:
        """Share of prompt tokens served from the provider's prompt cache (0-100)."""
        if not self.prompt_tokens:
            return 0.0
        return round(self.cached_tokens / self.prompt_tokens * 100, 2)


class UsageTotals(TokenUsage):
    """Sum of every TokenUsage produced while serving one request."""

    calls_counted: int = Field(default=0, ge=0)
