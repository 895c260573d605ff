"""
Usage aggregation for AgentFit

Rolls up token usage and cost across every agent call and the
orchestration call of one request. Cached agent outputs made no call
and contribute nothing.
"""

from typing import Iterable

from agentfit.models.agents import AgentResult
from agentfit.models.usage import TokenUsage, UsageTotals


def aggregate_usage(
    agent_results: Iterable[AgentResult],
    orchestration_usage: TokenUsage | None = None,
) -> UsageTotals:
    """Sum usage over agent results and the orchestration call."""
    usages = [r.usage for r in agent_results if r.usage is not None]
    if orchestration_usage is not None:
        usages.append(orchestration_usage)

    total = sum(usages, TokenUsage())
    return UsageTotals(
        **total.model_dump(),
        calls_counted=len(usages),
    )
