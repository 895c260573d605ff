"""
Prompt templates for AgentFit

Contains:
- Scoring roster and scoring orchestration prompts
- Tailoring roster and tailoring orchestration prompts
- Single-prompt editing prompts
"""

from agentfit.config.settings import Settings
from agentfit.prompts.base import PromptTemplate, ResponseShape, TemplateTable, Temperature
from agentfit.prompts.editing import EDITING_TEMPLATE_IDS, editing_templates
from agentfit.prompts.scoring import (
    SCORING_ORCHESTRATION_TEMPLATE_ID,
    SCORING_TEMPLATE_IDS,
    scoring_templates,
)
from agentfit.prompts.tailoring import (
    TAILORING_ORCHESTRATION_TEMPLATE_ID,
    TAILORING_TEMPLATE_IDS,
    tailoring_templates,
)


def build_template_table(settings: Settings) -> TemplateTable:
    """Build the immutable table of every template the engine uses."""
    return TemplateTable([
        *scoring_templates(settings),
        *tailoring_templates(settings),
        *editing_templates(settings),
    ])


__all__ = [
    "PromptTemplate",
    "ResponseShape",
    "TemplateTable",
    "Temperature",
    "build_template_table",
    "EDITING_TEMPLATE_IDS",
    "SCORING_ORCHESTRATION_TEMPLATE_ID",
    "SCORING_TEMPLATE_IDS",
    "TAILORING_ORCHESTRATION_TEMPLATE_ID",
    "TAILORING_TEMPLATE_IDS",
]
