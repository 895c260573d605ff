"""
Prompt template primitives for AgentFit

A PromptTemplate fixes everything about one kind of completion request:
the system role, the user message with {placeholders}, the model and
sampling parameters, and the shape the reply must take.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field

from agentfit.core.errors import TemplateError

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

JSON_ONLY_INSTRUCTION = "Return ONLY valid JSON. No explanatory text or markdown."


class ResponseShape(str, Enum):
    """How a reply is parsed before validation."""

    TEXT = "text"
    JSON = "json"
    SECTIONED = "sectioned"  # UPDATED_RESUME: ... CHANGE_SUMMARY: ...


class Temperature:
    """Shared sampling temperatures."""

    PRECISE = 0.1
    BALANCED = 0.3
    CREATIVE = 0.5


class PromptTemplate(BaseModel):
    """An immutable prompt definition."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    description: str = ""
    system_role: str
    user_template: str
    model: str | None = None  # None means the configured default model
    temperature: float = Temperature.BALANCED
    max_tokens: int | None = None
    response_shape: ResponseShape = ResponseShape.TEXT
    response_model: type[BaseModel] | None = None
    version: str = "1.0.0"
    tags: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def variables(self) -> list[str]:
        """Placeholder names in order of first appearance."""
        seen: list[str] = []
        for name in PLACEHOLDER_PATTERN.findall(self.user_template):
            if name not in seen:
                seen.append(name)
        return seen

    def render(self, variables: Mapping[str, Any]) -> str:
        """
        Substitute {placeholders} in the user template.

        A value that is None or an empty string counts as missing.

        Raises:
            TemplateError: If any placeholder has no value
        """
        missing = [
            name for name in self.variables
            if variables.get(name) is None or variables.get(name) == ""
        ]
        if missing:
            raise TemplateError(
                f"Missing required variables for template '{self.id}': {', '.join(missing)}"
            )

        return PLACEHOLDER_PATTERN.sub(lambda m: str(variables[m.group(1)]), self.user_template)

    def build_messages(self, variables: Mapping[str, Any]) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_role},
            {"role": "user", "content": self.render(variables)},
        ]


class TemplateTable(Mapping[str, PromptTemplate]):
    """Read-only lookup of templates by id. Built once, never mutated."""

    def __init__(self, templates: Iterable[PromptTemplate]):
        table: dict[str, PromptTemplate] = {}
        for template in templates:
            if template.id in table:
                raise TemplateError(f"Duplicate template id: {template.id}")
            table[template.id] = template
        self._templates = MappingProxyType(table)

    def __getitem__(self, template_id: str) -> PromptTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateError(f"Unknown template: {template_id}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def by_tag(self, tag: str) -> list[PromptTemplate]:
        return [t for t in self._templates.values() if tag in t.tags]
