"""
Shared fixtures: settings without retry delays, a fake completion
endpoint that answers per template, and an engine wired to it.
"""

import json
from collections import deque
from typing import Any

import httpx
import pytest

from agentfit.config.settings import Settings
from agentfit.core.activity import ActivityLogger
from agentfit.core.cache import InMemoryCacheStore, ResultCache
from agentfit.core.completion_client import CompletionClient
from agentfit.core.engine import MatchEngine
from agentfit.core.prompt_executor import PromptExecutor
from agentfit.models.agents import AgentKind, TailoringAgentKind
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.prompts import (
    SCORING_ORCHESTRATION_TEMPLATE_ID,
    SCORING_TEMPLATE_IDS,
    TAILORING_ORCHESTRATION_TEMPLATE_ID,
    TAILORING_TEMPLATE_IDS,
    TemplateTable,
    build_template_table,
)

DEFAULT_USAGE = {
    "prompt_tokens": 100,
    "completion_tokens": 50,
    "total_tokens": 150,
    "prompt_tokens_details": {"cached_tokens": 20},
}

CATEGORY_SCORES = {
    AgentKind.TECHNICAL_SKILLS: 80,
    AgentKind.EXPERIENCE_DEPTH: 70,
    AgentKind.ACHIEVEMENTS: 60,
    AgentKind.EDUCATION: 90,
    AgentKind.SOFT_SKILLS: 75,
    AgentKind.CAREER_PROGRESSION: 65,
}
# 80*.25 + 70*.25 + 60*.20 + 90*.10 + 75*.10 + 65*.10
WEIGHTED_SCORE = 72.5

RESUME = """# Jane Doe
Senior Data Engineer

## Experience
- Built Spark pipelines processing 2TB/day at Acme (2019-2024)
- Led migration of 40 Airflow DAGs to Kubernetes

## Skills
Python, SQL, Spark, Airflow, AWS
"""

TAILORED_RESUME = """# Jane Doe
Senior Data Engineer | Streaming Platforms

## Skills
Python, Spark, Kafka, Airflow, AWS
"""

TAILORING_REPLIES: dict[TailoringAgentKind, dict[str, Any]] = {
    TailoringAgentKind.SKILLS_OPTIMIZATION: {
        "optimizedSkillsSection": "Python, Spark, Kafka",
        "changesMade": ["Moved Spark to the front"],
    },
    TailoringAgentKind.EXPERIENCE_REFRAMING: {
        "enhancedExperienceSection": "- Built streaming-ready Spark pipelines",
        "relevanceImprovements": ["Emphasised streaming"],
    },
    TailoringAgentKind.ACHIEVEMENT_AMPLIFICATION: {
        "amplifiedAchievements": "- Cut pipeline cost by 30%",
        "impactImprovements": ["Added cost metric"],
    },
    TailoringAgentKind.KEYWORD_OPTIMIZATION: {
        "atsOptimizedContent": "Kafka, stream processing",
        "keywordsIntegrated": ["Kafka"],
    },
    TailoringAgentKind.PROFESSIONAL_SUMMARY: {
        "professionalSummary": "Data engineer focused on streaming platforms.",
        "brandPositioning": "Streaming specialist",
    },
    TailoringAgentKind.EDUCATION_CERTIFICATIONS: {
        "optimizedEducation": "BSc Computer Science",
        "educationPositioning": "Kept brief",
    },
    TailoringAgentKind.GAP_MITIGATION: {
        "gapMitigationStrategies": ["Frame Airflow work as orchestration depth"],
        "compensatingStrengths": ["Spark scale"],
    },
    TailoringAgentKind.INDUSTRY_ALIGNMENT: {
        "industryAlignedContent": "Fintech data platforms",
        "terminologyUpdates": ["pipelines -> data products"],
    },
}


class FakeCompletionEndpoint:
    """
    Stands in for the chat completions endpoint.

    Requests are matched to templates by their system and user message.
    A queued reply is one of:
    - str: a 200 completion with that content
    - int: an empty response with that status code
    - Exception: raised from the transport
    - httpx.Response: a fresh copy of it
    The last queued reply for a template is repeated.
    """

    def __init__(self, templates: TemplateTable):
        self.templates = templates
        self.replies: dict[str, deque] = {}
        self.calls: list[str] = []
        self.payloads: list[dict[str, Any]] = []

    def reply(self, template_id: str, *replies: Any) -> None:
        self.replies[template_id] = deque(replies)

    def reply_json(self, template_id: str, data: dict[str, Any]) -> None:
        self.reply(template_id, json.dumps(data))

    def calls_to(self, template_id: str) -> int:
        return self.calls.count(template_id)

    def identify(self, messages: list[dict[str, str]]) -> str:
        system, user = messages[0]["content"], messages[1]["content"]
        for template in self.templates.values():
            prefix = template.user_template.split("{", 1)[0]
            if template.system_role == system and user.startswith(prefix):
                return template.id
        raise AssertionError("Request does not match any template")

    def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        template_id = self.identify(payload["messages"])
        self.calls.append(template_id)
        self.payloads.append(payload)

        queue = self.replies.get(template_id)
        if not queue:
            return httpx.Response(500, json={"error": f"no reply for {template_id}"})
        reply = queue.popleft() if len(queue) > 1 else queue[0]

        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, int):
            return httpx.Response(reply, json={"error": "upstream failure"})
        if isinstance(reply, httpx.Response):
            return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)
        return httpx.Response(
            200,
            json={
                "model": payload["model"],
                "choices": [{"message": {"role": "assistant", "content": reply}}],
                "usage": DEFAULT_USAGE,
            },
        )

    # =========================================================================
    # CANNED REPLIES
    # =========================================================================

    def reply_scoring_roster(self, scores: dict[AgentKind, float] | None = None) -> None:
        for kind, score in (scores or CATEGORY_SCORES).items():
            label = kind.value.replace("_", " ")
            self.reply_json(SCORING_TEMPLATE_IDS[kind], {
                "categoryScore": score,
                "reasoning": f"Solid {label} evidence",
                "recommendations": [f"Strengthen {label}"],
            })
        self.reply_json(SCORING_TEMPLATE_IDS[AgentKind.STRENGTHS], {
            "topStrengths": ["Large-scale Spark pipelines", "Airflow orchestration"],
            "reasoning": "Directly relevant platform work",
            "differentiators": ["Led a Kubernetes migration"],
        })
        self.reply_json(SCORING_TEMPLATE_IDS[AgentKind.WEAKNESSES], {
            "topWeaknesses": [{
                "weakness": "No streaming experience",
                "impact": "Role is Kafka-heavy",
                "severity": "high",
                "improvementPlan": {
                    "shortTerm": "Kafka course",
                    "midTerm": "Side project",
                    "longTerm": "Production streaming work",
                },
            }],
            "reasoning": "Streaming is core to the role",
        })

    def reply_scoring_orchestration(self, overall_score: float) -> None:
        self.reply_json(SCORING_ORCHESTRATION_TEMPLATE_ID, {
            "overallScore": overall_score,
            "category": "good",
            "breakdown": {},
            "keyStrengths": ["Spark at scale"],
            "keyWeaknesses": ["No streaming experience"],
            "redFlags": [],
            "positiveIndicators": ["Clear ownership"],
            "hiringRecommendation": "Proceed to technical interview",
            "interviewFocus": [{
                "category": "Streaming",
                "areas": ["Kafka"],
                "questions": ["How would you design exactly-once delivery?"],
                "redFlags": ["Only batch exposure"],
            }],
        })

    def reply_tailoring_roster(self) -> None:
        for kind, data in TAILORING_REPLIES.items():
            self.reply_json(TAILORING_TEMPLATE_IDS[kind], data)

    def reply_tailoring_orchestration(self, document: str = TAILORED_RESUME) -> None:
        self.reply_json(TAILORING_ORCHESTRATION_TEMPLATE_ID, {
            "finalTailoredResume": document,
            "priorityChanges": ["Lead with streaming"],
            "changeSummary": "Repositioned for a streaming role",
            "expectedScoreImprovements": ["technical skills +10"],
        })


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openrouter_api_key="test-key",
        retry_delay_seconds=0,
        max_retries=1,
        langfuse_enabled=False,
        cache_dir="",
    )


@pytest.fixture
def templates(settings) -> TemplateTable:
    return build_template_table(settings)


@pytest.fixture
def endpoint(templates) -> FakeCompletionEndpoint:
    return FakeCompletionEndpoint(templates)


@pytest.fixture
def client(settings, endpoint) -> CompletionClient:
    return CompletionClient(settings, transport=httpx.MockTransport(endpoint.handle))


@pytest.fixture
def executor(client, templates, settings) -> PromptExecutor:
    return PromptExecutor(client, templates, settings)


@pytest.fixture
def cache(settings) -> ResultCache:
    return ResultCache(InMemoryCacheStore(), settings)


@pytest.fixture
def activity() -> ActivityLogger:
    return ActivityLogger(capacity=100)


@pytest.fixture
def engine(executor, cache, activity, settings) -> MatchEngine:
    return MatchEngine(executor, cache=cache, activity=activity, settings=settings)


@pytest.fixture
def candidate() -> CandidateProfile:
    return CandidateProfile(resume=RESUME, name="Jane Doe")


@pytest.fixture
def job() -> JobPosting:
    return JobPosting(
        id="job-42",
        title="Staff Data Engineer",
        company="Streamly",
        description="Build Kafka and Spark streaming pipelines on AWS.",
        location="Remote",
    )
