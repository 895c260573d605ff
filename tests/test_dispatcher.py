"""
Tests for single-agent execution and the concurrent roster dispatch.
"""

import httpx
import pytest

from agentfit.core.agent_runner import AgentRunner
from agentfit.core.dispatcher import ParallelDispatcher
from agentfit.core.errors import TemplateError
from agentfit.models.agents import ANALYSIS_KINDS, SCORING_KINDS, AgentKind, TailoringAgentKind
from agentfit.prompts import SCORING_TEMPLATE_IDS, TAILORING_TEMPLATE_IDS

from conftest import CATEGORY_SCORES


@pytest.fixture
def runner(executor, settings, cache, activity) -> AgentRunner:
    return AgentRunner(executor, settings, cache, activity)


@pytest.fixture
def dispatcher(runner) -> ParallelDispatcher:
    return ParallelDispatcher(runner)


class TestAgentRunner:
    @pytest.mark.asyncio
    async def test_successful_agent(self, runner, endpoint, candidate, job):
        endpoint.reply_scoring_roster()
        result = await runner.run(AgentKind.EDUCATION, candidate, job)

        assert result.success
        assert not result.is_fallback
        assert result.category_score == 90
        assert result.usage.total_tokens == 150

    @pytest.mark.asyncio
    async def test_failed_agent_gets_conservative_fallback(self, runner, endpoint, candidate, job, settings):
        endpoint.reply(SCORING_TEMPLATE_IDS[AgentKind.ACHIEVEMENTS], 503)
        result = await runner.run(AgentKind.ACHIEVEMENTS, candidate, job)

        assert not result.success
        assert result.is_fallback
        assert result.category_score == settings.fallback_achievements_score
        assert result.category_score <= 50
        assert result.reasoning.startswith("achievements evaluation failed:")
        assert result.output["recommendations"] == []

    @pytest.mark.asyncio
    async def test_timeout_fallback_reasoning(self, runner, endpoint, candidate, job):
        endpoint.reply(SCORING_TEMPLATE_IDS[AgentKind.SOFT_SKILLS], httpx.ConnectTimeout("slow"))
        result = await runner.run(AgentKind.SOFT_SKILLS, candidate, job)

        assert result.reasoning == "soft skills assessment timed out - using conservative score"

    @pytest.mark.asyncio
    async def test_analysis_fallback_has_empty_lists(self, runner, endpoint, candidate, job):
        endpoint.reply(SCORING_TEMPLATE_IDS[AgentKind.WEAKNESSES], "no json")
        result = await runner.run(AgentKind.WEAKNESSES, candidate, job)

        assert result.is_fallback
        assert result.output["top_weaknesses"] == []
        assert result.category_score is None

    @pytest.mark.asyncio
    async def test_agent_result_cached_per_user(self, runner, endpoint, candidate, job):
        endpoint.reply_scoring_roster()
        await runner.run(AgentKind.TECHNICAL_SKILLS, candidate, job, user_id="u1")
        cached = await runner.run(AgentKind.TECHNICAL_SKILLS, candidate, job, user_id="u1")
        other_user = await runner.run(AgentKind.TECHNICAL_SKILLS, candidate, job, user_id="u2")

        assert cached.from_cache
        assert cached.usage is None
        assert not other_user.from_cache
        assert endpoint.calls_to(SCORING_TEMPLATE_IDS[AgentKind.TECHNICAL_SKILLS]) == 2

    @pytest.mark.asyncio
    async def test_fallbacks_are_not_cached(self, runner, endpoint, candidate, job):
        template_id = SCORING_TEMPLATE_IDS[AgentKind.EDUCATION]
        endpoint.reply(template_id, 500)
        await runner.run(AgentKind.EDUCATION, candidate, job, user_id="u1")
        endpoint.reply(template_id, '{"categoryScore": 77, "reasoning": "Relevant degree"}')
        result = await runner.run(AgentKind.EDUCATION, candidate, job, user_id="u1")

        assert result.success
        assert not result.from_cache
        assert result.category_score == 77

    @pytest.mark.asyncio
    async def test_activity_recorded_per_call(self, runner, endpoint, candidate, job, activity):
        endpoint.reply_scoring_roster()
        await runner.run(AgentKind.EDUCATION, candidate, job, user_id="u1")

        [event] = activity.recent("u1")
        assert event.activity_type == "job_scoring_agent"
        assert event.token_usage == 150
        assert event.metadata["agent_type"] == "education"
        assert event.metadata["job_id"] == job.id

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_fallback(self, runner, candidate, job, monkeypatch):
        async def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(runner.executor, "execute", explode)
        result = await runner.run(AgentKind.EDUCATION, candidate, job)

        assert result.is_fallback
        assert result.error == "boom"

    @pytest.mark.asyncio
    async def test_template_error_propagates(self, runner, candidate, job, monkeypatch):
        async def missing(*args, **kwargs):
            raise TemplateError("Missing required variables")

        monkeypatch.setattr(runner.executor, "execute", missing)
        with pytest.raises(TemplateError):
            await runner.run(AgentKind.EDUCATION, candidate, job)

    @pytest.mark.asyncio
    async def test_tailoring_agent_defaults(self, runner, endpoint, candidate, job):
        endpoint.reply_tailoring_roster()
        result = await runner.run_tailoring(TailoringAgentKind.KEYWORD_OPTIMIZATION, candidate, job)

        assert result.success
        assert result.output["keywords_integrated"] == ["Kafka"]
        user_message = endpoint.payloads[-1]["messages"][1]["content"]
        assert "No scoring analysis available." in user_message
        assert "Tailor the resume to maximize its match with this job." in user_message
        assert "Staff Data Engineer at Streamly (Remote)" in user_message

    @pytest.mark.asyncio
    async def test_failed_tailoring_agent_has_empty_output(self, runner, endpoint, candidate, job):
        endpoint.reply(TAILORING_TEMPLATE_IDS[TailoringAgentKind.GAP_MITIGATION], 500)
        result = await runner.run_tailoring(TailoringAgentKind.GAP_MITIGATION, candidate, job)

        assert not result.success
        assert result.output == {}


class TestParallelDispatcher:
    @pytest.mark.asyncio
    async def test_roster_returns_every_slot(self, dispatcher, endpoint, candidate, job):
        endpoint.reply_scoring_roster()
        result_set = await dispatcher.run_roster(candidate, job)

        assert list(result_set.scoring) == list(SCORING_KINDS)
        assert list(result_set.analysis) == list(ANALYSIS_KINDS)
        assert result_set.metadata.agents_executed == 8
        assert not result_set.has_fallback
        assert {k: r.category_score for k, r in result_set.scoring.items()} == CATEGORY_SCORES
        assert set(result_set.agent_timings()) == {k.value for k in AgentKind}

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_the_roster(self, dispatcher, endpoint, candidate, job):
        endpoint.reply_scoring_roster()
        endpoint.reply(SCORING_TEMPLATE_IDS[AgentKind.CAREER_PROGRESSION], 500)
        result_set = await dispatcher.run_roster(candidate, job)

        assert result_set.fallback_kinds == [AgentKind.CAREER_PROGRESSION]
        assert result_set.get(AgentKind.STRENGTHS).success

    @pytest.mark.asyncio
    async def test_everything_failing_still_yields_eight_results(self, dispatcher, candidate, job):
        result_set = await dispatcher.run_roster(candidate, job)

        assert len(result_set.all_results()) == 8
        assert all(r.is_fallback for r in result_set.all_results())

    @pytest.mark.asyncio
    async def test_tailoring_roster(self, dispatcher, endpoint, candidate, job):
        endpoint.reply_tailoring_roster()
        endpoint.reply(TAILORING_TEMPLATE_IDS[TailoringAgentKind.INDUSTRY_ALIGNMENT], 500)
        result_set = await dispatcher.run_tailoring_roster(candidate, job, "Score 72", "Focus on Kafka")

        assert len(result_set.results) == 8
        assert result_set.failed_kinds == [TailoringAgentKind.INDUSTRY_ALIGNMENT]
        assert result_set.success_rate == 87.5
