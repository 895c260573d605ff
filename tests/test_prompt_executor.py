"""
Tests for template rendering, the completion client and the retrying executor.
"""

import httpx
import pytest

from agentfit.core.completion_client import CompletionClient, CompletionReply
from agentfit.core.errors import TemplateError
from agentfit.core.prompt_executor import ExecutionOptions
from agentfit.models.agents import AgentKind
from agentfit.models.tailoring import EditMode
from agentfit.prompts import EDITING_TEMPLATE_IDS, SCORING_TEMPLATE_IDS, build_template_table
from agentfit.prompts.base import PromptTemplate, ResponseShape, TemplateTable

TECHNICAL = SCORING_TEMPLATE_IDS[AgentKind.TECHNICAL_SKILLS]
VALID_SCORE = '{"categoryScore": 68, "reasoning": "Most core tools present"}'


def _variables() -> dict[str, str]:
    return {"job": '{"title": "Data Engineer"}', "resume": "Python, Spark"}


class TestTemplates:
    def test_render_substitutes_placeholders(self):
        template = PromptTemplate(
            id="t", name="t", system_role="role", user_template="Hello {name}, see {name} and {job}"
        )
        assert template.variables == ["name", "job"]
        assert template.render({"name": "Ada", "job": "DE"}) == "Hello Ada, see Ada and DE"

    def test_inserted_values_are_not_rendered_again(self):
        template = PromptTemplate(id="t", name="t", system_role="r", user_template="{resume}")
        assert template.render({"resume": "uses {job} literally"}) == "uses {job} literally"

    def test_empty_value_counts_as_missing(self):
        template = PromptTemplate(id="t", name="t", system_role="r", user_template="{job} {resume}")
        with pytest.raises(TemplateError, match="resume"):
            template.render({"job": "x", "resume": ""})

    def test_duplicate_ids_rejected(self):
        template = PromptTemplate(id="t", name="t", system_role="r", user_template="x")
        with pytest.raises(TemplateError):
            TemplateTable([template, template])

    def test_unknown_template(self, templates):
        with pytest.raises(TemplateError):
            templates["does-not-exist"]

    def test_table_covers_both_rosters_and_editing(self, settings):
        table = build_template_table(settings)
        assert len(table.by_tag("scoring")) == 9
        assert len(table.by_tag("tailoring")) == 9
        assert len(table.by_tag("editing")) == 3
        assert table[TECHNICAL].response_shape == ResponseShape.JSON
        assert table[EDITING_TEMPLATE_IDS[EditMode.ASK]].response_shape == ResponseShape.TEXT

    def test_agent_ceilings_below_orchestration(self, templates, settings):
        assert templates[TECHNICAL].max_tokens == settings.agent_max_tokens
        assert templates["scoring-orchestration"].max_tokens == settings.orchestration_max_tokens
        assert settings.agent_max_tokens < settings.orchestration_max_tokens


class TestCompletionClient:
    @pytest.mark.asyncio
    async def test_reply_usage_and_headers(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["title"] = request.headers["X-Title"]
            return httpx.Response(200, json={
                "model": "openai/gpt-5-mini",
                "choices": [{"message": {"content": [{"type": "text", "text": "Hel"}, "lo"]}}],
                "usage": {"prompt_tokens": 10, "completion_tokens": 5, "prompt_tokens_details": {"cached_tokens": 4}},
            })

        client = CompletionClient(settings, transport=httpx.MockTransport(handler))
        reply = await client.complete([{"role": "user", "content": "hi"}], "openai/gpt-5-mini", 0.1, 100)
        await client.close()

        assert reply.content == "Hello"
        assert reply.cached_tokens == 4
        assert reply.total_tokens == 15
        assert seen["auth"] == "Bearer test-key"
        assert seen["title"] == settings.openrouter_app_title


class TestPromptExecutor:
    @pytest.mark.asyncio
    async def test_success(self, executor, endpoint):
        endpoint.reply(TECHNICAL, VALID_SCORE)
        response = await executor.execute(TECHNICAL, _variables())

        assert response.success
        assert response.data["category_score"] == 68
        assert response.usage.total_tokens == 150
        assert response.metadata["attempts"] == 1
        assert response.metadata["template_id"] == TECHNICAL

    @pytest.mark.asyncio
    async def test_missing_variable_raises_before_any_call(self, executor, endpoint):
        with pytest.raises(TemplateError):
            await executor.execute(TECHNICAL, {"job": "x"})
        assert endpoint.calls == []

    @pytest.mark.asyncio
    async def test_transport_failure_is_retried(self, executor, endpoint):
        endpoint.reply(TECHNICAL, 502, VALID_SCORE)
        response = await executor.execute(TECHNICAL, _variables())

        assert response.success
        assert response.metadata["attempts"] == 2
        assert endpoint.calls_to(TECHNICAL) == 2
        # the failed attempt produced no reply, so only one call is billed
        assert response.usage.total_tokens == 150

    @pytest.mark.asyncio
    async def test_invalid_reply_is_retried_and_billed(self, executor, endpoint):
        endpoint.reply(TECHNICAL, "not json at all", VALID_SCORE)
        response = await executor.execute(TECHNICAL, _variables())

        assert response.success
        assert response.usage.total_tokens == 300

    @pytest.mark.asyncio
    async def test_non_json_body_is_retried(self, executor, endpoint):
        endpoint.reply(TECHNICAL, httpx.Response(200, text="<html>gateway hiccup</html>"), VALID_SCORE)
        response = await executor.execute(TECHNICAL, _variables())

        assert response.success
        assert response.metadata["attempts"] == 2
        assert endpoint.calls_to(TECHNICAL) == 2
        assert response.usage.total_tokens == 150

    @pytest.mark.asyncio
    async def test_reply_without_choices_gives_up_with_cause(self, executor, endpoint, settings):
        endpoint.reply(TECHNICAL, httpx.Response(200, json={"choices": []}))
        response = await executor.execute(TECHNICAL, _variables())

        assert not response.success
        assert response.error_type == "validation"
        assert "no choices" in response.error
        assert endpoint.calls_to(TECHNICAL) == settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, executor, endpoint, settings):
        endpoint.reply(TECHNICAL, 500)
        response = await executor.execute(TECHNICAL, _variables())

        assert not response.success
        assert response.error_type == "transport"
        assert "HTTP 500" in response.error
        assert endpoint.calls_to(TECHNICAL) == settings.max_retries + 1

    @pytest.mark.asyncio
    async def test_timeout(self, executor, endpoint):
        endpoint.reply(TECHNICAL, httpx.ReadTimeout("read timed out"))
        response = await executor.execute(TECHNICAL, _variables(), ExecutionOptions(max_retries=0))

        assert not response.success
        assert response.timed_out
        assert endpoint.calls_to(TECHNICAL) == 1

    @pytest.mark.asyncio
    async def test_validation_failure(self, executor, endpoint):
        endpoint.reply(TECHNICAL, '{"categoryScore": 250, "reasoning": "x"}')
        response = await executor.execute(TECHNICAL, _variables())

        assert not response.success
        assert response.error_type == "validation"
        assert response.data is None

    @pytest.mark.asyncio
    async def test_guarded_execution_reports_unexpected_errors(self, executor, monkeypatch):
        async def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(executor, "execute", explode)
        response = await executor.execute_guarded(TECHNICAL, _variables())

        assert not response.success
        assert response.error == "boom"
        assert response.error_type == "unexpected"

    @pytest.mark.asyncio
    async def test_guarded_execution_still_raises_template_errors(self, executor, endpoint):
        with pytest.raises(TemplateError):
            await executor.execute_guarded(TECHNICAL, {"job": "x"})
        assert endpoint.calls == []

    @pytest.mark.asyncio
    async def test_options_override_template_defaults(self, executor, endpoint):
        endpoint.reply(TECHNICAL, VALID_SCORE)
        await executor.execute(
            TECHNICAL,
            _variables(),
            ExecutionOptions(model="anthropic/claude-sonnet", temperature=0.7, max_tokens=321, user_id="u-1"),
        )
        payload = endpoint.payloads[-1]
        assert payload["model"] == "anthropic/claude-sonnet"
        assert payload["temperature"] == 0.7
        assert payload["max_tokens"] == 321
        assert payload["user"] == "u-1"

    def test_cost_estimate_discounts_cached_prompt_tokens(self, executor):
        usage = executor.estimate_usage(
            CompletionReply(content="x", prompt_tokens=100, completion_tokens=50, cached_tokens=20, total_tokens=150)
        )
        # (80 * 0.25 + 20 * 0.25 * 0.1 + 50 * 2.0) / 1e6
        assert usage.estimated_cost == pytest.approx(120.5e-6)
        assert usage.cost_savings == pytest.approx(4.5e-6)
        assert usage.cache_hit_rate == 20.0
