import json

import httpx
import pytest
import respx

from netmatch.interpreter import describe, interpret, parse_filter, strip_code_fence
from netmatch.schemas import StructuredFilter

COMPLETIONS_URL = "https://groq.test/openai/v1/chat/completions"


def test_strip_code_fence_variants():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n{"a": 1}```') == '{"a": 1}'
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


def test_parse_filter_reads_fenced_json():
    content = '```json\n{"skills": ["React"], "location": "Austin", "intent": null, "availability": null, "workingStyle": null}\n```'
    flt = parse_filter(content)
    assert flt == StructuredFilter(skills=["React"], location="Austin")


def test_parse_filter_rejects_non_json_and_non_objects():
    assert parse_filter("Sure! Here are React devs in Austin.") is None
    assert parse_filter('["React"]') is None
    assert parse_filter("") is None


def test_parse_filter_with_nothing_usable_is_unparseable():
    content = json.dumps({"skills": [], "location": "null", "intent": "investor", "availability": "", "workingStyle": None})
    assert parse_filter(content) is None


def test_parse_filter_coerces_fields():
    content = json.dumps(
        {
            "skills": "Python, python , Django,",
            "location": " Berlin ",
            "intent": "Co-Founder",
            "availability": "part-time",
            "working_style": "remote",
        }
    )
    flt = parse_filter(content)
    assert flt.skills == ["Python", "Django"]
    assert flt.location == "Berlin"
    assert flt.intent == "cofounder"
    assert flt.availability == "part-time"
    assert flt.working_style == "remote"


@pytest.mark.asyncio
@respx.mock
async def test_interpret_react_developers_in_austin(completion):
    route = respx.post(COMPLETIONS_URL).respond(
        json=completion(
            '{"skills": ["React"], "location": "Austin", "intent": null, "availability": null, "workingStyle": null}'
        )
    )
    flt = await interpret("React developers in Austin")
    assert flt == StructuredFilter(skills=["React"], location="Austin", intent=None, availability=None, working_style=None)

    sent = json.loads(route.calls.last.request.content)
    assert sent["model"] == "llama-test"
    assert sent["temperature"] == pytest.approx(0.1)
    assert "React developers in Austin" in sent["messages"][-1]["content"]


@pytest.mark.asyncio
@respx.mock
async def test_interpret_http_error_is_unparseable():
    respx.post(COMPLETIONS_URL).respond(status_code=500, text="upstream exploded")
    assert await interpret("React developers in Austin") is None


@pytest.mark.asyncio
@respx.mock
async def test_interpret_malformed_text_is_unparseable(completion):
    respx.post(COMPLETIONS_URL).respond(json=completion("I found several React developers in Austin."))
    assert await interpret("React developers in Austin") is None


@pytest.mark.asyncio
@respx.mock
async def test_interpret_timeout_is_unparseable():
    respx.post(COMPLETIONS_URL).mock(side_effect=httpx.ReadTimeout("slow"))
    assert await interpret("designers") is None


@pytest.mark.asyncio
@respx.mock
async def test_blank_query_skips_the_model():
    route = respx.post(COMPLETIONS_URL)
    assert await interpret("   ") is None
    assert not route.called


def test_describe():
    assert describe(StructuredFilter(skills=["React"], location="Austin")) == "Looking for professionals with React skills in Austin"
    assert (
        describe(StructuredFilter(intent="cofounder", skills=["Go", "Rust"], availability="full-time", working_style="remote"))
        == "Looking for a cofounder with Go, Rust skills (available full-time, remote)"
    )
