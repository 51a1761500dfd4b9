import pytest

from letteros.ai.errors import AIResponseParseError
from letteros.ai.parsing import find_json_object, require_json_object, strip_code_fences
from letteros.ai.prompts import PromptTemplateError, render_prompt


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_find_json_object_skips_surrounding_prose():
    text = 'Sure! Here it is: {"title": "Hi {name}", "items": [1, 2]} Hope that helps.'
    assert find_json_object(text) == {"title": "Hi {name}", "items": [1, 2]}


def test_find_json_object_handles_escaped_quotes():
    assert find_json_object('{"body": "He said \\"}\\" loudly"}') == {"body": 'He said "}" loudly'}


def test_find_json_object_returns_none_without_object():
    assert find_json_object("no json here") is None
    assert find_json_object('{"unterminated": ') is None


def test_require_json_object_raises():
    with pytest.raises(AIResponseParseError):
        require_json_object("plain text")


def test_render_prompt_fills_placeholders():
    prompt = render_prompt("planning_task_complete", newsletter_count=4)
    assert "4" in prompt


def test_render_prompt_missing_placeholder():
    with pytest.raises(PromptTemplateError):
        render_prompt("planning_task_complete")


def test_unknown_template():
    with pytest.raises(PromptTemplateError):
        render_prompt("does_not_exist")


def test_render_prompt_accepts_name_placeholder():
    prompt = render_prompt("launch_analyze", text="We sell focus coaching", name="Focus Coaching")

    assert "Focus Coaching" in prompt
    assert "We sell focus coaching" in prompt
