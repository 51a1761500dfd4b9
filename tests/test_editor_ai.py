import asyncio
import json

import pytest

from conftest import FakeLLM
from letteros.ai import editor, launch_wizard
from letteros.ai.errors import AIResponseParseError
from letteros.ai.plan_editing import modify_plan
from letteros.models.editor import AssistEditRequest
from letteros.models.launch_content import GeneratedBy, QuestionContext
from letteros.models.planning import ModifyPlanRequest, NewsletterPlan


def run(coro):
    return asyncio.run(coro)


def test_modify_plan_accepts_camel_case_field():
    llm = FakeLLM("  Block two hours every morning  ")
    request = ModifyPlanRequest(
        plan=NewsletterPlan(number=1, main_point="Focus more"),
        field="mainPoint",
        instruction="Make it concrete",
    )

    response = run(modify_plan(request, llm))

    assert request.field == "main_point"
    assert response.modified_value == "Block two hours every morning"
    assert "Make it concrete" in llm.prompts[0]


def test_modify_plan_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        ModifyPlanRequest(plan=NewsletterPlan(number=1), field="color")


def test_plan_alternatives_skip_empty_values():
    llm = FakeLLM(json.dumps({"alternatives": [
        {"value": "Option A", "reason": "Short"},
        {"value": ""},
        {"value": "Option B"},
    ]}))
    request = ModifyPlanRequest(action="alternatives", plan=NewsletterPlan(number=2, cta="Reply"), field="cta")

    response = run(modify_plan(request, llm))

    assert [a.value for a in response.alternatives] == ["Option A", "Option B"]
    assert response.modified_value is None


def test_subject_options_truncate_content():
    llm = FakeLLM(json.dumps({"subjects": [
        {"id": "1", "text": "A", "approach": "curiosity"},
        {"id": "2", "text": "B"},
        {"id": "3", "text": "C"},
    ]}))

    subjects = run(editor.generate_subject_options("x" * 5000, "Coaching", llm))

    assert [s.text for s in subjects] == ["A", "B", "C"]
    assert "x" * 2000 in llm.prompts[0]
    assert "x" * 2001 not in llm.prompts[0]


def test_titles_require_a_list():
    with pytest.raises(AIResponseParseError):
        run(editor.generate_titles("content", FakeLLM('{"titles": "one"}')))


def test_assist_body_modify_returns_text():
    llm = FakeLLM("Rewritten sentence.")
    request = AssistEditRequest(type="body_modify", current_body="Body", selected_text="Old", instruction="Shorter")

    response = run(editor.assist_edit(request, llm))

    assert response.modified_text == "Rewritten sentence."
    assert response.alternatives is None


def test_wizard_question_needs_previous_answers():
    context = QuestionContext(long_text="We sell coaching", answers=["Engineers"])

    with pytest.raises(launch_wizard.InvalidWizardStepError):
        run(launch_wizard.next_question(3, context, FakeLLM()))


def test_wizard_question_step_two():
    llm = FakeLLM('{"question": "What hurts most?", "options": ["Meetings", "Slack"]}')
    context = QuestionContext(long_text="We sell coaching", answers=["Engineers"])

    question = run(launch_wizard.next_question(2, context, llm))

    assert question.options == ["Meetings", "Slack"]
    assert "Engineers" in llm.prompts[0]


def test_generated_definition_keeps_name_and_answers():
    llm = FakeLLM(json.dumps({
        "name": "Something else",
        "description": "Coaching for engineers",
        "targetAudience": "Remote engineers",
        "launchContent": {"targetPain": "Context switching", "generatedBy": "manual"},
    }))

    content = run(launch_wizard.generate_definition(
        "Focus Coaching", "We sell coaching", ["a1", "a2", "a3", "a4"], llm
    ))

    assert content.name == "Focus Coaching"
    assert content.launch_content.generated_by == GeneratedBy.AI
    assert content.launch_content.target_pain == "Context switching"
    assert content.launch_content.ai_answers.step4 == "a4"
