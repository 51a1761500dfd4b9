# letteros/ai/launch_wizard.py
"""Four-question wizard that turns a free-form business description into launch content"""
import logging
from typing import Any, Dict

from pydantic import ValidationError
from letteros.ai.errors import AIResponseParseError
from letteros.ai.parsing import require_json_object
from letteros.ai.prompts import render_prompt
from letteros.models.launch_content import (
    AIAnswers, GeneratedBy, LaunchContentCreate, WizardQuestion, QuestionContext
)

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 4

class InvalidWizardStepError(ValueError):
    pass

def _question(raw: str) -> WizardQuestion:
    try:
        return WizardQuestion.model_validate(require_json_object(raw))
    except ValidationError as e:
        raise AIResponseParseError(f"Unexpected wizard question payload: {e}")

async def analyze_description(text: str, name: str, llm) -> WizardQuestion:
    """Step 1: who the launch is for"""
    raw = await llm.generate(render_prompt("launch_analyze", text=text, name=name))
    return _question(raw)

async def next_question(step: int, context: QuestionContext, llm) -> WizardQuestion:
    """Steps 2 to 4, each building on the previous answers"""
    if step <= FIRST_STEP or step > LAST_STEP:
        raise InvalidWizardStepError(f"Invalid step: {step}")
    if len(context.answers) < step - 1:
        raise InvalidWizardStepError(f"Step {step} needs {step - 1} previous answers")

    answers = {f"answer_{i}": answer for i, answer in enumerate(context.answers[:step - 1], start=1)}
    raw = await llm.generate(render_prompt(
        f"launch_question_{step}",
        long_text=context.long_text,
        **answers
    ))
    return _question(raw)

async def generate_definition(name: str, long_text: str, answers, llm) -> LaunchContentCreate:
    """Final step: a complete launch content definition from the four answers"""
    raw = await llm.generate(render_prompt(
        "launch_generate",
        name=name,
        long_text=long_text,
        answer_1=answers[0],
        answer_2=answers[1],
        answer_3=answers[2],
        answer_4=answers[3]
    ))
    payload: Dict[str, Any] = require_json_object(raw)
    payload["name"] = name

    details = payload.get("launchContent")
    if not isinstance(details, dict):
        details = {}
    details["generatedBy"] = GeneratedBy.AI.value
    details["aiAnswers"] = AIAnswers(
        step1=answers[0], step2=answers[1], step3=answers[2], step4=answers[3]
    ).model_dump(by_alias=True)
    payload["launchContent"] = details

    try:
        content = LaunchContentCreate.model_validate(payload)
    except ValidationError as e:
        raise AIResponseParseError(f"Unexpected launch content payload: {e}")

    logger.info(f"Generated launch content definition: {name}")
    return content
