# letteros/ai/plan_editing.py
import logging
from typing import Any, List

from letteros.ai.errors import AIResponseParseError
from letteros.ai.parsing import require_json_object
from letteros.ai.prompts import render_prompt, describe_launch_context
from letteros.ai.prompts.loader import NOT_SET
from letteros.models.planning import (
    Alternative, ModifyPlanRequest, ModifyPlanResponse, NewsletterPlan
)

logger = logging.getLogger(__name__)

PLAN_FIELD_LABELS = (
    ("subject", "Subject"),
    ("main_point", "Main point"),
    ("target_belief", "Belief to change"),
    ("experience_to_use", "Experience to use"),
    ("proof", "Proof"),
    ("cta", "CTA"),
)

def describe_plan(plan: NewsletterPlan) -> str:
    return "\n".join(
        f"- {label}: {getattr(plan, name) or NOT_SET}" for name, label in PLAN_FIELD_LABELS
    )

def parse_alternatives(items: Any) -> List[Alternative]:
    if not isinstance(items, list):
        raise AIResponseParseError("AI response has no alternatives list")
    alternatives = []
    for item in items:
        if isinstance(item, dict) and item.get("value"):
            alternatives.append(Alternative(
                value=str(item["value"]),
                reason=str(item.get("reason") or "")
            ))
    return alternatives

async def modify_plan(request: ModifyPlanRequest, llm) -> ModifyPlanResponse:
    """Rewrite one plan field, or propose five alternatives for it"""
    plan = request.plan

    if request.action == "alternatives":
        prompt = render_prompt(
            "plan_alternatives",
            field=request.field,
            number=plan.number,
            plan_block=describe_plan(plan),
            launch_context=describe_launch_context(request.launch_content),
            collected_experiences=request.collected_experiences or NOT_SET,
            current_value=getattr(plan, request.field) or ""
        )
        raw = await llm.generate(prompt)
        alternatives = parse_alternatives(require_json_object(raw).get("alternatives"))
        logger.info(f"Generated {len(alternatives)} alternatives for plan field {request.field}")
        return ModifyPlanResponse(success=True, alternatives=alternatives)

    prompt = render_prompt(
        "modify_plan_field",
        field=request.field,
        number=plan.number,
        plan_block=describe_plan(plan),
        collected_experiences=request.collected_experiences or NOT_SET,
        instruction=request.instruction
    )
    raw = await llm.generate(prompt)
    return ModifyPlanResponse(success=True, modified_value=raw.strip())
