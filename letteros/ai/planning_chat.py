# letteros/ai/planning_chat.py
"""Planning chat orchestration.

Each call is one turn: the transcript so far goes in, and either a single
clarifying question or a full newsletter series proposal comes out. Nothing
is persisted; the client resends the transcript every turn.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from letteros.config import settings
from letteros.ai.parsing import find_json_object, strip_code_fences
from letteros.ai.prompts import render_prompt, describe_launch_context
from letteros.models.launch_content import LaunchContext
from letteros.models.planning import (
    ChatMessage, ChatRole, NewsletterPlan, PlanningChatRequest,
    QuestionResult, ProposalResult
)

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_REASON = "Tell me more about your experience"
FALLBACK_MAIN_POINT = "Communicate the value"
FALLBACK_TARGET_BELIEF = "The reader's problem"
FALLBACK_PROOF = "Results and case studies"
FALLBACK_CTA = "Get in touch"

def count_user_turns(history: List[ChatMessage]) -> int:
    return sum(1 for message in history if message.role == ChatRole.USER)

def format_transcript(history: List[ChatMessage]) -> str:
    if not history:
        return "(no messages yet)"
    lines = []
    for message in history:
        speaker = "User" if message.role == ChatRole.USER else "AI"
        lines.append(f"{speaker}: {message.text}")
    return "\n\n".join(lines)

def collect_user_experiences(history: List[ChatMessage]) -> str:
    return "\n\n".join(m.text for m in history if m.role == ChatRole.USER)

def fallback_plan(context: LaunchContext, number: int, experiences: str) -> NewsletterPlan:
    return NewsletterPlan(
        number=number,
        subject=f"{context.name or 'Newsletter'} - Part {number}",
        main_point=context.value_proposition or FALLBACK_MAIN_POINT,
        target_belief=context.target_pain or FALLBACK_TARGET_BELIEF,
        experience_to_use=experiences,
        proof=FALLBACK_PROOF,
        cta=FALLBACK_CTA,
    )

def fallback_proposal(request: PlanningChatRequest, turn_count: int) -> ProposalResult:
    """Deterministic proposal built from launch content fields alone"""
    experiences = collect_user_experiences(request.chat_history)
    return ProposalResult(
        newsletters=[
            fallback_plan(request.launch_content, i, experiences)
            for i in range(1, request.newsletter_count + 1)
        ],
        collected_experiences=experiences,
        turn_count=turn_count,
        forced=True,
    )

def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)

def _plan_from_dict(item: Dict[str, Any], number: int) -> NewsletterPlan:
    experience = item.get("experienceToUse", item.get("experience_to_use"))
    return NewsletterPlan(
        number=number,
        subject=_text(item.get("subject")),
        main_point=_text(item.get("mainPoint", item.get("main_point"))),
        target_belief=_text(item.get("targetBelief", item.get("target_belief"))),
        experience_to_use=None if experience is None else _text(experience),
        proof=_text(item.get("proof")),
        cta=_text(item.get("cta")),
    )

def normalize_plans(
    raw_plans: Any,
    count: int,
    context: LaunchContext,
    experiences: str
) -> List[NewsletterPlan]:
    """Exactly `count` plans numbered 1..count; gaps are filled from the fallback"""
    items = raw_plans if isinstance(raw_plans, list) else []
    plans = []
    for i in range(count):
        number = i + 1
        item = items[i] if i < len(items) else None
        if isinstance(item, dict):
            plans.append(_plan_from_dict(item, number))
        else:
            plans.append(fallback_plan(context, number, experiences))

    if len(items) != count:
        logger.warning(f"Proposal had {len(items)} newsletters, normalized to {count}")
    return plans

class PlanningChatOrchestrator:
    """Runs one planning chat turn against a language model"""

    def __init__(self, max_turns: Optional[int] = None):
        self.max_turns = max_turns if max_turns is not None else settings.planning_max_turns

    def is_forced(self, request: PlanningChatRequest, turn_count: int) -> bool:
        return request.force_complete or turn_count >= self.max_turns

    def build_prompt(self, request: PlanningChatRequest, turn_count: int, forced: bool) -> str:
        if forced:
            task = render_prompt(
                "planning_task_complete",
                newsletter_count=request.newsletter_count
            )
        elif turn_count == 0:
            task = render_prompt(
                "planning_task_first_question",
                product_name=request.launch_content.name or "your launch"
            )
        else:
            hint = ""
            if turn_count >= 3:
                hint = "If you already have enough information, complete the plan instead."
            task = render_prompt(
                "planning_task_next_question",
                next_turn=turn_count + 1,
                completion_hint=hint
            )

        return render_prompt(
            "planning_chat",
            launch_context=describe_launch_context(request.launch_content),
            newsletter_count=request.newsletter_count,
            turn_count=turn_count,
            transcript=format_transcript(request.chat_history),
            task=task
        )

    async def next_turn(self, request: PlanningChatRequest, llm) -> Union[QuestionResult, ProposalResult]:
        turn_count = count_user_turns(request.chat_history)
        forced = self.is_forced(request, turn_count)
        logger.info(
            f"Planning chat turn: user_turns={turn_count} forced={forced} "
            f"count={request.newsletter_count}"
        )

        raw = await llm.generate(self.build_prompt(request, turn_count, forced))
        parsed = find_json_object(strip_code_fences(raw))

        if parsed is not None and parsed.get("type") == "proposal":
            return self._proposal(parsed, request, turn_count, forced)

        if forced:
            logger.warning("Forced planning turn did not yield a proposal, using fallback")
            return fallback_proposal(request, turn_count)

        if parsed is not None and parsed.get("question"):
            return QuestionResult(
                question=_text(parsed["question"]),
                reason=_text(parsed.get("reason")),
                turn_count=turn_count
            )

        # Free text is treated as the question itself
        return QuestionResult(
            question=raw.strip(),
            reason=DEFAULT_QUESTION_REASON,
            turn_count=turn_count
        )

    def _proposal(
        self,
        parsed: Dict[str, Any],
        request: PlanningChatRequest,
        turn_count: int,
        forced: bool
    ) -> ProposalResult:
        experiences = _text(parsed.get("collectedExperiences")) or \
            collect_user_experiences(request.chat_history)
        plans = normalize_plans(
            parsed.get("newsletters"),
            request.newsletter_count,
            request.launch_content,
            collect_user_experiences(request.chat_history)
        )
        return ProposalResult(
            newsletters=plans,
            collected_experiences=experiences,
            turn_count=turn_count,
            forced=forced
        )

# Global orchestrator instance
planning_chat = PlanningChatOrchestrator()
