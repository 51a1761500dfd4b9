# letteros/ai/series.py
import re
import logging
from typing import Any, Dict, List, Optional

from letteros.config import settings
from letteros.ai.parsing import find_json_object, strip_code_fences
from letteros.ai.planning_chat import format_transcript
from letteros.ai.prompts import render_prompt, load_asset, describe_launch_context
from letteros.ai.prompts.loader import NOT_SET
from letteros.models.planning import (
    GeneratedNewsletter, NewsletterPlan, SeriesRequest, SeriesResponse
)

logger = logging.getLogger(__name__)

SEQUENCE_PATTERNS_FILE = "sequence_patterns.json"
DEFAULT_PATTERN_COUNT = "3"

_SUBJECT_PREFIXES = [
    re.compile(r"^\[subject\].*?\n+", re.IGNORECASE),
    re.compile(r"^subject\s*[:：].*?\n+", re.IGNORECASE),
    re.compile(r"^【件名】.*?\n+"),
    re.compile(r"^件名[:：].*?\n+"),
]
_SUBJECT_FIELD = re.compile(r'"subject"\s*:\s*"([^"]+)"')
_BODY_FIELD = re.compile(
    r'"body"\s*:\s*"([\s\S]+?)(?:"\s*,\s*"wordCount|"\s*,\s*"qualityCheck|"\s*\})'
)

def sequence_guide(count: int, number: int) -> str:
    """Role of newsletter `number` within a series of `count`"""
    patterns = load_asset(SEQUENCE_PATTERNS_FILE)
    series = patterns.get(str(count)) or {}
    guide = series.get(str(number))
    if guide:
        return guide
    defaults = patterns[DEFAULT_PATTERN_COUNT]
    return defaults.get(str(number)) or defaults["1"]

def clean_body(body: str, subject: str) -> str:
    """Strip quoting, escaped newlines and a repeated subject line from a generated body"""
    text = strip_code_fences(body)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    text = text.replace("\\n", "\n").replace('\\"', '"')

    patterns = list(_SUBJECT_PREFIXES)
    if subject:
        patterns.append(re.compile(rf"^{re.escape(subject)}\s*\n+", re.IGNORECASE))
    for pattern in patterns:
        text = pattern.sub("", text, count=1)
    return text.strip()

def _plan_block(plan: Optional[NewsletterPlan]) -> str:
    if plan is None:
        return "No plan for this newsletter"
    return "\n".join([
        f"- Main point: {plan.main_point}",
        f"- Experience to use: {plan.experience_to_use or NOT_SET}",
        f"- CTA: {plan.cta}",
    ])

def build_series_prompt(request: SeriesRequest, number: int) -> str:
    count = request.newsletter_count
    plan = request.newsletter_plans[number - 1] if number <= len(request.newsletter_plans) else None

    if number > 1:
        position_hint = f"This is newsletter {number}, so keep the flow from the previous one."
    else:
        position_hint = "This is the first newsletter, so focus on the problem and empathy."
    if number < count:
        continuation_hint = "Leave the reader looking forward to the next email."
    else:
        continuation_hint = "This is the last newsletter, so make a clear offer and call to action."

    return render_prompt(
        "series_newsletter",
        newsletter_number=number,
        newsletter_count=count,
        launch_context=describe_launch_context(request.launch_content),
        lp_url=request.launch_content.lp_url or NOT_SET,
        price=request.launch_content.price or NOT_SET,
        plan_block=_plan_block(plan),
        collected_experiences=request.collected_experiences or NOT_SET,
        transcript=format_transcript(request.chat_history),
        sequence_guide=sequence_guide(count, number),
        position_hint=position_hint,
        continuation_hint=continuation_hint
    )

def parse_generated_newsletter(raw: str, number: int, product_name: str) -> GeneratedNewsletter:
    text = strip_code_fences(raw)
    parsed: Optional[Dict[str, Any]] = find_json_object(text)

    if parsed and parsed.get("subject") and parsed.get("body"):
        subject = str(parsed["subject"])
        body = clean_body(str(parsed["body"]), subject)
        word_count = parsed.get("wordCount")
        quality = parsed.get("qualityCheck")
        return GeneratedNewsletter(
            number=number,
            subject=subject,
            body=body,
            word_count=word_count if isinstance(word_count, int) else len(body),
            quality_check=quality if isinstance(quality, dict) else {}
        )

    logger.warning(f"Newsletter {number} was not valid JSON, extracting fields")
    subject_match = _SUBJECT_FIELD.search(text)
    subject = subject_match.group(1) if subject_match else f"{product_name or 'Newsletter'} - Part {number}"
    body_match = _BODY_FIELD.search(text)
    body = clean_body(body_match.group(1) if body_match else text, subject)
    return GeneratedNewsletter(
        number=number,
        subject=subject,
        body=body,
        word_count=len(body),
        quality_check={}
    )

async def generate_series(request: SeriesRequest, llm) -> SeriesResponse:
    """Generate every newsletter of the series, one model call each, in order"""
    newsletters: List[GeneratedNewsletter] = []
    for number in range(1, request.newsletter_count + 1):
        logger.info(f"Generating newsletter {number}/{request.newsletter_count}")
        raw = await llm.generate(
            build_series_prompt(request, number),
            max_output_tokens=settings.series_max_output_tokens
        )
        newsletters.append(
            parse_generated_newsletter(raw, number, request.launch_content.name or "")
        )

    return SeriesResponse(
        success=True,
        newsletters=newsletters,
        total_count=request.newsletter_count
    )
