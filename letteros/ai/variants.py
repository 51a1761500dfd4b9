# letteros/ai/variants.py
"""Multi-variant newsletter generation and assembly.

The model proposes three candidates for each of the four slots (subject,
introduction, structure, conclusion). The writer picks one per slot and the
picks are joined verbatim into the final newsletter.
"""
import logging
from typing import Any, Dict, List
from pydantic import ValidationError

from letteros.config import settings
from letteros.ai.errors import AIResponseParseError
from letteros.ai.parsing import require_json_object
from letteros.ai.prompts import render_prompt
from letteros.ai.prompts.loader import NOT_SET
from letteros.models.variants import (
    AssembledNewsletter, GeneratedVariant, SLOT_KEYS, VARIANTS_PER_SLOT,
    VariantRequest, VariantSelection, VariantSet, VariantSlot
)

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"

ID_PREFIXES = {
    VariantSlot.SUBJECT: "s",
    VariantSlot.INTRODUCTION: "i",
    VariantSlot.STRUCTURE: "st",
    VariantSlot.CONCLUSION: "c",
}

class IncompleteSelectionError(ValueError):
    """Assembly was requested before every slot had a selection"""

    def __init__(self, missing: List[VariantSlot]):
        self.missing = missing
        names = ", ".join(slot.value for slot in missing)
        super().__init__(f"Select one variant for every section (missing: {names})")

def build_variant_prompt(request: VariantRequest) -> str:
    product = request.product
    plan = request.plan
    system = render_prompt("variant_system")
    body = render_prompt(
        "variant_request",
        name=product.name,
        description=product.description or NOT_SET,
        target_audience=product.target_audience or NOT_SET,
        tone=product.tone or NOT_SET,
        target_segment=plan.target_segment,
        current_belief=plan.current_belief,
        desired_belief=plan.desired_belief,
        main_point=plan.main_point,
        proof=plan.proof,
        cta=plan.cta
    )
    return f"{system}\n\n{body}"

def parse_variant_set(payload: Dict[str, Any]) -> VariantSet:
    """Validate a generated payload; every slot needs at least three variants"""
    slots = {}
    for slot, key in SLOT_KEYS.items():
        items = payload.get(key)
        if not isinstance(items, list) or len(items) < VARIANTS_PER_SLOT:
            found = len(items) if isinstance(items, list) else 0
            raise AIResponseParseError(
                f"Expected {VARIANTS_PER_SLOT} {key}, got {found}"
            )

        variants = []
        for index, item in enumerate(items[:VARIANTS_PER_SLOT], start=1):
            if not isinstance(item, dict) or not item.get("content"):
                raise AIResponseParseError(f"Malformed variant in {key}")
            try:
                variants.append(GeneratedVariant(
                    id=str(item.get("id") or f"{ID_PREFIXES[slot]}{index}"),
                    content=str(item["content"]),
                    reasoning=str(item.get("reasoning") or "")
                ))
            except ValidationError as e:
                raise AIResponseParseError(f"Malformed variant in {key}: {e}")
        slots[key] = variants

    return VariantSet(**slots)

async def generate_variants(request: VariantRequest, llm) -> VariantSet:
    raw = await llm.generate(
        build_variant_prompt(request),
        temperature=settings.variant_temperature,
        max_output_tokens=settings.variant_max_output_tokens
    )
    variant_set = parse_variant_set(require_json_object(raw))
    logger.info(f"Generated variants for product: {request.product.name}")
    return variant_set

def missing_slots(selection: VariantSelection) -> List[VariantSlot]:
    return [slot for slot in VariantSlot if selection.get(slot) is None]

def assemble_final_content(selection: VariantSelection) -> AssembledNewsletter:
    """Join the chosen variants; no rewriting, no ranking"""
    missing = missing_slots(selection)
    if missing:
        raise IncompleteSelectionError(missing)

    body = SECTION_SEPARATOR.join([
        selection.introduction.content,
        selection.structure.content,
        selection.conclusion.content,
    ])
    return AssembledNewsletter(title=selection.subject.content, content=body)
