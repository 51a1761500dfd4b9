import asyncio
import json

import pytest

from conftest import FakeLLM
from letteros.ai.errors import AIResponseParseError
from letteros.ai.variants import (
    IncompleteSelectionError, assemble_final_content, generate_variants, parse_variant_set
)
from letteros.config import settings
from letteros.models.variants import (
    GeneratedVariant, ProductSummary, VariantPlan, VariantRequest, VariantSelection, VariantSlot
)


def variant_payload(per_slot=3, with_ids=True):
    payload = {}
    for key, prefix in (("subjects", "s"), ("introductions", "i"), ("structures", "st"), ("conclusions", "c")):
        payload[key] = [
            {
                **({"id": f"{prefix}{n}"} if with_ids else {}),
                "content": f"{key} {n}",
                "reasoning": "why",
            }
            for n in range(1, per_slot + 1)
        ]
    return payload


def make_request():
    return VariantRequest(
        product=ProductSummary(name="Focus Coaching", target_audience="Remote engineers"),
        plan=VariantPlan(
            target_segment="Senior engineers",
            current_belief="Meetings are unavoidable",
            desired_belief="Deep work is schedulable",
            main_point="Block mornings",
            proof="40 clients",
            cta="Book a call",
        ),
    )


def test_parse_keeps_exactly_three_per_slot():
    variant_set = parse_variant_set(variant_payload(per_slot=4))

    for slot in VariantSlot:
        assert len(variant_set.for_slot(slot)) == 3
    assert variant_set.subjects[0].id == "s1"


def test_parse_assigns_default_ids():
    variant_set = parse_variant_set(variant_payload(with_ids=False))

    assert [v.id for v in variant_set.structures] == ["st1", "st2", "st3"]
    assert variant_set.conclusions[2].id == "c3"


def test_parse_rejects_short_slot():
    payload = variant_payload()
    payload["structures"] = payload["structures"][:2]

    with pytest.raises(AIResponseParseError):
        parse_variant_set(payload)


def test_parse_rejects_missing_slot():
    payload = variant_payload()
    del payload["conclusions"]

    with pytest.raises(AIResponseParseError):
        parse_variant_set(payload)


def test_generate_uses_variant_sampling_settings():
    llm = FakeLLM("Here you go:\n```json\n" + json.dumps(variant_payload()) + "\n```")

    variant_set = asyncio.run(generate_variants(make_request(), llm))

    assert variant_set.introductions[1].content == "introductions 2"
    assert llm.calls[0]["temperature"] == settings.variant_temperature
    assert "Block mornings" in llm.prompts[0]


def test_generate_with_prose_reply_fails():
    llm = FakeLLM("I cannot produce variants right now.")

    with pytest.raises(AIResponseParseError):
        asyncio.run(generate_variants(make_request(), llm))


def test_assembly_is_exact_concatenation():
    selection = VariantSelection(
        subject=GeneratedVariant(id="s2", content="Your mornings are leaking"),
        introduction=GeneratedVariant(id="i1", content="Intro text."),
        structure=GeneratedVariant(id="st3", content="Body\nwith lines."),
        conclusion=GeneratedVariant(id="c1", content="Reply to this email."),
    )

    assembled = assemble_final_content(selection)

    assert assembled.title == "Your mornings are leaking"
    assert assembled.content == "Intro text.\n\nBody\nwith lines.\n\nReply to this email."


def test_assembly_requires_every_slot():
    selection = VariantSelection(
        subject=GeneratedVariant(id="s1", content="Subject"),
        introduction=GeneratedVariant(id="i1", content="Intro"),
    )

    with pytest.raises(IncompleteSelectionError) as excinfo:
        assemble_final_content(selection)

    assert excinfo.value.missing == [VariantSlot.STRUCTURE, VariantSlot.CONCLUSION]
