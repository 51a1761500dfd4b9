# letteros/models/variants.py
from enum import Enum
from typing import Optional, List
from pydantic import Field
from letteros.models.base import CamelModel

class VariantSlot(str, Enum):
    SUBJECT = "subject"
    INTRODUCTION = "introduction"
    STRUCTURE = "structure"
    CONCLUSION = "conclusion"

# Key of each slot in the generated JSON payload
SLOT_KEYS = {
    VariantSlot.SUBJECT: "subjects",
    VariantSlot.INTRODUCTION: "introductions",
    VariantSlot.STRUCTURE: "structures",
    VariantSlot.CONCLUSION: "conclusions",
}

VARIANTS_PER_SLOT = 3

class GeneratedVariant(CamelModel):
    id: str
    content: str
    reasoning: str = ""

class VariantSet(CamelModel):
    subjects: List[GeneratedVariant]
    introductions: List[GeneratedVariant]
    structures: List[GeneratedVariant]
    conclusions: List[GeneratedVariant]

    def for_slot(self, slot: VariantSlot) -> List[GeneratedVariant]:
        return getattr(self, SLOT_KEYS[slot])

class ProductSummary(CamelModel):
    name: str
    description: Optional[str] = None
    target_audience: Optional[str] = None
    tone: Optional[str] = None

class VariantPlan(CamelModel):
    target_segment: str
    current_belief: str
    desired_belief: str
    main_point: str
    proof: str
    cta: str

class VariantRequest(CamelModel):
    product: ProductSummary
    plan: VariantPlan

class VariantSelection(CamelModel):
    subject: Optional[GeneratedVariant] = None
    introduction: Optional[GeneratedVariant] = None
    structure: Optional[GeneratedVariant] = None
    conclusion: Optional[GeneratedVariant] = None

    def get(self, slot: VariantSlot) -> Optional[GeneratedVariant]:
        return getattr(self, slot.value)

    def is_complete(self) -> bool:
        return all(self.get(slot) is not None for slot in VariantSlot)

class AssembledNewsletter(CamelModel):
    title: str
    content: str

class AssembleRequest(CamelModel):
    selections: VariantSelection
    save: bool = False
    launch_content_id: Optional[str] = None
    plan: Optional[VariantPlan] = None

class AssembleResponse(AssembledNewsletter):
    newsletter_id: Optional[str] = None
    saved: bool = False
