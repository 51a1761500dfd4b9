# letteros/wizard/state_machine.py
"""Newsletter creation wizard as an explicit state machine.

ProductSelect -> CountSuggest -> ChatPlan -> Confirm -> Generate -> Select -> FinalEdit

Every forward step has a guard; every state except the first can step back
one state. The machine holds the data gathered along the way but does no I/O.
"""
import logging
from enum import Enum
from typing import Dict, List, Optional

from letteros.models.launch_content import LaunchContext
from letteros.models.planning import ChatMessage, NewsletterPlan, ProposalResult
from letteros.models.variants import (
    AssembledNewsletter, GeneratedVariant, VARIANTS_PER_SLOT,
    VariantSelection, VariantSet, VariantSlot
)
from letteros.ai.variants import assemble_final_content as join_selection

logger = logging.getLogger(__name__)

MIN_NEWSLETTERS = 1
MAX_NEWSLETTERS = 5

class WizardState(str, Enum):
    PRODUCT_SELECT = "product_select"
    COUNT_SUGGEST = "count_suggest"
    CHAT_PLAN = "chat_plan"
    CONFIRM = "confirm"
    GENERATE = "generate"
    SELECT = "select"
    FINAL_EDIT = "final_edit"

TRANSITIONS: Dict[WizardState, WizardState] = {
    WizardState.PRODUCT_SELECT: WizardState.COUNT_SUGGEST,
    WizardState.COUNT_SUGGEST: WizardState.CHAT_PLAN,
    WizardState.CHAT_PLAN: WizardState.CONFIRM,
    WizardState.CONFIRM: WizardState.GENERATE,
    WizardState.GENERATE: WizardState.SELECT,
    WizardState.SELECT: WizardState.FINAL_EDIT,
}

BACK_TRANSITIONS: Dict[WizardState, WizardState] = {
    target: source for source, target in TRANSITIONS.items()
}

class InvalidTransitionError(Exception):
    """The requested step is not allowed from the current state"""

class GuardError(InvalidTransitionError):
    """The step is allowed but its precondition does not hold"""

class NewsletterWizard:
    def __init__(self):
        self.state = WizardState.PRODUCT_SELECT
        self.launch_content: Optional[LaunchContext] = None
        self.newsletter_count: Optional[int] = None
        self.transcript: List[ChatMessage] = []
        self.proposal: Optional[ProposalResult] = None
        self.plan: Optional[NewsletterPlan] = None
        self.variants: Optional[VariantSet] = None
        self.selection = VariantSelection()
        self.final: Optional[AssembledNewsletter] = None

    def _require(self, state: WizardState) -> None:
        if self.state != state:
            raise InvalidTransitionError(
                f"Cannot do that in state {self.state.value} (expected {state.value})"
            )

    def _advance(self, source: WizardState) -> None:
        self._require(source)
        target = TRANSITIONS[source]
        logger.debug(f"Wizard transition {source.value} -> {target.value}")
        self.state = target

    def select_product(self, launch_content: LaunchContext) -> None:
        self._require(WizardState.PRODUCT_SELECT)
        # A new product starts a new series; nothing from an earlier pass carries over
        self.newsletter_count = None
        self.transcript = []
        self.proposal = None
        self.plan = None
        self.variants = None
        self.selection = VariantSelection()
        self.final = None
        self.launch_content = launch_content
        self._advance(WizardState.PRODUCT_SELECT)

    def choose_count(self, count: int) -> None:
        self._require(WizardState.COUNT_SUGGEST)
        if not MIN_NEWSLETTERS <= count <= MAX_NEWSLETTERS:
            raise GuardError(f"Newsletter count must be between {MIN_NEWSLETTERS} and {MAX_NEWSLETTERS}")
        self.newsletter_count = count
        self._advance(WizardState.COUNT_SUGGEST)

    def add_message(self, message: ChatMessage) -> None:
        """Append to the planning transcript; only possible while chatting"""
        self._require(WizardState.CHAT_PLAN)
        self.transcript.append(message)

    def accept_proposal(self, proposal: ProposalResult) -> None:
        self._require(WizardState.CHAT_PLAN)
        if not proposal.newsletters:
            raise GuardError("A proposal with at least one newsletter is required")
        self.proposal = proposal
        self._advance(WizardState.CHAT_PLAN)

    def confirm_plan(self, number: int = 1) -> None:
        """Pick which proposed newsletter to write and move on to generation"""
        self._require(WizardState.CONFIRM)
        plan = next((p for p in self.proposal.newsletters if p.number == number), None)
        if plan is None:
            raise GuardError(f"No newsletter {number} in the proposal")
        self.plan = plan
        self._advance(WizardState.CONFIRM)

    def receive_variants(self, variants: VariantSet) -> None:
        self._require(WizardState.GENERATE)
        for slot in VariantSlot:
            if len(variants.for_slot(slot)) < VARIANTS_PER_SLOT:
                raise GuardError(f"Incomplete variant set: not enough {slot.value} variants")
        self.variants = variants
        self.selection = VariantSelection()
        self._advance(WizardState.GENERATE)

    def select_variant(self, slot: VariantSlot, variant_id: str) -> GeneratedVariant:
        self._require(WizardState.SELECT)
        variant = next((v for v in self.variants.for_slot(slot) if v.id == variant_id), None)
        if variant is None:
            raise GuardError(f"Unknown {slot.value} variant: {variant_id}")
        setattr(self.selection, slot.value, variant)
        return variant

    def assemble_final_content(self) -> Optional[AssembledNewsletter]:
        """Join the selections and enter FinalEdit.

        Does nothing and returns None while any slot is still unselected.
        """
        self._require(WizardState.SELECT)
        if not self.selection.is_complete():
            return None
        self.final = join_selection(self.selection)
        self._advance(WizardState.SELECT)
        return self.final

    def back(self) -> WizardState:
        """Step back one state, dropping what the current state produced"""
        previous = BACK_TRANSITIONS.get(self.state)
        if previous is None:
            raise InvalidTransitionError(f"Cannot go back from {self.state.value}")

        if self.state == WizardState.COUNT_SUGGEST:
            self.launch_content = None
        elif self.state == WizardState.CHAT_PLAN:
            self.newsletter_count = None
            self.transcript = []
        elif self.state == WizardState.CONFIRM:
            self.proposal = None
        elif self.state == WizardState.GENERATE:
            self.plan = None
        elif self.state == WizardState.SELECT:
            self.variants = None
            self.selection = VariantSelection()
        elif self.state == WizardState.FINAL_EDIT:
            self.final = None

        logger.debug(f"Wizard back {self.state.value} -> {previous.value}")
        self.state = previous
        return self.state
