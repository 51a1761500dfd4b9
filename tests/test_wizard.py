import pytest

from letteros.models.planning import ChatMessage, ChatRole, NewsletterPlan, ProposalResult
from letteros.models.variants import GeneratedVariant, VariantSet, VariantSlot
from letteros.wizard import GuardError, InvalidTransitionError, NewsletterWizard, WizardState


def make_variants(per_slot=3):
    def slot(prefix):
        return [GeneratedVariant(id=f"{prefix}{n}", content=f"{prefix} text {n}") for n in range(1, per_slot + 1)]
    return VariantSet(subjects=slot("s"), introductions=slot("i"), structures=slot("st"), conclusions=slot("c"))


def make_proposal():
    return ProposalResult(newsletters=[
        NewsletterPlan(number=1, subject="One", main_point="First"),
        NewsletterPlan(number=2, subject="Two", main_point="Second"),
    ])


def wizard_at_select(launch_context):
    wizard = NewsletterWizard()
    wizard.select_product(launch_context)
    wizard.choose_count(2)
    wizard.add_message(ChatMessage(role=ChatRole.USER, text="My story"))
    wizard.accept_proposal(make_proposal())
    wizard.confirm_plan(2)
    wizard.receive_variants(make_variants())
    return wizard


def test_happy_path_reaches_final_edit(launch_context):
    wizard = wizard_at_select(launch_context)
    assert wizard.state == WizardState.SELECT
    assert wizard.plan.main_point == "Second"

    for slot, variant_id in ((VariantSlot.SUBJECT, "s1"), (VariantSlot.INTRODUCTION, "i2"),
                             (VariantSlot.STRUCTURE, "st3"), (VariantSlot.CONCLUSION, "c1")):
        wizard.select_variant(slot, variant_id)

    final = wizard.assemble_final_content()

    assert wizard.state == WizardState.FINAL_EDIT
    assert final.title == "s text 1"
    assert final.content == "i text 2\n\nst text 3\n\nc text 1"


def test_assembly_is_a_no_op_until_every_slot_is_selected(launch_context):
    wizard = wizard_at_select(launch_context)
    wizard.select_variant(VariantSlot.SUBJECT, "s1")

    assert wizard.assemble_final_content() is None
    assert wizard.state == WizardState.SELECT


def test_count_guard(launch_context):
    wizard = NewsletterWizard()
    wizard.select_product(launch_context)

    with pytest.raises(GuardError):
        wizard.choose_count(6)
    assert wizard.state == WizardState.COUNT_SUGGEST


def test_incomplete_variant_set_is_refused(launch_context):
    wizard = NewsletterWizard()
    wizard.select_product(launch_context)
    wizard.choose_count(1)
    wizard.accept_proposal(make_proposal())
    wizard.confirm_plan()

    with pytest.raises(GuardError):
        wizard.receive_variants(make_variants(per_slot=2))
    assert wizard.state == WizardState.GENERATE


def test_out_of_order_step_is_rejected():
    wizard = NewsletterWizard()

    with pytest.raises(InvalidTransitionError):
        wizard.choose_count(3)
    with pytest.raises(InvalidTransitionError):
        wizard.add_message(ChatMessage(role=ChatRole.USER, text="too early"))


def test_back_steps_one_state_and_clears_its_data(launch_context):
    wizard = wizard_at_select(launch_context)
    wizard.select_variant(VariantSlot.SUBJECT, "s2")

    assert wizard.back() == WizardState.GENERATE
    assert wizard.variants is None
    assert wizard.selection.subject is None

    assert wizard.back() == WizardState.CONFIRM
    assert wizard.plan is None
    assert wizard.proposal is not None


def test_cannot_go_back_from_first_state():
    with pytest.raises(InvalidTransitionError):
        NewsletterWizard().back()


def test_unknown_variant_id(launch_context):
    wizard = wizard_at_select(launch_context)

    with pytest.raises(GuardError):
        wizard.select_variant(VariantSlot.CONCLUSION, "c9")


def test_going_back_to_another_product_starts_a_fresh_chat(launch_context):
    wizard = NewsletterWizard()
    wizard.select_product(launch_context)
    wizard.choose_count(3)
    for n in range(9):
        wizard.add_message(ChatMessage(role=ChatRole.USER, text=f"Answer {n}"))

    assert wizard.back() == WizardState.COUNT_SUGGEST
    assert wizard.transcript == []
    assert wizard.newsletter_count is None
    assert wizard.back() == WizardState.PRODUCT_SELECT
    assert wizard.launch_content is None

    other = launch_context.model_copy(update={"name": "Sleep Coaching"})
    wizard.select_product(other)
    wizard.choose_count(2)

    assert wizard.launch_content.name == "Sleep Coaching"
    assert wizard.transcript == []
    assert wizard.newsletter_count == 2


def test_selecting_a_product_clears_an_earlier_pass(launch_context):
    wizard = wizard_at_select(launch_context)
    wizard.state = WizardState.PRODUCT_SELECT

    wizard.select_product(launch_context)

    assert wizard.transcript == []
    assert wizard.newsletter_count is None
    assert wizard.proposal is None
    assert wizard.plan is None
    assert wizard.variants is None
    assert not wizard.selection.is_complete()
