import asyncio
import json

from conftest import FakeLLM
from letteros.ai.planning_chat import (
    DEFAULT_QUESTION_REASON, PlanningChatOrchestrator, count_user_turns, format_transcript
)
from letteros.models.planning import (
    ChatMessage, ChatRole, PlanningChatRequest, ProposalResult, QuestionResult
)


def user(text):
    return ChatMessage(role=ChatRole.USER, text=text)


def assistant(text):
    return ChatMessage(role=ChatRole.ASSISTANT, text=text)


def proposal_json(count):
    return json.dumps({
        "type": "proposal",
        "newsletters": [
            {
                "number": i,
                "subject": f"Subject {i}",
                "mainPoint": f"Point {i}",
                "targetBelief": "Belief",
                "experienceToUse": "A client story",
                "proof": "Numbers",
                "cta": "Reply",
            }
            for i in range(1, count + 1)
        ],
        "collectedExperiences": "Helped 40 engineers",
    })


def run(orchestrator, request, llm):
    return asyncio.run(orchestrator.next_turn(request, llm))


def test_transcript_helpers():
    history = [assistant("Hi"), user("I coach engineers"), user("Mostly remote")]

    assert count_user_turns(history) == 2
    assert format_transcript(history).startswith("AI: Hi\n\nUser: I coach engineers")
    assert format_transcript([]) == "(no messages yet)"


def test_first_turn_returns_question(launch_context):
    llm = FakeLLM('{"type": "question", "question": "Who was your best client?", "reason": "Stories sell"}')
    request = PlanningChatRequest(launch_content=launch_context, newsletter_count=3)

    result = run(PlanningChatOrchestrator(max_turns=10), request, llm)

    assert isinstance(result, QuestionResult)
    assert result.question == "Who was your best client?"
    assert result.reason == "Stories sell"
    assert result.turn_count == 0
    assert "Focus Coaching" in llm.prompts[0]


def test_free_text_reply_becomes_question(launch_context):
    llm = FakeLLM("  What result are you proudest of?  ")
    request = PlanningChatRequest(launch_content=launch_context, chat_history=[user("hello")])

    result = run(PlanningChatOrchestrator(max_turns=10), request, llm)

    assert isinstance(result, QuestionResult)
    assert result.question == "What result are you proudest of?"
    assert result.reason == DEFAULT_QUESTION_REASON
    assert result.turn_count == 1


def test_proposal_is_padded_to_requested_count(launch_context):
    llm = FakeLLM("```json\n" + proposal_json(2) + "\n```")
    request = PlanningChatRequest(
        launch_content=launch_context,
        chat_history=[user("story one")],
        newsletter_count=3,
    )

    result = run(PlanningChatOrchestrator(max_turns=10), request, llm)

    assert isinstance(result, ProposalResult)
    assert [p.number for p in result.newsletters] == [1, 2, 3]
    assert result.newsletters[0].main_point == "Point 1"
    assert result.newsletters[2].subject == "Focus Coaching - Part 3"
    assert result.newsletters[2].main_point == "Ship deep work every day"
    assert result.collected_experiences == "Helped 40 engineers"
    assert result.forced is False


def test_proposal_is_truncated_and_renumbered(launch_context):
    llm = FakeLLM(proposal_json(5))
    request = PlanningChatRequest(launch_content=launch_context, newsletter_count=2)

    result = run(PlanningChatOrchestrator(max_turns=10), request, llm)

    assert len(result.newsletters) == 2
    assert [p.number for p in result.newsletters] == [1, 2]


def test_force_complete_with_unusable_reply_uses_fallback(launch_context):
    llm = FakeLLM("Sorry, I need more information first.")
    request = PlanningChatRequest(
        launch_content=launch_context,
        chat_history=[user("I doubled my output")],
        newsletter_count=4,
        force_complete=True,
    )

    result = run(PlanningChatOrchestrator(max_turns=10), request, llm)

    assert isinstance(result, ProposalResult)
    assert result.forced is True
    assert len(result.newsletters) == 4
    first = result.newsletters[0]
    assert first.subject == "Focus Coaching - Part 1"
    assert first.target_belief == "Constant context switching"
    assert first.experience_to_use == "I doubled my output"


def test_turn_limit_forces_a_proposal(launch_context):
    history = []
    for i in range(3):
        history += [assistant(f"Question {i}"), user(f"Answer {i}")]
    llm = FakeLLM('{"type": "question", "question": "One more?"}')
    request = PlanningChatRequest(launch_content=launch_context, chat_history=history, newsletter_count=3)

    result = run(PlanningChatOrchestrator(max_turns=3), request, llm)

    assert isinstance(result, ProposalResult)
    assert result.forced is True
    assert len(result.newsletters) == 3
    assert result.turn_count == 3
