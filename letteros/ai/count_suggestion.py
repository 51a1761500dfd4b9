# letteros/ai/count_suggestion.py
import logging
from pydantic import ValidationError
from letteros.ai.errors import AIServiceError
from letteros.ai.parsing import require_json_object
from letteros.ai.prompts import render_prompt, describe_launch_context
from letteros.models.launch_content import LaunchContext
from letteros.models.planning import CountOption, CountSuggestion

logger = logging.getLogger(__name__)

def fallback_count_suggestion() -> CountSuggestion:
    return CountSuggestion(
        recommended=3,
        reasoning="The standard three-step series fits most launches",
        options=[
            CountOption(count=2, name="Compact", description="Interest -> action in two steps"),
            CountOption(count=3, name="Standard", description="Awareness -> understanding -> action"),
            CountOption(count=4, name="Thorough", description="Four steps focused on building trust"),
        ]
    )

async def suggest_newsletter_count(context: LaunchContext, llm) -> CountSuggestion:
    """Ask the model how long the series should be; never fails"""
    prompt = render_prompt(
        "count_suggestion",
        launch_context=describe_launch_context(context)
    )
    try:
        raw = await llm.generate(prompt)
        suggestion = CountSuggestion.model_validate(require_json_object(raw))
    except (AIServiceError, ValidationError) as e:
        logger.warning(f"Count suggestion failed, using fallback: {e}")
        return fallback_count_suggestion()

    logger.info(f"Suggested newsletter count: {suggestion.recommended}")
    return suggestion
