# letteros/ai/prompts/loader.py
"""Versioned prompt templates.

Templates live in ``templates/<version>/<name>.txt`` and use ``str.format``
placeholders (literal braces are doubled). The active version comes from
``settings.prompt_version``.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from letteros.config import settings
from letteros.models.launch_content import LaunchContext

TEMPLATE_DIR = Path(__file__).parent / "templates"
NOT_SET = "Not set"

class PromptTemplateError(KeyError):
    pass

@lru_cache(maxsize=None)
def _read(version: str, filename: str) -> str:
    path = TEMPLATE_DIR / version / filename
    if not path.exists():
        raise PromptTemplateError(f"Prompt template not found: {version}/{filename}")
    return path.read_text(encoding="utf-8")

def load_template(name: str, version: Optional[str] = None) -> str:
    return _read(version or settings.prompt_version, f"{name}.txt")

def load_asset(filename: str, version: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON data asset stored alongside the templates"""
    return json.loads(_read(version or settings.prompt_version, filename))

def render_prompt(template_name: str, /, version: Optional[str] = None, **values: Any) -> str:
    template = load_template(template_name, version)
    try:
        return template.format(**values)
    except KeyError as e:
        raise PromptTemplateError(f"Missing placeholder {e} for template {template_name}")

def describe_launch_context(context: LaunchContext) -> str:
    """Render launch content fields as the labelled block every prompt embeds"""
    rows = [
        ("Name", context.name),
        ("Description", context.description),
        ("Target audience", context.target_audience),
        ("Value proposition", context.value_proposition),
        ("Concept", context.concept),
        ("Customer pain", context.target_pain),
        ("Current state", context.current_state),
        ("Ideal future", context.ideal_future),
    ]
    return "\n".join(f"{label}: {value or NOT_SET}" for label, value in rows)
