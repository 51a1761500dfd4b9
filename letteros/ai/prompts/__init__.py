# letteros/ai/prompts/__init__.py
from .loader import render_prompt, load_asset, describe_launch_context, PromptTemplateError

__all__ = [
    'render_prompt',
    'load_asset',
    'describe_launch_context',
    'PromptTemplateError'
]
