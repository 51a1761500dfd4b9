# letteros/wizard/__init__.py
from .state_machine import (
    NewsletterWizard,
    WizardState,
    InvalidTransitionError,
    GuardError
)

__all__ = [
    'NewsletterWizard',
    'WizardState',
    'InvalidTransitionError',
    'GuardError'
]
