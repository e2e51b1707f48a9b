# Routers package for the onboarding intake

from . import form, submit

__all__ = [
    "form",
    "submit",
]
