"""Content action handlers, one per :class:`~museflow.models.actions.ActionKind`."""

from museflow.services.handlers.base import BaseActionHandler
from museflow.services.handlers.ideate import IdeateHandler
from museflow.services.handlers.rewrite import RewriteHandler
from museflow.services.handlers.summarize import SummarizeHandler
from museflow.services.handlers.translate import TranslateHandler

__all__ = [
    "BaseActionHandler",
    "IdeateHandler",
    "RewriteHandler",
    "SummarizeHandler",
    "TranslateHandler",
]
