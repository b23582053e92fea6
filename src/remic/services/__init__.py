"""Dream store services."""

from .backend import BackendRewriteService
from .language_model import LanguageModelRewriteService
from .rewrite import (
    FallbackRewriteService,
    HttpRewriteService,
    RewriteService,
    build_rewrite_service,
)
from .store import DreamStore

__all__ = [
    "DreamStore",
    "RewriteService",
    "HttpRewriteService",
    "BackendRewriteService",
    "LanguageModelRewriteService",
    "FallbackRewriteService",
    "build_rewrite_service",
]
