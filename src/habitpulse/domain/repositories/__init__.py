"""Repository protocol definitions for domain layer."""

from .habit import CompletionStore

__all__ = ["CompletionStore"]
