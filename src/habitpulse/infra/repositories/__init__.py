"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelCompletionStore

__all__ = ["SQLModelCompletionStore"]
