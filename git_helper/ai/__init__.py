from .interface import CompletionClient

__all__ = ["CompletionClient"]
