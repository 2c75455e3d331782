from .protocols import ChatMessage, CompletionOptions, CompletionProtocol, CompletionProvider, ProvidesProviderInfo, SupportsAclose
from .dispatcher import CompletionClient

__all__ = [
    "ChatMessage",
    "CompletionOptions",
    "CompletionProtocol",
    "CompletionProvider",
    "ProvidesProviderInfo",
    "SupportsAclose",
    "CompletionClient",
]
