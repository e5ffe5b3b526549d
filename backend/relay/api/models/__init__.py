from .chat import ChatCompletionRequest

__all__ = [
    "ChatCompletionRequest",
]
