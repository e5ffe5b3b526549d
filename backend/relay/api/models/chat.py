"""
Request models for the chat-completion relay.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ChatCompletionRequest(BaseModel):
    """Inbound chat-completion body.

    - model: Optional upstream model identifier, forwarded as given
      (defaults from settings when missing, null or empty)
    - messages: List of message dictionaries with role and content

    Every other field (temperature, max_tokens, top_p, frequency_penalty,
    presence_penalty, ...) is kept as parsed, in order, and passed through.
    """
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model: Any = None
    messages: Optional[List[Dict[str, Any]]] = None  # [{role: str, content: str}]

    @property
    def passthrough(self) -> Dict[str, Any]:
        """Inbound fields other than ``model`` and ``messages``, in inbound order."""
        return dict(self.model_extra or {})

    def to_upstream_payload(self, default_model: str) -> Dict[str, Any]:
        """
        Build the upstream body.

        ``model`` falls back to ``default_model`` when missing, null or empty,
        ``messages`` is only sent when the caller sent it, and ``stream`` is
        always true.
        """
        model = default_model if self.model in (None, "") else self.model
        payload: Dict[str, Any] = {"model": model}
        if "messages" in self.model_fields_set:
            payload["messages"] = self.messages
        payload["stream"] = True

        for key, value in self.passthrough.items():
            payload.setdefault(key, value)
        return payload
