from __future__ import annotations

from typing import Any, Protocol

from vendeai.application.dto.ai import AiCompletionRequest


class AiCompletionPort(Protocol):
    def complete(self, request: AiCompletionRequest) -> Any:
        """Free text, or the decoded JSON payload when a schema is given."""
        ...
