"""Remote completion API access.

Responsibilities:
    - Configuration of the completion provider from the environment
    - Building the streamed completion request from a conversation
    - Exposing the remote token stream as plain text deltas

Kept separate from the HTTP layer so the proxy endpoint receives a ready
service instance instead of reaching for process-wide globals.
"""

from multichat.completion.config import CompletionConfig, get_completion_config
from multichat.completion.service import CompletionService

__all__ = ["CompletionConfig", "CompletionService", "get_completion_config"]
