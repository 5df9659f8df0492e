"""Multi-User Chat - streaming chat front-end for hosted completion APIs.

Combines FastAPI for the streaming proxy endpoint, the OpenAI SDK for the
remote completion call, NiceGUI for the chat interface, and Pydantic for
data validation.

Components:
    - api: HTTP proxy endpoint and stream relay
    - completion: remote completion client and configuration
    - ui: Conversation client and chat page
    - models: Request, error and message schemas
"""

__version__ = "0.1.0"
