"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - completion/: Configuration and request building
    - api/: Stream relay behaviour
    - ui/: Conversation state, identity storage, proxy client, formatting

Uses fakes for the remote API and the proxy. Follows single responsibility
per test function. Leverages pytest-check for multiple assertions per test.
"""
