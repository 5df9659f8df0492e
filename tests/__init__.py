"""Test package for Multi-User Chat.

Unit tests for isolated logic and integration tests for the proxy endpoint
and the conversation client working against it.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP-level workflow tests

The remote completion API is replaced by an in-process fake; no test needs
network access or an API key. Uses pytest with pytest-check for soft
assertions.
"""
