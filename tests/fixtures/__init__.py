"""Test fixtures for pytest.

- falcon_responses: recorded Falcon API bodies
- falcon_server: in-process Falcon API serving them
"""
