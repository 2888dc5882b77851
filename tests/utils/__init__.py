"""Test utilities for corewait.

- conditions: scripted conditions that record how they were called
- stub_server: FastAPI stand-in for HTTP health and JSON-RPC endpoints
- timeout_multiplier: slack for slow CI platforms

Import directly from specific modules:
    from tests.utils.conditions import ScriptedCondition
    from tests.utils.stub_server import StubState, StubServer
"""
