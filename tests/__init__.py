"""
elkstack Test Suite

Unit tests for deployment context selection, address resolution, readiness
polling, environment checks, the stack commands and the CLI surface. External
tools are never invoked; a fake command runner supplies their output.
"""
