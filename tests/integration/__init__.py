"""Integration tests for the two-phase publish cycle.

These tests run the orchestrator against real temporary document trees,
with a fake publish operation in place of the markdown-confluence CLI.
They bridge the gap between isolated unit tests and a real publish.
"""
