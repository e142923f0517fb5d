"""
Command-line interface for the coordinator.

Entry point: ``coordinator`` (see ``coordinator.cli.app``).
"""
