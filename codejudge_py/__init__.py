"""codejudge_py - CLI client for running and submitting code to a judge service."""

__version__ = "1.0.0"
