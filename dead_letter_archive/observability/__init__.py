"""
Logging and metrics for the dead letter archive.
"""
