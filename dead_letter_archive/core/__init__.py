"""
Core enrichment logic and models for dead letter records.
"""
