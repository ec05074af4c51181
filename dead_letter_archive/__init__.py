"""
Dead letter archive: enrich failed workflow messages and archive them to S3.
"""

__version__ = "0.1.0"
