"""
AWS adapters: SQS record parsing, S3 object store, Step Functions lookups.
"""
