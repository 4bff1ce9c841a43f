# app/lambdas/notes_api/__init__.py
"""Notes CRUD API served by AWS Lambda on top of DynamoDB."""

__version__ = "0.3.0"
