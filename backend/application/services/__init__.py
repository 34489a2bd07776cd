"""
Application Services.

Use cases that load rows, run domain rules and persist the outcome.
Views and Celery tasks call these; nothing here knows about HTTP.
"""
