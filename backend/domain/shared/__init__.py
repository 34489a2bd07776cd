"""
Shared Kernel.

Base entities, events, exceptions and value objects used by every domain.
"""
