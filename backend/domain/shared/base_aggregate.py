"""
Base Aggregate Root class.

The aggregate root is the only entry point into a cluster of domain
objects and collects the events raised while it is being changed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .base_entity import AuditableEntity
from .events import DomainEvent


@dataclass(eq=False, repr=False)
class AggregateRoot(AuditableEntity):
    """
    Base class for all aggregate roots.

    Key responsibilities:
    - Enforce invariants across the aggregate
    - Emit domain events for significant state changes
    """

    _domain_events: List[DomainEvent] = field(default_factory=list, repr=False)

    def add_domain_event(self, event: DomainEvent) -> None:
        """Add a domain event to be dispatched after persistence."""
        self._domain_events.append(event)

    def clear_domain_events(self) -> List[DomainEvent]:
        """Clear and return all pending domain events."""
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    @property
    def domain_events(self) -> List[DomainEvent]:
        return self._domain_events.copy()

    def validate(self) -> None:
        """
        Validate aggregate invariants.

        Subclasses raise a DomainException when an invariant is broken.
        """
        pass
