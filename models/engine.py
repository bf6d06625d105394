"""
Simulation engine collaborator types.

The topology only stores *which* implementation is configured for each
engine slot. The classes here are the default implementations those
slots point at; custom engines subclass them so the XML codec can find
them by qualified class name.
"""

from dataclasses import dataclass, fields
from typing import Optional


class MessageEngine:
    """Default message-delivery engine."""


class LinkResolver:
    """Default link-resolution strategy (wireless links from geometry)."""


class Scheduler:
    """Default scheduler."""


class DefaultClock:
    """Default clock model."""


# Slot name -> (base class, default implementation)
ENGINE_SLOTS = {
    "message_engine": (MessageEngine, MessageEngine),
    "link_resolver": (LinkResolver, LinkResolver),
    "scheduler": (Scheduler, Scheduler),
    "clock_model": (DefaultClock, DefaultClock),
}


@dataclass
class EngineConfig:
    """
    Implementation classes selected for each engine slot.

    Attributes:
        message_engine: Message-delivery engine class
        link_resolver: Link-resolution strategy class
        scheduler: Scheduler class
        clock_model: Clock model class
    """
    message_engine: type = MessageEngine
    link_resolver: type = LinkResolver
    scheduler: type = Scheduler
    clock_model: type = DefaultClock

    def get(self, slot: str) -> type:
        """Get the class configured for a slot."""
        if slot not in ENGINE_SLOTS:
            raise KeyError(slot)
        return getattr(self, slot)

    def set(self, slot: str, implementation: Optional[type]) -> None:
        """
        Configure a slot. None restores the slot default.

        Raises:
            KeyError: if the slot does not exist
            TypeError: if implementation does not derive from the slot base
        """
        if slot not in ENGINE_SLOTS:
            raise KeyError(slot)
        base, default = ENGINE_SLOTS[slot]
        if implementation is None:
            implementation = default
        if not (isinstance(implementation, type) and issubclass(implementation, base)):
            raise TypeError(f"{slot} must be a subclass of {base.__name__}")
        setattr(self, slot, implementation)

    def is_default(self, slot: str) -> bool:
        return self.get(slot) == ENGINE_SLOTS[slot][1]

    def reset(self) -> None:
        """Restore every slot to its default implementation."""
        for f in fields(self):
            setattr(self, f.name, ENGINE_SLOTS[f.name][1])
