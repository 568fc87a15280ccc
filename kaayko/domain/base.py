"""Base classes for domain layer.

Catalog and cart models are either value objects, frozen and equal
when their fields are equal, or entities carrying a string ID that
alone decides equality.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable model compared field by field."""


@dataclass(eq=False)
class Entity(ABC):
    """Model with identity.

    Attributes:
        id: Store document ID or line token. Two entities of the same
            type with the same ID are equal whatever their other fields.
    """

    id: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
