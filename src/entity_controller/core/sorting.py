"""Sort criteria passed through controllers to paged ``find_all`` queries."""

from __future__ import annotations

from dataclasses import dataclass

from entity_controller.core.errors import InvalidSortCriterionError


@dataclass(frozen=True)
class SortCriterion:
    """Order results by one entity property.

    Attributes:
        property: Name of the mapped attribute to sort by.
        ascending: ``False`` for descending order.
    """

    property: str
    ascending: bool = True

    def __post_init__(self) -> None:
        if not self.property:
            raise InvalidSortCriterionError(self.property, "Sort property name cannot be empty")

    @classmethod
    def asc(cls, property_name: str) -> SortCriterion:
        return cls(property_name, ascending=True)

    @classmethod
    def desc(cls, property_name: str) -> SortCriterion:
        return cls(property_name, ascending=False)

    def __str__(self) -> str:
        return f"{self.property} {'ASC' if self.ascending else 'DESC'}"


__all__ = ["SortCriterion"]
