"""Controller contracts.

A controller exposes the operations of a DAO to the rest of an
application.  The contracts are split so that code which only reads can
be handed a :class:`ReadableController` and nothing more.

Architecture:
    ::

        ReadableController[T, K]    same shape as ReadableDAO
        WriteableController[T, K]   WriteableDAO + save_or_update
        Controller[T, K]            ReadableController + WriteableController
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from entity_controller.core.protocols import ReadableDAO, WriteableDAO

T = TypeVar("T")
K_contra = TypeVar("K_contra", contravariant=True)


@runtime_checkable
class ReadableController(ReadableDAO[T, K_contra], Protocol[T, K_contra]):
    """Read-only controller for one entity class."""


@runtime_checkable
class WriteableController(WriteableDAO[T, K_contra], Protocol[T, K_contra]):
    """Write controller for one entity class."""

    def save_or_update(self, obj: T) -> T:
        """Update ``obj`` when it is already persistent, save it otherwise."""
        ...


@runtime_checkable
class Controller(
    ReadableController[T, K_contra],
    WriteableController[T, K_contra],
    Protocol[T, K_contra],
):
    """Read-write controller for one entity class."""


__all__ = ["ReadableController", "WriteableController", "Controller"]
