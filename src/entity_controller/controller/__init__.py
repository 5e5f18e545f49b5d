"""Controller contracts and their DAO-delegating implementations."""

from entity_controller.controller.delegating import (
    DelegatingController,
    DelegatingReadableController,
    DelegatingWriteableController,
)
from entity_controller.controller.protocols import (
    Controller,
    ReadableController,
    WriteableController,
)

__all__ = [
    "Controller",
    "ReadableController",
    "WriteableController",
    "DelegatingController",
    "DelegatingReadableController",
    "DelegatingWriteableController",
]
