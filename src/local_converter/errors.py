"""Exception hierarchy for conversion, storage and backend failures."""

from __future__ import annotations


class ConverterError(Exception):
    """Base class for errors raised by local_converter."""

    exit_code = 1


class SelectionError(ConverterError):
    """The user's file/kind selection cannot be converted."""

    exit_code = 2


class ConversionInProgressError(ConverterError):
    """A conversion is already running on this orchestrator."""

    exit_code = 3


class BackendError(ConverterError):
    """A conversion engine failed."""

    exit_code = 4


class DependencyError(BackendError):
    """A conversion engine library is not installed."""

    exit_code = 5


class BackendNotFoundError(ConverterError):
    """No backend is registered for the requested kind."""

    exit_code = 6


class StorageError(ConverterError):
    """The key-value store could not complete an operation."""

    exit_code = 7


class StorageFullError(StorageError):
    """A write would exceed the configured storage quota."""
