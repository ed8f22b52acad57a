"""
Module: core.errors

Purpose:
    Exception taxonomy shared by every subpackage.

Key Classes:
    - CvdToolkitError: Base class for all toolkit errors
    - InvalidArgumentError: Caller passed an empty pool or malformed request
    - InvalidStateError: Operation called in the wrong state machine state

Used By:
    - core.utils.seeded_random, generation, session, tuning
"""

from __future__ import annotations


class CvdToolkitError(Exception):
    """Base class for errors raised by cvd_toolkit."""
    pass


class InvalidArgumentError(CvdToolkitError, ValueError):
    """
    A caller violated an input contract.

    Raised for empty selection pools, out-of-range configuration values
    and malformed request records. Subclasses ValueError so that code
    catching ValueError for bad configuration keeps working.
    """
    pass


class InvalidStateError(CvdToolkitError, RuntimeError):
    """
    An operation was invoked in a state that does not permit it.

    Example:
        Recording a response when no plate is awaiting one, or asking the
        tuner for a plate before ``init`` was called.
    """
    pass
