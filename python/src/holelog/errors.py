# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

"""Exceptions raised by the sampling engine.

All of them derive from ``ValueError`` so callers that already guard input
handling with ``except ValueError`` keep working.
"""


class HoleLogError(ValueError):
    """Base class for recoverable sampling errors."""


class IntervalValidationError(HoleLogError):
    pass


class SeedIdentifierError(HoleLogError):
    pass


class QCConfigError(HoleLogError):
    pass


class HoleInfoIncompleteError(HoleLogError):
    pass


class HoleNotFoundError(HoleLogError, KeyError):
    def __str__(self):
        return ValueError.__str__(self)
