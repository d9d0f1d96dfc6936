from __future__ import annotations


class DiagnosticError(Exception):
    """Base class for failures the collector downgrades to an "unavailable" field."""


class ProbeUnavailable(DiagnosticError):
    """The probe executable is missing or could not be launched."""


class ProbeTimeout(DiagnosticError):
    """The probe did not finish within its timeout."""


class ProviderUnavailable(DiagnosticError):
    """An OS metric query failed or was denied."""


class PersistenceFailure(DiagnosticError):
    """The report file could not be written."""
