"""
Error kinds raised by the repeater.

Configuration and ingestion errors are raised before any request is sent.
RequestFailureError is collected per task by the dispatcher and never aborts
the run; AbortedError is raised after an interrupt.
"""


class RepeaterError(Exception):
    """Base class for all repeater errors."""


class UnsupportedInputError(RepeaterError):
    """Input file has no extension or one that is not understood."""


class IoFailureError(RepeaterError):
    """Filesystem or stream error."""


class RecordDecodeError(RepeaterError):
    """A row or object of the input could not be decoded."""


class BadTimestampError(RecordDecodeError):
    """A timestamp did not match the log backend format."""


class BadConfigError(RepeaterError):
    """Host resolution or another startup option is misconfigured."""


class UnmappedDomainError(RepeaterError):
    """A record's domain has no entry in the host mapping."""

    def __init__(self, domain_name: str):
        super().__init__(f"No scheme and host mapped for domain: {domain_name}")
        self.domain_name = domain_name


class EmptyPlanError(RepeaterError):
    """No records survived host resolution."""


class RequestFailureError(RepeaterError):
    """A single dispatched request failed or returned a non-success status."""

    def __init__(self, url: str, cause: str):
        super().__init__(f"Request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class AbortedError(RepeaterError):
    """The run was interrupted by the user."""
