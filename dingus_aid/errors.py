"""Exceptions raised by dingus-aid.

Everything derives from `DingusAidError` so the CLI can report any of them with
a single handler. Whether an error is fatal is decided by the caller, not here.
"""


class DingusAidError(Exception):
    """Base class for all dingus-aid errors."""


class ConfigIOError(DingusAidError):
    """The credential or session file could not be read or written."""


class CredentialMissing(DingusAidError):
    """No API key is stored yet."""


class UpstreamError(DingusAidError):
    """The completion API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"error from OpenAI API: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class MalformedResponseError(DingusAidError):
    """The completion API answered, but not with the shape we expect."""


class CommandExecutionError(DingusAidError):
    """The suggested command ran and exited with a non-zero status."""

    def __init__(self, returncode: int, output: str):
        super().__init__(f"exit status {returncode}")
        self.returncode = returncode
        self.output = output


class ClipboardError(DingusAidError):
    """The clipboard helper ran but did not succeed."""


class UnsupportedPlatformError(ClipboardError):
    """There is no clipboard helper for this operating system."""
