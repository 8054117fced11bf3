"""Terminal errors raised by ingestion, upload and the inventory lifecycle.

Anything not listed here (a malformed row, a missing optional column) is
recovered where it happens and never raised.
"""


class SNReportError(Exception):
    """Base class for every error the CLI reports to the user."""


class EmptyInputError(SNReportError):
    def __init__(self, message: str = "File is empty."):
        super().__init__(message)


class NoValidRowsError(SNReportError):
    """No delimiter (nor the blind fallback) produced a single valid row."""

    def __init__(self, warnings: list[str]):
        self.warnings = list(warnings)
        detail = "\n".join(f"  - {w}" for w in self.warnings)
        super().__init__(f"No valid data found in file.\n{detail}" if detail else "No valid data found in file.")


class BatchSendFailure(SNReportError):
    """A batch was rejected on every attempt. Earlier batches stay committed."""

    def __init__(self, batch_index: int, sent_count: int, attempts: int):
        self.batch_index = batch_index
        self.sent_count = sent_count
        self.attempts = attempts
        super().__init__(
            f"Batch {batch_index + 1} failed after {attempts} attempts; "
            f"{sent_count} records were already uploaded and remain committed."
        )


class InvalidStatusTransition(SNReportError):
    def __init__(self, sn_number: str, current: str, target: str):
        self.sn_number = sn_number
        self.current = current
        self.target = target
        super().__init__(f"SN {sn_number}: cannot change status from '{current}' to '{target}'.")
