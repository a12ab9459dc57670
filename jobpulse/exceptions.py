"""Exceptions for jobpulse."""


class JobPulseError(Exception):
    """Base exception for jobpulse errors."""

    pass


class MetricsFetchError(JobPulseError):
    """Raised when a remote metrics call fails for a job."""

    def __init__(self, job_id: str, reason: str):
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Metrics fetch failed for job {job_id}: {reason}")


class ConfigStoreError(JobPulseError):
    """Raised when the configuration store file cannot be read or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Config store error ({path}): {reason}")
