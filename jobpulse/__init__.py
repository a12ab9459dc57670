"""jobpulse: engagement metrics for job search listings."""

__version__ = "0.1.0"
