"""Course progress tracking and quiz grading service."""

__version__ = "0.1.0"
