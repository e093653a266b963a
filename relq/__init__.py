"""Release version resolution and queue sequencing for CI workflows."""

__version__ = "0.1.0"
