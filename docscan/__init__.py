"""Document scan and validation service for student enrollment documents."""

__version__ = "0.1.0"
