"""User identity service: registration, role-based access, and admin change notifications."""

__version__ = "0.1.0"
