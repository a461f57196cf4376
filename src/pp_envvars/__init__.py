"""Reconcile Power Platform environment variable values against a desired state."""

__version__ = "0.1.0"
