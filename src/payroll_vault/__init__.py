"""Pooled payroll vault with interval-based salary settlement."""

__version__ = "0.1.0"
