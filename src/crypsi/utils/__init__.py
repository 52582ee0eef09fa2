"""Utility functions for crypsi."""

from .provider import run_provider

__all__ = ["run_provider"]
