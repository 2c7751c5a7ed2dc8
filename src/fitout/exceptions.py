"""Exceptions for fitout."""

from __future__ import annotations


class FitoutError(Exception):
    """Base exception for fitout errors."""


class ConfigFileError(FitoutError):
    """A configuration document could not be read or parsed."""


class ClaudeCommandError(FitoutError):
    """The ``claude`` CLI is missing, failed, or returned unusable output."""
