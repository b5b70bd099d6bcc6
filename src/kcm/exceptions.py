"""Custom exceptions for kcm.

This module defines a small hierarchy of exceptions so callers can tell
bootstrap failures (fatal) from scan and mutation failures (shown in the UI).
"""


class KcmError(Exception):
    """Base exception for all kcm errors."""


class ConfigError(KcmError):
    """Raised when the config file or home directory cannot be resolved."""


class ScanError(KcmError):
    """Raised when a watch directory cannot be read or a file name fails to parse."""


class MutationError(KcmError):
    """Raised when deleting a kubeconfig or updating the active link fails."""


class PointerError(MutationError):
    """Raised when the active kubeconfig symlink cannot be created."""
