"""
Custom Exception Classes for the Sugar Config Wizard

This module defines the exception classes raised while collecting a Candy Machine
configuration. They split into two families that the wizard treats very differently:

Retryable:
- InputValidationError: an answer has the wrong shape or breaks a cross-field rule.
  The reason is shown to the operator and the same question is asked again.

Fatal (abort the whole run, nothing is persisted):
- NetworkError / ValidatorTimeoutError: an external check could not be completed
- StorageError: the config file could not be written
- WizardCancelledError: the operator stopped the wizard
- AssemblerError / IncompleteConfigError: the question flow wrote a field twice or
  forgot one

Usage:
    Validators raise InputValidationError; everything else is expected to propagate to
    the caller (terminal entry point or MCP tool), which reports it to the operator.
"""
class InputValidationError(Exception):
    """Raised when an answer is rejected and the question should be asked again."""


class NetworkError(Exception):
    """Raised when the Solana RPC endpoint cannot be reached or returns an error."""


class ValidatorTimeoutError(NetworkError):
    """Raised when an asynchronous validation does not finish in time."""


class StorageError(Exception):
    """Raised when the config file cannot be checked or written."""


class WizardCancelledError(Exception):
    """Raised when the operator aborts the wizard."""


class AnswersExhaustedError(WizardCancelledError):
    """Raised by a scripted prompter when no answer is left for a question."""


class AssemblerError(Exception):
    """Raised when a config field is written twice or after the document was built."""


class IncompleteConfigError(AssemblerError):
    """Raised when the document is built before every field was assigned."""


class ConfigurationError(Exception):
    """Raised when there are configuration-related errors."""
