"""Custom exception hierarchy for calcstyle.

The evaluators never raise; these are used by the parser, the style sheet
loader and the command line.
"""


class CalcStyleError(Exception):
    """Base exception for all calcstyle errors."""


class ParseError(CalcStyleError):
    """Raised when an expression string or style sheet cannot be parsed."""


class ValidationError(CalcStyleError):
    """Raised when a warning is escalated to an error by a WarningPolicy."""
