"""Warning policy controls for calcstyle diagnostics.

The evaluators degrade to neutral values instead of raising. Each degradation
is reported as a coded ``StyleWarning`` so that callers who care can tell an
explicit zero apart from a failed evaluation.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterable
from dataclasses import dataclass

from calcstyle.errors import ValidationError

KNOWN_CODES: frozenset[str] = frozenset({"W01", "W02", "W03", "W04", "W05", "W06", "W07"})

UNKNOWN_FUNCTION = "W01"
MALFORMED_CALC = "W02"
UNKNOWN_ENV = "W03"
UNIT_MISMATCH = "W04"
UNKNOWN_OPERATOR = "W05"
UNSUPPORTED_UNIT = "W06"
UNPARSEABLE_SOURCE = "W07"


class StyleWarning(UserWarning):
    """Warning with a machine-readable code."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(f"[{code}] {message}")


@dataclass(frozen=True)
class WarningPolicy:
    """Controls how individual warning codes are handled."""

    warn_as_error: frozenset[str] = frozenset()
    suppress: frozenset[str] = frozenset()


def emit_warning(code: str, message: str) -> None:
    """Issue a ``StyleWarning`` via ``warnings.warn``. Never raises.

    A warnings filter that turns ``StyleWarning`` into an error (``-W error``)
    drops the warning instead, so the caller still returns its fallback value.
    Escalation belongs to ``apply_policy``.
    """
    try:
        warnings.warn(StyleWarning(code, message), stacklevel=3)
    except StyleWarning:
        pass


def apply_policy(
    caught: Iterable[warnings.WarningMessage], policy: WarningPolicy | None
) -> list[StyleWarning]:
    """Filter warnings recorded by ``warnings.catch_warnings(record=True)``.

    Returns the ``StyleWarning`` instances that survive suppression, in order.
    Raises ``ValidationError`` for the first one whose code is escalated.
    Non-calcstyle warnings are ignored.
    """
    kept: list[StyleWarning] = []
    for record in caught:
        warning = record.message
        if not isinstance(warning, StyleWarning):
            continue
        if policy is not None:
            if warning.code in policy.suppress:
                continue
            if warning.code in policy.warn_as_error:
                raise ValidationError(str(warning))
        kept.append(warning)
    return kept


def parse_code_list(raw: str) -> frozenset[str]:
    """Parse a comma-separated string of W-codes and validate them.

    Raises ``ValueError`` for unknown codes.
    """
    codes: set[str] = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if token not in KNOWN_CODES:
            raise ValueError(f"Unknown warning code: {token!r} (known: {sorted(KNOWN_CODES)})")
        codes.add(token)
    return frozenset(codes)
