"""Redaction of sensitive fields in log metadata.

Masking only ever replaces scalar leaves. Containers are always recursed
into, even when their key looks sensitive, so the shape of the metadata is
preserved.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from logkit.core.config import LoggingConfig

# Matched as case-insensitive substrings of the field name
DEFAULT_MASK_FIELDS: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "api-key",
    "authorization",
    "auth",
    "bearer",
    "credential",
    "private",
    "ssn",
    "social_security",
    "credit_card",
    "creditcard",
    "card_number",
    "cardnumber",
    "cvv",
    "pin",
    "otp",
    "access_token",
    "refresh_token",
    "id_token",
    "jwt",
)

DEFAULT_MASK_PATTERN = "[REDACTED]"

DEFAULT_MAX_DEPTH = 10

_SCALAR_SEQUENCES = (str, bytes, bytearray)


def should_mask_field(field_name: str, mask_fields: Iterable[str]) -> bool:
    """Check whether a field name contains any sensitive pattern.

    Args:
        field_name: Metadata key to check.
        mask_fields: Patterns, already lower-cased.

    Returns:
        True if the key contains one of the patterns (case-insensitive).
    """
    lowered = field_name.lower()
    return any(pattern in lowered for pattern in mask_fields)


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, set, frozenset))


def _mask(
    value: Any,
    fields: tuple[str, ...],
    replacement: str,
    depth: int,
    max_depth: int,
) -> Any:
    if depth > max_depth:
        return value

    if value is None or isinstance(value, _SCALAR_SEQUENCES):
        return value

    if isinstance(value, Mapping):
        masked: dict[Any, Any] = {}
        for key, item in value.items():
            if _is_container(item):
                masked[key] = _mask(item, fields, replacement, depth + 1, max_depth)
            elif should_mask_field(str(key), fields):
                masked[key] = replacement
            else:
                masked[key] = item
        return masked

    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_mask(item, fields, replacement, depth + 1, max_depth) for item in value]
        if isinstance(value, list):
            return items
        if isinstance(value, tuple):
            return tuple(items)
        # Sets cannot hold the dicts masking produces; render them as lists
        return items

    return value


def mask_value(
    value: Any,
    mask_fields: Iterable[str] = DEFAULT_MASK_FIELDS,
    replacement: str = DEFAULT_MASK_PATTERN,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Recursively redact sensitive scalar values.

    Args:
        value: Arbitrary metadata (mapping, sequence or scalar).
        mask_fields: Field name patterns to redact.
        replacement: Text substituted for redacted values.
        depth: Current nesting depth.
        max_depth: Subtrees deeper than this are returned unchanged.

    Returns:
        A copy of ``value`` with the same container shape and sensitive
        leaves replaced.
    """
    fields = tuple(pattern.lower() for pattern in mask_fields)
    return _mask(value, fields, replacement, depth, max_depth)


def _identity(data: Any) -> Any:
    return data


class Masker:
    """Callable masker bound to a fixed set of patterns."""

    def __init__(
        self,
        mask_fields: Iterable[str] = DEFAULT_MASK_FIELDS,
        replacement: str = DEFAULT_MASK_PATTERN,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.fields = tuple(pattern.lower() for pattern in mask_fields)
        self.replacement = replacement
        self.max_depth = max_depth

    def __call__(self, data: Any) -> Any:
        return _mask(data, self.fields, self.replacement, 0, self.max_depth)


def create_masker(config: "LoggingConfig") -> Callable[[Any], Any]:
    """Create a masking function from configuration.

    When masking is disabled the returned function hands back its argument
    itself, not a copy.
    """
    if not config.mask_enabled:
        return _identity

    fields = tuple(config.mask_fields) or DEFAULT_MASK_FIELDS
    pattern = config.mask_pattern or DEFAULT_MASK_PATTERN
    return Masker(fields, pattern)
