"""MIME type string validation."""

from mime_common.exceptions import InvalidTypeError

MIME_TYPE_LENGTH = 255

# RFC 2045 tspecials; '/' is handled separately as the super/subtype separator.
TSPECIALS = frozenset('()<>@,;:\\"[]?=')


def _check_token(token: str, part: str) -> None:
    if not token:
        raise InvalidTypeError(token, f"empty {part}")
    for char in token:
        if not (0x20 < ord(char) < 0x7f):
            raise InvalidTypeError(token, f"illegal character {char!r} in {part}")
        if char in TSPECIALS or char == '/':
            raise InvalidTypeError(token, f"illegal character {char!r} in {part}")


def validate_mime_type(identifier: str) -> str:
    """
    Validate a MIME type string and return its normalized (lower-case) form.

    A supertype on its own ("text") is valid, as is "text/plain". The
    subtype may not be empty once a '/' is present.

    Raises:
        InvalidTypeError: If the string violates the registry's syntax rules
    """
    if not identifier:
        raise InvalidTypeError(identifier, "empty type")
    if len(identifier) >= MIME_TYPE_LENGTH:
        raise InvalidTypeError(identifier, f"longer than {MIME_TYPE_LENGTH - 1} characters")

    supertype, sep, subtype = identifier.partition('/')
    try:
        _check_token(supertype, "supertype")
        if sep:
            _check_token(subtype, "subtype")
    except InvalidTypeError as e:
        raise InvalidTypeError(identifier, e.reason) from None

    return identifier.lower()


def is_valid_mime_type(identifier: str) -> bool:
    try:
        validate_mime_type(identifier)
    except InvalidTypeError:
        return False
    return True
