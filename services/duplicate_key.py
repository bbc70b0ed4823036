"""
Duplicate-key translation.

Turns the typed DuplicateKeyError raised by repositories into the 409
ValidationError clients receive, naming exactly one offending field.
"""
from fastapi import status

from core.exceptions import DuplicateKeyError, ValidationError
from models.resource import ResourceDescriptor


def translate_duplicate_key(error: Exception, descriptor: ResourceDescriptor) -> Exception:
    """
    Translate a duplicate-key error; return any other error unchanged.

    The reported field is the first of ``descriptor.duplicate_priority``
    named by the error, else ``descriptor.duplicate_fallback``.
    """
    if not isinstance(error, DuplicateKeyError):
        return error

    field = next(
        (name for name in descriptor.duplicate_priority if name in error.fields),
        descriptor.duplicate_fallback,
    )
    return ValidationError(
        errors=[{
            "field": field,
            "location": "body",
            "messages": [f'"{field}" already exists'],
        }],
        status_code=status.HTTP_409_CONFLICT,
    )
