import logging
import re
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

log = logging.getLogger('growthbook_openfeature')

# Maximum length for client keys
_MAX_CLIENT_KEY_LENGTH = 8192

# Compiled regex pattern for valid characters in client keys
_VALID_CHARACTERS_REGEX = re.compile(r"[^a-zA-Z0-9._-]")


def validate_client_key_format(client_key: str, logger: logging.Logger) -> str:
    """
    Validates that a GrowthBook client key does not contain invalid characters and is not
    unreasonably long.

    :param client_key: the client key to validate
    :param logger: the logger to use for logging warnings
    :return: the validated client key, or empty string if the client key is invalid
    """
    if client_key is None or client_key == '':
        return ""

    if not isinstance(client_key, str):
        logger.warning('Client key was not a string and was discarded')
        return ""
    if len(client_key) > _MAX_CLIENT_KEY_LENGTH:
        logger.warning('Client key was longer than %d characters and was discarded' % _MAX_CLIENT_KEY_LENGTH)
        return ""
    if _VALID_CHARACTERS_REGEX.search(client_key):
        logger.warning('Client key contained invalid characters and was discarded')
        return ""
    return client_key


T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """
    The outcome of a step that completed normally.
    """

    value: T


@dataclass(frozen=True)
class Failure:
    """
    The outcome of a step that failed. ``error`` is a human-readable description; ``exception``
    is set when the failure was caused by a raised exception.
    """

    error: str
    exception: Optional[Exception] = None


Outcome = Union[Success[T], Failure]


def describe_exception(e: Exception) -> str:
    message = str(e)
    return message if message else e.__class__.__name__
