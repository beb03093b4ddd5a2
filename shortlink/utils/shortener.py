"""Slug generation utility

This module provides a helper function for generating short, random,
unguessable slugs from a fixed Base62 alphabet.

Functions:
    generate_slug(length=7):
        Generate a random slug suitable for use as a short URL path.

Example:
    >>> from shortlink.utils import generate_slug
    >>> generate_slug()
    'q3ZbT0x'
    >>> len(generate_slug(12))
    12
"""

import secrets

from shortlink.constants import Slug
from shortlink.exceptions import InvalidArgumentError


ALPHABET = Slug.ALPHABET
BASE = len(ALPHABET)  # 10 digits + 26 lowercase + 26 uppercase
# Largest multiple of BASE that fits in a byte (248). Bytes at or above it are
# rejected, otherwise the first 256 % 62 characters would be drawn more often.
ACCEPTABLE_MAX = (256 // BASE) * BASE


def generate_slug(length: int = Slug.LENGTH) -> str:
    """Generate a random Base62 slug.

    Characters are drawn uniformly from the alphabet using rejection sampling
    over bytes from the operating system's CSPRNG (`secrets`). Slugs double
    as access tokens for unlisted links, so a predictable PRNG (`random`)
    must not be used here.

    Args:
        length (int, optional):
            Exact length of the slug. Defaults to 7.

    Returns:
        str: A slug of exactly `length` characters from [0-9a-zA-Z].

    Raises:
        InvalidArgumentError:
            If `length` is not a positive integer.

    Example:
        >>> generate_slug(7)
        'Gh71WPT'
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise InvalidArgumentError(f'Slug length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise InvalidArgumentError(f'Slug length must be greater than 0 (given value: {length}).')

    chars: list[str] = []
    while len(chars) < length:
        for byte in secrets.token_bytes(length):
            if byte >= ACCEPTABLE_MAX:
                continue
            chars.append(ALPHABET[byte % BASE])
            if len(chars) == length:
                break

    return ''.join(chars)
