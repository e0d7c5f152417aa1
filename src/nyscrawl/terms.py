from __future__ import annotations

import itertools
import logging
import secrets
import string
from typing import Iterator

from .config import TOKEN_LENGTH
from .core.errors import TokenGenerationError

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase


def generate_token(length: int = TOKEN_LENGTH, alphabet: str = ALPHABET) -> str:
    """
    Draw `length` characters uniformly and independently from `alphabet`
    using the OS CSPRNG, then lower-case the result. Repeats are allowed.

    Raises TokenGenerationError if the entropy source fails.
    """
    if length < 1:
        raise ValueError(f"token length must be positive, got {length}")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    try:
        chars = [secrets.choice(alphabet) for _ in range(length)]
    except (OSError, NotImplementedError) as e:
        logger.error("failed to generate secure random index: %s", e)
        raise TokenGenerationError(str(e)) from e
    return "".join(chars).lower()


def all_tokens(
    length: int = TOKEN_LENGTH, alphabet: str = ALPHABET
) -> Iterator[str]:
    """The full token space in lexicographic order ('aaa', 'aab', ...)."""
    for combo in itertools.product(alphabet.lower(), repeat=length):
        yield "".join(combo)


def token_space_size(
    length: int = TOKEN_LENGTH, alphabet: str = ALPHABET
) -> int:
    return len(alphabet) ** length


def is_valid_token(token: str, length: int = TOKEN_LENGTH) -> bool:
    return (
        isinstance(token, str)
        and len(token) == length
        and all(c in string.ascii_lowercase for c in token)
    )
