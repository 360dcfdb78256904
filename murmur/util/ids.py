"""Public identifier encoding.

Internal numeric keys are never exposed. Each public id is a sqids string
encoding ``[internal_id, entity_type]`` so ids of different entity kinds
cannot be confused with each other.
"""

import random
from enum import IntEnum

from sqids import Sqids

from murmur.util.error import InvalidPublicIdError

DEFAULT_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class EntityType(IntEnum):
    """Entity tag embedded in public ids."""

    USER = 1
    FILE = 2
    COMMENT = 11


def shuffle_alphabet(seed: str) -> str:
    """Deterministically permute the default alphabet from a seed string."""
    alphabet = list(DEFAULT_ALPHABET)
    random.Random(seed).shuffle(alphabet)
    return "".join(alphabet)


class IdCodec:
    """Encodes and decodes public identifiers."""

    def __init__(self, min_length: int = 4, seed: str | None = None) -> None:
        alphabet = shuffle_alphabet(seed) if seed else DEFAULT_ALPHABET
        self._sqids = Sqids(alphabet=alphabet, min_length=min_length)

    def encode(self, internal_id: int, entity_type: EntityType) -> str:
        return self._sqids.encode([internal_id, int(entity_type)])

    def decode(self, public_id: str) -> tuple[int, int]:
        """Decode a public id.

        Args:
            public_id: The encoded identifier

        Returns:
            ``(internal_id, entity_type)``

        Raises:
            InvalidPublicIdError: If the id does not decode to exactly two numbers
        """
        numbers = self._sqids.decode(public_id) if public_id else []
        if len(numbers) != 2:
            raise InvalidPublicIdError(f"Cannot decode public id: {public_id!r}")
        return numbers[0], numbers[1]

    def encode_comment(self, comment_id: int) -> str:
        return self.encode(comment_id, EntityType.COMMENT)

    def decode_comment(self, public_id: str) -> int:
        """Decode a comment public id, rejecting ids of other entity kinds."""
        internal_id, entity_type = self.decode(public_id)
        if entity_type != EntityType.COMMENT:
            raise InvalidPublicIdError(f"Not a comment id: {public_id!r}")
        return internal_id

    def decode_user(self, public_id: str) -> int:
        internal_id, entity_type = self.decode(public_id)
        if entity_type != EntityType.USER:
            raise InvalidPublicIdError(f"Not a user id: {public_id!r}")
        return internal_id
