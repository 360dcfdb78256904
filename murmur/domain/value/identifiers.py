"""Strongly typed identifiers for murmur domain entities.

Internal identifiers are the numeric storage keys. They never leave the
service; callers only ever see the encoded public form (see
``murmur.util.ids``).
"""

from typing import NewType

CommentId = NewType("CommentId", int)
UserId = NewType("UserId", int)
