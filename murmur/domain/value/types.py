"""Domain value types for murmur.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum, IntEnum
from typing import Optional

from murmur.domain.value.common import ValueObject
from murmur.domain.value.identifiers import UserId


class CommentStatus(IntEnum):
    """Moderation state of a comment.

    Stored as an integer; the numeric values are part of the export format.
    """

    PUBLISHED = 1
    PENDING = 2


class ModerationAction(str, Enum):
    """What to do with content the AI classifier flags."""

    PENDING = "pending"
    REJECT = "reject"


class RiskLevel(IntEnum):
    """Ordinal risk tier reported by the content classifier."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def parse(cls, label: str | None) -> Optional["RiskLevel"]:
        """Normalize a classifier label to a tier.

        Accepts English names in any case plus the Chinese labels the
        classifier returns (simplified and traditional forms).

        Returns:
            The tier, or None when the label is not recognized
        """
        if not label:
            return None
        return _RISK_LABELS.get(label.strip().lower())


_RISK_LABELS = {
    "high": RiskLevel.HIGH,
    "高": RiskLevel.HIGH,
    "medium": RiskLevel.MEDIUM,
    "中": RiskLevel.MEDIUM,
    "low": RiskLevel.LOW,
    "低": RiskLevel.LOW,
}


class AuthClaims(ValueObject):
    """Identity asserted by a verified access token."""

    user_id: UserId
