"""SQLAlchemy table definitions for murmur.

Schema management happens outside this service; these definitions mirror
the existing tables.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    SmallInteger,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column("nickname", String(50), nullable=False),
    Column("email", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("group_id", Integer, nullable=False),  # 1 = administrators
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_users_email", users_table.c.email)
Index("idx_users_group_id", users_table.c.group_id)

# ============================================================================
# USER NOTIFICATION CONFIGS TABLE
# ============================================================================
user_notification_configs_table = Table(
    "user_notification_configs",
    metadata,
    Column(
        "user_id",
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "allow_comment_reply_notification",
        Boolean,
        nullable=False,
        server_default="true",
    ),
)

# ============================================================================
# COMMENTS TABLE
# ============================================================================
comments_table = Table(
    "comments",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("pinned_at", TIMESTAMP(timezone=True), nullable=True),
    Column("target_path", String(255), nullable=False),
    Column("target_title", String(255), nullable=True),
    Column(
        "user_id", BigInteger, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    ),
    # No foreign keys: deleting a comment leaves its replies in place
    Column("parent_id", BigInteger, nullable=True),
    Column("reply_to_id", BigInteger, nullable=True),
    Column("nickname", String(50), nullable=False),
    Column("email", String(255), nullable=True),
    Column("email_md5", String(32), nullable=False, server_default=""),
    Column("website", String(255), nullable=True),
    Column("ip_address", String(64), nullable=False, server_default=""),
    Column("ip_location", String(255), nullable=False, server_default=""),
    Column("user_agent", Text, nullable=False, server_default=""),
    Column("content", Text, nullable=False),
    Column("content_html", Text, nullable=False, server_default=""),
    Column("status", SmallInteger, nullable=False, server_default="1"),
    Column("is_admin_comment", Boolean, nullable=False, server_default="false"),
    Column("is_anonymous", Boolean, nullable=False, server_default="false"),
    Column("like_count", Integer, nullable=False, server_default="0"),
    CheckConstraint("like_count >= 0", name="like_count_non_negative"),
    CheckConstraint("status IN (1, 2)", name="status_known"),
)

Index("idx_comments_target_path", comments_table.c.target_path)
Index("idx_comments_parent_id", comments_table.c.parent_id)
Index("idx_comments_status", comments_table.c.status)
Index("idx_comments_created_at", comments_table.c.created_at)
