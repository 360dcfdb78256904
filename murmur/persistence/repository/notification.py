"""PostgreSQL implementation of NotificationPreference repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from murmur.domain.model import NotificationPreference
from murmur.domain.repository import NotificationPreferenceRepository
from murmur.domain.value import UserId
from murmur.persistence.mappers import row_to_notification_preference
from murmur.persistence.tables import user_notification_configs_table


class PostgresNotificationPreferenceRepository(NotificationPreferenceRepository):
    """PostgreSQL implementation of NotificationPreferenceRepository.

    Used from background notification jobs that outlive the request, so
    every call opens its own short session instead of sharing the
    request's.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def find_by_user_id(
        self, user_id: UserId
    ) -> Optional[NotificationPreference]:
        stmt = select(user_notification_configs_table).where(
            user_notification_configs_table.c.user_id == user_id
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
        return row_to_notification_preference(dict(row)) if row else None

    async def save(self, preference: NotificationPreference) -> NotificationPreference:
        values = preference.model_dump()
        stmt = (
            insert(user_notification_configs_table)
            .values(**values)
            .on_conflict_do_update(
                index_elements=[user_notification_configs_table.c.user_id],
                set_={
                    "allow_comment_reply_notification": values[
                        "allow_comment_reply_notification"
                    ]
                },
            )
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()
        return preference
