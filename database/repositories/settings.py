from typing import Optional

from sqlalchemy import select

from core.utils import utcnow
from database.models import AppSettings
from database.repositories.base import BaseRepository


class SettingsRepository(BaseRepository):
    model = AppSettings

    def get_value(self, key: str) -> Optional[str]:
        stmt = select(AppSettings.value).where(AppSettings.key == key)
        return self.db.execute(stmt).scalar_one_or_none()

    def set_value(self, key: str, value: str) -> None:
        row = self.db.execute(
            select(AppSettings).where(AppSettings.key == key)
        ).scalar_one_or_none()
        if row is None:
            self.db.add(AppSettings(key=key, value=value))
        else:
            row.value = value
            row.updated_at = utcnow()
        self.db.flush()
