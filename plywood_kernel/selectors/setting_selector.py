"""Read-only queries over plywood setting records."""

from uuid import UUID

from sqlalchemy import select

from plywood_kernel.domain.dtos import SettingInfo
from plywood_kernel.exceptions import SettingNotFoundError
from plywood_kernel.models.setting import PlywoodSetting
from plywood_kernel.selectors.base import BaseSelector


class SettingSelector(BaseSelector[PlywoodSetting]):
    """Selector for setting records."""

    def get(self, setting_id: UUID) -> SettingInfo:
        setting = self.session.get(PlywoodSetting, setting_id)
        if setting is None:
            raise SettingNotFoundError(str(setting_id))
        return SettingInfo.from_model(setting)

    def recent(self, limit: int = 50) -> list[SettingInfo]:
        """Most recent settings first."""
        stmt = (
            select(PlywoodSetting)
            .order_by(PlywoodSetting.created_at.desc(), PlywoodSetting.id.desc())
            .limit(limit)
        )
        return [SettingInfo.from_model(s) for s in self.session.execute(stmt).scalars()]
