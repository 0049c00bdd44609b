"""
Versioned settings documents.

Each SettingsDomain is one SystemSetting row holding a JSON document.
Reads fill in defaults for anything not stored yet; writes go through
the row's optimistic-lock version so a concurrent writer cannot be
silently overwritten.
"""

import logging
from typing import Dict, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.models import SettingsDomain, SystemSetting
from src.schemas.settings import (
    CommissionSettings,
    IncentiveSettings,
    ProductCommissionSettings,
    SalarySettings,
    SignupRoleSettings,
)
from src.services.errors import ConflictError

logger = logging.getLogger(__name__)

SETTINGS_SCHEMAS: Dict[SettingsDomain, Type[BaseModel]] = {
    SettingsDomain.COMMISSION: CommissionSettings,
    SettingsDomain.PRODUCT_COMMISSION: ProductCommissionSettings,
    SettingsDomain.SALARY: SalarySettings,
    SettingsDomain.INCENTIVE: IncentiveSettings,
    SettingsDomain.SIGNUP_ROLES: SignupRoleSettings,
}


async def get_settings_row(
    db: AsyncSession,
    domain: SettingsDomain,
    for_update: bool = False,
) -> SystemSetting:
    """Fetch the settings row, creating it with defaults on first use."""
    query = select(SystemSetting).where(SystemSetting.key == domain.value)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)

    row = (await db.execute(query)).scalar_one_or_none()
    if row is None:
        schema = SETTINGS_SCHEMAS[domain]
        row = SystemSetting(key=domain.value)
        row.set_value(schema().model_dump(mode="json"))
        db.add(row)
        await db.flush()
        logger.info(f"Created default settings: {domain.value}")
    return row


def parse_settings(domain: SettingsDomain, raw: Optional[dict]) -> BaseModel:
    return SETTINGS_SCHEMAS[domain].model_validate(raw or {})


async def load_settings(
    db: AsyncSession,
    domain: SettingsDomain,
    for_update: bool = False,
) -> Tuple[BaseModel, int]:
    """Live settings for a domain and the version they were read at."""
    row = await get_settings_row(db, domain, for_update=for_update)
    return parse_settings(domain, row.get_value()), row.version


async def write_settings(
    db: AsyncSession,
    domain: SettingsDomain,
    new_settings: BaseModel,
    expected_version: Optional[int] = None,
) -> int:
    """
    Replace a settings document.

    Args:
        expected_version: If given, the write only succeeds while the
            stored version still matches.

    Returns:
        The new version.
    """
    row = await get_settings_row(db, domain, for_update=True)
    if expected_version is not None and row.version != expected_version:
        raise ConflictError(
            f"{domain.value} settings changed since version {expected_version}; reload and retry."
        )

    row.set_value(new_settings.model_dump(mode="json"))
    try:
        await db.flush()
    except StaleDataError as exc:
        raise ConflictError(
            f"{domain.value} settings were modified concurrently; reload and retry."
        ) from exc

    logger.info(f"Settings {domain.value} updated to version {row.version}")
    return row.version
