"""
SystemSetting model for business configuration documents.
"""

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class SystemSetting(Base):
    """
    Key-value store for settings documents.

    Settings are stored as JSON values to support complex types.
    `version` is the optimistic lock column: an UPDATE issued against a
    stale version fails with StaleDataError instead of overwriting.

    Keys (one per SettingsDomain):
    - commission: flat token commission per role
    - product_commission: price tiers with per-role cash/installment amounts
    - salary: base salary per role / salesman stage
    - incentive: target tiers per role / salesman stage
    - signup_roles: roles offered on the signup form
    """

    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )
    value: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        comment="JSON value - use {'v': ...} wrapper for simple values",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<SystemSetting(key='{self.key}', version={self.version})>"

    def get_value(self):
        """Get the actual value from the JSON wrapper."""
        if isinstance(self.value, dict) and "v" in self.value:
            return self.value["v"]
        return self.value

    def set_value(self, val):
        """Set value with JSON wrapper."""
        self.value = {"v": val}
