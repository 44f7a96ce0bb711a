"""
Configuration management for the freight ledger.

Handles loading and accessing:
- Business configuration (config.yaml)
- Environment variables (FREIGHT_LEDGER_*)
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from freight_ledger.data.models.reference import FactoringCompany, TenantConfig


class AuditConfig(BaseModel):
    """Audit trail settings."""

    outbox_path: Path = Path("data/audit_outbox.jsonl")
    entity_type: str = "load"


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    json_output: bool = Field(True, alias="json")


class EnvironmentSettings(BaseSettings):
    """Environment variables configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    tenant_id: Optional[str] = Field(None, alias="FREIGHT_LEDGER_TENANT_ID")
    audit_outbox_path: Optional[Path] = Field(None, alias="FREIGHT_LEDGER_AUDIT_OUTBOX_PATH")
    log_level: Optional[str] = Field(None, alias="FREIGHT_LEDGER_LOG_LEVEL")
    log_json: Optional[bool] = Field(None, alias="FREIGHT_LEDGER_LOG_JSON")


class ConfigManager:
    """
    Central configuration manager for the freight ledger.

    Loads and provides access to:
    - Business configuration from config/config.yaml
    - Environment variables from .env
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        business_config: Optional[dict[str, Any]] = None,
        env_settings: Optional[EnvironmentSettings] = None,
    ) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional path to config directory. Defaults to project root/config.
            business_config: Optional pre-loaded business config (skips config.yaml)
            env_settings: Optional pre-built environment settings
        """
        if config_dir is None:
            # Default to config/ directory in project root
            project_root = Path(__file__).parent.parent.parent.parent
            config_dir = project_root / "config"

        self.config_dir = config_dir
        self._business_config = business_config
        self._env_settings = env_settings

    @property
    def business_config(self) -> dict[str, Any]:
        """Load and return business configuration from config.yaml."""
        if self._business_config is None:
            config_path = self.config_dir / "config.yaml"
            with open(config_path, "r") as f:
                self._business_config = yaml.safe_load(f) or {}
        return self._business_config

    @property
    def env(self) -> EnvironmentSettings:
        """Load and return environment settings."""
        if self._env_settings is None:
            self._env_settings = EnvironmentSettings()
        return self._env_settings

    def get_tenant_config(self) -> TenantConfig:
        """
        Build the tenant configuration.

        The tenant id from the environment wins over config.yaml.

        Returns:
            TenantConfig with factoring companies and the default company id
        """
        tenant = self.business_config.get("tenant", {})
        companies = [
            FactoringCompany(
                id=str(entry["id"]),
                name=entry.get("name", str(entry["id"])),
                fee_percentage=(
                    Decimal(str(entry["fee_percentage"]))
                    if entry.get("fee_percentage") is not None
                    else None
                ),
            )
            for entry in self.business_config.get("factoring_companies", [])
        ]
        return TenantConfig(
            tenant_id=self.env.tenant_id or tenant.get("id", "default"),
            default_factoring_company_id=tenant.get("default_factoring_company_id"),
            factoring_companies=companies,
        )

    def get_audit_config(self) -> AuditConfig:
        """Get audit configuration, applying the outbox path override from env."""
        audit = AuditConfig(**self.business_config.get("audit", {}))
        if self.env.audit_outbox_path is not None:
            audit = audit.model_copy(update={"outbox_path": self.env.audit_outbox_path})
        return audit

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration, applying env overrides."""
        logging_config = LoggingConfig(**self.business_config.get("logging", {}))
        overrides: dict[str, Any] = {}
        if self.env.log_level:
            overrides["level"] = self.env.log_level
        if self.env.log_json is not None:
            overrides["json_output"] = self.env.log_json
        return logging_config.model_copy(update=overrides)

    def get_settlement_defaults(self) -> dict[str, Any]:
        """Get default settlement deductions from business config."""
        return self.business_config.get("settlement", {}).get("default_deductions", {})


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """
    Get the global configuration manager instance.

    Returns:
        ConfigManager singleton instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
