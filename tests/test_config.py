"""
Tests for configuration loading and logging setup.
"""

from decimal import Decimal
from pathlib import Path

import structlog
from structlog.testing import capture_logs

from freight_ledger.core.config import ConfigManager, EnvironmentSettings
from freight_ledger.core.logging import configure_logging
from freight_ledger.services import build_services

from conftest import BUSINESS_CONFIG


class TestConfigManager:

    def test_tenant_config_from_business_config(self, config_manager):
        tenant = config_manager.get_tenant_config()
        assert tenant.tenant_id == "acme-trucking"
        assert tenant.default_factoring_company_id == "rts"
        assert tenant.get_factoring_company("triumph").fee_percentage == Decimal("2.5")
        assert tenant.get_factoring_company("missing") is None

    def test_yaml_is_loaded_from_config_dir(self, tmp_path):
        (tmp_path / "config.yaml").write_text(
            "tenant:\n  id: yaml-tenant\nfactoring_companies: []\n"
        )
        manager = ConfigManager(config_dir=tmp_path, env_settings=EnvironmentSettings(_env_file=None))
        assert manager.get_tenant_config().tenant_id == "yaml-tenant"

    def test_bundled_config_is_valid(self):
        manager = ConfigManager(business_config=None, env_settings=EnvironmentSettings(_env_file=None))
        tenant = manager.get_tenant_config()
        assert tenant.get_factoring_company(tenant.default_factoring_company_id) is not None

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FREIGHT_LEDGER_TENANT_ID", "env-tenant")
        monkeypatch.setenv("FREIGHT_LEDGER_AUDIT_OUTBOX_PATH", str(tmp_path / "outbox.jsonl"))
        monkeypatch.setenv("FREIGHT_LEDGER_LOG_LEVEL", "WARNING")
        manager = ConfigManager(
            business_config=BUSINESS_CONFIG, env_settings=EnvironmentSettings(_env_file=None)
        )
        assert manager.get_tenant_config().tenant_id == "env-tenant"
        assert manager.get_audit_config().outbox_path == Path(tmp_path / "outbox.jsonl")
        assert manager.get_logging_config().level == "WARNING"

    def test_logging_config_accepts_json_key(self, config_manager):
        logging_config = config_manager.get_logging_config()
        assert logging_config.level == "DEBUG"
        assert logging_config.json_output is False

    def test_settlement_defaults(self, config_manager):
        assert config_manager.get_settlement_defaults() == {"insurance": 150}


class TestConfigureLogging:

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_output=True)
        structlog.get_logger().info("load_updated", load_id="load-1")
        output = capsys.readouterr().out
        assert '"event": "load_updated"' in output
        assert '"load_id": "load-1"' in output

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_output=True)
        structlog.get_logger().info("hidden_event")
        structlog.get_logger().warning("visible_event")
        output = capsys.readouterr().out
        assert "hidden_event" not in output
        assert "visible_event" in output

    def test_level_comes_from_config(self):
        manager = ConfigManager(
            business_config={"logging": {"level": "ERROR", "json": True}},
            env_settings=EnvironmentSettings(_env_file=None),
        )
        configure_logging(config_manager=manager)
        with capture_logs() as logs:
            structlog.get_logger().warning("filtered_event")
            structlog.get_logger().error("kept_event")
        assert [log["event"] for log in logs] == ["kept_event"]


class TestBuildServices:

    def test_services_share_tenant_and_outbox(self, tmp_path, owner_operator, actor, load_data):
        manager = ConfigManager(
            business_config={
                **BUSINESS_CONFIG,
                "audit": {"outbox_path": str(tmp_path / "outbox.jsonl"), "entity_type": "load"},
            },
            env_settings=EnvironmentSettings(_env_file=None),
        )
        services = build_services(manager, drivers=[owner_operator])
        load = services.loads.create_load(load_data, actor)

        assert load.driver_base_pay == Decimal("880.00")
        assert services.audit_writer.tenant_id == "acme-trucking"
        assert services.audit_writer.outbox.path == tmp_path / "outbox.jsonl"
        assert services.adjustments.load_service is services.loads
        assert services.settlement.config_manager is manager
