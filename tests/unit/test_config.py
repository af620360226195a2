import pytest

from inventory_sync.config import DataverseConfig, load_dataverse_config, use_mock_connector
from inventory_sync.exceptions import ConfigurationError


def test_api_url_strips_trailing_slash(dataverse_config):
    assert dataverse_config.api_url == "https://contoso.crm.dynamics.com/api/data/v9.2/"


def test_scope_targets_environment_default(dataverse_config):
    assert dataverse_config.scope == "https://contoso.crm.dynamics.com/.default"


def test_api_url_uses_configured_version():
    config = DataverseConfig(environment_url="https://org.crm4.dynamics.com", api_version="v9.1")

    assert config.api_url == "https://org.crm4.dynamics.com/api/data/v9.1/"


def test_missing_settings_lists_blank_required_values():
    config = DataverseConfig(environment_url="https://org.crm.dynamics.com", client_id="  ")

    assert config.missing_settings() == [
        "DATAVERSE_CLIENT_ID",
        "DATAVERSE_CLIENT_SECRET",
        "DATAVERSE_TENANT_ID",
    ]


def test_complete_config_has_nothing_missing(dataverse_config):
    assert dataverse_config.missing_settings() == []


def test_client_secret_is_hidden_from_repr(dataverse_config):
    assert "s3cr3t" not in repr(dataverse_config)


def test_load_from_environment_applies_defaults():
    config = load_dataverse_config(
        {
            "DATAVERSE_ENVIRONMENT_URL": "https://org.crm.dynamics.com",
            "DATAVERSE_CLIENT_ID": "client",
            "DATAVERSE_CLIENT_SECRET": "secret",
            "DATAVERSE_TENANT_ID": "tenant",
        }
    )

    assert config.missing_settings() == []
    assert config.api_version == "v9.2"
    assert config.entity_set_name == "cr62d_productinventories"
    assert config.key_field_name == "cr62d_sku"
    assert config.request_timeout_seconds == 60.0


def test_load_from_environment_reads_overrides():
    config = load_dataverse_config(
        {
            "DATAVERSE_ENVIRONMENT_URL": "https://org.crm.dynamics.com",
            "DATAVERSE_API_VERSION": "v9.0",
            "DATAVERSE_ENTITY_SET": "new_stocklevels",
            "DATAVERSE_REQUEST_TIMEOUT_SECONDS": "15",
        }
    )

    assert config.api_version == "v9.0"
    assert config.entity_set_name == "new_stocklevels"
    assert config.request_timeout_seconds == 15.0
    assert "DATAVERSE_TENANT_ID" in config.missing_settings()


def test_empty_environment_loads_incomplete_config():
    assert len(load_dataverse_config({}).missing_settings()) == 4


def test_use_mock_connector_flag():
    assert use_mock_connector({"SYNC_USE_MOCK_CONNECTOR": "true"}) is True
    assert use_mock_connector({"SYNC_USE_MOCK_CONNECTOR": "1"}) is True
    assert use_mock_connector({"SYNC_USE_MOCK_CONNECTOR": "no"}) is False
    assert use_mock_connector({}) is False


@pytest.mark.parametrize("timeout", ["sixty", "0", "-5"])
def test_invalid_timeout_is_a_configuration_error(timeout):
    with pytest.raises(ConfigurationError) as exc_info:
        load_dataverse_config(
            {
                "DATAVERSE_ENVIRONMENT_URL": "https://org.crm.dynamics.com",
                "DATAVERSE_CLIENT_ID": "client",
                "DATAVERSE_CLIENT_SECRET": "secret",
                "DATAVERSE_TENANT_ID": "tenant",
                "DATAVERSE_REQUEST_TIMEOUT_SECONDS": timeout,
            }
        )

    assert exc_info.value.missing_settings == ["DATAVERSE_REQUEST_TIMEOUT_SECONDS"]
