import os
from typing import List, Mapping, Optional

from azure.identity import AzureAuthorityHosts
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inventory_sync.exceptions import ConfigurationError

REQUIRED_SETTINGS = {
    "environment_url": "DATAVERSE_ENVIRONMENT_URL",
    "client_id": "DATAVERSE_CLIENT_ID",
    "client_secret": "DATAVERSE_CLIENT_SECRET",
    "tenant_id": "DATAVERSE_TENANT_ID",
}

OPTIONAL_SETTINGS = {
    "api_version": "DATAVERSE_API_VERSION",
    "authority_host": "DATAVERSE_AUTHORITY_HOST",
    "entity_set_name": "DATAVERSE_ENTITY_SET",
    "key_field_name": "DATAVERSE_KEY_FIELD",
    "quantity_field_name": "DATAVERSE_QUANTITY_FIELD",
    "last_modified_field_name": "DATAVERSE_LAST_MODIFIED_FIELD",
    "request_timeout_seconds": "DATAVERSE_REQUEST_TIMEOUT_SECONDS",
}

ENV_NAMES = {**REQUIRED_SETTINGS, **OPTIONAL_SETTINGS}


class DataverseConfig(BaseModel):
    """
    Endpoint, credential and table mapping settings for the Dataverse Web API.

    Required values default to blank so an incomplete configuration can still be
    loaded and reported; the connector refuses to start when any is missing.
    """

    environment_url: str = ""
    client_id: str = ""
    client_secret: str = Field(default="", repr=False)
    tenant_id: str = ""
    api_version: str = "v9.2"
    authority_host: str = AzureAuthorityHosts.AZURE_PUBLIC_CLOUD

    # Logical names of the target table and its columns
    entity_set_name: str = "cr62d_productinventories"
    key_field_name: str = "cr62d_sku"  # alternate key
    quantity_field_name: str = "cr62d_quantityonhand"
    last_modified_field_name: str = "cr62d_lastmodifiedexternal"

    request_timeout_seconds: float = Field(default=60.0, gt=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def api_url(self) -> str:
        return f"{self.environment_url.rstrip('/')}/api/data/{self.api_version}/"

    @property
    def scope(self) -> str:
        return f"{self.environment_url.rstrip('/')}/.default"

    def missing_settings(self) -> List[str]:
        """Environment variable names of required settings that are blank."""
        return [
            env_name
            for field_name, env_name in REQUIRED_SETTINGS.items()
            if not getattr(self, field_name).strip()
        ]


def load_dataverse_config(environ: Optional[Mapping[str, str]] = None) -> DataverseConfig:
    """
    Build a DataverseConfig from environment variables.

    Unset optional variables fall back to the model defaults.

    Raises:
        ConfigurationError: If a variable holds a value the model rejects
    """
    environ = os.environ if environ is None else environ

    values = {
        field_name: environ.get(env_name, "")
        for field_name, env_name in REQUIRED_SETTINGS.items()
    }
    for field_name, env_name in OPTIONAL_SETTINGS.items():
        value = environ.get(env_name)
        if value:
            values[field_name] = value

    try:
        return DataverseConfig.model_validate(values)
    except ValidationError as e:
        invalid = [
            ENV_NAMES.get(str(error["loc"][0]), str(error["loc"][0]))
            for error in e.errors()
            if error["loc"]
        ]
        raise ConfigurationError(
            f"Dataverse configuration has invalid values: {', '.join(invalid)}",
            missing_settings=invalid,
        ) from e


def use_mock_connector(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get("SYNC_USE_MOCK_CONNECTOR", "").strip().lower() in ("1", "true", "yes")
