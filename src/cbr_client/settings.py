"""CBR client configuration settings.

Environment-based configuration for IBM Cloud authentication and the
account/resource scope that created zones and rules are bound to.
"""


from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CBRSettings(BaseSettings):
    """Configuration for the context-based restrictions client.

    All settings can be configured via environment variables or .env file.

    Attributes:
        api_key: IBM Cloud API key exchanged for an IAM bearer token
        account_id: Account that owns the zones and rules
        resource_group_id: Resource group used to scope rules when no cluster is set
        cluster_id: Optional cluster instance; takes precedence over the resource group
        pattern: Suffix appended to created zone/rule names, matched by cleanup
        api_type: Kubernetes API type restriction ("management" or "cluster")
        service_url: Override for the CBR service endpoint
        iam_url: Override for the IAM token endpoint
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Required authentication
    api_key: SecretStr = Field(
        ...,
        alias="IBMCLOUD_API_KEY",
        description="IBM Cloud API key",
    )
    account_id: str = Field(
        ...,
        alias="IBMCLOUD_ACCOUNT_ID",
        description="IBM Cloud account identifier",
    )

    # Rule scope
    resource_group_id: str = Field(
        default="",
        alias="IBMCLOUD_RESOURCE_GROUP_ID",
        description="Resource group ID used when no cluster ID is configured",
    )
    cluster_id: str | None = Field(
        default=None,
        alias="CLUSTER_ID",
        description="Cluster instance ID; rules are scoped to it when set",
    )
    pattern: str = Field(
        ...,
        alias="CBR_PATTERN",
        description="Naming pattern appended to created zones and rules",
    )
    api_type: str | None = Field(
        default=None,
        alias="APITYPE",
        description="Kubernetes API type restriction (management or cluster)",
    )

    # Endpoints
    service_url: str | None = Field(
        default=None,
        alias="CBR_SERVICE_URL",
        description="CBR service URL (SDK default when unset)",
    )
    iam_url: str | None = Field(
        default=None,
        alias="IBMCLOUD_IAM_URL",
        description="IAM token URL (SDK default when unset)",
    )

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Reject blank patterns, which would match every zone and rule."""
        if not v.strip():
            msg = "pattern must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("cluster_id", "api_type")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank strings as unset; other values are kept as given."""
        if v is None or not v.strip():
            return None
        return v

    def get_api_key_value(self) -> str:
        """Get the API key as a plain string.

        Returns:
            The API key value.
        """
        return self.api_key.get_secret_value()


_settings_instance: CBRSettings | None = None


def get_cbr_settings() -> CBRSettings:
    """Get default settings (singleton, reads from environment).

    Returns:
        CBRSettings instance.

    Raises:
        ValidationError: If required environment variables are missing.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = CBRSettings()
    return _settings_instance


def reset_settings() -> None:
    """Reset singleton (for testing)."""
    global _settings_instance
    _settings_instance = None
