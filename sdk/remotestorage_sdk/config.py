"""
Configuration for the remoteStorage SDK.

Uses pydantic-settings for environment variable loading. All settings have
defaults suitable for local development, so constructing a client without
any environment works.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_TYPE_NAMESPACE = "https://remotestoragejs.com/spec/modules/"


class ClientConfig(BaseSettings):
    """Scoped client configuration loaded from environment."""

    # Prefix for synthesized @type identifiers: <namespace><module>/<alias>
    type_namespace: str = Field(
        default=DEFAULT_TYPE_NAMESPACE,
        description="Prefix of generated @type identifiers",
    )

    json_mime_type: str = Field(
        default="application/json",
        description="MIME type recorded for objects stored with storeObject",
    )

    sync_once_depth: int = Field(
        default=1,
        ge=1,
        description="Depth of the partial sync issued by syncOnce",
    )

    model_config = {"env_prefix": "RS_"}


class ObservabilityConfig(BaseSettings):
    """Logging configuration loaded from environment."""

    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "RS_"}
