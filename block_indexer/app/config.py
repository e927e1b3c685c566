"""Config file."""
import json
from typing import Annotated, Any
from urllib.parse import quote_plus

from eth_utils import is_address, to_checksum_address
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # PROJECT
    project_name: str = Field("block-indexer", alias="PROJECT_NAME")

    # DATABASE
    postgres_user: str = Field("postgres", alias="POSTGRES_USER")
    postgres_password: SecretStr = Field(SecretStr("postgres"), alias="POSTGRES_PASSWORD")
    postgres_server: str = Field("localhost", alias="POSTGRES_SERVER")
    postgres_port: int = Field(5432, alias="POSTGRES_PORT")
    postgres_db: str = Field("block_indexer", alias="POSTGRES_DB")
    database_url: str | None = Field(None, alias="DATABASE_URL")

    # CHAIN
    rpc_url: str = Field("http://localhost:8545", alias="RPC_URL")
    rpc_timeout_s: int = Field(30, alias="RPC_TIMEOUT_S")

    # PROTOCOLS
    # "mimo", "mimo,other" or a JSON list
    enabled_protocols: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["mimo"], alias="ENABLED_PROTOCOLS"
    )
    mimo_factory_address: str | None = Field(None, alias="MIMO_FACTORY_ADDRESS")

    @field_validator("enabled_protocols", mode="before")
    @classmethod
    def split_enabled_protocols(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        if v.strip().startswith("["):
            return json.loads(v)
        return [p.strip() for p in v.split(",") if p.strip()]

    @field_validator("mimo_factory_address")
    @classmethod
    def checksum_factory_address(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if not is_address(v):
            raise ValueError(f"Invalid factory address: {v!r}")
        return to_checksum_address(v)

    @model_validator(mode="after")
    def assemble_db_url(self) -> "Settings":
        if not self.database_url:
            user = quote_plus(self.postgres_user)
            password = quote_plus(self.postgres_password.get_secret_value())
            host = self.postgres_server
            port = self.postgres_port
            db = self.postgres_db

            self.database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


settings: Settings = Settings()
