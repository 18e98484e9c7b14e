"""
Configuración del sync (archivo YAML) validada con Pydantic.

Aqui se define:
- conexion a Odoo (sin secretos: la API key viene de ODOO_API_KEY)
- conexion a PostgreSQL, modo SSL y estrategia de lock
- politica de reintentos / timeouts
- modelos a sincronizar (fields, dominio base, cursor, solapamiento, tamaño de pagina)

Ejemplo:

    odoo:
      base_url: https://erp.example.com
      database: production
      username: sync-bot@example.com
    postgres:
      connection: {type: params, host: localhost, port: 5432, database: mirror, user: odoo_sync}
      ssl_mode: disable
      lock_strategy: advisory
    sync:
      request_timeout_seconds: 30
      max_retries: 3
      backoff_base_ms: 500
    models:
      - name: res.partner
        fields: [id, name, email, write_date, create_date]
        domain: [["active", "in", [true, false]]]
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union
from urllib.parse import quote

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from odoo_sync.core.config import Settings, normalize_psycopg_dsn
from odoo_sync.domain.entities.filters import Filter
from odoo_sync.infrastructure.external.odoo.domain_serializer import parse_odoo_domain
from odoo_sync.infrastructure.external.odoo.types import OdooCredentials, RetryPolicy
from odoo_sync.shared.constants.sync_constants import (
    DEFAULT_CURSOR_FIELD,
    DEFAULT_OVERLAP_SECONDS,
    DEFAULT_PAGE_SIZE,
    LockStrategy,
    ODOO_ID_FIELD,
    SslMode,
)
from odoo_sync.shared.exceptions.sync import SyncConfigError


class OdooConnectionConfig(BaseModel):
    """Servidor Odoo origen."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = Field(..., min_length=1, description="URL base, p.ej. https://erp.example.com")
    database: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)


class PostgresUrlConnection(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["url"]
    url: str = Field(..., min_length=1)


class PostgresParamsConnection(BaseModel):
    """Conexion por parametros; el password viene de POSTGRES_PASSWORD."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["params"]
    host: str = Field(..., min_length=1)
    port: int = Field(5432, gt=0)
    database: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)


PostgresConnection = Annotated[
    Union[PostgresUrlConnection, PostgresParamsConnection],
    Field(discriminator="type"),
]


class PostgresConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    connection: Optional[PostgresConnection] = None
    ssl_mode: SslMode = SslMode.DISABLE
    lock_strategy: LockStrategy = LockStrategy.ADVISORY


class SyncSettings(BaseModel):
    """Reintentos y timeouts globales del cliente Odoo."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    request_timeout_seconds: int = Field(30, gt=0)
    max_retries: int = Field(3, ge=0)
    backoff_base_ms: int = Field(500, gt=0)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            backoff_base_s=self.backoff_base_ms / 1000.0,
            timeout_s=float(self.request_timeout_seconds),
        )


class ModelSyncConfig(BaseModel):
    """
    Descriptor inmutable de un modelo a sincronizar.

    - fields: proyeccion enviada a search_read
    - domain: filtro base en notacion de dominio Odoo
    - cursor_field: campo que detecta cambios (por defecto write_date)
    - overlap_seconds: margen restado al checkpoint en cada corrida
    - page_size: registros por pagina (> 0)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    fields: List[str] = Field(..., min_length=1)
    domain: List[Any] = Field(default_factory=list)
    cursor_field: str = Field(DEFAULT_CURSOR_FIELD, min_length=1)
    overlap_seconds: int = Field(DEFAULT_OVERLAP_SECONDS, ge=0)
    page_size: int = Field(DEFAULT_PAGE_SIZE, gt=0)

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: List[str]) -> List[str]:
        for index, name in enumerate(v):
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"fields[{index}] debe ser un string no vacio")
        return v

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: List[Any]) -> List[Any]:
        parse_odoo_domain(v)
        return v

    @property
    def overlap(self) -> timedelta:
        return timedelta(seconds=self.overlap_seconds)

    @property
    def base_filter(self) -> Filter:
        return parse_odoo_domain(self.domain)

    @property
    def fetch_fields(self) -> List[str]:
        """`fields` garantizando id y el campo cursor (necesarios para paginar)."""
        fetch = list(self.fields)
        for required in (ODOO_ID_FIELD, self.cursor_field):
            if required not in fetch:
                fetch.append(required)
        return fetch


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    odoo: OdooConnectionConfig
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    models: List[ModelSyncConfig] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_models(self) -> "AppConfig":
        seen: set[str] = set()
        for model in self.models:
            if model.name in seen:
                raise ValueError(f"Modelo duplicado en la configuracion: {model.name}")
            seen.add(model.name)
        return self

    def odoo_credentials(self, settings: Settings) -> OdooCredentials:
        if not settings.ODOO_API_KEY.strip():
            raise SyncConfigError("Falta variable de entorno obligatoria: ODOO_API_KEY")
        return OdooCredentials(
            base_url=self.odoo.base_url,
            database=self.odoo.database,
            username=self.odoo.username,
            api_key=settings.ODOO_API_KEY,
        )

    def database_dsn(self, settings: Settings) -> str:
        """
        DSN psycopg efectivo.

        Sin `postgres.connection` en el YAML se usa la URL de Settings
        (DATABASE_URL o componentes DATABASE_*).
        """
        connection = self.postgres.connection
        if connection is None:
            return settings.effective_database_url
        if isinstance(connection, PostgresUrlConnection):
            return normalize_psycopg_dsn(connection.url)

        if not settings.POSTGRES_PASSWORD.strip():
            raise SyncConfigError("Falta variable de entorno obligatoria: POSTGRES_PASSWORD")
        return (
            f"postgresql://{quote(connection.user, safe='')}:{quote(settings.POSTGRES_PASSWORD, safe='')}"
            f"@{connection.host}:{connection.port}/{quote(connection.database, safe='')}"
        )

    def select_models(self, names: Optional[List[str]] = None) -> List[ModelSyncConfig]:
        """Modelos a sincronizar en el orden configurado (opcionalmente filtrados)."""
        if not names:
            return list(self.models)
        unknown = set(names) - {m.name for m in self.models}
        if unknown:
            raise SyncConfigError(f"Modelos no configurados: {', '.join(sorted(unknown))}")
        return [m for m in self.models if m.name in names]


def load_sync_config(path: Union[str, Path]) -> AppConfig:
    """
    Lee y valida el YAML de configuracion.

    Raises:
        SyncConfigError: archivo inexistente, YAML invalido o esquema invalido
    """
    config_path = Path(path).expanduser().resolve()
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SyncConfigError(f"No se pudo leer la configuracion {config_path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise SyncConfigError(f"YAML invalido en {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise SyncConfigError(f"La raiz de {config_path} debe ser un objeto")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise SyncConfigError(f"Configuracion invalida en {config_path}:\n{e}") from e
