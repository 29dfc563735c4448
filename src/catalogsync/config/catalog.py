"""Remote catalog configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from catalogsync import __version__

from .env import env_flag, env_int, optional_env_var, require_env_var
from .errors import ConfigurationError
from .http_resilience import BasicAuth, ResilienceConfig

CATALOG_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 10_000
DEFAULT_MAX_BATCH = 1_000
DEFAULT_DELETE_PARALLELISM = 4


@dataclass(frozen=True)
class CatalogConfig:
    """Holds the catalog endpoint and the run options read from the environment."""

    base_url: str
    resilience: ResilienceConfig
    dry_run: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    max_batch: int = DEFAULT_MAX_BATCH
    use_bulk_writes: bool = True
    delete_parallelism: int = DEFAULT_DELETE_PARALLELISM


def _basic_auth() -> BasicAuth | None:
    username = optional_env_var("CATALOG_USERNAME")
    password = optional_env_var("CATALOG_PASSWORD")
    if username is None and password is None:
        return None
    if username is None or password is None:
        raise ConfigurationError("CATALOG_USERNAME and CATALOG_PASSWORD must be set together")
    return BasicAuth(username=username, password=password)


def get_catalog_config(*, resilience: ResilienceConfig | None = None) -> CatalogConfig:
    base_url = require_env_var("CATALOG_URL").strip().rstrip("/") + "/"
    return CatalogConfig(
        base_url=base_url,
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=base_url,
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            auth=_basic_auth(),
            default_headers={"User-Agent": f"catalogsync/{__version__}"},
        ),
        dry_run=env_flag("CATALOG_DRY_RUN"),
        page_size=env_int("CATALOG_PAGE_SIZE", default=DEFAULT_PAGE_SIZE, minimum=1),
        max_batch=env_int("CATALOG_MAX_BATCH", default=DEFAULT_MAX_BATCH, minimum=1),
        use_bulk_writes=env_flag("CATALOG_USE_BULK_WRITES", default=True),
        delete_parallelism=env_int(
            "CATALOG_DELETE_PARALLELISM", default=DEFAULT_DELETE_PARALLELISM, minimum=1
        ),
    )
