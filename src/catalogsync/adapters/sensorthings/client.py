"""SensorThings API implementation of the catalog port."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
import simplejson
from pydantic import ValidationError

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.domain.errors import RemoteCallFailure
from catalogsync.domain.model import EntityKind

from .schema import EntityPage
from .translator import (
    IOT_ID,
    batch_payload,
    changed_payload,
    collection_for,
    entity_path,
    id_from_location,
    outcome_tokens,
    to_entity,
    to_observation,
    to_payload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Coroutine, Sequence

    from catalogsync.config.catalog import CatalogConfig
    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.domain.batching import Batch
    from catalogsync.domain.model import CatalogEntity, EntityId, Observation, StoredItem

    from .schema import JsonObject

log = getLogger(__name__)

BULK_WRITE_PATH = "CreateObservations"
JSON_HEADERS = {"Content-Type": "application/json"}


def _query_params(
    *,
    filter_expr: str,
    select: Sequence[str],
    expand: Sequence[str],
    top: int | None,
    order_by: str | None,
) -> dict[str, str]:
    params: dict[str, str] = {}
    if filter_expr:
        params["$filter"] = filter_expr
    if select:
        params["$select"] = ",".join(select)
    if expand:
        params["$expand"] = ",".join(expand)
    if top is not None:
        params["$top"] = str(top)
    if order_by:
        params["$orderby"] = order_by
    return params


class SensorThingsCatalog:
    """Blocking ``CatalogService`` backed by a SensorThings REST endpoint.

    Each call runs its own event loop, so one instance can be shared by the
    threads of a ``BulkDeleter``. Transport and protocol errors surface as
    ``RemoteCallFailure``.
    """

    def __init__(
        self,
        *,
        config: CatalogConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def query(
        self,
        kind: EntityKind,
        *,
        filter: str = "",  # noqa: A002
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int | None = None,
        order_by: str | None = None,
    ) -> list[CatalogEntity]:
        if kind is EntityKind.OBSERVATION:
            raise ValueError("Use query_observations to read observations")
        params = _query_params(
            filter_expr=filter, select=select, expand=expand, top=top, order_by=order_by
        )
        rows = self._run(self._fetch_all_async(collection_for(kind), params))
        return [to_entity(kind, row) for row in rows]

    def query_observations(
        self,
        *,
        filter: str = "",  # noqa: A002
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int | None = None,
        order_by: str | None = None,
    ) -> list[Observation]:
        params = _query_params(
            filter_expr=filter, select=select, expand=expand, top=top, order_by=order_by
        )
        rows = self._run(
            self._fetch_all_async(collection_for(EntityKind.OBSERVATION), params)
        )
        return [to_observation(row) for row in rows]

    def create(self, item: StoredItem) -> None:
        item.id = self._run(self._create_async(collection_for(item.kind), to_payload(item)))
        log.debug("Created %s", item)

    def update(self, item: StoredItem, changed: Collection[str]) -> None:
        if item.id is None:
            raise ValueError(f"Cannot update unsaved {item}")
        payload = changed_payload(item, changed)
        if not payload:
            return
        self._run(self._send_async("PATCH", entity_path(item.kind, item.id), json=payload))

    def delete(self, item: StoredItem) -> None:
        if item.id is None:
            raise ValueError(f"Cannot delete unsaved {item}")
        self._run(self._send_async("DELETE", entity_path(item.kind, item.id)))

    def bulk_write(self, batches: Sequence[Batch]) -> list[str]:
        if not batches:
            return []
        body = [batch_payload(batch) for batch in batches]
        response = self._run(self._send_async("POST", BULK_WRITE_PATH, json=body))
        data = _json(response)
        if not isinstance(data, list):
            raise RemoteCallFailure(f"Unexpected {BULK_WRITE_PATH} response payload")
        tokens = outcome_tokens(data)
        expected = sum(len(batch) for batch in batches)
        if len(tokens) != expected:
            log.warning(
                "%s returned %s results for %s observations", BULK_WRITE_PATH, len(tokens), expected
            )
        return tokens

    def _run[T](self, coroutine: Coroutine[Any, Any, T]) -> T:
        try:
            return asyncio.run(coroutine)
        except httpx.HTTPStatusError as exc:
            response = exc.response
            msg = (
                f"{exc.request.method} {exc.request.url} failed with "
                f"{response.status_code}: {response.text}"
            )
            raise RemoteCallFailure(msg, status_code=response.status_code) from exc
        except httpx.HTTPError as exc:
            raise RemoteCallFailure(f"Catalog request failed: {exc}") from exc

    async def _fetch_all_async(self, path: str, params: dict[str, str]) -> list[JsonObject]:
        rows: list[JsonObject] = []
        async with self._client_factory(self._resilience) as client:
            url: str | None = path
            request_params: dict[str, str] | None = params
            while url is not None:
                response = await client.get(url, params=request_params)
                response.raise_for_status()
                try:
                    page = EntityPage.model_validate(_json(response))
                except ValidationError as exc:
                    raise RemoteCallFailure(f"Unexpected page payload from {url}") from exc
                rows.extend(page.value)
                # nextLink already carries the query options
                url = page.next_link
                request_params = None
        log.debug("Fetched %s rows from %s", len(rows), path)
        return rows

    async def _create_async(self, path: str, payload: JsonObject) -> EntityId:
        async with self._client_factory(self._resilience) as client:
            response = await client.post(path, content=_encode(payload), headers=JSON_HEADERS)
            response.raise_for_status()
        location = response.headers.get("Location")
        if location:
            return id_from_location(location)
        data = _json(response) if response.content else None
        if isinstance(data, dict) and data.get(IOT_ID) is not None:
            return data[IOT_ID]
        raise RemoteCallFailure(f"No id returned when creating in {path}")

    async def _send_async(
        self,
        method: str,
        path: str,
        *,
        json: object = None,
    ) -> httpx.Response:
        async with self._client_factory(self._resilience) as client:
            if json is None:
                response = await client.request(method, path)
            else:
                response = await client.request(
                    method, path, content=_encode(json), headers=JSON_HEADERS
                )
            response.raise_for_status()
        return response


def _encode(body: object) -> bytes:
    # Decimals go out as exact JSON numbers, never via float.
    return simplejson.dumps(body, use_decimal=True).encode()


def _json(response: httpx.Response) -> Any:
    try:
        return simplejson.loads(response.text, use_decimal=True)
    except ValueError as exc:
        raise RemoteCallFailure(
            f"Invalid JSON from {response.request.url}", status_code=response.status_code
        ) from exc
