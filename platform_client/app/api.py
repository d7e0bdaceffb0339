"""
Typed client for the platform's JSON:API resources and plugin services.

Single resources are fetched through a batching loader backed by a shared
cache. Every successful response, including plain collection queries and
writes, primes that cache with the resources it carries, so related
records returned via ``include`` are served later without another request.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from shared.config import PlatformConfig, get_config
from shared.errors import StorageProtocolError
from shared.logging import bind_install, get_logger
from shared.metrics import ClientMetrics
from .adapters.transport import PlatformTransport
from .caching import BatchLoader, ResourceCache, ResourceKey, ResponseAbsorber, TypeAliasTable
from .resources import InviteCreation, PaginationParams, ResourceType, validate_invite_query
from .storage import BaseStorageCommand, StorageItem, StoragePipeline, parse_command, parse_result


STORAGE_PATH = "/api/v2/plugin-services/storage"

Query = Optional[Union[PaginationParams, Mapping[str, Any]]]


def _query_params(params: Query) -> Optional[Dict[str, Any]]:
    if params is None:
        return None
    if isinstance(params, PaginationParams):
        return params.to_params()
    return dict(params)


def _data(body: Any) -> Any:
    return body.get("data") if isinstance(body, Mapping) else None


class PlatformAPI:
    """Client for one access token. Create one per plugin request or job."""

    def __init__(
        self,
        access_token: str,
        config: Optional[PlatformConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[ClientMetrics] = None,
        aliases: Optional[TypeAliasTable] = None,
    ):
        self.config = config or get_config()
        self.metrics = metrics or ClientMetrics()
        self.logger = get_logger("platform_client.api")

        self.transport = PlatformTransport(
            access_token,
            self.config.base_url,
            timeout=self.config.http_timeout,
            client=client,
            metrics=self.metrics,
        )
        self.loader = BatchLoader(
            self._fetch_resources,
            cache=ResourceCache(self.config.cache_max_entries),
            aliases=aliases,
            max_batch_size=self.config.loader_max_batch_size,
            share_include_variants=self.config.share_include_variants,
            metrics=self.metrics,
        )
        self.absorber = ResponseAbsorber(self.loader, metrics=self.metrics)
        self.transport.add_response_interceptor(self.absorber)

    async def _fetch_resource(self, key: ResourceKey) -> Any:
        params = {"include": key.include} if key.include else None
        return _data(await self.transport.get(key.path(), params=params))

    async def _fetch_resources(self, keys: List[ResourceKey]) -> List[Any]:
        # One GET per unique key; failures stay local to their key
        return await asyncio.gather(*(self._fetch_resource(key) for key in keys), return_exceptions=True)

    async def load_resource(self, resource_type: Union[str, ResourceType], resource_id: str,
                            include: Optional[str] = None) -> Dict[str, Any]:
        type_name = resource_type.value if isinstance(resource_type, ResourceType) else resource_type
        return await self.loader.load(ResourceKey(type_name, resource_id, include))

    def prime(self, resource: Mapping[str, Any]) -> int:
        """Put a resource payload (and its alias-equivalents) into the cache."""
        return self.absorber.absorb({"data": resource})

    async def get_agreement_page(self, agreement_page_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.AGREEMENT_PAGES, agreement_page_id, include)

    async def get_agreement(self, agreement_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.AGREEMENTS, agreement_id, include)

    async def get_company(self, company_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.COMPANIES, company_id, include)

    async def get_employee(self, employee_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.EMPLOYEES, employee_id, include)

    async def get_flow(self, flow_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.FLOWS, flow_id, include)

    async def get_location(self, location_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.LOCATIONS, location_id, include)

    async def get_sign_in_field_page(self, page_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.SIGN_IN_FIELD_PAGES, page_id, include)

    async def get_sign_in_field(self, field_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.SIGN_IN_FIELDS, field_id, include)

    async def get_invite(self, invite_id: str, include: Optional[str] = None) -> Dict[str, Any]:
        return await self.load_resource(ResourceType.INVITES, invite_id, include)

    async def _list(self, path: str, params: Query = None) -> List[Dict[str, Any]]:
        return _data(await self.transport.get(path, params=_query_params(params))) or []

    async def get_employee_by_email(self, email: str, include: Optional[str] = None) -> Optional[Dict[str, Any]]:
        params = PaginationParams(filter={"email": email}, page={"limit": 1}, include=include)
        employees = await self._list("/api/v3/employees", params)
        return employees[0] if employees else None

    async def get_employees(self, params: Query = None) -> List[Dict[str, Any]]:
        return await self._list("/api/v3/employees", params)

    async def get_flows(self, params: Query = None) -> List[Dict[str, Any]]:
        return await self._list("/api/v3/flows", params)

    async def get_locations(self, params: Query = None) -> List[Dict[str, Any]]:
        return await self._list("/api/v3/locations", params)

    async def get_sign_in_fields(self, sign_in_field_page_id: str) -> List[Dict[str, Any]]:
        return await self._list(f"/api/v3/sign-in-field-pages/{sign_in_field_page_id}/sign-in-fields")

    async def get_invites(self, params: Query = None) -> List[Dict[str, Any]]:
        query = _query_params(params)
        if query is not None:
            validate_invite_query(query)
        return await self._list("/api/v3/invites", query)

    async def me(self) -> Dict[str, Any]:
        return _data(await self.transport.get("/api/v2/users/me"))

    async def create_invite(self, invite: InviteCreation) -> Dict[str, Any]:
        return _data(await self.transport.post("/api/v3/invites", json=invite.to_document()))

    async def update_invite(self, invite_id: str, invite: InviteCreation) -> Dict[str, Any]:
        return _data(await self.transport.put(f"/api/v3/invites/{invite_id}", json=invite.to_document(invite_id)))

    async def partial_update_invite(self, invite_id: str, invite: InviteCreation) -> Dict[str, Any]:
        return _data(await self.transport.patch(f"/api/v3/invites/{invite_id}", json=invite.to_document(invite_id)))

    async def remove_invite(self, invite_id: str) -> None:
        await self.transport.delete(f"/api/v3/invites/{invite_id}")
        self.loader.clear_resource(ResourceKey(ResourceType.INVITES.value, invite_id))

    async def update_job(self, job_id: str, update: Mapping[str, Any]) -> None:
        await self.transport.patch(f"/api/v2/plugin-services/jobs/{job_id}", json=dict(update))

    async def get_plugin_install_config(self, install_id: str) -> Dict[str, Any]:
        return _data(await self.transport.get(f"/api/v2/plugin-services/installs/{install_id}/config")) or {}

    async def set_plugin_install_config(self, install_id: str, config: Mapping[str, Any]) -> None:
        await self.transport.put(f"/api/v2/plugin-services/installs/{install_id}/config", json=dict(config))

    async def create_notification(self, install_id: str, params: Optional[Mapping[str, Any]] = None) -> None:
        await self.transport.post(
            f"/api/v2/plugin-services/installs/{install_id}/notifications",
            json=dict(params or {})
        )

    def pipeline(self, install_id: Optional[str] = None) -> StoragePipeline:
        """Start a storage pipeline, optionally scoped to an install."""
        return StoragePipeline(self, install_id)

    async def storage_pipeline(
        self,
        commands: Sequence[Union[BaseStorageCommand, Mapping[str, Any]]],
        install_id: Optional[str] = None,
    ) -> List[Optional[StorageItem]]:
        """Submit storage commands as one request; results line up with ``commands``."""
        parsed = [parse_command(command) for command in commands]
        request: Dict[str, Any] = {"commands": [command.to_wire() for command in parsed]}
        if install_id:
            request["install_id"] = install_id

        for command in parsed:
            self.metrics.increment_counter("storage_commands_total", action=command.action)

        with bind_install(install_id):
            return await self._submit_storage(request, len(parsed))

    async def _submit_storage(self, request: Dict[str, Any], expected: int) -> List[Optional[StorageItem]]:
        self.logger.debug("Submitting storage pipeline", commands=expected)
        body = await self.transport.post(STORAGE_PATH, json=request)
        results = _data(body)
        if not isinstance(results, list) or len(results) != expected:
            self.logger.error("Storage response does not match commands", commands=expected)
            raise StorageProtocolError(
                "Result count does not match command count",
                details={
                    "commands": expected,
                    "results": len(results) if isinstance(results, list) else None
                }
            )

        try:
            return [parse_result(result) for result in results]
        except ValueError as exc:
            raise StorageProtocolError("Unreadable storage item", details={"error": str(exc)}) from exc

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "PlatformAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
