"""
Test helper functions and factory methods for the platform plugin client.
"""

import json
import re
from typing import Dict, Any, Optional, List, Tuple
from dataclasses import dataclass, field

import httpx


RESOURCE_PATH = re.compile(r"^/api/v3/(?P<type>[a-z-]+)/(?P<id>[^/]+)$")
COLLECTION_PATH = re.compile(r"^/api/v3/(?P<type>[a-z-]+)$")
STORAGE_PATH = "/api/v2/plugin-services/storage"


def create_resource(resource_type: str, resource_id: str, relationships: Optional[Dict[str, Any]] = None,
                    **attributes) -> Dict[str, Any]:
    """Create a JSON:API resource payload."""
    resource: Dict[str, Any] = {
        "type": resource_type,
        "id": str(resource_id),
        "attributes": attributes,
    }
    if relationships:
        resource["relationships"] = {
            name: {"data": linkage} for name, linkage in relationships.items()
        }
    return resource


def create_document(data: Any, included: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Wrap resources in a response document."""
    document: Dict[str, Any] = {"data": data}
    if included is not None:
        document["included"] = included
    return document


@dataclass
class RecordedRequest:
    """A request seen by the fake platform."""
    method: str
    path: str
    params: Dict[str, str]
    body: Any
    headers: Dict[str, str]


@dataclass
class FakePlatform:
    """
    In-memory stand-in for the platform API, served through ``httpx.MockTransport``.

    Resources are served from ``resources``; ``included`` lists what each
    resource's fetch embeds, and ``routes`` answers fixed GET paths verbatim.
    Storage commands run against a small in-memory key/value store with the
    same null-on-conflict behavior as the real one.
    """
    resources: Dict[Tuple[str, str], Dict[str, Any]] = field(default_factory=dict)
    included: Dict[Tuple[str, str], List[Dict[str, Any]]] = field(default_factory=dict)
    failures: Dict[str, int] = field(default_factory=dict)
    routes: Dict[str, Any] = field(default_factory=dict)
    storage: Dict[Optional[str], Dict[str, Any]] = field(default_factory=dict)
    storage_responses: List[Any] = field(default_factory=list)
    requests: List[RecordedRequest] = field(default_factory=list)

    def add(self, resource: Dict[str, Any], included: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        key = (resource["type"], resource["id"])
        self.resources[key] = resource
        if included:
            self.included[key] = included
        return resource

    def fail(self, path: str, status_code: int = 500):
        self.failures[path] = status_code

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def count(self, method: str, path: str) -> int:
        return sum(1 for request in self.requests if request.method == method and request.path == path)

    def calls(self, method: str, path: str) -> List[RecordedRequest]:
        return [request for request in self.requests if request.method == method and request.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append(RecordedRequest(
            method=request.method,
            path=path,
            params=dict(request.url.params),
            body=body,
            headers=dict(request.headers),
        ))

        if path in self.failures:
            return httpx.Response(self.failures[path], json={"errors": [{"status": str(self.failures[path])}]})

        if request.method == "GET" and path in self.routes:
            return httpx.Response(200, json=self.routes[path])

        if request.method == "POST" and path == STORAGE_PATH:
            if self.storage_responses:
                return httpx.Response(200, json=self.storage_responses.pop(0))
            return httpx.Response(200, json={"data": self._run_storage(body)})

        match = RESOURCE_PATH.match(path)
        if request.method == "GET" and match:
            key = (match.group("type"), match.group("id"))
            resource = self.resources.get(key)
            if resource is None:
                return httpx.Response(404, json={"errors": [{"status": "404"}]})
            included = self.included.get(key) if request.url.params.get("include") else None
            return httpx.Response(200, json=create_document(resource, included))

        match = COLLECTION_PATH.match(path)
        if request.method == "GET" and match:
            rows = [res for (res_type, _), res in self.resources.items() if res_type == match.group("type")]
            return httpx.Response(200, json=create_document(rows))

        if request.method == "DELETE":
            return httpx.Response(204)

        return httpx.Response(200, json=body if body is not None else {})

    def _run_storage(self, body: Dict[str, Any]) -> List[Optional[Dict[str, Any]]]:
        store = self.storage.setdefault(body.get("install_id"), {})
        results: List[Optional[Dict[str, Any]]] = []

        for command in body["commands"]:
            action, key = command["action"], command["key"]
            if action == "get":
                results.append({"key": key, "value": store[key]} if key in store else None)
            elif action == "set":
                store[key] = command.get("value")
                results.append({"key": key, "value": store[key]})
            elif action == "set_unique":
                if key in store:
                    results.append(None)
                else:
                    store[key] = command.get("value")
                    results.append({"key": key, "value": store[key]})
            elif action == "set_unique_num":
                current = store.get(key)
                store[key] = command.get("start", 1) if current is None else current + command.get("increment", 1)
                results.append({"key": key, "value": store[key]})
            elif action == "unset":
                existed = key in store
                value = store.pop(key, None)
                results.append({"key": key, "value": value} if existed else None)
            else:
                results.append(None)

        return results
