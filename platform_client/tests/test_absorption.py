"""
Unit tests for response absorption into the loader cache.
"""

from unittest.mock import AsyncMock

import pytest

from platform_client.app.caching import BatchLoader, ResourceKey, ResponseAbsorber
from shared.metrics import ClientMetrics
from shared.test_helpers import create_document, create_resource


class TestResponseAbsorber:
    """Test cases for ResponseAbsorber."""

    @pytest.fixture
    def batch_fn(self):
        return AsyncMock(return_value=[])

    @pytest.fixture
    def loader(self, batch_fn):
        return BatchLoader(batch_fn)

    @pytest.fixture
    def absorber(self, loader):
        return ResponseAbsorber(loader)

    @pytest.mark.asyncio
    async def test_primary_and_included_are_primed(self, absorber, loader, batch_fn):
        """Everything in ``data`` and ``included`` resolves from cache afterwards."""
        location = create_resource("locations", "5", name="HQ")
        invite = create_resource("invites", "1", relationships={"location": {"type": "locations", "id": "5"}})

        primed = absorber.absorb(create_document(invite, included=[location]))

        assert primed == 2
        assert await loader.load(ResourceKey("invites", "1")) is invite
        assert await loader.load(ResourceKey("locations", "5")) is location
        batch_fn.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_data_is_primed(self, absorber, loader, batch_fn):
        employees = [create_resource("employees", str(i), name=f"E{i}") for i in range(3)]

        assert absorber.absorb(create_document(employees)) == 3
        assert await loader.load(ResourceKey("employees", "2")) is employees[2]
        batch_fn.assert_not_called()

    @pytest.mark.asyncio
    async def test_aliased_type_primed_under_canonical(self, absorber, loader, batch_fn):
        """Relationship-labelled resources are reachable under the model's type."""
        screening = create_resource("employee-screening-flows", "42", name="Screening")

        absorber.absorb(create_document(create_resource("employees", "1"), included=[screening]))

        assert loader.cache.get(("flows", "42", None)) is screening
        assert loader.cache.get(("employee-screening-flows", "42", None)) is screening
        assert await loader.load(ResourceKey("flows", "42")) is screening
        batch_fn.assert_not_called()

    def test_primary_overrides_included_duplicate(self, absorber, loader):
        stale = create_resource("flows", "1", name="stale")
        fresh = create_resource("flows", "1", name="fresh")

        absorber.absorb(create_document(fresh, included=[stale]))

        assert loader.cache.get(("flows", "1", None)) is fresh

    @pytest.mark.parametrize("body", [
        None,
        "not json api",
        [],
        {},
        {"data": None},
        {"data": "oops", "included": 7},
        {"data": [{"attributes": {}}, 3, None]},
        {"data": {"type": "", "id": "1"}},
        {"data": {"type": "flows", "id": None}},
        {"data": [{"type": None, "id": "1"}, {"type": "flows", "id": None}]},
    ])
    def test_malformed_bodies_prime_nothing(self, absorber, loader, body):
        assert absorber.absorb(body) == 0
        assert len(loader.cache) == 0

    def test_interceptor_returns_body_unchanged(self, absorber):
        body = create_document(create_resource("companies", "1"))

        assert absorber(body) is body

    def test_absorbed_resources_counted(self, loader):
        metrics = ClientMetrics()
        absorber = ResponseAbsorber(loader, metrics=metrics)

        absorber.absorb(create_document([create_resource("employees", "1"), create_resource("employees", "2")]))

        assert metrics.sample("absorbed_resources_total", resource_type="employees") == 2
