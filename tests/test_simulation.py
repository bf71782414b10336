"""
Unit tests for cvd_lens.simulation.

Tests cover:
  • all variants succeed → one live reference per variant
  • requests are issued concurrently, not one after another
  • any failing subset → SimulationError, no partial result set, no refs
  • in-flight requests are not cancelled when one fails
  • variant selection (subset, duplicates, empty)
"""

from __future__ import annotations

import asyncio
from itertools import combinations

import pytest

from cvd_lens.core.constants import SIMULATE_PATH
from cvd_lens.core.errors import SimulationError
from cvd_lens.domain.enums import SimulationVariant
from cvd_lens.metrics import metrics_snapshot
from cvd_lens.resources import ResourceLifecycleManager
from cvd_lens.simulation import SimulationOrchestrator, SimulationResultSet

from tests.conftest import PNG_BYTES

ALL = tuple(v.value for v in SimulationVariant)
FAILING_SUBSETS = [
    subset for n in range(1, len(ALL) + 1) for subset in combinations(ALL, n)
]


@pytest.fixture
def orchestrator(client):
    return SimulationOrchestrator(client, ResourceLifecycleManager())


class TestSimulateAll:
    @pytest.mark.asyncio
    async def test_all_variants_succeed(self, orchestrator, image):
        results = await orchestrator.simulate_all(image)
        assert isinstance(results, SimulationResultSet)
        assert list(results) == list(SimulationVariant)
        for variant, ref in results.items():
            assert ref.is_live
            assert ref.read() == PNG_BYTES + variant.value.encode()
            assert ref.media_type == "image/png"
        assert metrics_snapshot()["live_references"] == 3

    @pytest.mark.asyncio
    async def test_lookup_by_name(self, orchestrator, image):
        results = await orchestrator.simulate_all(image)
        assert results["tritanopia"] is results[SimulationVariant.TRITANOPIA]

    @pytest.mark.asyncio
    async def test_missing_and_unknown_keys(self, orchestrator, image):
        results = await orchestrator.simulate_all(image, [SimulationVariant.TRITANOPIA])
        assert "tritanopia" in results
        assert "protanopia" not in results
        assert "bogus" not in results
        assert results.get("protanopia") is None
        assert results.get("bogus") is None
        with pytest.raises(KeyError):
            results["bogus"]

    @pytest.mark.asyncio
    async def test_requests_run_concurrently(self, service, orchestrator, image):
        service.default_delay = 0.02
        await orchestrator.simulate_all(image)
        assert service.peak_inflight == 3

    @pytest.mark.asyncio
    async def test_deuteranopia_500(self, service, orchestrator, image):
        service.simulate_status["deuteranopia"] = 500
        with pytest.raises(SimulationError) as exc_info:
            await orchestrator.simulate_all(image)
        assert exc_info.value.variant == "deuteranopia"
        assert "deuteranopia" in str(exc_info.value)
        assert metrics_snapshot()["references_acquired"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", FAILING_SUBSETS)
    async def test_any_failure_rejects_whole_set(self, service, orchestrator, image, failing):
        for variant in failing:
            service.simulate_status[variant] = 500
        with pytest.raises(SimulationError) as exc_info:
            await orchestrator.simulate_all(image)
        assert exc_info.value.variant in failing
        assert metrics_snapshot()["references_acquired"] == 0

    @pytest.mark.asyncio
    async def test_first_failure_wins(self, service, orchestrator, image):
        service.simulate_status.update({"protanopia": 500, "tritanopia": 502})
        service.simulate_delay["protanopia"] = 0.05
        with pytest.raises(SimulationError) as exc_info:
            await orchestrator.simulate_all(image)
        assert exc_info.value.variant == "tritanopia"
        await asyncio.sleep(0.1)   # let protanopia finish

    @pytest.mark.asyncio
    async def test_pending_requests_are_not_cancelled(self, service, orchestrator, image):
        service.simulate_status["deuteranopia"] = 500
        service.simulate_delay.update({"protanopia": 0.03, "tritanopia": 0.03})
        with pytest.raises(SimulationError):
            await orchestrator.simulate_all(image)
        assert service.completed == ["deuteranopia"]
        await asyncio.sleep(0.1)
        assert sorted(service.completed) == sorted(ALL)
        assert metrics_snapshot()["references_acquired"] == 0


class TestVariantSelection:
    @pytest.mark.asyncio
    async def test_subset(self, service, orchestrator, image):
        results = await orchestrator.simulate_all(image, ["tritanopia"])
        assert list(results) == [SimulationVariant.TRITANOPIA]
        assert len(service.requests_to(SIMULATE_PATH)) == 1

    @pytest.mark.asyncio
    async def test_duplicates_collapse_in_canonical_order(self, service, orchestrator, image):
        results = await orchestrator.simulate_all(
            image, ["tritanopia", "protanopia", "tritanopia"]
        )
        assert results.variants == (SimulationVariant.PROTANOPIA, SimulationVariant.TRITANOPIA)
        assert len(service.requests_to(SIMULATE_PATH)) == 2

    @pytest.mark.asyncio
    async def test_empty_selection_rejected(self, service, orchestrator, image):
        with pytest.raises(ValueError):
            await orchestrator.simulate_all(image, [])
        assert service.requests == []
