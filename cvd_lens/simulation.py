"""
cvd_lens.simulation — Concurrent CVD simulation with all-or-nothing join.

One request per requested variant is issued at once; the results are joined
with ``asyncio.gather``.  If any request fails, the first failure is raised
and no ``SimulationResultSet`` is built.  Requests that are still in flight
are not cancelled; they run to completion and their results are dropped.

References are only acquired after every variant has succeeded, so a failed
run never leaves a half-populated set (or orphaned references) behind.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Optional

from cvd_lens.domain.enums import SimulationVariant
from cvd_lens.domain.models import UploadedImage
from cvd_lens.resources import LocalReference, ResourceLifecycleManager
from cvd_lens.service.client import CVDServiceClient

logger = logging.getLogger(__name__)


class SimulationResultSet(Mapping):
    """Read-only ``SimulationVariant → LocalReference`` mapping.

    Only ever constructed once every requested variant has resolved.
    Iteration follows the canonical variant order.
    """

    def __init__(self, references: Mapping[SimulationVariant, LocalReference]) -> None:
        ordered = {v: references[v] for v in SimulationVariant if v in references}
        self._refs: Mapping[SimulationVariant, LocalReference] = MappingProxyType(ordered)

    def __getitem__(self, variant) -> LocalReference:
        try:
            key = SimulationVariant(variant)
        except ValueError:
            raise KeyError(variant) from None
        return self._refs[key]

    def __iter__(self) -> Iterator[SimulationVariant]:
        return iter(self._refs)

    def __len__(self) -> int:
        return len(self._refs)

    def __repr__(self) -> str:
        return f"SimulationResultSet({[v.value for v in self._refs]})"

    @property
    def variants(self) -> tuple:
        return tuple(self._refs)

    def references(self) -> list:
        return list(self._refs.values())


class SimulationOrchestrator:
    """Fans one image out to every requested simulation variant."""

    def __init__(
        self,
        client: CVDServiceClient,
        resources: Optional[ResourceLifecycleManager] = None,
    ) -> None:
        self._client = client
        self._resources = resources or ResourceLifecycleManager()

    async def simulate_all(
        self,
        image: UploadedImage,
        variants: Iterable[SimulationVariant] = tuple(SimulationVariant),
    ) -> SimulationResultSet:
        """Simulate ``image`` for each of ``variants`` concurrently.

        Raises the first ``SimulationError`` if any variant fails.
        """
        ordered = SimulationVariant.ordered(variants)
        if not ordered:
            raise ValueError("at least one simulation variant is required")

        logger.info(
            "Simulating %s (%d bytes) for %s",
            image.filename, image.size, ", ".join(v.value for v in ordered),
        )
        blobs = await asyncio.gather(
            *(self._client.simulate(image, variant) for variant in ordered)
        )

        refs: Dict[SimulationVariant, LocalReference] = {
            variant: self._resources.acquire(blob) for variant, blob in zip(ordered, blobs)
        }
        logger.info("Simulation complete for %d variants", len(refs))
        return SimulationResultSet(refs)
