"""
cvd_lens.resources — Local references to binary blobs.

A ``LocalReference`` is the Python counterpart of a browser object URL: a
short-lived handle over an in-memory blob that the presentation layer can
display or download.  It is either ``live`` or ``revoked``; once revoked it
can never be read again.

The manager keeps no registry of live references.  Whoever asks for a
reference owns it and must release it on every exit path; ``scoped()`` and
``replace()`` cover the two common shapes (temporary use, and superseding a
previous reference).

Usage::

    manager = ResourceLifecycleManager()
    with manager.scoped(blob) as ref:
        show(ref.url)

    current = manager.replace(current, new_blob)   # old one is revoked
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, cast

from cvd_lens.core.constants import REFERENCE_NAMESPACE, REFERENCE_URL_SCHEME
from cvd_lens.core.errors import ResourceStateError
from cvd_lens.domain.enums import ReferenceState
from cvd_lens.domain.models import Blob
from cvd_lens.metrics import record_reference_acquired, record_reference_released

logger = logging.getLogger(__name__)


class LocalReference:
    """Handle over one blob.  Only the manager that issued it can revoke it."""

    __slots__ = ("_url", "_blob", "_state")

    def __init__(self, url: str, blob: Blob) -> None:
        self._url = url
        self._blob: Optional[Blob] = blob
        self._state = ReferenceState.LIVE

    def __repr__(self) -> str:
        return f"LocalReference({self._url!r}, state={self._state.value})"

    @property
    def state(self) -> ReferenceState:
        return self._state

    @property
    def is_live(self) -> bool:
        return self._state is ReferenceState.LIVE

    @property
    def url(self) -> str:
        self._ensure_live()
        return self._url

    @property
    def media_type(self) -> str:
        return self._live_blob().media_type

    @property
    def size(self) -> int:
        return self._live_blob().size

    def read(self) -> bytes:
        """Dereference: return the blob's bytes."""
        return self._live_blob().content

    def blob(self) -> Blob:
        return self._live_blob()

    def _ensure_live(self) -> None:
        if self._state is ReferenceState.REVOKED:
            raise ResourceStateError(self._url)

    def _live_blob(self) -> Blob:
        self._ensure_live()
        return cast(Blob, self._blob)

    def _revoke(self) -> bool:
        if self._state is ReferenceState.REVOKED:
            return False
        self._state = ReferenceState.REVOKED
        self._blob = None
        return True


class ResourceLifecycleManager:
    """Creates and revokes ``LocalReference`` handles."""

    def __init__(self, namespace: str = REFERENCE_NAMESPACE) -> None:
        self._namespace = namespace

    def acquire(self, blob: Blob) -> LocalReference:
        url = f"{REFERENCE_URL_SCHEME}:{self._namespace}/{uuid.uuid4()}"
        ref = LocalReference(url, blob)
        record_reference_acquired()
        logger.debug("Acquired %s (%d bytes, %s)", url, blob.size, blob.media_type)
        return ref

    def release(self, ref: Optional[LocalReference]) -> None:
        """Revoke ``ref``.  Releasing ``None`` or a revoked reference is a no-op."""
        if ref is None:
            return
        if ref._revoke():
            record_reference_released()
            logger.debug("Released %s", ref._url)

    def release_all(self, refs: Iterable[Optional[LocalReference]]) -> None:
        for ref in refs:
            self.release(ref)

    def replace(self, current: Optional[LocalReference], blob: Blob) -> LocalReference:
        """Release the superseded ``current`` reference and acquire one for ``blob``."""
        self.release(current)
        return self.acquire(blob)

    @contextmanager
    def scoped(self, blob: Blob) -> Iterator[LocalReference]:
        ref = self.acquire(blob)
        try:
            yield ref
        finally:
            self.release(ref)
