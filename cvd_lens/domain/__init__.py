"""
cvd_lens.domain — Canonical data models and enumerations.

This package defines the source-of-truth types shared by the client, the
orchestrators and the session. Nothing in here should import from other
cvd_lens sub-packages except ``cvd_lens.core``.
"""
