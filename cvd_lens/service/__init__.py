"""
cvd_lens.service — HTTP access to the external simulation/analysis service.

Import surface::

    from cvd_lens.service.client import CVDServiceClient
"""
