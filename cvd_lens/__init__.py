"""
cvd_lens — client-side orchestration for colour-vision-deficiency
simulation and palette accessibility analysis.

Import surface::

    from cvd_lens.workflow import CVDSession
    from cvd_lens.domain.models import UploadedImage
"""

__version__ = "0.1.0"
