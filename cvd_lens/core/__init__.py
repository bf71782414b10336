"""
cvd_lens.core — Constants, error taxonomy and logging setup.

Nothing in here imports from other cvd_lens sub-packages.
"""
