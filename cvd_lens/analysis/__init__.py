"""
cvd_lens.analysis — Palette → accessibility analysis pipeline, confusion
ranking and presentable rows.

Import surface::

    from cvd_lens.analysis.pipeline import AnalysisPipeline
    from cvd_lens.analysis.ranking  import build_color_pairs, rank_confusion
    from cvd_lens.analysis.view     import build_report_view
"""
