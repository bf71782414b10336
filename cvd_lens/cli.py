"""
cvd-lens command-line entry point.

Run with:
    cvd-lens photo.jpg -o out/ --analyze --export

Uploads the image, writes the original and every simulation into the
output directory, optionally runs the palette analysis (printed to stdout)
and writes the design-token artifacts next to the images.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from cvd_lens.config import ServiceConfig
from cvd_lens.core.errors import CVDLensError
from cvd_lens.core.logging import configure_logging
from cvd_lens.domain.enums import SimulationVariant
from cvd_lens.domain.models import UploadedImage
from cvd_lens.resources import LocalReference
from cvd_lens.service.client import CVDServiceClient
from cvd_lens.workflow import CVDSession, ViewModel

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvd-lens",
        description="Simulate colour vision deficiencies and check palette accessibility",
    )
    parser.add_argument("image", help="Image file to upload")
    parser.add_argument(
        "-o", "--out",
        default="cvd-output",
        help="Directory for simulated images and exported tokens (default: cvd-output)",
    )
    parser.add_argument(
        "--variants",
        nargs="+",
        choices=[v.value for v in SimulationVariant],
        default=[v.value for v in SimulationVariant],
        help="Variants to simulate (default: all)",
    )
    parser.add_argument("--analyze", action="store_true", help="Run the palette accessibility analysis")
    parser.add_argument("--export", action="store_true", help="Export design tokens (implies --analyze)")
    parser.add_argument("--api-base", default=None, help="Service base URL (overrides CVD_API_BASE)")
    parser.add_argument("--json", action="store_true", help="Print the analysis as JSON")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser


def _extension(ref: LocalReference) -> str:
    return mimetypes.guess_extension(ref.media_type) or ".bin"


def write_images(view: ViewModel, out_dir: Path) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    original = view.original_ref
    written = [out_dir / f"original{_extension(original)}"]
    written[0].write_bytes(original.read())
    for variant, ref in (view.simulation_results or {}).items():
        path = out_dir / f"{variant.value}{_extension(ref)}"
        path.write_bytes(ref.read())
        written.append(path)
    return written


def render_text(view: ViewModel) -> str:
    lines: List[str] = []
    if view.palette_entries:
        lines.append("Palette")
        for entry in view.palette_entries:
            lines.append(f"  {entry.hex}  {entry.percent * 100:5.1f}%")
    report = view.report_view()
    if report is None:
        return "\n".join(lines)

    if report.scores:
        lines.append("CVD visibility scores")
        for card in report.scores:
            lines.append(f"  {card.label:<13} {card.score:5.1f}  {card.description}")
    lines.append("Readability")
    for row in report.contrast:
        lines.append(f"  {row.fg} on {row.background}: {row.contrast:g}:1  {row.verdict}")
    if not report.contrast:
        lines.append("  No contrast pairs to check.")
    lines.append("Colour confusion")
    for row in report.confusion:
        lines.append(f"  {row.c1} + {row.c2}: {row.headline}. {row.detail}")
    if not report.confusion:
        lines.append("  No color pairs found.")
    if report.suggestions:
        lines.append("Suggestions")
        for s in report.suggestions:
            lines.append(f"  {s.title}: {s.text} ({s.badge})")
    return "\n".join(lines)


def render_json(view: ViewModel) -> str:
    report = view.report_view()
    payload = {
        "palette": [e.model_dump() for e in view.palette_entries or ()],
        "report": report.model_dump(mode="json") if report is not None else None,
    }
    return json.dumps(payload, indent=2)


async def run(args: argparse.Namespace, client: Optional[CVDServiceClient] = None) -> int:
    config = ServiceConfig.from_env(api_base=args.api_base)
    out_dir = Path(args.out)
    try:
        image = UploadedImage.from_path(args.image)
    except OSError as exc:
        print(f"error: cannot read {args.image}: {exc}", file=sys.stderr)
        return 1

    async with CVDSession(config, client=client) as session:
        try:
            view = await session.upload(image, [SimulationVariant(v) for v in args.variants])
            for path in write_images(view, out_dir):
                print(f"wrote {path}")

            if args.analyze or args.export:
                await session.analyze()
                view = session.view
                print(render_json(view) if args.json else render_text(view))

            if args.export:
                artifacts = await session.export_tokens()
                if artifacts is not None:
                    for path in artifacts.save_to(out_dir):
                        print(f"wrote {path}")
        except CVDLensError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
