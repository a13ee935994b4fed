from __future__ import annotations

import argparse
from pathlib import Path

from .artifacts import write_extract_report_json, write_glyph_manifest_json
from .contracts import ExtractConfig, GridGeometry
from .data_access import split_input_list
from .module import run_extract


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="glyph-extract",
        description="Scanned handwriting grid -> per-character PNG glyphs + glyphs.json manifest.",
    )
    p.add_argument(
        "--input",
        required=True,
        help="Scanned pages, comma-separated, in template page order (e.g. page1.png,page2.png).",
    )
    p.add_argument("--output", type=Path, default=Path("./output"), help="Output directory.")
    p.add_argument("--dpi", type=int, default=300, help="Scanner DPI.")
    p.add_argument("--margin-top", type=float, default=15.0, help="Top margin in mm.")
    p.add_argument("--margin-left", type=float, default=15.0, help="Left margin in mm.")
    p.add_argument("--threshold", type=int, default=240, help="White threshold (0-255).")
    p.add_argument(
        "--transparent",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Make the paper background transparent.",
    )
    p.add_argument("--report", type=Path, default=None, help="Optional run report JSON file.")
    p.add_argument(
        "--compute-source-sha256",
        action="store_true",
        help="Include SHA-256 of every input file in the run report.",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    input_files = split_input_list(args.input)
    if not input_files:
        parser.error("--input must name at least one file")

    try:
        geometry = GridGeometry(dpi=args.dpi, margin_top_mm=args.margin_top, margin_left_mm=args.margin_left)
        config = ExtractConfig(
            out_root=args.output,
            geometry=geometry,
            threshold=args.threshold,
            transparent=args.transparent,
            compute_source_sha256=args.compute_source_sha256,
        )
    except ValueError as e:
        parser.error(str(e))

    result = run_extract(config=config, input_files=input_files)
    if args.report is not None:
        write_extract_report_json(result=result, out_file=args.report)

    if not result.ok:
        for err in result.errors:
            print(f"error {err.code}: {err.message} {err.detail or ''}")
        return 2

    write_glyph_manifest_json(
        glyphs=result.glyphs,
        cell_width_mm=geometry.cell_width_mm,
        cell_height_mm=geometry.cell_height_mm,
        out_file=config.manifest_file,
    )
    print(f"glyphs={len(result.glyphs)} errors={len(result.errors)} manifest={config.manifest_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
