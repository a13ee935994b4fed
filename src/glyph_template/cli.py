from __future__ import annotations

import argparse
from pathlib import Path

from charsets import DEFAULT_CHARSET

from .contracts import TemplateConfig
from .module import write_template_pdf


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="glyph-template",
        description="Render the printable handwriting grid template (PDF).",
    )
    p.add_argument("output", nargs="?", type=Path, default=Path("template.pdf"), help="Output PDF file.")
    p.add_argument("--margin-top", type=float, default=15.0, help="Top margin in mm.")
    p.add_argument("--margin-left", type=float, default=15.0, help="Left margin in mm.")
    p.add_argument("--dpi", type=int, default=300, help="Raster resolution of the PDF pages.")
    p.add_argument("--font", type=Path, default=None, help="TrueType font for labels (Unicode coverage).")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = TemplateConfig(
            margin_top_mm=args.margin_top,
            margin_left_mm=args.margin_left,
            dpi=args.dpi,
            font_path=args.font,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        page_count = write_template_pdf(config=config, charset=DEFAULT_CHARSET, out_file=args.output)
    except OSError as e:
        print(f"error: {e}")
        return 2

    print(f"template={args.output} pages={page_count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
