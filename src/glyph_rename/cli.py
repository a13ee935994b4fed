from __future__ import annotations

import argparse
from pathlib import Path

from charsets import DEFAULT_CHARSET

from .module import rename_glyphs


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="glyph-rename",
        description="Rename glyph PNGs to the current ASCII-safe names and regenerate glyphs.json.",
    )
    p.add_argument("glyphs_dir", type=Path, help="Directory holding the glyph PNG files.")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    result = rename_glyphs(glyphs_dir=args.glyphs_dir, charset=DEFAULT_CHARSET)
    for err in result.errors:
        print(f"error {err.code}: {err.message} {err.detail or ''}")

    print(
        f"glyphs={len(result.glyphs)} renamed={len(result.renamed)} missing={len(result.missing)} "
        f"conflicts={len(result.conflicts)} removed={len(result.removed)} ok={result.ok}"
    )
    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
