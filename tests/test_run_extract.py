from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path

import numpy as np
from loguru import logger
from PIL import Image

from charsets import CharacterSet
from glyph_extract.artifacts import load_glyph_manifest, serialize_extract_result, write_glyph_manifest_json
from glyph_extract.contracts import ExtractConfig, GlyphResult, GridGeometry
from glyph_extract.module import run_extract
from glyph_extract.sink import GlyphSink, PngDirectorySink
from glyph_extract.sources import PageDecodeError, Pypdfium2PageSource, decode_page_bytes

# 2 x 2 grid of 20 px cells at 20 dpi, no margins -> 40 x 40 px page.
GRID = GridGeometry(
    cell_width_mm=25.4,
    cell_height_mm=25.4,
    columns=2,
    rows=2,
    dpi=20,
    margin_top_mm=0.0,
    margin_left_mm=0.0,
)

CHARSET = CharacterSet(
    name="test",
    chars=tuple("AB.?CDEF"),
    filenames={".": "dot", "?": "question"},
)


def _write_page(path: Path) -> None:
    page = np.full((40, 40, 3), 255, dtype=np.uint8)
    page[4:12, 4:8] = (0, 0, 0)
    page[25:30, 22:35] = (30, 30, 30)
    Image.fromarray(page).save(path, format="PNG")


class _FailingSink(GlyphSink):
    def __init__(self, inner: GlyphSink, fail_on: str) -> None:
        self.inner = inner
        self.fail_on = fail_on
        self.seen: list[str] = []

    def save(self, glyph: GlyphResult) -> str:
        self.seen.append(glyph.char)
        if glyph.char == self.fail_on:
            raise OSError("disk full")
        return self.inner.save(glyph)


class _MemorySink(GlyphSink):
    def __init__(self) -> None:
        self.stored: dict[str, np.ndarray] = {}

    def save(self, glyph: GlyphResult) -> str:
        key = f"mem://{glyph.index}"
        self.stored[key] = glyph.raster
        return key


class _ForgetfulPngSink(PngDirectorySink):
    def save(self, glyph: GlyphResult) -> str:
        return self.filename_for(glyph.char)


class TestRunExtract(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.page1 = self.tmp / "page1.png"
        self.page2 = self.tmp / "page2.png"
        _write_page(self.page1)
        _write_page(self.page2)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _config(self, out: str, **kw) -> ExtractConfig:
        return ExtractConfig(out_root=self.tmp / out, geometry=GRID, charset=CHARSET, **kw)

    def test_two_pages_fill_the_manifest_in_cursor_order(self) -> None:
        cfg = self._config("out")
        result = run_extract(config=cfg, input_files=[self.page1, self.page2])

        self.assertTrue(result.ok, result.errors)
        self.assertEqual(list(result.glyphs), list("AB.?CDEF"))
        self.assertEqual(result.glyphs["."], "dot.png")
        self.assertEqual(result.glyphs["?"], "question.png")
        self.assertEqual([p.cursor_start for p in result.pages], [0, 4])
        self.assertEqual([p.glyph_count for p in result.pages], [4, 4])
        self.assertEqual({p.backend for p in result.pages}, {"pillow"})
        self.assertNotIn("unassigned_chars", result.meta)

        with Image.open(cfg.glyphs_dir / "A.png") as img:
            self.assertEqual(img.mode, "RGBA")
            self.assertEqual(img.size, (8, 12))  # x 2..10, y 2..14
        with Image.open(cfg.glyphs_dir / "B.png") as img:
            self.assertEqual(img.size, (20, 20))  # empty cell keeps its full size

    def test_outputs_are_byte_identical_across_runs(self) -> None:
        def run_once(name: str) -> dict[str, bytes]:
            cfg = self._config(name)
            result = run_extract(config=cfg, input_files=[self.page1, self.page2])
            self.assertTrue(result.ok)
            write_glyph_manifest_json(
                glyphs=result.glyphs,
                cell_width_mm=GRID.cell_width_mm,
                cell_height_mm=GRID.cell_height_mm,
                out_file=cfg.manifest_file,
            )
            files = {p.name: p.read_bytes() for p in sorted(cfg.glyphs_dir.iterdir())}
            files["glyphs.json"] = cfg.manifest_file.read_bytes()
            files["report"] = serialize_extract_result(result).encode("utf-8")
            return files

        self.assertEqual(run_once("run1"), run_once("run2"))

        manifest = load_glyph_manifest(self.tmp / "run1" / "glyphs.json")
        self.assertEqual(manifest["version"], 1)
        self.assertEqual(manifest["cellSize"], {"width": 25.4, "height": 25.4})
        self.assertEqual(manifest["glyphs"]["."], "dot.png")

    def test_decode_failure_stops_the_run(self) -> None:
        broken = self.tmp / "broken.png"
        broken.write_bytes(b"not an image")

        result = run_extract(config=self._config("out"), input_files=[self.page1, broken, self.page2])

        self.assertFalse(result.ok)
        self.assertEqual([e.code for e in result.errors], ["EXTRACT_PAGE_DECODE_FAILED"])
        self.assertEqual(result.errors[0].detail["page_num"], 2)
        self.assertEqual(list(result.glyphs), list("AB.?"))
        self.assertEqual(len(result.pages), 1)

    def test_glyph_save_failure_is_skipped_and_cursor_advances(self) -> None:
        cfg = self._config("out")
        cfg.glyphs_dir.mkdir(parents=True)
        sink = _FailingSink(PngDirectorySink(out_dir=cfg.glyphs_dir, charset=CHARSET), fail_on="B")

        result = run_extract(config=cfg, input_files=[self.page1], sink=sink)

        self.assertTrue(result.ok)
        self.assertEqual(sink.seen, list("AB.?"))
        self.assertEqual(list(result.glyphs), ["A", ".", "?"])
        self.assertEqual([e.code for e in result.errors], ["GLYPH_SAVE_FAILED"])
        self.assertEqual(result.errors[0].detail["char"], "B")
        self.assertEqual(result.meta["unassigned_chars"], 4)

        # "?" still comes from cell (1, 1), which holds the second stroke.
        with Image.open(cfg.glyphs_dir / "question.png") as img:
            self.assertEqual(img.size, (17, 9))  # x 0..17, y 3..12 (cell-local)

    def test_custom_sink_owns_its_naming_and_storage(self) -> None:
        sink = _MemorySink()

        result = run_extract(config=self._config("out"), input_files=[self.page1], sink=sink)

        self.assertTrue(result.ok, result.errors)
        self.assertEqual(result.glyphs, {"A": "mem://0", "B": "mem://1", ".": "mem://2", "?": "mem://3"})
        self.assertEqual(sink.stored["mem://0"].shape, (12, 8, 4))
        self.assertEqual(list((self.tmp / "out" / "glyphs").iterdir()), [])

    def test_png_sink_reports_glyphs_missing_on_disk(self) -> None:
        cfg = self._config("out")
        cfg.glyphs_dir.mkdir(parents=True)
        sink = _ForgetfulPngSink(out_dir=cfg.glyphs_dir, charset=CHARSET)

        result = run_extract(config=cfg, input_files=[self.page1], sink=sink)

        self.assertFalse(result.ok)
        self.assertEqual([e.code for e in result.errors], ["EXTRACT_OUTPUT_MISSING"] * 4)

    def test_every_glyph_is_logged_at_info(self) -> None:
        messages: list[str] = []
        handler_id = logger.add(messages.append, level="INFO", format="{level} {message}")
        try:
            run_extract(config=self._config("out"), input_files=[self.page1])
        finally:
            logger.remove(handler_id)

        glyph_lines = [m for m in messages if m.startswith("INFO [")]
        self.assertEqual(len(glyph_lines), 4)
        self.assertIn("'?' -> question.png", glyph_lines[3])

    def test_unwritable_output_location_is_fatal(self) -> None:
        blocker = self.tmp / "file.txt"
        blocker.write_text("x", encoding="utf-8")

        result = run_extract(config=ExtractConfig(out_root=blocker, geometry=GRID, charset=CHARSET),
                             input_files=[self.page1])

        self.assertFalse(result.ok)
        self.assertEqual([e.code for e in result.errors], ["EXTRACT_OUTPUT_DIR_FAILED"])
        self.assertEqual(result.glyphs, {})

    def test_source_hashes_are_recorded_on_request(self) -> None:
        result = run_extract(config=self._config("out", compute_source_sha256=True), input_files=[self.page1])
        self.assertEqual(len(result.meta["sources"]), 1)
        self.assertEqual(len(result.meta["sources"][0]["sha256"]), 64)

    def test_config_validation(self) -> None:
        with self.assertRaises(ValueError):
            ExtractConfig(out_root=self.tmp, threshold=256)
        with self.assertRaises(TypeError):
            ExtractConfig(out_root=str(self.tmp))  # type: ignore[arg-type]


class TestPageSources(unittest.TestCase):
    def test_decode_page_bytes_converts_to_rgb(self) -> None:
        buf = io.BytesIO()
        Image.new("L", (7, 5), 128).save(buf, format="PNG")
        page = decode_page_bytes(buf.getvalue())
        self.assertEqual(page.shape, (5, 7, 3))
        self.assertEqual(tuple(page[0, 0]), (128, 128, 128))

    def test_decode_page_bytes_rejects_garbage(self) -> None:
        with self.assertRaises(PageDecodeError):
            decode_page_bytes(b"\x00\x01garbage")

    def test_pdf_scan_pages_are_rendered_in_order(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            pdf = Path(d) / "scan.pdf"
            first = Image.new("RGB", (100, 60), (255, 255, 255))
            second = Image.new("RGB", (100, 60), (0, 0, 0))
            first.save(pdf, format="PDF", save_all=True, append_images=[second], resolution=50.0)

            pages = list(Pypdfium2PageSource().load_pages(path=pdf, dpi=50))

        self.assertEqual(len(pages), 2)
        for page in pages:
            self.assertEqual(page.ndim, 3)
            self.assertEqual(page.shape[2], 3)
            self.assertLessEqual(abs(page.shape[1] - 100), 1)
            self.assertLessEqual(abs(page.shape[0] - 60), 1)
        self.assertGreater(pages[0].mean(), 200)
        self.assertLess(pages[1].mean(), 50)


if __name__ == "__main__":
    unittest.main()
