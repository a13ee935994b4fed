from __future__ import annotations

import unittest

import numpy as np

from glyph_extract.raster import alpha_for_lightness, ink_opaque_threshold, make_transparent


class TestAlphaForLightness(unittest.TestCase):
    def test_ink_opaque_threshold(self) -> None:
        self.assertEqual(ink_opaque_threshold(240), 180)
        self.assertEqual(ink_opaque_threshold(255), 191)
        self.assertEqual(ink_opaque_threshold(1), 0)
        self.assertEqual(ink_opaque_threshold(0), 0)

    def test_zone_boundaries(self) -> None:
        t = 240  # ink_opaque = 180, band (180, 240)
        self.assertEqual(alpha_for_lightness(255, t), 0)
        self.assertEqual(alpha_for_lightness(240, t), 0)
        self.assertEqual(alpha_for_lightness(239, t), 4)  # 255 * 1 // 60
        self.assertEqual(alpha_for_lightness(210, t), 127)  # 255 * 30 // 60
        self.assertEqual(alpha_for_lightness(181, t), 250)  # 255 * 59 // 60
        self.assertEqual(alpha_for_lightness(180, t), 255)
        self.assertEqual(alpha_for_lightness(179, t), 255)
        self.assertEqual(alpha_for_lightness(0, t), 255)

    def test_monotonic_in_lightness(self) -> None:
        for t in (0, 1, 2, 5, 100, 200, 240, 255):
            alphas = [alpha_for_lightness(l, t) for l in range(256)]
            for darker, lighter in zip(alphas, alphas[1:]):
                self.assertGreaterEqual(darker, lighter, msg=f"threshold={t}")

    def test_degenerate_thresholds_do_not_divide_by_zero(self) -> None:
        self.assertEqual({alpha_for_lightness(l, 0) for l in range(256)}, {0})
        self.assertEqual(alpha_for_lightness(0, 1), 255)
        self.assertEqual({alpha_for_lightness(l, 1) for l in range(1, 256)}, {0})
        # threshold 2: ink_opaque is 1, so no lightness falls inside the band.
        self.assertEqual([alpha_for_lightness(l, 2) for l in range(4)], [255, 255, 0, 0])


class TestMakeTransparent(unittest.TestCase):
    def test_full_white_becomes_fully_transparent(self) -> None:
        raster = np.full((6, 5, 3), 255, dtype=np.uint8)
        out = make_transparent(raster, 240)
        self.assertEqual(out.shape, (6, 5, 4))
        self.assertFalse(out.any())

    def test_full_black_stays_opaque_black(self) -> None:
        raster = np.zeros((6, 5, 3), dtype=np.uint8)
        out = make_transparent(raster, 240)
        self.assertTrue((out[:, :, 3] == 255).all())
        self.assertFalse(out[:, :, :3].any())

    def test_matches_scalar_classifier_for_every_lightness(self) -> None:
        for t in (0, 1, 2, 7, 128, 240, 255):
            gray = np.arange(256, dtype=np.uint8)
            raster = np.stack([gray, gray, gray], axis=1)[None, :, :]
            out = make_transparent(raster, t)
            expected = [alpha_for_lightness(l, t) for l in range(256)]
            self.assertEqual(out[0, :, 3].tolist(), expected, msg=f"threshold={t}")

    def test_lightness_is_max_channel_and_color_is_kept(self) -> None:
        raster = np.array([[[10, 200, 30], [250, 245, 241], [5, 6, 7]]], dtype=np.uint8)
        out = make_transparent(raster, 240)
        self.assertEqual(tuple(out[0, 0]), (10, 200, 30, 170))  # 255 * 40 // 60
        self.assertEqual(tuple(out[0, 1]), (0, 0, 0, 0))
        self.assertEqual(tuple(out[0, 2]), (5, 6, 7, 255))

    def test_four_channel_input_and_no_mutation(self) -> None:
        raster = np.zeros((2, 2, 4), dtype=np.uint8)
        raster[:, :, :3] = 255
        raster[0, 0] = (0, 0, 0, 0)
        before = raster.copy()
        out = make_transparent(raster, 240)
        self.assertEqual(out.shape, (2, 2, 4))
        self.assertEqual(tuple(out[0, 0]), (0, 0, 0, 255))
        self.assertEqual(tuple(out[1, 1]), (0, 0, 0, 0))
        self.assertTrue(np.array_equal(raster, before))

    def test_zero_sized_raster(self) -> None:
        out = make_transparent(np.zeros((0, 0, 3), dtype=np.uint8), 240)
        self.assertEqual(out.shape, (0, 0, 4))


if __name__ == "__main__":
    unittest.main()
