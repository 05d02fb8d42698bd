import io
import math
import os
import shutil
import tempfile
from unittest import mock

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase
from PIL import Image

from quotevault.disclosure import (
    AssetNotFound,
    InvalidLevel,
    block_size,
    pixelate,
    resolve_clarity,
    sniff_content_type,
)


def gradient_png(width=100, height=100, mode="RGB") -> bytes:
    img = Image.new(mode, (width, height))
    img.putdata([((x * 255) // width, (y * 255) // height, 128) for y in range(height) for x in range(width)])
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


class BlockSizeTests(SimpleTestCase):
    def test_formula(self):
        self.assertEqual(block_size(0.0), 50)
        self.assertEqual(block_size(0.02), 49)
        self.assertEqual(block_size(0.5), 25)
        self.assertEqual(block_size(0.9), 4)

    def test_floor_of_two(self):
        self.assertEqual(block_size(0.97), 2)
        self.assertEqual(block_size(1.0), 2)

    def test_monotonic(self):
        levels = [i / 100 for i in range(101)]
        sizes = [block_size(c) for c in levels]
        for smaller, larger in zip(sizes[1:], sizes):
            self.assertLessEqual(smaller, larger)

    def test_rejects_bad_levels(self):
        for bad in (-0.1, 1.1, math.nan, math.inf, "0.5", None, True):
            with self.assertRaises(InvalidLevel):
                block_size(bad)


class ResolveClarityTests(SimpleTestCase):
    def test_explicit_clarity_wins(self):
        self.assertEqual(resolve_clarity(0.3, hints_used=5, base_clarity=0.02), 0.3)

    def test_hint_count_uses_base(self):
        self.assertAlmostEqual(resolve_clarity(hints_used=2, base_clarity=0.02), 0.32)

    def test_requires_something(self):
        with self.assertRaises(InvalidLevel):
            resolve_clarity()
        with self.assertRaises(InvalidLevel):
            resolve_clarity(hints_used=2)


class PixelateTests(SimpleTestCase):
    def setUp(self):
        self.source = gradient_png()

    def test_full_reveal_returns_source_bytes(self):
        for level in (0.95, 0.99, 1.0):
            self.assertEqual(pixelate(self.source, level), self.source)

    def test_mosaic_blocks(self):
        data = pixelate(self.source, 0.0, image_format="PNG")
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.size, (100, 100))
            # 50px blocks: each quadrant is one flat colour.
            self.assertEqual(img.getpixel((0, 0)), img.getpixel((49, 49)))
            self.assertEqual(img.getpixel((50, 50)), img.getpixel((99, 99)))
            self.assertNotEqual(img.getpixel((0, 0)), img.getpixel((99, 99)))

    def test_default_output_is_jpeg(self):
        data = pixelate(self.source, 0.5)
        self.assertEqual(sniff_content_type(data), "image/jpeg")
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.size, (100, 100))

    def test_tiny_image_still_renders(self):
        data = pixelate(gradient_png(3, 5), 0.0, image_format="PNG")
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.size, (3, 5))

    def test_transparent_palette_image(self):
        img = Image.new("P", (40, 40))
        img.info["transparency"] = 0
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        data = pixelate(buffer.getvalue(), 0.2)
        self.assertEqual(sniff_content_type(data), "image/jpeg")

    def test_source_bytes_untouched(self):
        original = bytes(self.source)
        pixelate(self.source, 0.1)
        self.assertEqual(self.source, original)

    def test_same_input_same_output(self):
        self.assertEqual(pixelate(self.source, 0.4), pixelate(self.source, 0.4))

    def test_reads_from_path(self):
        tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tmp)
        path = os.path.join(tmp, "portrait.png")
        with open(path, "wb") as fh:
            fh.write(self.source)
        self.assertEqual(pixelate(path, 1.0), self.source)
        self.assertEqual(sniff_content_type(pixelate(path, 0.3)), "image/jpeg")

    def test_missing_file(self):
        with self.assertRaises(AssetNotFound):
            pixelate("/nonexistent/quotevault/missing.png", 0.5)

    def test_undecodable_bytes(self):
        with self.assertRaises(AssetNotFound):
            pixelate(b"definitely not an image", 0.5)

    def test_oversized_image_is_unavailable(self):
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 100):
            with self.assertRaises(AssetNotFound):
                pixelate(self.source, 0.5)
            self.assertEqual(sniff_content_type(self.source, "image/unknown"), "image/unknown")

    def test_invalid_level_checked_first(self):
        with self.assertRaises(InvalidLevel):
            pixelate("/nonexistent/quotevault/missing.png", -0.5)
        with self.assertRaises(InvalidLevel):
            pixelate(self.source, math.nan)


class PixelateCommandTests(SimpleTestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp)
        self.source = os.path.join(self.tmp, "banner.png")
        with open(self.source, "wb") as fh:
            fh.write(gradient_png())

    def test_writes_render(self):
        output = os.path.join(self.tmp, "out.png")
        out = io.StringIO()
        call_command("pixelate", self.source, output, "--hint", "2", "--format", "png", stdout=out)
        self.assertIn("clarity 0.32", out.getvalue())
        with Image.open(output) as img:
            self.assertEqual(img.format, "PNG")

    def test_bad_level_is_command_error(self):
        with self.assertRaises(CommandError):
            call_command("pixelate", self.source, os.path.join(self.tmp, "x.jpg"), "--level", "2")
