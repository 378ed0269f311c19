"""Integration tests for the complete PlaneKit pipeline."""

import numpy as np
from PIL import Image

from planekit import (
    ChannelPlanes,
    EdgeMode,
    PackedImage,
    blend,
    gaussian_blur,
    key_color_transparent,
    read_image,
    to_black_and_white,
    to_grayscale,
    unsharp_mask,
    write_image,
)
from planekit.core import (
    CHANNEL_ALPHA,
    CHANNEL_RED,
    EdgeAwareKernel,
    to_grayscale_packed,
    varying_kernel_filter,
)
from planekit.core.algebra import luma


class TestFullPipelineIntegration:
    """Test file -> packed -> planes -> filters -> packed -> file."""

    def setup_method(self):
        """Set up test fixtures."""
        self.test_images = self._create_test_images()

    def _create_test_images(self) -> dict:
        images = {}

        gradient = np.zeros((40, 60, 3), dtype=np.uint8)
        for y in range(40):
            gradient[y, :, 0] = int(255 * y / 40)
        images['gradient'] = gradient

        checkered = np.zeros((32, 48, 3), dtype=np.uint8)
        for y in range(32):
            for x in range(48):
                if (x // 8 + y // 8) % 2:
                    checkered[y, x] = [255, 255, 255]
        images['checkered'] = checkered

        shapes = np.full((36, 54, 3), 50, dtype=np.uint8)
        shapes[5:15, 8:20] = [255, 0, 0]
        shapes[20:30, 30:45] = [0, 255, 0]
        images['shapes'] = shapes

        return images

    def _write_png(self, tmp_path, name, pixels):
        path = tmp_path / f"{name}.png"
        Image.fromarray(pixels).save(path)
        return path

    def test_blur_sharpen_round_trip(self, tmp_path):
        """Test every sample survives load, filtering and save with its size intact."""
        for name, pixels in self.test_images.items():
            packed = read_image(self._write_png(tmp_path, name, pixels))
            assert packed is not None
            assert packed.shape == pixels.shape[:2]

            planes = ChannelPlanes.from_packed(packed)
            blurred = gaussian_blur(planes, 2, 1.0)
            sharpened = unsharp_mask(planes, 2, 1.0, 1.0, edge_mode=EdgeMode.REFLECT)

            for result, suffix in ((blurred, "blur"), (sharpened, "sharp")):
                out_path = tmp_path / f"{name}_{suffix}.png"
                assert write_image(result.to_packed(), out_path)
                restored = read_image(out_path)
                assert restored == result.to_packed()

    def test_identity_pipeline_is_lossless(self, tmp_path):
        pixels = self.test_images['shapes']
        packed = read_image(self._write_png(tmp_path, "shapes", pixels))
        restored = ChannelPlanes.from_packed(packed).to_packed()
        assert restored == packed
        np.testing.assert_array_equal(restored.channel(CHANNEL_RED), pixels[..., 0])

    def test_blur_then_blend_with_mask(self, tmp_path):
        """Test a focus effect: sharp inside a mask, blurred outside."""
        planes = ChannelPlanes.from_packed(
            read_image(self._write_png(tmp_path, "checkered", self.test_images['checkered']))
        )
        blurred = gaussian_blur(planes, 3, 2.0)

        mask = np.zeros(planes.shape)
        mask[8:24, 12:36] = 1.0
        result = blend(planes, blurred, mask)

        np.testing.assert_allclose(result.data[:, 8:24, 12:36], planes.data[:, 8:24, 12:36])
        np.testing.assert_allclose(result.data[:, :4, :4], blurred.data[:, :4, :4])

    def test_edge_aware_blur_keeps_flat_regions(self, tmp_path):
        planes = ChannelPlanes.from_packed(
            read_image(self._write_png(tmp_path, "shapes", self.test_images['shapes']))
        )
        provider = EdgeAwareKernel(luma(planes), radius=2, sigma_min=0.5, sigma_max=2.0)
        result = varying_kernel_filter(planes, provider)

        assert result.shape == planes.shape
        np.testing.assert_allclose(result.data[:, 9:11, 12:16], planes.data[:, 9:11, 12:16], atol=1e-12)

    def test_grayscale_and_black_and_white(self, tmp_path):
        packed = read_image(self._write_png(tmp_path, "gradient", self.test_images['gradient']))
        planes = ChannelPlanes.from_packed(packed)

        gray = to_grayscale(planes)
        np.testing.assert_allclose(to_grayscale(gray).data, gray.data, atol=1e-12)
        assert to_grayscale_packed(to_grayscale_packed(packed)) == to_grayscale_packed(packed)

        bw = to_black_and_white(planes, 0.1)
        assert set(np.unique(bw.data)) <= {0.0, 1.0}
        # Dark top rows stay black, bright bottom rows turn white
        assert np.all(bw.data[:, 0, :] == 0.0)
        assert np.all(bw.data[:, -1, :] == 1.0)

    def test_key_color_to_transparent_png(self, tmp_path):
        packed = read_image(self._write_png(tmp_path, "shapes", self.test_images['shapes']))
        key_color_transparent(packed, (255, 0, 0), 10.0)

        out_path = tmp_path / "keyed.png"
        assert write_image(packed, out_path, keep_alpha=True)
        restored = read_image(out_path)

        alpha = restored.channel(CHANNEL_ALPHA)
        assert np.all(alpha[5:15, 8:20] == 0)
        assert alpha[0, 0] == 255
        assert int((alpha == 0).sum()) == 10 * 12

    def test_default_white_canvas(self):
        canvas = PackedImage(4, 3)
        planes = ChannelPlanes.from_packed(canvas)
        assert np.all(planes.data == 1.0)
