"""Tests for the packed ARGB image representation."""

import pytest
import numpy as np

from planekit.core.errors import DimensionMismatchError, InvalidChannelError
from planekit.core.packed import (
    CHANNEL_ALPHA,
    CHANNEL_BLUE,
    CHANNEL_GREEN,
    CHANNEL_RED,
    OPAQUE_WHITE,
    PackedImage,
    pack_argb,
    unpack_argb,
)


def random_packed(height=4, width=5, seed=0):
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 2**32, size=(height, width), dtype=np.uint64)
    return PackedImage.from_array(data)


class TestConstruction:
    """Test the ways a packed image is created."""

    def test_default_is_opaque_white(self):
        """Test a sized image starts as opaque white."""
        image = PackedImage(3, 2)
        assert image.width == 3
        assert image.height == 2
        assert image.shape == (2, 3)
        assert np.all(image.data == OPAQUE_WHITE)

    def test_explicit_fill_color(self):
        """Test a sized image can start with another color."""
        image = PackedImage(2, 2, color=0x80102030)
        assert np.all(image.data == 0x80102030)

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError, match="Invalid image size"):
            PackedImage(-1, 2)

    def test_from_signed_array(self):
        """Test signed 32-bit ARGB values are reinterpreted as unsigned."""
        image = PackedImage.from_array(np.array([[-1, 0]], dtype=np.int32))
        assert image.pixel(0, 0) == 0xFFFFFFFF
        assert image.pixel(0, 1) == 0

    def test_from_array_requires_2d_integers(self):
        with pytest.raises(ValueError, match="Expected 2D"):
            PackedImage.from_array(np.zeros((2, 2, 3), dtype=np.uint32))
        with pytest.raises(ValueError, match="Expected integer"):
            PackedImage.from_array(np.zeros((2, 2), dtype=np.float64))

    def test_copy_is_independent(self):
        """Test mutating a copy leaves the source untouched."""
        image = PackedImage(2, 2)
        clone = image.copy()
        clone.set_channel(CHANNEL_RED, 0)
        assert image.channel(CHANNEL_RED).max() == 255
        assert clone.channel(CHANNEL_RED).max() == 0
        assert image != clone

    def test_data_is_a_copy(self):
        image = PackedImage(2, 2)
        data = image.data
        data[0, 0] = 0
        assert image.pixel(0, 0) == OPAQUE_WHITE


class TestChannelAccess:
    """Test channel extraction."""

    def test_channel_offsets(self):
        """Test each channel is read from its own byte."""
        image = PackedImage.from_array(np.array([[0x80FF4020]], dtype=np.uint32))
        assert image.channel(CHANNEL_ALPHA)[0, 0] == 0x80
        assert image.channel(CHANNEL_RED)[0, 0] == 0xFF
        assert image.channel(CHANNEL_GREEN)[0, 0] == 0x40
        assert image.channel(CHANNEL_BLUE)[0, 0] == 0x20

    def test_channel_float_scaling(self):
        """Test float channels are the integer channels divided by 255."""
        image = random_packed()
        for c in range(4):
            np.testing.assert_allclose(image.channel_float(c), image.channel(c) / 255.0)
            assert image.channel_float(c).min() >= 0.0
            assert image.channel_float(c).max() <= 1.0

    @pytest.mark.parametrize("channel_id", [-1, 4, 1.0, "red"])
    def test_invalid_channel(self, channel_id):
        image = PackedImage(2, 2)
        with pytest.raises(InvalidChannelError, match="Channel id"):
            image.channel(channel_id)


class TestSetChannel:
    """Test channel injection."""

    @pytest.mark.parametrize("channel_id", [0, 1, 2, 3])
    def test_integer_round_trip(self, channel_id):
        """Test writing back an extracted channel is the identity."""
        image = random_packed(seed=channel_id)
        before = image.data
        image.set_channel(channel_id, image.channel(channel_id))
        np.testing.assert_array_equal(image.data, before)

    def test_integer_grid_only_touches_target_channel(self):
        image = PackedImage.from_array(np.array([[0x11223344]], dtype=np.uint32))
        image.set_channel(CHANNEL_GREEN, np.array([[0xAB]]))
        assert image.pixel(0, 0) == 0x1122AB44

    def test_float_grid_is_scaled(self):
        image = PackedImage(2, 1)
        image.set_channel(CHANNEL_RED, np.array([[0.0, 1.0]]))
        np.testing.assert_array_equal(image.channel(CHANNEL_RED), [[0, 255]])

    def test_float_overflow_is_clamped(self):
        """Test out-of-range floats never leak into neighbouring channels."""
        image = PackedImage.from_array(np.array([[0x80404040, 0x80404040]], dtype=np.uint32))
        image.set_channel(CHANNEL_GREEN, np.array([[2.0, -1.0]]))

        np.testing.assert_array_equal(image.channel(CHANNEL_GREEN), [[255, 0]])
        np.testing.assert_array_equal(image.channel(CHANNEL_RED), [[0x40, 0x40]])
        np.testing.assert_array_equal(image.channel(CHANNEL_BLUE), [[0x40, 0x40]])
        np.testing.assert_array_equal(image.channel(CHANNEL_ALPHA), [[0x80, 0x80]])

    def test_integer_scalar(self):
        image = PackedImage(3, 2)
        image.set_channel(CHANNEL_ALPHA, 0)
        assert np.all(image.channel(CHANNEL_ALPHA) == 0)
        assert np.all(image.channel(CHANNEL_RED) == 255)

    def test_float_scalar(self):
        image = PackedImage(2, 2)
        image.set_channel(CHANNEL_BLUE, 0.5)
        assert np.all(image.channel(CHANNEL_BLUE) == 128)

    def test_shape_mismatch(self):
        image = PackedImage(2, 2)
        with pytest.raises(DimensionMismatchError, match="does not match"):
            image.set_channel(CHANNEL_RED, np.zeros((3, 3)))


class TestResetAndInvert:
    """Test whole-image operations."""

    def test_reset_to_color(self):
        image = PackedImage(2, 2)
        image.reset(0x00000000)
        assert np.all(image.data == 0)
        image.reset()
        assert np.all(image.data == OPAQUE_WHITE)

    def test_invert_colors_keeps_alpha(self):
        image = PackedImage.from_array(np.array([[0x7F102030]], dtype=np.uint32))
        inverted = image.invert_colors()
        assert inverted.pixel(0, 0) == 0x7FEFDFCF
        assert image.pixel(0, 0) == 0x7F102030


class TestPackHelpers:
    """Test ARGB pack/unpack helpers."""

    def test_pack_argb(self):
        assert pack_argb(0x12, 0x34, 0x56, 0x78) == 0x78123456
        assert pack_argb(255, 255, 255) == OPAQUE_WHITE

    def test_unpack_argb(self):
        assert unpack_argb(0x78123456) == (0x12, 0x34, 0x56, 0x78)

    def test_pack_out_of_range(self):
        with pytest.raises(ValueError, match="red must be in"):
            pack_argb(256, 0, 0)
