import cv2
import numpy as np
import pytest

from justscan.scanner.preprocess import contrast_stretch, encode_frame, normalize_frame


class TestContrastStretch:

    def test_bounded_and_monotonic_over_all_intensities(self):
        values = contrast_stretch(np.arange(256))
        assert values.min() >= 0
        assert values.max() <= 255
        assert np.all(np.diff(values) >= 0)

    def test_mid_level_unchanged_and_extremes_clamped(self):
        assert contrast_stretch(128) == 128
        assert contrast_stretch(0) == 0
        assert contrast_stretch(255) == 255
        assert contrast_stretch(200) == pytest.approx(221.6)


class TestNormalizeFrame:

    def test_three_equal_channels(self):
        frame = np.random.default_rng(7).integers(0, 256, size=(12, 16, 3), dtype=np.uint8)
        image = normalize_frame(frame)
        assert image.shape == frame.shape
        assert image.dtype == np.uint8
        assert np.array_equal(image[:, :, 0], image[:, :, 1])
        assert np.array_equal(image[:, :, 1], image[:, :, 2])

    def test_luminosity_weights_use_rgb_order(self):
        # OpenCV frames are BGR; pure red is weighted 0.2126
        red = np.zeros((1, 1, 3), dtype=np.uint8)
        red[0, 0, 2] = 255
        expected = round(1.3 * (255 * 0.2126 - 128) + 128)
        assert normalize_frame(red)[0, 0, 0] == expected

    def test_rejects_single_channel(self):
        with pytest.raises(ValueError):
            normalize_frame(np.zeros((4, 4), dtype=np.uint8))


def test_encode_frame_is_jpeg():
    image = normalize_frame(np.full((8, 8, 3), 90, dtype=np.uint8))
    payload = encode_frame(image, quality=80)
    assert payload[:2] == b"\xff\xd8"
    decoded = cv2.imdecode(np.frombuffer(payload, dtype=np.uint8), cv2.IMREAD_GRAYSCALE)
    assert decoded.shape == (8, 8)
