"""
justscan/scanner/preprocess.py
-----------------
Frame normalization before OCR: luminosity grayscale, then a linear
contrast stretch around mid-grey, written back to all three channels.
"""

import cv2
import numpy as np

# R, G, B luminosity weights
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)
MID_LEVEL = 128
DEFAULT_CONTRAST = 1.3
DEFAULT_JPEG_QUALITY = 80


def contrast_stretch(values, contrast=DEFAULT_CONTRAST):
    """clamp(contrast * (v - 128) + 128, 0, 255) for scalars or arrays."""
    stretched = contrast * (np.asarray(values, dtype=np.float64) - MID_LEVEL) + MID_LEVEL
    return np.clip(stretched, 0, 255)


def normalize_frame(frame_bgr, contrast=DEFAULT_CONTRAST):
    """
    Grayscale + contrast stretch of an OpenCV BGR frame.
    Returns a uint8 image of the same shape with three equal channels.
    """
    frame = np.asarray(frame_bgr, dtype=np.float64)
    if frame.ndim != 3 or frame.shape[2] < 3:
        raise ValueError("Expected a BGR frame with three channels")

    r_weight, g_weight, b_weight = LUMA_WEIGHTS
    gray = frame[:, :, 2] * r_weight + frame[:, :, 1] * g_weight + frame[:, :, 0] * b_weight
    gray = np.rint(contrast_stretch(gray, contrast)).astype(np.uint8)
    return np.dstack([gray, gray, gray])


def encode_frame(image, quality=DEFAULT_JPEG_QUALITY):
    """JPEG-encode a normalized frame for the OCR service."""
    ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise ValueError("Could not encode frame as JPEG")
    return buffer.tobytes()
