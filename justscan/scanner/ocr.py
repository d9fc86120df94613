import logging
from dataclasses import dataclass

import cv2
import numpy as np
import pytesseract

logger = logging.getLogger(__name__)


@dataclass
class OcrResult:
    """Text extracted from one frame. Empty text means nothing was read."""
    text: str = ""


class TesseractOCR:
    """Text extraction through the local Tesseract binary."""

    def __init__(self, cmd=None, config="--psm 6"):
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd
        self.config = config

    def recognize(self, payload):
        data = np.frombuffer(payload, dtype=np.uint8)
        image = cv2.imdecode(data, cv2.IMREAD_GRAYSCALE)
        if image is None:
            logger.debug("[OCR] Could not decode frame payload")
            return OcrResult()

        text = pytesseract.image_to_string(image, config=self.config) or ""
        return OcrResult(text=text.strip())
