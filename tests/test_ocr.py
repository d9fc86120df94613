from unittest.mock import patch

import numpy as np

from justscan.scanner.ocr import OcrResult, TesseractOCR
from justscan.scanner.preprocess import encode_frame, normalize_frame


def test_recognize_strips_text():
    payload = encode_frame(normalize_frame(np.full((10, 10, 3), 200, dtype=np.uint8)))
    with patch("justscan.scanner.ocr.pytesseract.image_to_string", return_value="  COLLEGE 12345 \n") as ocr:
        result = TesseractOCR().recognize(payload)

    assert result == OcrResult(text="COLLEGE 12345")
    image = ocr.call_args[0][0]
    assert image.shape == (10, 10)


def test_undecodable_payload_is_empty():
    with patch("justscan.scanner.ocr.pytesseract.image_to_string") as ocr:
        assert TesseractOCR().recognize(b"not an image").text == ""
    ocr.assert_not_called()
