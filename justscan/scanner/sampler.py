"""
justscan/scanner/sampler.py
-----------------
Fixed-interval frame sampling. Each tick grabs the current camera frame,
normalizes and encodes it, then runs OCR on a single worker. A tick is
skipped while the previous one is still in flight, so slow OCR drops
frames instead of queueing them.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor

import cv2

from justscan.scanner.preprocess import DEFAULT_CONTRAST, DEFAULT_JPEG_QUALITY, encode_frame, normalize_frame

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 0.2


# -------------------------------------------------------------
# CAMERA
# -------------------------------------------------------------
class CameraSource:

    def __init__(self, index=0):
        self.capture = cv2.VideoCapture(index)
        if not self.capture.isOpened():
            logger.error("[CAMERA] Cannot open camera %s", index)

    def is_ready(self):
        return self.capture.isOpened()

    def read(self):
        success, frame = self.capture.read()
        return frame if success else None

    def release(self):
        self.capture.release()


# -------------------------------------------------------------
# SAMPLER
# -------------------------------------------------------------
class FrameSampler:

    def __init__(self, session, video, ocr, interval=DEFAULT_INTERVAL_SECONDS,
                 contrast=DEFAULT_CONTRAST, jpeg_quality=DEFAULT_JPEG_QUALITY,
                 executor=None, keep_last_frame=False):
        self.session = session
        self.video = video
        self.ocr = ocr
        self.interval = interval
        self.contrast = contrast
        self.jpeg_quality = jpeg_quality
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr")
        self.keep_last_frame = keep_last_frame
        self.last_frame = None

    def tick(self):
        """Start one sample. Returns the OCR future, or None when the tick was skipped."""
        if not self.video.is_ready():
            return None

        ticket = self.session.begin_tick()
        if ticket is None:
            return None

        frame = self.video.read()
        if frame is None:
            self.session.fail_tick(ticket)
            return None

        try:
            image = normalize_frame(frame, self.contrast)
            payload = encode_frame(image, self.jpeg_quality)
        except ValueError as e:
            logger.warning("[SAMPLER] Skipping frame: %s", e)
            self.session.fail_tick(ticket)
            return None

        if self.keep_last_frame:
            self.last_frame = image
        future = self.executor.submit(self._process, ticket, payload)
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.exception("[SAMPLER] Tick processing failed", exc_info=error)

    def _process(self, ticket, payload):
        try:
            text = self.ocr.recognize(payload).text
        except Exception:
            # OCR failures count as a frame with no text
            logger.debug("[SAMPLER] OCR failed", exc_info=True)
            text = ""

        roll_no = self.session.complete_tick(ticket, text)
        if roll_no is None:
            return None
        return self.session.verify(roll_no)

    def run(self, stop_event):
        """Tick every interval until stop_event is set."""
        logger.info("[SAMPLER] Sampling every %.0f ms", self.interval * 1000)
        while not stop_event.is_set():
            started = time.monotonic()
            self.tick()
            stop_event.wait(max(0.0, self.interval - (time.monotonic() - started)))

    def close(self):
        self.executor.shutdown(wait=False)
