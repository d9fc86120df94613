"""
justscan/scanner/session.py
-----------------
One scan session at the gate.

    IDLE -> SCANNING -> VERIFYING -> RESULT_SUCCESS | RESULT_ERROR
    reset() from a result returns to SCANNING, stop() from anywhere to IDLE.

Every start/stop/reset bumps the session generation. A tick carries the
generation it was issued under; results from an older generation are
dropped without touching memory.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum

from justscan.scanner.client import AttendanceError
from justscan.scanner.memory import RECENCY_WINDOW_SECONDS, SignalMemory
from justscan.scanner.signals import SignalExtractor

logger = logging.getLogger(__name__)


class ScanState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    VERIFYING = "verifying"
    RESULT_SUCCESS = "success"
    RESULT_ERROR = "error"


@dataclass
class ScanResult:
    success: bool
    message: str
    roll_no: str = None
    entry_type: str = None  # "Out" | "In"
    student: dict = None


class ScanSession:

    def __init__(self, config, attendance, clock=time.monotonic,
                 window=RECENCY_WINDOW_SECONDS, on_result=None):
        self.config = config
        self.attendance = attendance
        self.clock = clock
        self.on_result = on_result
        self.extractor = SignalExtractor(config)
        self.memory = SignalMemory(window, keyword_required=config.keyword_required)

        self._lock = threading.Lock()
        self.state = ScanState.IDLE
        self.generation = 0
        self.in_flight = False
        self.result = None

    # ---------------------------
    # OPERATOR ACTIONS
    # ---------------------------
    def _restart(self, state):
        self.generation += 1
        self.in_flight = False
        self.result = None
        self.memory.reset()
        self.state = state

    def start(self):
        with self._lock:
            if self.state != ScanState.IDLE:
                return False
            self._restart(ScanState.SCANNING)
        logger.info("[SCAN] Scanning started")
        return True

    def stop(self):
        with self._lock:
            self._restart(ScanState.IDLE)
        logger.info("[SCAN] Scanning stopped")

    def reset(self):
        """Back to SCANNING with empty memory. Ignored while a scan is being verified."""
        with self._lock:
            if self.state == ScanState.VERIFYING:
                return False
            self._restart(ScanState.SCANNING)
        logger.info("[SCAN] Scanner reset")
        return True

    # ---------------------------
    # SAMPLING TICKS
    # ---------------------------
    def begin_tick(self):
        """Generation ticket for a new tick, or None when the tick must be skipped."""
        with self._lock:
            if self.state != ScanState.SCANNING or self.in_flight:
                return None
            self.in_flight = True
            return self.generation

    def fail_tick(self, ticket):
        with self._lock:
            if ticket == self.generation:
                self.in_flight = False

    def complete_tick(self, ticket, text):
        """
        Apply the OCR text of a tick. Returns the roll number to verify when
        all signals are live (the session is then VERIFYING), else None.
        """
        with self._lock:
            if ticket != self.generation:
                logger.debug("[SCAN] Dropping result from a stopped session")
                return None
            self.in_flight = False
            if self.state != ScanState.SCANNING:
                return None

            now = self.clock()
            observation = self.extractor.extract(text, fallback_roll_no=self.memory.live_roll_no(now))
            if not observation.empty:
                self.memory.observe(observation, now)

            roll_no = self.memory.decide(now)
            if roll_no is None:
                return None
            self.state = ScanState.VERIFYING

        logger.info("[SCAN] Verified card for roll no %s", roll_no)
        return roll_no

    # ---------------------------
    # ATTENDANCE HAND-OFF
    # ---------------------------
    def verify(self, roll_no):
        with self._lock:
            if self.state != ScanState.VERIFYING:
                return None
            ticket = self.generation

        try:
            response = self.attendance.record_scan(roll_no)
            result = ScanResult(
                success=True,
                message=response.get("message", ""),
                roll_no=roll_no,
                entry_type=response.get("type"),
                student=response.get("student")
            )
        except AttendanceError as e:
            result = ScanResult(success=False, message=str(e), roll_no=roll_no)
        except Exception:
            logger.exception("[SCAN] Unexpected error recording %s", roll_no)
            result = ScanResult(success=False, message="Error processing scan", roll_no=roll_no)

        with self._lock:
            if ticket != self.generation or self.state != ScanState.VERIFYING:
                logger.debug("[SCAN] Session changed during verification, result dropped")
                return None
            self.result = result
            self.state = ScanState.RESULT_SUCCESS if result.success else ScanState.RESULT_ERROR
            self.memory.reset()

        if result.success:
            logger.info("[SCAN] %s", result.message)
        else:
            logger.warning("[SCAN] Scan failed for %s: %s", roll_no, result.message)
        if self.on_result:
            self.on_result(result)
        return result
