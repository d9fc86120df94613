"""
Gate kiosk: opens a portal session, loads the organization's scan settings
and roster once, then scans ID cards from a local camera.

    justscan-kiosk --organization-id <id> --access-code <code>

Type "r" + Enter to scan the next card after a result, "q" to quit.
"""

import argparse
import logging
import os
import sys
import threading

from justscan.config import Config
from justscan.scanner.client import AttendanceClient, AttendanceError
from justscan.scanner.ocr import TesseractOCR
from justscan.scanner.sampler import CameraSource, FrameSampler
from justscan.scanner.session import ScanSession
from justscan.scanner.signals import ScanConfig
from justscan.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="JustScan gate kiosk")
    parser.add_argument("--api-url", default=Config.SCAN_API_URL)
    parser.add_argument("--organization-id", required=True)
    parser.add_argument("--access-code", default=os.environ.get("JUSTSCAN_ACCESS_CODE"))
    parser.add_argument("--email", help="optional account to log in with")
    parser.add_argument("--password", default=os.environ.get("JUSTSCAN_PASSWORD"))
    parser.add_argument("--camera", type=int, default=Config.SCAN_CAMERA_INDEX)
    parser.add_argument("--interval", type=float, default=Config.SCAN_INTERVAL_SECONDS)
    parser.add_argument("--window", type=float, default=Config.SCAN_RECENCY_WINDOW_SECONDS)
    parser.add_argument("--log-level", default=Config.LOG_LEVEL)
    return parser.parse_args(argv)


def print_result(result):
    prefix = "OK " if result.success else "ERR"
    print(f"[{prefix}] {result.message}  (press r to scan again)", flush=True)


def load_session(args, client):
    if args.email:
        client.login(args.email, args.password)
    client.open_portal(args.organization_id, args.access_code)

    config = ScanConfig.from_api(client.fetch_organization(), client.fetch_roster())
    if not config.keyword_required:
        logger.warning("[KIOSK] No validation keywords configured, keyword check is disabled")
    logger.info("[KIOSK] Loaded %d students", len(config.roster))
    return ScanSession(config, client, window=args.window, on_result=print_result)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)

    if not args.access_code:
        print("An access code is required (--access-code or JUSTSCAN_ACCESS_CODE).", file=sys.stderr)
        return 2

    client = AttendanceClient(args.api_url)
    try:
        session = load_session(args, client)
    except AttendanceError as e:
        print(f"Could not open the organization: {e}", file=sys.stderr)
        return 1

    video = CameraSource(args.camera)
    sampler = FrameSampler(
        session, video, TesseractOCR(Config.TESSERACT_CMD),
        interval=args.interval, contrast=Config.SCAN_CONTRAST, jpeg_quality=Config.SCAN_JPEG_QUALITY
    )
    stop_event = threading.Event()
    worker = threading.Thread(target=sampler.run, args=(stop_event,), daemon=True)

    session.start()
    worker.start()
    print("Scanning. Commands: r = reset, q = quit", flush=True)
    try:
        for line in sys.stdin:
            command = line.strip().lower()
            if command == "q":
                break
            if command == "r":
                if not session.reset():
                    print("Still verifying the last card, try again.", flush=True)
    except KeyboardInterrupt:
        pass
    finally:
        stop_event.set()
        session.stop()
        worker.join(timeout=2)
        sampler.close()
        video.release()
    return 0


if __name__ == "__main__":
    sys.exit(main())
