#!/usr/bin/env python
"""Live demo: connect to the sensor, print 1 Hz vitals, then print an ECG report."""
import argparse
import json
import sys
import time

from neuroguard.acquisition import DeviceLink
from neuroguard.config import Settings
from neuroguard.errors import ConnectError, InsufficientDataError
from neuroguard.io import JSONFileSessionStore
from neuroguard.realtime import SignalPipeline
from neuroguard.utils.log import configure_logging


def main():
    settings = Settings()
    ap = argparse.ArgumentParser()
    ap.add_argument("--port", default=settings.serial_port)
    ap.add_argument("--baud", type=int, default=settings.baud)
    ap.add_argument("--seconds", type=float, default=15.0)
    ap.add_argument("--save", action="store_true", help="persist the session summary")
    args = ap.parse_args()

    configure_logging(settings.log_level, settings.log_file)
    scfg = settings.serial_config()
    scfg.port, scfg.baud = args.port, args.baud

    link = DeviceLink(scfg)
    store = JSONFileSessionStore(settings.session_store_path) if args.save else None
    pipeline = SignalPipeline(link, settings.pipeline_config(), store=store)
    try:
        link.connect()
    except ConnectError as exc:
        print(f"Connection failed: {exc}", file=sys.stderr)
        return 1

    pipeline.start_scanning()
    deadline = time.monotonic() + args.seconds
    try:
        while time.monotonic() < deadline and link.is_connected:
            time.sleep(pipeline.config.tick_interval_s)
            v = pipeline.tick()
            if v is not None:
                print(f"HR={v.heart_rate} BPM RMSSD={v.rmssd} ms SDNN={v.sdnn} ms "
                      f"EMG rms={v.emg_rms} mdf={v.emg_median_freq:.1f} Hz")
        if not link.is_connected:
            print("Device disconnected", file=sys.stderr)
            return 1
        try:
            report = pipeline.analyze()
        except InsufficientDataError as exc:
            print(f"No report: {exc}", file=sys.stderr)
            return 1
        print("\n".join(report.interpretation))
        if store is not None:
            record = pipeline.save_session()
            print(json.dumps({"saved_session": record.id}))
    finally:
        pipeline.close()
        link.disconnect(wait=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
