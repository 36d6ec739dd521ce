#!/usr/bin/env python
"""Offline report: load a CSV with a column 'ecg' (raw ADC counts) and write the ECG report as JSON."""
import argparse
import json
import pandas as pd
from pathlib import Path

from neuroguard.ecg import generate_ecg_report


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("input_csv", type=Path)
    ap.add_argument("output_json", type=Path)
    ap.add_argument("--fs", type=float, default=100.0)
    ap.add_argument("--column", default="ecg")
    args = ap.parse_args()

    df = pd.read_csv(args.input_csv)
    raw = df[args.column].dropna().to_numpy(float)

    report = generate_ecg_report(raw, fs=args.fs)
    args.output_json.parent.mkdir(parents=True, exist_ok=True)
    args.output_json.write_text(json.dumps(report.to_dict(), indent=2))
    for line in report.interpretation:
        print(line)


if __name__ == "__main__":
    main()
