#!/usr/bin/env python3
"""Toy test oracle used by the tests.

The variant source decides the outcome of each test through marker lines:

    // fail p3        test p3 fails
    // value single 7 the single probe reports 7.0
    // no-output      exit without writing output.json (a broken harness)
    // no-values      write output.json without a values payload
"""
import argparse
import json
from pathlib import Path


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", required=True)
    ap.add_argument("--output", required=True)
    args = ap.parse_args()

    data = json.loads(Path(args.input).read_text(encoding="utf-8"))
    test = data["test"]
    source = Path(data["source"]).read_text(encoding="utf-8")

    failing = set()
    values = {}
    omit_values = False
    for line in source.splitlines():
        parts = line.strip().split()
        if parts[:1] != ["//"] or len(parts) < 2:
            continue
        if parts[1] == "no-output":
            raise SystemExit(0)
        if parts[1] == "no-values":
            omit_values = True
        if parts[1] == "fail" and len(parts) >= 3:
            failing.add(parts[2])
        if parts[1] == "value" and len(parts) >= 4:
            values[parts[2]] = float(parts[3])

    out = {"passed": test not in failing}
    if not omit_values:
        out["values"] = [values.get(test, 1.0)]
    Path(args.output).write_text(json.dumps(out), encoding="utf-8")


if __name__ == "__main__":
    main()
