#!/usr/bin/env python3
"""
Evaluation runner for the Huffman coding engine.

This evaluation script:
- Runs pytest on the tests/ folder and collects individual test results
- Measures round-trip correctness and compression ratio over a small corpus
- Generates a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json] [--skip-tests]
"""
import os
import sys
import json
import uuid
import platform
import subprocess
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_core import build_frequency_list  # noqa: E402
from huffman_errors import HuffmanError  # noqa: E402
from huffman_service import HuffmanService  # noqa: E402

CORPUS = {
    "english_sample": (
        b"the quick brown fox jumps over the lazy dog "
        b"this is a sample text that we will use when we build "
        b"up a table we will only handle lower case letters and "
        b"no punctuation symbols the frequency will of course not "
        b"represent english but it is probably not that far off"
    ),
    "short_text": b"this is something we should encode",
    "skewed": b"a" * 900 + b"b" * 80 + b"c" * 15 + b"d" * 5,
    "single_symbol": b"z" * 256,
    "all_bytes": bytes(range(256)),
}

STATUS_WORDS = (" PASSED", " FAILED", " ERROR", " SKIPPED")


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_environment_info():
    """Collect environment information for the report."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    tests = []
    for line in output.split('\n'):
        line_stripped = line.strip()

        # Match lines like: tests/test_huffman_core.py::test_round_trip PASSED [ 10%]
        if '::' not in line_stripped:
            continue
        for status_word in STATUS_WORDS:
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": status_word.strip().lower(),
                })
                break

    return tests


def summarize(tests):
    counts = {"total": len(tests), "passed": 0, "failed": 0, "error": 0, "skipped": 0}
    for test in tests:
        counts[test["outcome"]] += 1
    return counts


def run_pytest(tests_dir, timeout=300):
    """
    Run pytest on the tests/ folder.

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]
    env = os.environ.copy()
    env["PYTHONPATH"] = str(PROJECT_ROOT)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    tests = parse_pytest_verbose_output(result.stdout)
    summary = summarize(tests)
    print(
        f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['error']} errors, {summary['skipped']} skipped (total: {summary['total']})"
    )
    for test in tests:
        print(f"  {test['nodeid']}: {test['outcome']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": result.stdout[-3000:],
        "stderr": result.stderr[-1000:],
    }


def measure_corpus(corpus=None):
    """Compress and decompress every corpus entry with a freshly trained service."""
    corpus = CORPUS if corpus is None else corpus
    print(f"\n{'=' * 60}")
    print("COMPRESSION METRICS")
    print(f"{'=' * 60}")

    metrics = {}
    for name, data in corpus.items():
        svc = HuffmanService()
        try:
            compressed = svc.compress(data)
            restored = svc.decompress(compressed)
        except HuffmanError as e:
            metrics[name] = {"round_trip": False, "error": str(e)}
            print(f"  {name}: error: {e}")
            continue

        freqs = build_frequency_list(data)
        entry = {
            "round_trip": restored == data,
            "original_bytes": len(data),
            "compressed_bytes": len(compressed),
            "ratio": round(len(compressed) / len(data), 6) if data else None,
            "alphabet_size": len(freqs),
            "average_code_length": round(svc.table.average_code_length(freqs), 6) if data else None,
        }
        metrics[name] = entry
        print(f"  {name}: {entry['original_bytes']} -> {entry['compressed_bytes']} bytes, round trip {entry['round_trip']}")

    return metrics


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the Huffman engine evaluation")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument("--skip-tests", action="store_true", help="Only measure the corpus")
    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()
    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    tests = None if args.skip_tests else run_pytest(PROJECT_ROOT / "tests")
    metrics = measure_corpus()

    success = all(m["round_trip"] for m in metrics.values())
    if tests is not None:
        success = success and tests["success"]

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "environment": get_environment_info(),
        "tests": tests,
        "metrics": metrics,
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\nReport saved to: {output_path}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'YES' if success else 'NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
