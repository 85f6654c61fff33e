#!/usr/bin/env python3
"""
Performance benchmark for xmlstreamer against other incremental XML writers.
Streams a large synthetic document into a sink that discards its input, so
peak RSS shows whether a writer holds the document in memory.
"""

# ruff: noqa: PLC0415, BLE001
from __future__ import annotations

import argparse
import multiprocessing
import sys
import threading
import time

try:
    import psutil

    _PSUTIL_AVAILABLE = True
except ImportError:
    psutil = None
    _PSUTIL_AVAILABLE = False


class MemoryMonitor:
    """Sample a process's RSS on a background thread and keep the peak."""

    def __init__(self, pid: int, sample_interval: float = 0.01):
        self.sample_interval = sample_interval
        self.peak_rss = 0
        self._proc = psutil.Process(pid)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self):
        while not self._stop.is_set():
            try:
                self.peak_rss = max(self.peak_rss, self._proc.memory_info().rss)
            except psutil.Error:
                return
            self._stop.wait(self.sample_interval)

    def start(self):
        self._thread.start()

    def stop(self) -> dict:
        self._stop.set()
        self._thread.join(timeout=1.0)
        return {"rss_peak_mb": self.peak_rss / (1024 * 1024)}


class NullSink:
    """Counts what is written and keeps none of it."""

    def __init__(self):
        self.size = 0

    def write(self, data):
        self.size += len(data)
        return len(data)

    def flush(self):
        pass


def iter_records(count: int):
    """Yield (id, name, text) rows for the synthetic document."""
    for index in range(count):
        yield str(index), f"record-{index % 97}", f"Value {index} & <more> \"quoted\" 'text'"


def _timed(write_fn, records: int, iterations: int) -> dict:
    times = []
    size = 0
    for _ in range(iterations):
        sink = NullSink()
        start = time.perf_counter()
        write_fn(sink, records)
        times.append(time.perf_counter() - start)
        size = sink.size
    return {
        "total_time": sum(times),
        "mean_time": sum(times) / len(times) if times else 0,
        "min_time": min(times) if times else 0,
        "max_time": max(times) if times else 0,
        "output_chars": size,
    }


def write_xmlstreamer(sink, records: int):
    from xmlstreamer import WriterOpts, XMLStreamer

    writer = XMLStreamer(sink, WriterOpts(encoding="UTF-8"))
    writer.tag("records")
    for record_id, name, text in iter_records(records):
        writer.tag("record").attribute("id", record_id).attribute("name", name)
        writer.element("text", text)
        writer.close()
    writer.close()


def write_lxml(sink, records: int):
    from lxml import etree

    with etree.xmlfile(sink, encoding="UTF-8") as xf:
        xf.write_declaration()
        with xf.element("records"):
            for record_id, name, text in iter_records(records):
                with xf.element("record", id=record_id, name=name):
                    with xf.element("text"):
                        xf.write(text)


def write_saxutils(sink, records: int):
    from xml.sax.saxutils import XMLGenerator

    gen = XMLGenerator(sink, encoding="UTF-8", short_empty_elements=True)
    gen.startDocument()
    gen.startElement("records", {})
    for record_id, name, text in iter_records(records):
        gen.startElement("record", {"id": record_id, "name": name})
        gen.startElement("text", {})
        gen.characters(text)
        gen.endElement("text")
        gen.endElement("record")
    gen.endElement("records")
    gen.endDocument()


def benchmark_xmlstreamer(records: int, iterations: int = 1) -> dict:
    """Benchmark the streaming writer."""
    try:
        import xmlstreamer  # noqa: F401
    except ImportError:
        return {"error": "xmlstreamer not importable"}
    return _timed(write_xmlstreamer, records, iterations)


def benchmark_lxml(records: int, iterations: int = 1) -> dict:
    """Benchmark lxml's incremental etree.xmlfile writer."""
    try:
        import lxml  # noqa: F401
    except ImportError:
        return {"error": "lxml not installed (pip install lxml)"}
    return _timed(write_lxml, records, iterations)


def benchmark_saxutils(records: int, iterations: int = 1) -> dict:
    """Benchmark the standard library's SAX XMLGenerator."""
    return _timed(write_saxutils, records, iterations)


def _benchmark_worker(bench_fn, records, iterations, queue):
    """Worker function to run benchmark in a separate process."""
    try:
        res = bench_fn(records, iterations)
        queue.put(res)
    except Exception as e:
        queue.put({"error": str(e)})


def run_benchmark_isolated(bench_fn, records, iterations, args):
    """Run benchmark in a separate process to isolate memory usage."""
    if args.no_mem or not _PSUTIL_AVAILABLE:
        return bench_fn(records, iterations)

    queue = multiprocessing.Queue()
    p = multiprocessing.Process(target=_benchmark_worker, args=(bench_fn, records, iterations, queue))
    p.start()

    mon = MemoryMonitor(pid=p.pid, sample_interval=max(0.0005, args.mem_sample_ms / 1000.0))
    mon.start()

    res = None
    try:
        res = queue.get()
    finally:
        memory = mon.stop()
        p.join()

    if res and "error" not in res:
        res.update(memory)
    return res


def print_results(results: dict, records: int, iterations: int = 1):
    """Pretty print benchmark results."""
    print("\n" + "=" * 90)
    if iterations > 1:
        print(f"BENCHMARK RESULTS ({records} records x {iterations} iterations)")
    else:
        print(f"BENCHMARK RESULTS ({records} records)")
    print("=" * 90)

    header = f"\n{'Writer':<15} {'Total (s)':<10} {'Mean (ms)':<10} {'Peak (MB)':<10} {'Chars':<12}"
    print(header)
    print("-" * 90)

    baseline = results.get("xmlstreamer", {}).get("total_time", 0)

    for name, result in results.items():
        if "error" in result:
            print(f"{name:<15} {result['error']}")
            continue

        total = result["total_time"]
        mean_ms = result["mean_time"] * 1000
        peak_mb = result.get("rss_peak_mb", 0)
        mem_str = f"{peak_mb:>10.1f}" if "rss_peak_mb" in result else f"{'n/a':>10}"

        speedup = ""
        if name != "xmlstreamer" and baseline > 0 and total > 0:
            speedup = f" ({total / baseline:.2f}x)"

        print(f"{name:<15} {total:<10.3f} {mean_ms:<10.3f} {mem_str} {result['output_chars']:<12}{speedup}")

    print("\n" + "=" * 90)


def main():
    parser = argparse.ArgumentParser(description="Benchmark incremental XML writers")
    parser.add_argument("--records", type=int, default=100_000, help="Records per document (default: 100000)")
    parser.add_argument("--iterations", type=int, default=1, help="Documents written per writer (default: 1)")
    parser.add_argument(
        "--writers",
        nargs="+",
        choices=["xmlstreamer", "lxml", "saxutils"],
        default=["xmlstreamer", "lxml", "saxutils"],
        help="Writers to benchmark (default: all)",
    )
    parser.add_argument("--no-mem", action="store_true", help="Disable memory measurement (RSS sampling)")
    parser.add_argument(
        "--mem-sample-ms", type=float, default=10.0, help="Memory sampling interval in milliseconds (default: 10ms)",
    )

    args = parser.parse_args()
    if args.records <= 0:
        print("ERROR: --records must be positive")
        sys.exit(1)

    benchmarks = {
        "xmlstreamer": benchmark_xmlstreamer,
        "lxml": benchmark_lxml,
        "saxutils": benchmark_saxutils,
    }
    if not _PSUTIL_AVAILABLE and not args.no_mem:
        print("Note: psutil not installed; memory metrics will be skipped. Install with: pip install psutil")

    results = {}
    for name in args.writers:
        print(f"\nBenchmarking {name}...", end="", flush=True)
        res = run_benchmark_isolated(benchmarks[name], args.records, args.iterations, args)
        results[name] = res
        if "error" in res:
            print(f" SKIPPED ({res['error']})")
        else:
            print(
                f" DONE ({res['total_time']:.3f}s"
                + (f", peak RSS {res.get('rss_peak_mb', 0):.1f} MB" if "rss_peak_mb" in res else "")
                + ")",
            )

    print_results(results, args.records, args.iterations)


if __name__ == "__main__":
    main()
