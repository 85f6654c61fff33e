#!/usr/bin/env python3
"""
Random fuzzer for the streaming XML writer.
Generates random operation streams and checks the writer's output.

Canonical streams (attributes only directly after a tag or another
attribute, every tag closed) must parse as XML. Permissive streams (stray
closes, attributes anywhere) only have to run without raising.
"""

import argparse
import io
import random
import string
import sys
import time
import traceback

from xmlstreamer import CLOSE, Attr, Tag, Text, WriterOpts, XMLStreamer

TAGS = [
    "root", "item", "entry", "node", "a", "b", "list", "value", "x-y", "_z", "data.1",
]

ATTRIBUTES = ["id", "name", "type", "ref", "class", "data-x", "a1", "b_2"]

SPECIAL_CHARS = ["&", "<", ">", '"', "'", "&amp;", "]]>", "<!--", "-->", "<?", "?>"]

UNICODE_CHARS = ["é", " ", " ", "中", "\U0001f600", "\t", "\n", " "]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_text():
    """Generate text mixing plain, special and non-ASCII characters."""
    parts = []
    for _ in range(random.randint(0, 6)):
        choice = random.random()
        if choice < 0.4:
            parts.append(random_string(0, 10))
        elif choice < 0.8:
            parts.append(random.choice(SPECIAL_CHARS))
        else:
            parts.append(random.choice(UNICODE_CHARS))
    return "".join(parts)


def fuzz_value():
    """Text appends may carry any printable value."""
    choice = random.random()
    if choice < 0.1:
        return random.randint(-1000, 1000)
    if choice < 0.15:
        return random.random()
    return fuzz_text()


def canonical_element(ops, depth=0, max_depth=8):
    """Append the operations of one element with random attributes and content."""
    ops.append(Tag(random.choice(TAGS)))
    for name in random.sample(ATTRIBUTES, random.randint(0, 3)):
        ops.append(Attr(name))
        if random.random() < 0.9:
            ops.append(Text(fuzz_value()))
    for _ in range(random.randint(0, 4)):
        if depth < max_depth and random.random() < 0.5:
            canonical_element(ops, depth + 1, max_depth)
        else:
            for _ in range(random.randint(1, 3)):
                ops.append(Text(fuzz_value()))
    ops.append(CLOSE)


def generate_canonical_ops():
    ops = []
    canonical_element(ops, max_depth=random.randint(0, 8))
    return ops


def generate_permissive_ops():
    """Any operation in any order."""
    ops = []
    for _ in range(random.randint(1, 60)):
        choice = random.random()
        if choice < 0.3:
            ops.append(Tag(random.choice(TAGS)))
        elif choice < 0.5:
            ops.append(Attr(random.choice(ATTRIBUTES)))
        elif choice < 0.75:
            ops.append(Text(fuzz_value()))
        else:
            ops.append(CLOSE)
    return ops


def render(ops):
    out = io.StringIO()
    writer = XMLStreamer(out, WriterOpts(prolog=False))
    for op in ops:
        writer.submit(op)
    return out.getvalue()


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against the writer."""
    from lxml import etree

    if seed is not None:
        random.seed(seed)

    failures = []
    successes = 0

    print(f"Fuzzing xmlstreamer with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        canonical = i % 2 == 0
        ops = generate_canonical_ops() if canonical else generate_permissive_ops()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            output = render(ops)
            if canonical:
                etree.fromstring(output)
            successes += 1
        except Exception as e:
            failures.append({
                "test_num": i,
                "ops": ops,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  FAILURE: Test {i}: {e}")

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS: xmlstreamer")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Failures:       {len(failures)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if failures:
        print(f"\n{'='*60}")
        print("FAILURE DETAILS:")
        print(f"{'='*60}")
        for failure in failures[:10]:
            print(f"\nTest #{failure['test_num']}:")
            print(f"  Ops: {failure['ops'][:20]!r}...")
            print(f"  Error: {failure['error']}")
        if len(failures) > 10:
            print(f"\n... and {len(failures) - 10} more failures")

    if save_failures and failures:
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"Ops:\n{failure['ops']!r}\n")
                f.write(f"Error: {failure['error']}\n")
                f.write(f"Traceback:\n{failure['traceback']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures


def main():
    parser = argparse.ArgumentParser(description="Fuzz the streaming XML writer with random operation streams")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample documents written from canonical streams",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(render(generate_canonical_ops()))
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
