"""
Build script for xmlstreamer.

    pip install .                           # pure Python
    XMLSTREAMER_USE_MYPYC=1 pip install .   # machine and escaping compiled with mypyc
"""

import os
import sys

from setuptools import setup

# Every operation passes through these; writer.py stays interpreted so the
# sink can be any object with a write() method.
MYPYC_MODULES = [
    "src/xmlstreamer/machine.py",
    "src/xmlstreamer/escape.py",
]


def mypyc_extensions() -> list:
    try:
        from mypyc.build import mypycify
    except ImportError:
        sys.exit("ERROR: mypyc is not installed. Install with: pip install xmlstreamer[mypyc]")

    return mypycify(
        MYPYC_MODULES,
        opt_level=os.environ.get("MYPYC_OPT_LEVEL", "3"),
        separate=False,
        multi_file=False,
    )


if __name__ == "__main__":
    use_mypyc = os.environ.get("XMLSTREAMER_USE_MYPYC", "0") == "1"
    setup(ext_modules=mypyc_extensions() if use_mypyc else [])
