import subprocess
import sys


def test_core_does_not_import_runtime_or_polars():
    # Run in a clean Python process to avoid pollution from other tests
    code = r"""
import sys
import streamschema.core  # noqa: F401

forbidden = ["streamschema.runtime", "polars"]
present = [m for m in forbidden if m in sys.modules]
print(",".join(present))
"""
    proc = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, check=True)
    assert proc.stdout.strip() == ""
