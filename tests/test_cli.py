"""Test the easyprotect command-line tool.

Run from the repo root:
    python3 tests/test_cli.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import io
import json
import tempfile
from contextlib import redirect_stderr, redirect_stdout

from easyprotect.cli import main
from easyprotect.storage import LogReader, LogWriter


def run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        status = main(argv)
    return status, out.getvalue(), err.getvalue()


def test_decode_json():
    print("test_decode_json...", end="")

    status, out, _ = run(["decode", "--port", "3", "--json", "1005000000"])
    assert status == 0
    doc = json.loads(out)
    assert doc["warnings"] == [] and doc["errors"] == []
    assert doc["data"]["port"] == 3
    assert doc["data"]["packet_type_info"] == "synchronous"
    assert doc["data"]["status_interpretation"] == {"day_value": 5}

    print(" OK")


def test_decode_text():
    print("test_decode_text...", end="")

    status, out, _ = run(["decode", "A0:02:00:21:05", "53"])
    assert status == 0
    lines = out.splitlines()
    assert lines[0] == "AP1/0 port=0 asynchronous: removal date=208-5-1"
    assert lines[1] == "type=0x5/3 port=0 None: None"

    print(" OK")


def test_decode_errors():
    print("test_decode_errors...", end="")

    status, out, err = run(["decode", "1005", "zz"])
    assert status == 1
    assert out == ""
    assert "SP1 packet needs 5 bytes, got 2" in err
    assert "zz:" in err

    print(" OK")


def test_import_dump_info():
    print("test_import_dump_info...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        src = os.path.join(tmp, "uplinks.txt")
        out_path = os.path.join(tmp, "uplinks.epul")
        with open(src, "w") as f:
            f.write("# captured uplinks\n")
            f.write("1000000000 1 1005000000\n")
            f.write("2000000000 1 a002002105\n")
            f.write("\n")
            f.write("1 91\n")

        status, out, _ = run(["import", src, out_path])
        assert status == 0
        assert "wrote 3 uplinks" in out

        with LogReader(out_path) as reader:
            ups = list(reader.uplinks())
        assert [u.timestamp for u in ups] == [1000000000, 2000000000, 0]

        status, out, _ = run(["dump", "--json", out_path])
        assert status == 0
        docs = [json.loads(line) for line in out.splitlines()]
        assert docs[0]["timestamp"] == 1000000000
        assert docs[1]["data"]["status_interpretation"] == "removal"
        assert docs[2]["data"] == {"status_decoded": False}
        assert len(docs[2]["errors"]) == 1

        status, out, _ = run(["info", out_path])
        assert status == 0
        assert "Uplinks:    3" in out
        assert "Truncated:  1" in out
        assert "0x1/0x0" in out
        assert "0xA/0x0" in out

    print(" OK")


def test_import_bad_line():
    print("test_import_bad_line...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        src = os.path.join(tmp, "bad.txt")
        with open(src, "w") as f:
            f.write("1 2 3 4\n")
        status, _, err = run(["import", src, os.path.join(tmp, "out.epul")])
        assert status == 1
        assert "bad.txt:1" in err

    print(" OK")


def test_no_command():
    print("test_no_command...", end="")

    status, out, _ = run([])
    assert status == 1
    assert "usage" in out

    print(" OK")


if __name__ == "__main__":
    print("easyprotect CLI tests")
    print("=====================\n")

    test_decode_json()
    test_decode_text()
    test_decode_errors()
    test_import_dump_info()
    test_import_bad_line()
    test_no_command()

    print("\nAll CLI tests passed.")
