import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from crcgen.cli import main


GOLDEN = Path(__file__).parent / "golden"


class CLITestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name)

        cwd = os.getcwd()
        os.chdir(self.path)
        self.addCleanup(os.chdir, cwd)

        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        os.environ.pop("GOPACKAGE", None)

    def assertUsageError(self, argv, message):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as cm:
                main(argv)
        self.assertEqual(cm.exception.code, 2)
        self.assertIn(message, stderr.getvalue())

    def test_default_output(self):
        self.assertEqual(main(["--size", "16", "--poly", "0x1021", "--package", "crc"]), 0)
        text = (self.path / "crc16_table.go").read_text()
        self.assertIn("package crc\n", text)
        self.assertIn("var crc16Table = []uint16{\n", text)
        self.assertIn("\"crcgen --size 16 --poly 0x1021 --package crc\"", text)

    def test_package_from_environment(self):
        os.environ["GOPACKAGE"] = "examples"
        self.assertEqual(main(["-s", "8", "-p", "0x9B", "-o", "table.go"]), 0)
        text = (self.path / "table.go").read_text()
        golden = (GOLDEN / "crc8_table.go").read_text()
        self.assertEqual(text.splitlines()[1:], golden.splitlines()[1:])

    def test_algorithm(self):
        self.assertEqual(main(["-a", "CRC-16/XMODEM", "-f", "python"]), 0)
        namespace = {}
        exec((self.path / "crc16_table.py").read_text(), namespace)
        self.assertEqual(namespace["CRC16_TABLE"][1], 0x1021)

    def test_stdout(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertEqual(main(["-s", "8", "-p", "7", "-f", "c", "-o", "-"]), 0)
        self.assertIn("static const uint8_t crc8_table[256] = {", stdout.getvalue())
        self.assertEqual(os.listdir(self.path), [])

    def test_list_algorithms(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertEqual(main(["--list-algorithms"]), 0)
        self.assertIn("CRC16_XMODEM", stdout.getvalue())
        self.assertIn("CRC8_SMBUS", stdout.getvalue())

    def test_bad_size(self):
        self.assertUsageError(["-s", "32", "-p", "0x04C11DB7", "--package", "crc"],
                              "invalid choice")

    def test_missing_size(self):
        self.assertUsageError(["-p", "0x07", "--package", "crc"],
                              "CRC size must be 8 or 16 bits")

    def test_zero_polynomial(self):
        self.assertUsageError(["-s", "8", "-p", "0", "--package", "crc"],
                              "a nonzero polynomial must be specified")
        self.assertUsageError(["-s", "8", "--package", "crc"],
                              "a nonzero polynomial must be specified")

    def test_polynomial_too_wide(self):
        self.assertUsageError(["-s", "8", "-p", "0x107", "--package", "crc"],
                              "does not fit in 8 bits")

    def test_negative_polynomial(self):
        self.assertUsageError(["-s", "8", "-p", "-1", "--package", "crc"],
                              "Polynomial must be non-negative, not -1")

    def test_missing_package(self):
        self.assertUsageError(["-s", "8", "-p", "0x07"],
                              "package name is required")

    def test_unknown_algorithm(self):
        self.assertUsageError(["-a", "CRC32_ISO_HDLC", "--package", "crc"],
                              "unknown algorithm")

    def test_conflicting_algorithm(self):
        self.assertUsageError(["-a", "CRC8_LTE", "-s", "8", "--package", "crc"],
                              "cannot be combined")

    def test_write_failure(self):
        with self.assertLogs("crcgen.cli", level="ERROR"):
            status = main(["-s", "8", "-p", "0x07", "-f", "c",
                           "-o", str(self.path / "missing" / "crc8_table.h")])
        self.assertEqual(status, 1)
        self.assertEqual(os.listdir(self.path), [])
