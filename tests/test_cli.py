import unittest
import io
import os
import sys
import tempfile
from contextlib import redirect_stdout

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from ansify.cli import VERSION, main, parse_args
from ansify.converter import ConversionMode

MOCK_PROJECT = os.path.join(PROJECT_ROOT, "tests", "mock_project")
KR_SAMPLE = os.path.join(MOCK_PROJECT, "kr_sample.c")
ANSI_SAMPLE = os.path.join(MOCK_PROJECT, "ansi_sample.c")


class TestParseArgs(unittest.TestCase):

    def test_defaults(self):
        args = parse_args(["in.c", "out.c"])
        self.assertEqual(args.mode, ConversionMode.ANSI)
        self.assertFalse(args.quiet)
        self.assertFalse(args.dry_run)
        self.assertEqual(args.max_lines, 50)
        self.assertEqual((args.input, args.output), ("in.c", "out.c"))

    def test_mode_flags(self):
        self.assertEqual(parse_args(["-k", "a", "b"]).mode, ConversionMode.KR)
        self.assertEqual(parse_args(["-p", "a", "b"]).mode, ConversionMode.PROTOTYPES)

    def test_upper_case_switches(self):
        self.assertEqual(parse_args(["-K", "a", "b"]).mode, ConversionMode.KR)
        self.assertEqual(parse_args(["-P", "a", "b"]).mode, ConversionMode.PROTOTYPES)
        self.assertTrue(parse_args(["-Q", "a", "b"]).quiet)

    def test_version_flag(self):
        with redirect_stdout(io.StringIO()) as buf:
            with self.assertRaises(SystemExit):
                parse_args(["--version"])
        self.assertIn(VERSION, buf.getvalue())

    def test_k_and_p_are_exclusive(self):
        with self.assertRaises(SystemExit):
            parse_args(["-k", "-p", "a", "b"])

    def test_missing_positional(self):
        with self.assertRaises(SystemExit):
            parse_args(["in.c"])

    def test_bad_max_lines(self):
        with self.assertRaises(SystemExit):
            parse_args(["--max-lines", "0", "a", "b"])


class TestMain(unittest.TestCase):

    def test_convert_to_ansi(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            self.assertEqual(main(["-q", KR_SAMPLE, out]), 0)
            with open(out, "r", encoding="utf-8") as f:
                text = f.read()
        self.assertIn("int add(int a,\n         int b)\n", text)

    def test_prototypes_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "protos.h")
            self.assertEqual(main(["-q", "-p", ANSI_SAMPLE, out]), 0)
            with open(out, "r", encoding="utf-8") as f:
                text = f.read()
        self.assertTrue(text.startswith("int add(int a, int b);\n"))
        self.assertNotIn("return", text)

    def test_stdout_output(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            self.assertEqual(main(["-q", "-k", ANSI_SAMPLE, "-"]), 0)
        self.assertIn("int add(a, b)\nint a ;\nint b ;\n", buf.getvalue())

    def test_dry_run(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            self.assertEqual(main(["-q", "--dry-run", KR_SAMPLE, out]), 0)
            self.assertFalse(os.path.exists(out))

    def test_missing_input(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            self.assertEqual(main(["-q", os.path.join(tmp, "absent.c"), out]), 1)
            self.assertFalse(os.path.exists(out))

    def test_banner_unless_quiet(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            with self.assertLogs("ansify", level="INFO") as logs:
                self.assertEqual(main([KR_SAMPLE, out]), 0)
        self.assertIn(f"V{VERSION}", logs.output[0])
        self.assertIn(f"Converting file {KR_SAMPLE} to ANSI", logs.output[1])

    def test_overflow_reported_once(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = os.path.join(tmp, "long.c")
            with open(src, "w", encoding="utf-8") as f:
                f.write("int f(a,\n" + "  b,\n" * 10 + "  c)\nint a;\n{\n}\n")
            with self.assertLogs("ansify", level="ERROR") as logs:
                main(["-q", "--max-lines", "5", src, os.path.join(tmp, "out.c")])
        self.assertEqual(len(logs.records), 1)
        self.assertIn("Too many lines", logs.output[0])

    def test_overflow_exit_code(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = os.path.join(tmp, "long.c")
            with open(src, "w", encoding="utf-8") as f:
                f.write("int f(a,\n" + "  b,\n" * 10 + "  c)\nint a;\n{\n}\n")
            out = os.path.join(tmp, "out.c")
            self.assertEqual(main(["-q", "--max-lines", "5", src, out]), 1)


if __name__ == "__main__":
    unittest.main()
