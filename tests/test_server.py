"""
MCP server checks:
  1. The server module imports and registers all 4 tools
  2. Each tool returns markdown for good input and an error string for bad input
  3. In-place conversion rewrites the file
"""

import unittest
import asyncio
import os
import shutil
import sys
import tempfile

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

import fastmcp_server
from fastmcp_server import (
    convert_file,
    convert_source,
    generate_prototypes,
    mcp,
    verify_conversion,
)

MOCK_PROJECT = os.path.join(PROJECT_ROOT, "tests", "mock_project")
KR_SAMPLE = os.path.join(MOCK_PROJECT, "kr_sample.c")
ANSI_SAMPLE = os.path.join(MOCK_PROJECT, "ansi_sample.c")


class TestServerTools(unittest.TestCase):

    def test_tools_registered(self):
        tools = asyncio.run(mcp.list_tools())
        names = {t.name for t in tools}
        self.assertEqual(
            names,
            {"convert_source", "convert_file", "generate_prototypes", "verify_conversion"},
        )

    def test_convert_source(self):
        md = convert_source("int add(a, b)\nint a;\nint b;\n{\n}\n", mode="ANSI")
        self.assertIn("```c\nint add(int a,\n         int b)\n{\n}\n```", md)
        self.assertIn("1 converted", md)

    def test_convert_source_bad_mode(self):
        self.assertTrue(convert_source("int x;", mode="pascal").startswith("Error"))

    def test_convert_source_overflow(self):
        md = convert_source("int f(a,\n" + "  b,\n" * 10 + "  c)\n", max_lines=3)
        self.assertTrue(md.startswith("Error: Too many lines"))

    def test_convert_file_to_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            md = convert_file(ANSI_SAMPLE, out, mode="kr")
            self.assertTrue(md.startswith("Wrote"))
            with open(out, "r", encoding="utf-8") as f:
                self.assertIn("int square(n)\nint n ;\n", f.read())

    def test_convert_file_in_place(self):
        with tempfile.TemporaryDirectory() as tmp:
            work = os.path.join(tmp, "work.c")
            shutil.copyfile(KR_SAMPLE, work)
            convert_file(work)
            with open(work, "r", encoding="utf-8") as f:
                self.assertIn("void setpt(struct point *p,\n", f.read())

    def test_convert_file_prototypes_never_in_place(self):
        with tempfile.TemporaryDirectory() as tmp:
            work = os.path.join(tmp, "work.c")
            shutil.copyfile(KR_SAMPLE, work)
            md = convert_file(work, "", mode="prototypes")
            self.assertTrue(md.startswith("Error"))
            with open(work, "r", encoding="utf-8") as f:
                after = f.read()
            with open(KR_SAMPLE, "r", encoding="utf-8") as f:
                self.assertEqual(after, f.read())

    def test_convert_file_prototypes_to_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "protos.h")
            md = convert_file(KR_SAMPLE, out, mode="prototypes")
            self.assertTrue(md.startswith("Wrote"))
            with open(out, "r", encoding="utf-8") as f:
                self.assertTrue(f.read().startswith("int add(int a,\n"))

    def test_convert_file_dry_run(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.c")
            md = convert_file(KR_SAMPLE, out, dry_run=True)
            self.assertTrue(md.startswith("[Dry Run]"))
            self.assertFalse(os.path.exists(out))

    def test_convert_file_missing(self):
        self.assertTrue(convert_file("/nonexistent/x.c").startswith("Error"))

    def test_generate_prototypes(self):
        md = generate_prototypes(KR_SAMPLE)
        self.assertIn("double mean(double vals[],\n             int n);\n", md)
        self.assertNotIn("#include", md)

    def test_verify_conversion(self):
        with open(KR_SAMPLE, "r", encoding="utf-8") as f:
            md = verify_conversion(f.read())
        self.assertIn("**Result**: PASS", md)

    def test_module_logger(self):
        self.assertEqual(fastmcp_server.logger.name, "fastmcp_server")


if __name__ == "__main__":
    unittest.main()
