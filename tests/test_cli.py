import contextlib
import gzip
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from prune_graph.cli import config_from_args, main, parse_args

DATA_DIR = Path(__file__).resolve().parent / "data"
EXAMPLE = DATA_DIR / "example.tsv"
EXAMPLE_GZ = DATA_DIR / "example.tsv.gz"
BASE_ARGS = ["--header", "-w", "r2", "-f", "r2 > 0.2", "-q"]


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_main(self, *extra: str, input_path: Path = EXAMPLE) -> int:
        return main(["--in", str(input_path), "--out", str(self.tmp / "out.txt"), *BASE_ARGS, *extra])

    def test_golden_partition(self) -> None:
        rc = self.run_main("--out-excl", str(self.tmp / "excl.txt"))
        self.assertEqual(rc, 0)
        self.assertEqual((self.tmp / "out.txt").read_text(), (DATA_DIR / "example.unlinked").read_text())
        self.assertEqual((self.tmp / "excl.txt").read_text(), (DATA_DIR / "example.linked").read_text())

    def test_gzip_input(self) -> None:
        rc = self.run_main(input_path=EXAMPLE_GZ)
        self.assertEqual(rc, 0)
        self.assertEqual((self.tmp / "out.txt").read_text(), (DATA_DIR / "example.unlinked").read_text())

    def run_piped(self, data: bytes, argv: list[str]) -> tuple[int, str]:
        stdin = io.TextIOWrapper(io.BufferedReader(io.BytesIO(data)))
        stdout = io.StringIO()
        with mock.patch("sys.stdin", stdin), contextlib.redirect_stdout(stdout):
            rc = main(argv)
        return rc, stdout.getvalue()

    def test_stdin_to_stdout(self) -> None:
        rc, out = self.run_piped(EXAMPLE.read_bytes(), BASE_ARGS)
        self.assertEqual(rc, 0)
        self.assertEqual(out, (DATA_DIR / "example.unlinked").read_text())

    def test_gzip_stdin_to_stdout(self) -> None:
        rc, out = self.run_piped(gzip.compress(EXAMPLE.read_bytes()), [*BASE_ARGS, "--out-excl", str(self.tmp / "excl.txt")])
        self.assertEqual(rc, 0)
        self.assertEqual(out, (DATA_DIR / "example.unlinked").read_text())
        self.assertEqual((self.tmp / "excl.txt").read_text(), (DATA_DIR / "example.linked").read_text())

    def test_small_gzip_stdin(self) -> None:
        rc, out = self.run_piped(gzip.compress(b"a\tb\t1.0\nb\tc\t1.0\n"), ["-q"])
        self.assertEqual(rc, 0)
        self.assertEqual(out, "a\nc\n")

    def test_component_mode_threads(self) -> None:
        rc = self.run_main("--mode", "component", "-t", "3", "--out-excl", str(self.tmp / "excl.txt"))
        self.assertEqual(rc, 0)
        self.assertEqual((self.tmp / "out.txt").read_text(), (DATA_DIR / "example.unlinked").read_text())
        self.assertEqual((self.tmp / "excl.txt").read_text(), (DATA_DIR / "example.linked").read_text())

    def test_out_graph(self) -> None:
        rc = self.run_main("--out-graph", str(self.tmp / "graph.dot"))
        self.assertEqual(rc, 0)
        dot = (self.tmp / "graph.dot").read_text().splitlines()
        self.assertEqual(dot[0], "graph {")
        self.assertEqual(dot[-1], "}")
        self.assertEqual(sum(" -- " in ln for ln in dot), 11)
        self.assertEqual(sum("label" in ln and " -- " not in ln for ln in dot), 12)

    def test_subset(self) -> None:
        rc = self.run_main("--subset", str(DATA_DIR / "example.subset"), "--out-excl", str(self.tmp / "excl.txt"))
        self.assertEqual(rc, 0)
        self.assertEqual((self.tmp / "out.txt").read_text(), "snp01\nsnp04\n")
        self.assertEqual((self.tmp / "excl.txt").read_text(), "snp02\nsnp03\n")

    def test_fatal_input_exits_with_error(self) -> None:
        self.assertEqual(main(["--in", str(EXAMPLE), "--header", "-w", "r3", "-q"]), 1)
        bad = self.tmp / "bad.tsv"
        bad.write_text("a\tb\t0.5\nb\tc\n")
        self.assertEqual(main(["--in", str(bad), "-q"]), 1)
        empty = self.tmp / "empty.tsv"
        empty.write_text("n1\tn2\tr2\n")
        self.assertEqual(main(["--in", str(empty), "--header", "-w", "r2", "-q"]), 1)

    def test_invalid_config(self) -> None:
        self.assertEqual(self.run_main("-t", "0"), 2)
        self.assertEqual(self.run_main("--weight-precision", "-1"), 2)

    def test_config_from_args(self) -> None:
        cfg = config_from_args(parse_args(["--header", "-w", "r2", "--keep-heavy", "--mode", "component"]))
        self.assertTrue(cfg.header)
        self.assertTrue(cfg.keep_heavy)
        self.assertEqual(cfg.mode, "component")
        self.assertEqual(cfg.weight_precision, 4)
        self.assertEqual(cfg.input, "-")
        self.assertIsNone(cfg.weight_filter)


if __name__ == "__main__":
    unittest.main()
