import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from main import build_parser, main


class ParserTests(unittest.TestCase):
    def test_defaults(self) -> None:
        args = build_parser().parse_args(["--width", "3", "--height", "2", "--depth", "4"])
        self.assertEqual((args.width, args.height, args.depth), (3, 2, 4))
        self.assertEqual(args.preset, "procedural_building")
        self.assertIsNone(args.seed)
        self.assertFalse(args.step)
        self.assertFalse(args.verify)

    def test_dimensions_are_required(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            build_parser().parse_args(["--width", "3"])

    def test_unknown_preset_is_rejected(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            build_parser().parse_args(["--width", "1", "--height", "1", "--depth", "1", "--preset", "castle"])


class MainTests(unittest.TestCase):
    def test_solve_writes_output_and_store(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "out.json"
            store_dir = Path(tmpdir) / "solves"
            with redirect_stdout(io.StringIO()):
                code = main([
                    "--width", "3", "--height", "3", "--depth", "2",
                    "--seed", "5",
                    "--output", str(output),
                    "--store-dir", str(store_dir),
                    "--log-level", "WARNING",
                ])
            self.assertEqual(code, 0)
            payload = json.loads(output.read_text(encoding="utf-8"))
            self.assertTrue(payload["solved"])
            self.assertEqual(payload["dimensions"], [3, 3, 2])
            self.assertEqual(len(payload["assignment"]), 18)
            self.assertEqual(payload["validation"], [])
            self.assertEqual(len(list(store_dir.glob("*.json"))), 1)

    def test_step_mode_with_verify(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "out.json"
            buffer = io.StringIO()
            with redirect_stdout(buffer):
                code = main([
                    "--width", "2", "--height", "3", "--depth", "2",
                    "--preset", "stacked_tower",
                    "--seed", "1",
                    "--step",
                    "--verify",
                    "--no-store",
                    "--output", str(output),
                    "--log-level", "WARNING",
                ])
            self.assertEqual(code, 0)
            self.assertIn("[step 1]", buffer.getvalue())
            payload = json.loads(output.read_text(encoding="utf-8"))
            self.assertTrue(payload["solved"])
            self.assertIn(payload["verify"], ("OPTIMAL", "FEASIBLE"))

    def test_invalid_preset_height_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with redirect_stdout(io.StringIO()):
                code = main([
                    "--width", "2", "--height", "1", "--depth", "2",
                    "--preset", "stacked_tower",
                    "--store-dir", tmpdir,
                    "--log-level", "ERROR",
                ])
            self.assertEqual(code, 2)
            docs = list(Path(tmpdir).glob("*.json"))
            self.assertEqual(len(docs), 1)
            self.assertEqual(json.loads(docs[0].read_text(encoding="utf-8"))["status"], "failed")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
