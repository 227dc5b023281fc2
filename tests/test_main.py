import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from news_scout import main as cli
from news_scout.models import Run

CONFIG = """
workspaces:
  - id: ws
    topics:
      - id: ai
        name: AI
        description: ai
        model: gpt-4o-mini
    sources: []
"""


class TestParseArgs(unittest.TestCase):
    def test_topic_requires_workspace(self):
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            cli.parse_args(["--topic", "ai"])

    def test_topic_and_run_id_are_exclusive(self):
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            cli.parse_args(["--workspace", "ws", "--topic", "ai", "--run-id", "r1"])

    def test_defaults(self):
        args = cli.parse_args(["--run-id", "r1"])
        self.assertEqual(args.config, "config/workspaces.yaml")
        self.assertFalse(args.dry_run)
        self.assertIsNone(args.log_level)


class TestMain(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = Path(tmp.name)
        self.config = self.dir / "workspaces.yaml"
        self.config.write_text(CONFIG, encoding="utf-8")
        env = {
            "SCOUT_RUNS_PATH": str(self.dir / "runs.json"),
            "SCOUT_USAGE_LOG_PATH": str(self.dir / "usage.jsonl"),
            "LOG_OUTPUT": "stdout",
        }
        env_patch = mock.patch.dict("os.environ", env, clear=True)
        env_patch.start()
        self.addCleanup(env_patch.stop)
        for name in ("load_dotenv", "configure_logging"):
            p = mock.patch.object(cli, name)
            p.start()
            self.addCleanup(p.stop)

    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(["--config", str(self.config), *argv])
        return code, out.getvalue()

    def test_creates_and_executes_a_run(self):
        def finish(run_id, *, runs, **kwargs):
            run = runs.get(run_id)
            run.status = "done"
            runs.save(run)
            return run

        with mock.patch.object(cli, "execute_run", side_effect=finish) as execute:
            code, out = self.run_cli("--workspace", "ws", "--topic", "ai")
        self.assertEqual(code, 0)
        self.assertIn(": done", out)
        self.assertTrue(execute.call_args.kwargs["notifier"].dry_run)

    def test_failed_run_exits_non_zero(self):
        def fail(run_id, *, runs, **kwargs):
            run = runs.get(run_id)
            run.status = "error"
            run.error_message = "provider down"
            runs.save(run)
            raise RuntimeError("provider down")

        with mock.patch.object(cli, "execute_run", side_effect=fail):
            code, out = self.run_cli("--workspace", "ws", "--topic", "ai")
        self.assertEqual(code, 1)
        self.assertIn("- Error: provider down", out)

    def test_unknown_topic(self):
        with mock.patch.object(cli, "execute_run") as execute:
            code, _ = self.run_cli("--workspace", "ws", "--topic", "missing")
        self.assertEqual(code, 1)
        execute.assert_not_called()

    def test_invalid_config(self):
        self.config.write_text("workspaces: nope\n", encoding="utf-8")
        code, _ = self.run_cli("--run-id", "r1")
        self.assertEqual(code, 1)

    def test_existing_run_id_is_passed_through(self):
        done = Run(id="r1", workspace_id="ws", topic_id="ai", status="done")
        with mock.patch.object(cli, "execute_run", return_value=done) as execute:
            code, out = self.run_cli("--run-id", "r1")
        self.assertEqual(code, 0)
        self.assertEqual(execute.call_args.args[0], "r1")
        self.assertIn("Run r1: done", out)


if __name__ == "__main__":
    unittest.main()
