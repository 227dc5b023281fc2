import tempfile
import textwrap
import unittest
from pathlib import Path

from news_scout.storage import WorkspaceStore
from news_scout.utils.config_loader import ConfigError, load_workspaces_config

VALID = """
workspaces:
  - id: newsroom
    recipients: ["111", "222", "111"]
    topics:
      - id: ai
        name: AI
        description: umetna inteligenca
        model: gpt-4o-mini
        max_sources_per_run: 30
        negative_filters: [horoskop, " ", nagradna igra]
    sources:
      - name: Search
        type: topic_search
      - name: Delo
        type: rss
        url: https://www.delo.si/rss
      - name: Portal
        type: html
        url: https://portal.example.com/latest
        selectors: {list: article, title: h2, link: a}
        active: false
"""


class TestConfigLoader(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, text):
        path = Path(self.tmp.name) / "workspaces.yaml"
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    def test_loads_workspace(self):
        (ws,) = load_workspaces_config(self.write(VALID))
        self.assertEqual(ws.id, "newsroom")
        topic = ws.topics[0]
        self.assertEqual(topic.max_sources_per_run, 30)
        self.assertEqual(topic.negative_filters, ["horoskop", "nagradna igra"])
        self.assertEqual([s.type for s in ws.sources], ["topic_search", "rss", "html"])
        self.assertIsNone(ws.sources[0].url)
        self.assertEqual(ws.sources[2].selectors.link, "a")
        self.assertIsNone(ws.sources[2].selectors.date)
        self.assertFalse(ws.sources[2].active)

    def test_default_cap(self):
        text = VALID.replace("        max_sources_per_run: 30\n", "")
        (ws,) = load_workspaces_config(self.write(text))
        self.assertEqual(ws.topics[0].max_sources_per_run, 50)

    def test_invalid_configs(self):
        broken = {
            "unknown type": VALID.replace("type: topic_search", "type: podcast"),
            "rss without url": VALID.replace("        url: https://www.delo.si/rss\n", ""),
            "non-http url": VALID.replace("https://www.delo.si/rss", "ftp://delo.si/rss"),
            "negative cap": VALID.replace("max_sources_per_run: 30", "max_sources_per_run: -1"),
            "non-int cap": VALID.replace("max_sources_per_run: 30", "max_sources_per_run: lots"),
            "incomplete selectors": VALID.replace("{list: article, title: h2, link: a}", "{list: article}"),
            "duplicate names": VALID.replace("name: Portal", "name: Delo"),
            "topic without model": VALID.replace("        model: gpt-4o-mini\n", ""),
            "bad yaml": "workspaces: [\n",
            "not a mapping": "- just a list\n",
        }
        for label, text in broken.items():
            with self.subTest(label), self.assertRaises(ConfigError):
                load_workspaces_config(self.write(text))

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_workspaces_config(Path(self.tmp.name) / "absent.yaml")


class TestWorkspaceStore(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        path = Path(tmp.name) / "workspaces.yaml"
        path.write_text(VALID, encoding="utf-8")
        self.store = WorkspaceStore.from_yaml(path)

    def test_active_sources_only(self):
        self.assertEqual([s.name for s in self.store.active_sources("newsroom")], ["Search", "Delo"])

    def test_sources_are_snapshots(self):
        snapshot = self.store.active_sources("newsroom")
        snapshot[0].active = False
        self.assertTrue(self.store.active_sources("newsroom")[0].active)

    def test_recipients_are_distinct(self):
        self.assertEqual(self.store.recipients("newsroom"), ["111", "222"])

    def test_lookups(self):
        self.assertEqual(self.store.get_topic("newsroom", "ai").model, "gpt-4o-mini")
        with self.assertRaises(LookupError):
            self.store.get_topic("newsroom", "nope")
        with self.assertRaises(LookupError):
            self.store.workspace("nope")


if __name__ == "__main__":
    unittest.main()
