import json
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

import requests

from news_scout.models import DedupedCandidate, RankedResult
from news_scout.processors.ai import ChatResult, LLMClient
from news_scout.processors.ai.parsing import (
    FALLBACK_REASON,
    extract_ranked_urls,
    parse_ranking_response,
)
from news_scout.processors.ai.retry import with_retries
from news_scout.processors.rank import (
    AUTO_SELECT_REASON,
    build_user_message,
    format_time_ago,
    rank_candidates,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeLLM(LLMClient):
    provider = "fake"

    def __init__(self, reply="", *, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, model, system_prompt, user_message):
        self.calls.append((model, system_prompt, user_message))
        if self.error is not None:
            raise self.error
        return ChatResult(text=self.reply, input_tokens=1200, output_tokens=150, latency_ms=42)


def candidates(n):
    return [
        DedupedCandidate(
            title=f"Story {i}",
            url=f"https://news.example.com/{i}",
            published_at=NOW - timedelta(hours=i),
            source_name="Feed",
            source_names=["Feed"],
        )
        for i in range(n)
    ]


def json_reply(*urls):
    return json.dumps(
        {"results": [{"url": u, "title": "t", "reason": f"pick {u}"} for u in urls]}
    )


class TestRankCandidates(unittest.TestCase):
    def test_three_or_fewer_are_auto_selected_without_llm(self):
        llm = FakeLLM(json_reply())
        for n in (0, 1, 3):
            cands = candidates(n)
            res = rank_candidates(cands, "topic", "gpt-4o-mini", client=llm)
            self.assertEqual([r.url for r in res.results], [c.url for c in cands])
            self.assertTrue(all(r.reason == AUTO_SELECT_REASON for r in res.results))
            self.assertFalse(res.used_llm)
            self.assertEqual((res.input_tokens, res.output_tokens), (0, 0))
        self.assertEqual(llm.calls, [])

    def test_llm_choice_is_a_subset_of_at_most_three(self):
        for n in (4, 50):
            cands = candidates(n)
            urls = [c.url for c in cands]
            llm = FakeLLM(json_reply(*urls[:5]))
            res = rank_candidates(cands, "topic", "gpt-4o-mini", client=llm, now=NOW)
            self.assertEqual(len(res.results), 3)
            self.assertTrue(all(r.url in urls for r in res.results))
            self.assertEqual(len({r.url for r in res.results}), 3)
            self.assertTrue(res.used_llm)
            self.assertFalse(res.used_fallback)
            self.assertEqual((res.input_tokens, res.output_tokens, res.latency_ms), (1200, 150, 42))

    def test_prompt_carries_topic_and_candidates(self):
        llm = FakeLLM(json_reply("https://news.example.com/1"))
        rank_candidates(candidates(4), "AI in Slovenia", "m", client=llm, now=NOW)
        model, system_prompt, user_message = llm.calls[0]
        self.assertEqual(model, "m")
        self.assertIn("Respond with valid JSON only", system_prompt)
        self.assertIn("Topic: AI in Slovenia", user_message)
        self.assertIn("URL: https://news.example.com/3", user_message)
        self.assertIn("Sources: 1 (Feed)", user_message)

    def test_invented_urls_are_dropped(self):
        llm = FakeLLM(json_reply("https://invented.example.org/x", "https://news.example.com/2"))
        res = rank_candidates(candidates(5), "topic", "m", client=llm)
        self.assertEqual([r.url for r in res.results], ["https://news.example.com/2"])
        self.assertEqual(res.results[0].reason, "pick https://news.example.com/2")

    def test_canonical_match_emits_candidate_url(self):
        llm = FakeLLM(json_reply("https://www.news.example.com/1?utm_source=llm"))
        res = rank_candidates(candidates(5), "topic", "m", client=llm)
        self.assertEqual([r.url for r in res.results], ["https://news.example.com/1"])

    def test_duplicate_picks_collapse(self):
        llm = FakeLLM(json_reply("https://news.example.com/1", "https://news.example.com/1"))
        res = rank_candidates(candidates(5), "topic", "m", client=llm)
        self.assertEqual(len(res.results), 1)

    def test_prose_reply_falls_back_to_url_extraction(self):
        reply = (
            "I would pick https://news.example.com/2 first, then "
            "(https://news.example.com/0). Not https://elsewhere.example.org/9."
        )
        res = rank_candidates(candidates(4), "topic", "m", client=FakeLLM(reply))
        self.assertTrue(res.used_fallback)
        self.assertEqual(
            [r.url for r in res.results],
            ["https://news.example.com/2", "https://news.example.com/0"],
        )
        self.assertEqual(res.results[0].title, "Story 2")
        self.assertTrue(all(r.reason == FALLBACK_REASON for r in res.results))

    def test_prose_reply_without_candidate_urls_raises(self):
        llm = FakeLLM("Nothing fits today, maybe see https://elsewhere.example.org/9.")
        with self.assertRaises(ValueError):
            rank_candidates(candidates(4), "topic", "m", client=llm)

    def test_json_reply_with_only_unknown_urls_is_empty(self):
        llm = FakeLLM(json_reply("https://invented.example.org/x"))
        res = rank_candidates(candidates(4), "topic", "m", client=llm)
        self.assertEqual(res.results, [])
        self.assertTrue(res.used_llm)
        self.assertFalse(res.used_fallback)
        self.assertEqual(len(llm.calls), 1)

    def test_provider_error_propagates(self):
        llm = FakeLLM(error=RuntimeError("provider down"))
        with self.assertRaises(RuntimeError):
            rank_candidates(candidates(4), "topic", "m", client=llm)
        self.assertEqual(len(llm.calls), 1)

    def test_missing_client_raises(self):
        with self.assertRaises(ValueError):
            rank_candidates(candidates(4), "topic", "m")


class TestFormatting(unittest.TestCase):
    def test_format_time_ago(self):
        self.assertEqual(format_time_ago(None, now=NOW), "unknown")
        self.assertEqual(format_time_ago(NOW - timedelta(minutes=20), now=NOW), "< 1h ago")
        self.assertEqual(format_time_ago(NOW - timedelta(hours=5, minutes=30), now=NOW), "5h ago")
        self.assertEqual(format_time_ago(NOW - timedelta(hours=50), now=NOW), "2d ago")

    def test_user_message_numbers_candidates(self):
        text = build_user_message(candidates(2), "topic", now=NOW)
        self.assertIn("1. Story 0", text)
        self.assertIn("2. Story 1", text)
        self.assertIn("Published: < 1h ago", text)
        self.assertIn("Published: 1h ago", text)


class TestParsing(unittest.TestCase):
    def test_parses_json_inside_code_fence(self):
        raw = '```json\n{"results":[{"url":" https://a.com/1 ","title":"A","reason":"big"}]}\n```'
        self.assertEqual(
            parse_ranking_response(raw),
            [RankedResult(url="https://a.com/1", title="A", reason="big")],
        )

    def test_rejects_malformed_replies(self):
        for raw in ("", "no json here", "{not json}", '{"results": []}', '{"results": [{"title": "x"}]}'):
            with self.assertRaises(ValueError, msg=raw):
                parse_ranking_response(raw)

    def test_extract_strips_trailing_punctuation_and_dedupes(self):
        known = {"https://a.com/1": "One", "https://a.com/2": "Two"}
        raw = "See https://a.com/1, https://a.com/1. and https://a.com/2!"
        out = extract_ranked_urls(raw, known)
        self.assertEqual([r.url for r in out], ["https://a.com/1", "https://a.com/2"])
        self.assertEqual(out[1].title, "Two")

    def test_extract_respects_limit(self):
        known = {f"https://a.com/{i}": str(i) for i in range(5)}
        raw = " ".join(known)
        self.assertEqual(len(extract_ranked_urls(raw, known, limit=3)), 3)


class TestRetries(unittest.TestCase):
    @mock.patch("news_scout.processors.ai.retry.time.sleep")
    def test_retries_transient_errors(self, sleep):
        fn = mock.Mock(side_effect=[requests.ConnectionError("reset"), "ok"])
        with mock.patch.dict("os.environ", {"AI_RETRIES": "2", "AI_BACKOFF": "1.5"}):
            self.assertEqual(with_retries(fn), "ok")
        self.assertEqual(fn.call_count, 2)
        sleep.assert_called_once_with(1.0)

    @mock.patch("news_scout.processors.ai.retry.time.sleep")
    def test_client_errors_are_not_retried(self, sleep):
        resp = mock.Mock(status_code=401)
        fn = mock.Mock(side_effect=requests.HTTPError("unauthorized", response=resp))
        with mock.patch.dict("os.environ", {"AI_RETRIES": "2"}), self.assertRaises(requests.HTTPError):
            with_retries(fn)
        self.assertEqual(fn.call_count, 1)
        sleep.assert_not_called()


if __name__ == "__main__":
    unittest.main()
