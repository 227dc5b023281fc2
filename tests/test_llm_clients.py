import unittest
from unittest import mock

from news_scout.processors.ai import create_llm_client
from news_scout.processors.ai.gemini import GeminiClient
from news_scout.processors.ai.ollama import OllamaClient
from news_scout.processors.ai.openai import OpenAIClient


def http_reply(payload):
    resp = mock.Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


class TestOpenAIClient(unittest.TestCase):
    @mock.patch("news_scout.processors.ai.openai.requests.post")
    def test_chat_returns_text_and_usage(self, post):
        post.return_value = http_reply(
            {
                "choices": [{"message": {"content": ' {"results": []} '}}],
                "usage": {"prompt_tokens": 120, "completion_tokens": 30},
            }
        )
        client = OpenAIClient(api_key="sk-test", base_url="https://llm.example.com/v1/")
        result = client.chat("gpt-4o-mini", "system", "user")
        self.assertEqual(result.text, '{"results": []}')
        self.assertEqual((result.input_tokens, result.output_tokens), (120, 30))
        self.assertEqual(post.call_args.args[0], "https://llm.example.com/v1/chat/completions")
        payload = post.call_args.kwargs["json"]
        self.assertEqual([m["role"] for m in payload["messages"]], ["system", "user"])
        self.assertEqual(post.call_args.kwargs["headers"]["Authorization"], "Bearer sk-test")

    def test_requires_api_key(self):
        with mock.patch.dict("os.environ", {}, clear=True), self.assertRaises(RuntimeError):
            OpenAIClient()


class TestGeminiClient(unittest.TestCase):
    @mock.patch("news_scout.processors.ai.gemini.requests.post")
    def test_chat_joins_parts(self, post):
        post.return_value = http_reply(
            {
                "candidates": [{"content": {"parts": [{"text": "{\"results\""}, {"text": ": []}"}]}}],
                "usageMetadata": {"promptTokenCount": 50, "candidatesTokenCount": 9},
            }
        )
        result = GeminiClient(api_key="g").chat("gemini-2.0-flash", "system", "user")
        self.assertEqual(result.text, '{"results": []}')
        self.assertEqual((result.input_tokens, result.output_tokens), (50, 9))
        self.assertIn("gemini-2.0-flash:generateContent", post.call_args.args[0])
        self.assertEqual(post.call_args.kwargs["params"], {"key": "g"})


class TestOllamaClient(unittest.TestCase):
    @mock.patch("news_scout.processors.ai.ollama.requests.post")
    def test_chat(self, post):
        post.return_value = http_reply(
            {"message": {"content": "picked"}, "prompt_eval_count": 11, "eval_count": 4}
        )
        result = OllamaClient(host="http://ollama:11434/").chat("llama3", "s", "u")
        self.assertEqual(result.text, "picked")
        self.assertEqual((result.input_tokens, result.output_tokens), (11, 4))
        self.assertEqual(post.call_args.args[0], "http://ollama:11434/api/chat")
        self.assertFalse(post.call_args.kwargs["json"]["stream"])


class TestFactory(unittest.TestCase):
    def test_backend_selection(self):
        env = {"OPENAI_API_KEY": "k", "GOOGLE_API_KEY": "g", "SCOUT_LLM_BACKEND": "Gemini"}
        with mock.patch.dict("os.environ", env, clear=True):
            self.assertIsInstance(create_llm_client(), GeminiClient)
            self.assertIsInstance(create_llm_client(backend="openai"), OpenAIClient)
            self.assertIsInstance(create_llm_client(backend="ollama"), OllamaClient)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_llm_client(backend="telepathy")


if __name__ == "__main__":
    unittest.main()
