import asyncio
import unittest

import httpx

from llm_gateway.errors import (
    MalformedResponseError,
    MissingCredentialsError,
    ProviderConnectionError,
    ProviderHttpError,
)
from llm_gateway.types import GenerationResult, Turn
from support import (
    RecordingHandler,
    anthropic_message,
    gemini_content,
    make_gateway,
    openai_completion,
    unreachable,
)

TURNS = [Turn(role="user", content="hi")]


class OpenAIShapedProviderTests(unittest.TestCase):
    def test_openai_request_and_result(self) -> None:
        handler = RecordingHandler(lambda: httpx.Response(200, json=openai_completion()))
        gateway = make_gateway(handler)

        result = asyncio.run(gateway.generate("openai", "gpt-4o-mini", TURNS))

        self.assertEqual(str(handler.last.url), "https://api.openai.com/v1/chat/completions")
        self.assertEqual(handler.last.headers["authorization"], "Bearer sk-openai")
        body = handler.last_json()
        self.assertEqual(body["model"], "gpt-4o-mini")
        self.assertEqual(body["messages"], [{"role": "user", "content": "hi"}])
        self.assertFalse(body["stream"])
        self.assertEqual(
            result,
            GenerationResult(
                content="Hello there",
                model="gpt-4o-mini",
                usage={"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
            ),
        )

    def test_deepseek_and_mistral_endpoints(self) -> None:
        cases = {
            "deepseek": ("https://api.deepseek.com/v1/chat/completions", "Bearer sk-deepseek"),
            "mistral": ("https://api.mistral.ai/v1/chat/completions", "Bearer sk-mistral"),
        }
        for provider, (url, auth) in cases.items():
            handler = RecordingHandler(
                lambda: httpx.Response(200, json=openai_completion(model="echoed-model"))
            )
            gateway = make_gateway(handler)
            result = asyncio.run(gateway.generate(provider, "any-model", TURNS))
            self.assertEqual(str(handler.last.url), url)
            self.assertEqual(handler.last.headers["authorization"], auth)
            self.assertEqual(result.model, "echoed-model")

    def test_usage_is_optional(self) -> None:
        payload = openai_completion()
        del payload["usage"]
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        result = asyncio.run(gateway.generate("mistral", "mistral-large-latest", TURNS))
        self.assertIsNone(result.usage)

    def test_missing_choices_is_malformed(self) -> None:
        gateway = make_gateway(
            RecordingHandler(lambda: httpx.Response(200, json={"model": "gpt-4o", "choices": []}))
        )
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("openai", "gpt-4o", TURNS))

    def test_null_content_is_malformed(self) -> None:
        payload = openai_completion()
        payload["choices"][0]["message"]["content"] = None
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("deepseek", "deepseek-chat", TURNS))

    def test_only_first_choice_needs_content(self) -> None:
        payload = openai_completion("first")
        payload["choices"].append({"index": 1, "message": {"role": "assistant", "content": None}})
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        result = asyncio.run(gateway.generate("openai", "gpt-4o", TURNS))
        self.assertEqual(result.content, "first")

    def test_non_json_success_body_is_malformed(self) -> None:
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, text="<html>oops</html>")))
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("openai", "gpt-4o", TURNS))


class AnthropicProviderTests(unittest.TestCase):
    def test_request_headers_and_result(self) -> None:
        handler = RecordingHandler(lambda: httpx.Response(200, json=anthropic_message()))
        gateway = make_gateway(handler)

        result = asyncio.run(gateway.generate("anthropic", "claude-sonnet-4", TURNS))

        self.assertEqual(str(handler.last.url), "https://api.anthropic.com/v1/messages")
        self.assertEqual(handler.last.headers["x-api-key"], "sk-anthropic")
        self.assertEqual(handler.last.headers["anthropic-version"], "2023-06-01")
        self.assertNotIn("authorization", handler.last.headers)
        self.assertEqual(handler.last_json()["model"], "claude-sonnet-4-20250514")
        self.assertEqual(result.content, "Hello there")
        self.assertEqual(result.model, "claude-sonnet-4-20250514")
        self.assertEqual(result.usage, {"input_tokens": 5, "output_tokens": 2})

    def test_later_non_text_blocks_are_ignored(self) -> None:
        payload = anthropic_message("Hello")
        payload["content"].append(
            {"type": "tool_use", "id": "toolu_1", "name": "lookup", "input": {"q": "x"}}
        )
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        result = asyncio.run(gateway.generate("anthropic", "claude-3-opus", TURNS))
        self.assertEqual(result.content, "Hello")

    def test_first_block_without_text_is_malformed(self) -> None:
        payload = anthropic_message()
        payload["content"] = [{"type": "thinking", "thinking": "hmm"}]
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("anthropic", "claude-3-opus", TURNS))

    def test_missing_content_is_malformed(self) -> None:
        payload = anthropic_message()
        payload["content"] = []
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("anthropic", "claude-3-opus", TURNS))


class GeminiProviderTests(unittest.TestCase):
    def test_request_and_result(self) -> None:
        handler = RecordingHandler(lambda: httpx.Response(200, json=gemini_content()))
        gateway = make_gateway(handler)

        result = asyncio.run(gateway.generate("gemini", "gemini-1.5-flash", TURNS))

        url = handler.last.url
        self.assertEqual(
            url.path, "/v1beta/models/gemini-1.5-flash:generateContent"
        )
        self.assertEqual(url.params["key"], "gm-key")
        self.assertNotIn("authorization", handler.last.headers)
        self.assertEqual(result.model, "gemini-1.5-flash")
        self.assertEqual(result.content, "Hello there")
        self.assertEqual(result.usage, {"promptTokenCount": 5, "candidatesTokenCount": 2})

    def test_later_inline_data_part_is_ignored(self) -> None:
        payload = gemini_content("Here you go")
        payload["candidates"][0]["content"]["parts"].append(
            {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}}
        )
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json=payload)))
        result = asyncio.run(gateway.generate("gemini", "gemini-2.0-flash", TURNS))
        self.assertEqual(result.content, "Here you go")

    def test_empty_candidates_is_malformed(self) -> None:
        gateway = make_gateway(RecordingHandler(lambda: httpx.Response(200, json={"candidates": []})))
        with self.assertRaises(MalformedResponseError):
            asyncio.run(gateway.generate("gemini", "gemini-2.0-flash", TURNS))


class ProviderErrorTests(unittest.TestCase):
    def test_unauthorized_surfaces_http_error_for_every_provider(self) -> None:
        for provider in ("openai", "anthropic", "deepseek", "gemini", "mistral"):
            handler = RecordingHandler(lambda: httpx.Response(401, text="invalid api key"))
            gateway = make_gateway(handler)
            with self.assertRaises(ProviderHttpError) as ctx:
                asyncio.run(gateway.generate(provider, "some-model", TURNS))
            self.assertEqual(ctx.exception.status_code, 401)
            self.assertEqual(ctx.exception.provider, provider)
            self.assertEqual(ctx.exception.body, "invalid api key")

    def test_transport_failure_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)
        with self.assertRaises(ProviderConnectionError):
            asyncio.run(gateway.generate("openai", "gpt-4o", TURNS))

    def test_missing_key_fails_before_request(self) -> None:
        gateway = make_gateway(unreachable, gemini_api_key=None)
        with self.assertRaises(MissingCredentialsError) as ctx:
            asyncio.run(gateway.generate("gemini", "gemini-2.0-flash", TURNS))
        self.assertEqual(ctx.exception.env_var, "GEMINI_API_KEY")


if __name__ == "__main__":
    unittest.main()
