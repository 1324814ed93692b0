"""LLM-backed generation of state-specific legal rights guides."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from langchain_core.messages import HumanMessage, SystemMessage

from rightguard.constants import FALLBACK_GUIDE_SCRIPT, LANGUAGES
from rightguard.errors import IntegrationError
from rightguard.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a legal expert specializing in constitutional rights and state-specific law enforcement "
    "interaction guidelines. Provide accurate, practical information while emphasizing that this is "
    "general information and not legal advice."
)

USER_PROMPT_TEMPLATE = """Generate a comprehensive legal rights guide for {state} in {language_name}.

Include:
1. State-specific rights during police encounters
2. Key laws and statutes relevant to citizen interactions with law enforcement
3. "What to say" scripts for common scenarios (traffic stops, questioning, searches)
4. Important state-specific considerations and exceptions

Format as JSON with:
- title: Brief title for the guide
- content: Detailed legal information (markdown format)
- script: Key phrases and scripts for interactions

Keep it accurate, practical, and focused on citizen rights and safety."""


@dataclass(frozen=True)
class GeneratedGuide:
    title: str
    content: str
    script: str


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```"):
        lines = stripped.splitlines()
        if len(lines) >= 2:
            return "\n".join(lines[1:-1]).strip()
    return stripped


def build_prompt(state: str, language: str) -> str:
    language_name = "English" if language == "en" else "Spanish"
    return USER_PROMPT_TEMPLATE.format(state=state, language_name=language_name)


def parse_guide(raw: str, state: str) -> GeneratedGuide:
    """Turn a completion into a guide, falling back to plain text when it is not JSON."""

    fallback = GeneratedGuide(title=f"{state} Legal Rights Guide", content=raw, script=FALLBACK_GUIDE_SCRIPT)
    try:
        payload = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError:
        return fallback
    if not isinstance(payload, dict):
        return fallback

    def _text(key: str, default: str) -> str:
        value = payload.get(key)
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value) if value else default

    return GeneratedGuide(
        title=_text("title", fallback.title),
        content=_text("content", raw),
        script=_text("script", FALLBACK_GUIDE_SCRIPT),
    )


class GuideGenerator:
    """Execute the guide prompt against the configured LLM provider."""

    def __init__(self, *, settings: Settings | None = None, client=None) -> None:
        self.settings = settings or get_settings()
        self.provider = (self.settings.llm.provider or "openai").lower()
        self._client = client if client is not None else self._build_client()

    def _build_client(self):
        llm = self.settings.llm
        if self.provider == "mock":
            return None

        if self.provider == "openai":
            from openai import OpenAI

            kwargs = {"api_key": llm.openai_api_key}
            if llm.openai_base_url:
                kwargs["base_url"] = llm.openai_base_url
            return OpenAI(**kwargs)

        if self.provider == "ollama":
            from langchain_ollama import ChatOllama

            return ChatOllama(
                model=llm.chat_model,
                base_url=llm.ollama_base_url,
                temperature=llm.temperature,
                num_predict=llm.max_tokens,
            )
        raise NotImplementedError(f"Unsupported LLM provider '{self.provider}'")

    def generate(self, state: str, language: str) -> GeneratedGuide:
        """Generate a guide for ``state`` in ``language``.

        Raises:
            IntegrationError: If the provider fails or returns an empty completion.
        """

        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language '{language}'")

        prompt = build_prompt(state, language)
        if self.provider == "mock":
            raw = self._mock_completion(state, language)
        elif self.provider == "openai":
            raw = self._openai_completion(prompt)
        else:
            raw = self._chat_completion(prompt)

        if not raw or not raw.strip():
            raise IntegrationError("Failed to generate legal guide content")
        return parse_guide(raw, state)

    def _openai_completion(self, prompt: str) -> str:
        llm = self.settings.llm
        try:
            response = self._client.chat.completions.create(
                model=llm.chat_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
            )
        except Exception as exc:  # pragma: no cover - LLM availability
            LOGGER.exception("OpenAI completion failed")
            raise IntegrationError("Failed to generate legal guide content") from exc
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""

    def _chat_completion(self, prompt: str) -> str:
        try:
            response = self._client.invoke([SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)])
        except Exception as exc:  # pragma: no cover - LLM availability
            LOGGER.exception("Chat model invocation failed")
            raise IntegrationError("Failed to generate legal guide content") from exc
        content = getattr(response, "content", "")
        return content if isinstance(content, str) else ""

    def _mock_completion(self, state: str, language: str) -> str:
        if language == "es":
            payload = {
                "title": f"Guía de derechos legales de {state}",
                "content": (
                    f"## Sus derechos en {state}\n\n"
                    "- Puede permanecer en silencio.\n"
                    "- Puede negarse a un registro sin orden judicial.\n"
                    "- Puede preguntar si está detenido.\n\n"
                    "Esta es información general y no asesoría legal."
                ),
                "script": "Estoy ejerciendo mis derechos constitucionales. Deseo permanecer en silencio y hablar con un abogado.",
            }
        else:
            payload = {
                "title": f"{state} Legal Rights Guide",
                "content": (
                    f"## Your rights in {state}\n\n"
                    "- You may remain silent.\n"
                    "- You may refuse a search without a warrant.\n"
                    "- You may ask whether you are being detained.\n\n"
                    "This is general information and not legal advice."
                ),
                "script": FALLBACK_GUIDE_SCRIPT,
            }
        return json.dumps(payload, ensure_ascii=False)


__all__ = ["GeneratedGuide", "GuideGenerator", "build_prompt", "parse_guide"]
