from __future__ import annotations
from typing import Optional

from ..config import Settings
from ..errors import ProviderError
from ..providers import ProviderBase


class Provider(ProviderBase):
    id = "gemini"
    name = "Google Gemini"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__(settings)
        self._model = None
        api = self.settings.gemini_api_key
        if not api:
            self.ready = False
            self.reason = "GEMINI_API_KEY not set"
            return
        try:
            import google.generativeai as genai  # type: ignore
            genai.configure(api_key=api)
            model_id = self.settings.gemini_model
            self._model = genai.GenerativeModel(
                model_id,
                generation_config=genai.GenerationConfig(
                    temperature=self.settings.gemini_temperature,
                    top_p=self.settings.gemini_top_p,
                    max_output_tokens=self.settings.gemini_max_output_tokens,
                ),
            )
            self.ready = True
            self.reason = f"Gemini client ready (model={model_id})"
        except Exception as e:
            self.ready = False
            self.reason = f"google-generativeai not installed/usable: {e}"

    def generate(self, prompt: str) -> str:
        if not self.ready or self._model is None:
            raise ProviderError(f"gemini not ready: {self.reason}")
        try:
            r = self._model.generate_content(prompt)
        except Exception as e:
            raise ProviderError(f"failed to generate content: {e}") from e
        try:
            text = r.text
        except ValueError as e:
            # Raised when the response carries no candidates (e.g. blocked prompt).
            raise ProviderError(f"no content generated: {e}") from e
        text = (text or "").strip()
        if not text:
            raise ProviderError("no content generated")
        return text
