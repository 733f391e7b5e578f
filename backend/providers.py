import json
import re
import time
import logging
from dataclasses import dataclass
from typing import Any, Optional

from google import genai

from prompts import question_answer_prompt, concept_explain_prompt

# Module logger
logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


class GenerationError(RuntimeError):
    """The model produced no usable output."""

    def __init__(self, message: str, raw: Optional[str] = None, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw
        self.error = error

    def to_detail(self) -> dict:
        detail = {"message": self.message}
        if self.raw is not None:
            detail["raw"] = self.raw
        if self.error is not None:
            detail["error"] = self.error
        return detail


@dataclass(frozen=True)
class ParsedAIResult:
    value: Any = None
    raw: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _first_item(seq: Any) -> Any:
    if isinstance(seq, (list, tuple)) and seq:
        return seq[0]
    return None


def extract_text(response: Any) -> Optional[str]:
    """Return candidates[0].content.parts[0].text, or None if any hop is missing."""
    candidate = _first_item(_field(response, "candidates"))
    part = _first_item(_field(_field(candidate, "content"), "parts"))
    text = _field(part, "text")
    if isinstance(text, str) and text:
        return text
    return None


def strip_code_fences(text: str) -> str:
    cleaned = _LEADING_FENCE.sub("", text.strip())
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def _reject_constant(name: str):
    # json.loads accepts NaN/Infinity, which are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads_strict(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def parse_model_json(text: str) -> ParsedAIResult:
    """Parse model text as JSON, retrying once with markdown fences removed."""
    try:
        return ParsedAIResult(value=_loads_strict(text), raw=text)
    except (ValueError, TypeError):
        pass

    try:
        return ParsedAIResult(value=_loads_strict(strip_code_fences(text)), raw=text)
    except (ValueError, TypeError) as e:
        return ParsedAIResult(raw=text, error=str(e))


def derive_explanation(result: ParsedAIResult, text: str) -> str:
    """Pick the explanation: its `explanation` field, else the JSON dumped, else the raw text."""
    value = result.value if result.ok else None
    if isinstance(value, dict) and value.get("explanation"):
        explanation = value["explanation"]
        return explanation if isinstance(explanation, str) else json.dumps(explanation)
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return text


class GeminiProvider:
    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.0-flash-lite", client: Any = None):
        if client is None:
            if not api_key:
                raise ValueError("GEMINI_API_KEY or GOOGLE_API_KEY not found in environment")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        logger.debug("GeminiProvider initialized with model=%s", model)

    def _generate_text(self, prompt: str) -> str:
        start_time = time.time()
        response = self.client.models.generate_content(
            model=self.model,
            contents=[{"text": prompt}],
        )
        text = extract_text(response)
        if not text:
            logger.debug("Gemini returned no text in %.2fs", time.time() - start_time)
            raise GenerationError("No response from Gemini")
        logger.debug("Gemini raw response in %.2fs (truncated): %s", time.time() - start_time, text[:500])
        return text

    def generate_interview_questions(self, role, experience, topics_to_focus, number_of_questions) -> Any:
        logger.debug(
            "Gemini.generate_interview_questions: role=%s, experience=%s, topics=%s, num=%s",
            role, experience, topics_to_focus, number_of_questions
        )
        prompt = question_answer_prompt(role, experience, topics_to_focus, number_of_questions)
        text = self._generate_text(prompt)

        result = parse_model_json(text)
        if not result.ok:
            logger.debug("Gemini.generate_interview_questions JSON parse error: %s", result.error)
            raise GenerationError("Gemini returned invalid JSON", raw=text, error=result.error)
        return result.value

    def explain_concept(self, question: str) -> str:
        logger.debug("Gemini.explain_concept: question_len=%d", len(question or ""))
        text = self._generate_text(concept_explain_prompt(question))
        result = parse_model_json(text)
        if not result.ok:
            logger.debug("Gemini.explain_concept falling back to raw text: %s", result.error)
        return derive_explanation(result, text)
