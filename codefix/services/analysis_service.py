import json
import logging
from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from codefix.errors import (
    InvalidRequest,
    RateLimited,
    ServerMisconfigured,
    UpstreamEmptyResponse,
    UpstreamError,
    UpstreamMalformedResponse,
)
from codefix.models import AnalysisRequest, AnalysisResult, ErrorDetail, NO_ERROR_RESULT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gemini-1.5-flash'
DEFAULT_TIMEOUT = 30.0


def validate_request(language: Any, code: Any) -> AnalysisRequest:
    """Checks the client input in order; the first failing field wins."""
    try:
        return AnalysisRequest(language=language, code=code)
    except ValidationError as e:
        field = e.errors()[0]["loc"][0]
        raise InvalidRequest(f"Missing {field}") from e


def build_prompt(language: str, code: str) -> list:
    """Builds the single user message sent to Gemini. Deterministic for a given input."""
    text = f'''
You are an expert code analyzer. Your job: detect whether the provided code has an error, explain it, and provide corrected code. You must respond with ONLY valid JSON.

Language: {language}

Code:

{code}

Return ONLY JSON in this exact shape:
{{
  "hasError": boolean,
  "error": {{
    "type": string,
    "reason": string,
    "line": number|null
  }}|null,
  "correctedCode": string|null
}}

Rules:
- If there is no error, set hasError=false, error=null, correctedCode=null.
- If there is an error, set hasError=true and fill: type (e.g., SyntaxError/CompilationError/TypeError/etc), reason (clear explanation), and line (specific line number if possible, otherwise null).
- Always provide correctedCode as the corrected full code when an error is reported.
- Be strict: respond with JSON only, no markdown, no extra keys.
- If multiple issues exist, report the most critical one and still provide a corrected version of the full code.
'''.strip()
    return [{'role': 'user', 'parts': [text]}]


def _reject_constant(name: str) -> None:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_model_text(text: str) -> Any:
    """Strict JSON parsing; NaN and Infinity are not JSON."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error(f"Failed to parse Gemini response as JSON: {text!r}. Parse error: {e}")
        raise UpstreamMalformedResponse(text) from e


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_result(parsed: Any) -> AnalysisResult:
    """
    Coerces the parsed model output into the canonical result shape.

    The payload is untrusted: every field is checked on its own and nothing is
    passed through without a type check. Pure function of its input.
    """
    payload = parsed if isinstance(parsed, dict) else {}

    # JSON truthiness: empty arrays and objects still count as true.
    has_error = payload.get('hasError')
    has_error = isinstance(has_error, (list, dict)) or bool(has_error)
    if not has_error:
        # A correctedCode sent alongside hasError=false is dropped here as well.
        return NO_ERROR_RESULT.model_copy(deep=True)

    error = payload.get('error')
    corrected_code = payload.get('correctedCode')
    if not isinstance(corrected_code, str):
        corrected_code = None

    if not isinstance(error, dict):
        return AnalysisResult(has_error=True, error=ErrorDetail(), corrected_code=corrected_code)

    error_type = error.get('type')
    reason = error.get('reason')
    line = error.get('line')
    detail = ErrorDetail(
        type=error_type if isinstance(error_type, str) else 'UnknownError',
        reason=reason if isinstance(reason, str) else 'Unknown',
        line=line if _is_number(line) else None,
    )
    return AnalysisResult(has_error=True, error=detail, corrected_code=corrected_code)


def _extract_text(response: Any) -> Optional[str]:
    """Pulls the first candidate's first text part out of a Gemini response."""
    try:
        text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, KeyError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


def _dump_payload(response: Any) -> str:
    try:
        return json.dumps(response.to_dict())
    except (AttributeError, TypeError, ValueError):
        return str(response)


def _call_gemini(prompt: list, api_key: str, model_name: str, timeout: float) -> Any:
    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(model_name)
    generation_config = genai.types.GenerationConfig(temperature=0)
    try:
        return model.generate_content(
            prompt,
            generation_config=generation_config,
            request_options={'timeout': timeout, 'retry': None},
        )
    except (google_exceptions.TooManyRequests, google_exceptions.ResourceExhausted) as e:
        logger.error(f"Gemini rate limit hit: {e}")
        raise RateLimited() from e
    except google_exceptions.GoogleAPIError as e:
        logger.error(f"Gemini request failed: {e}")
        raise UpstreamError(details=str(e)) from e


def analyze_code(language: Any, code: Any, api_key: Optional[str],
                 model_name: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT) -> AnalysisResult:
    """
    Asks Gemini to find the most critical error in ``code`` and returns the
    normalized result.

    Raises a ``RelayError`` subclass for invalid input, missing configuration
    and every upstream failure class.
    """
    analysis_request = validate_request(language, code)
    if not api_key:
        raise ServerMisconfigured("GEMINI_API_KEY")

    prompt = build_prompt(analysis_request.language, analysis_request.code)
    response = _call_gemini(prompt, api_key, model_name or DEFAULT_MODEL, timeout)
    payload = _dump_payload(response)
    logger.info(f"Gemini raw response: {payload}")

    text = _extract_text(response)
    if text is None:
        logger.error(f"Gemini returned empty or invalid content: {payload}")
        raise UpstreamEmptyResponse(details=payload)

    logger.info(f"Gemini content: {text}")
    return normalize_result(parse_model_text(text))
