"""
Session controller for the code analyzer front end.

The result area is driven by one explicit phase value:

    Idle -> Analyzing -> {NoErrorFound, ErrorFound, <failure>} -> Idle (on reset)

Failures are RateLimitedFailure, RequestFailure, ConnectionFailure and
UnexpectedResponse. Speech playback is a separate Speaking/Silent flag.
Everything the front end shows is derived from the phase by ``render``.
"""
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from codefix.client.relay_client import RelayResponse
from codefix.errors import RelayConnectionError

logger = logging.getLogger(__name__)

LANGUAGES = {
    'python': 'Python',
    'javascript': 'JavaScript',
    'java': 'Java',
    'c': 'C',
}
DEFAULT_LANGUAGE = 'python'
STATUS_DURATION = 3.0

EMPTY_CODE_STATUS = "Please write or paste some code first."
ANALYZING_STATUS = "Analyzing your code..."
NO_ERROR_STATUS = "Analysis complete - no errors found!"
ERROR_FOUND_STATUS = "Analysis complete - errors found and fixes provided!"
COPY_FAILED_STATUS = "Failed to copy code"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Analyzing:
    pass


@dataclass(frozen=True)
class NoErrorFound:
    pass


@dataclass(frozen=True)
class ErrorFound:
    error_type: Optional[str] = None
    reason: Optional[str] = None
    line: Optional[Union[int, float]] = None
    corrected_code: Optional[str] = None


@dataclass(frozen=True)
class RateLimitedFailure:
    message: str
    details: str = ''


@dataclass(frozen=True)
class RequestFailure:
    message: str


@dataclass(frozen=True)
class ConnectionFailure:
    message: str


@dataclass(frozen=True)
class UnexpectedResponse:
    pass


Phase = Union[Idle, Analyzing, NoErrorFound, ErrorFound,
              RateLimitedFailure, RequestFailure, ConnectionFailure, UnexpectedResponse]
FAILED_PHASES = (RateLimitedFailure, RequestFailure, ConnectionFailure, UnexpectedResponse)


@dataclass(frozen=True)
class ErrorPanel:
    type_text: str
    reason_text: str
    line_text: str


@dataclass(frozen=True)
class RenderModel:
    """What the result area shows. Panels that are None are hidden."""
    title: str
    message: str
    icon: str
    details: Optional[str] = None
    error_panel: Optional[ErrorPanel] = None
    corrected_code: Optional[str] = None


def _format_line(line: Optional[Union[int, float]]) -> str:
    if line is None:
        return 'Unknown'
    if isinstance(line, float) and line.is_integer():
        line = int(line)
    return f"Line {line}"


def render(phase: Phase) -> RenderModel:
    if isinstance(phase, Analyzing):
        return RenderModel("Analyzing...", "Looking for errors in your code.", 'spinner')
    if isinstance(phase, NoErrorFound):
        return RenderModel("No Errors Found!", "Your code looks great! No errors were detected.", 'check')
    if isinstance(phase, ErrorFound):
        corrected = phase.corrected_code
        return RenderModel(
            "Errors Detected!",
            "We found issues in your code. See the details below.",
            'bug',
            error_panel=ErrorPanel(
                type_text=phase.error_type or 'UnknownError',
                reason_text=phase.reason or 'Unknown',
                line_text=_format_line(phase.line),
            ),
            corrected_code=corrected if corrected and corrected.strip() else None,
        )
    if isinstance(phase, RateLimitedFailure):
        return RenderModel("Rate Limit Exceeded", phase.message, 'clock', details=phase.details)
    if isinstance(phase, RequestFailure):
        return RenderModel("Analysis Failed", phase.message, 'exclamation-triangle')
    if isinstance(phase, ConnectionFailure):
        return RenderModel("Connection Error", phase.message, 'wifi')
    if isinstance(phase, UnexpectedResponse):
        return RenderModel("Unexpected Response", "Received an unexpected response from the server.",
                           'question-circle')
    return RenderModel(
        "Ready to Help!",
        "Write or paste your code, then click 'Analyze Code' to find errors and get helpful explanations.",
        'code',
    )


def narration(panel: ErrorPanel) -> str:
    text = f"Error detected. {panel.type_text}. {panel.reason_text}."
    if panel.line_text != 'Unknown':
        text += f" on {panel.line_text}"
    return text


def phase_from_response(response: RelayResponse) -> Phase:
    """Maps one relay response onto the phase it leads to."""
    body: Any = response.body
    if not response.ok:
        body = body if isinstance(body, dict) else {}
        message = str(body.get('error') or 'Request failed')
        if body.get('isRateLimit'):
            return RateLimitedFailure(message, str(body.get('details') or ''))
        return RequestFailure(message)

    if not isinstance(body, dict) or not isinstance(body.get('hasError'), bool):
        return UnexpectedResponse()
    if not body['hasError']:
        return NoErrorFound()

    error = body.get('error')
    if not isinstance(error, dict):
        error = {}
    corrected_code = body.get('correctedCode')
    line = error.get('line')
    return ErrorFound(
        error_type=error.get('type') if isinstance(error.get('type'), str) else None,
        reason=error.get('reason') if isinstance(error.get('reason'), str) else None,
        line=line if isinstance(line, (int, float)) and not isinstance(line, bool) else None,
        corrected_code=corrected_code if isinstance(corrected_code, str) else None,
    )


class SessionView:
    """Display surface the session drives. The base implementation shows nothing."""

    def render(self, model: RenderModel) -> None:
        pass

    def show_status(self, text: str, duration: float) -> None:
        pass

    def show_language(self, display_name: str) -> None:
        pass

    def set_analyze_enabled(self, enabled: bool) -> None:
        pass

    def set_speaking(self, speaking: bool) -> None:
        pass


class AnalysisSession:
    """
    State of one front end: selected language, code text, current phase and
    speech flag. One instance per page (or terminal run).

    ``relay`` needs ``analyze(language, code) -> RelayResponse``; ``speaker``
    needs ``speak(text, on_end)`` and ``cancel()``.
    """

    def __init__(self, relay, speaker, view: Optional[SessionView] = None,
                 language: str = DEFAULT_LANGUAGE, status_duration: float = STATUS_DURATION):
        self.relay = relay
        self.speaker = speaker
        self.view = view or SessionView()
        self.status_duration = status_duration
        self.selected_language = DEFAULT_LANGUAGE
        self.code = ''
        self.phase: Phase = Idle()
        self._status = ''
        self._status_expires_at: Optional[float] = None
        self.is_speaking = False
        self._speech_id = 0
        self.analyze_enabled = True

        self.select_language(language)
        self.view.render(render(self.phase))

    @property
    def displayed(self) -> RenderModel:
        return render(self.phase)

    @property
    def corrected_code(self) -> Optional[str]:
        return self.displayed.corrected_code

    def select_language(self, language: str) -> None:
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language '{language}'. Choose one of: {', '.join(LANGUAGES)}")
        self.selected_language = language
        self.view.show_language(LANGUAGES[language])

    def set_code(self, code: str) -> None:
        self.code = code

    @property
    def status(self) -> str:
        """The transient status message, empty once its display duration has passed."""
        if self._status_expires_at is not None and time.monotonic() >= self._status_expires_at:
            return ''
        return self._status

    def set_status(self, text: str, duration: Optional[float] = None) -> None:
        duration = self.status_duration if duration is None else duration
        self._status = text
        self._status_expires_at = time.monotonic() + duration if text else None
        self.view.show_status(text, duration)

    def _transition(self, phase: Phase) -> None:
        logger.debug(f"{type(self.phase).__name__} -> {type(phase).__name__}")
        self.phase = phase
        self.view.render(render(phase))

    def _set_analyze_enabled(self, enabled: bool) -> None:
        self.analyze_enabled = enabled
        self.view.set_analyze_enabled(enabled)

    def analyze(self) -> Phase:
        """Sends the current code to the relay and moves to the resulting phase."""
        if isinstance(self.phase, Analyzing):
            return self.phase

        code = self.code.strip()
        if not code:
            self.set_status(EMPTY_CODE_STATUS)
            return self.phase

        self._set_analyze_enabled(False)
        self.set_status(ANALYZING_STATUS)
        self._transition(Analyzing())
        try:
            response = self.relay.analyze(self.selected_language, code)
            self._transition(phase_from_response(response))
            if isinstance(self.phase, NoErrorFound):
                self.set_status(NO_ERROR_STATUS)
            elif isinstance(self.phase, ErrorFound):
                self.set_status(ERROR_FOUND_STATUS)
        except RelayConnectionError as e:
            self._transition(ConnectionFailure(str(e)))
            self.stop_speaking()
        finally:
            if isinstance(self.phase, Analyzing):
                self._transition(Idle())
            self._set_analyze_enabled(True)
        return self.phase

    def reset(self) -> None:
        self.code = ''
        self._transition(Idle())
        self.set_status('')
        self.stop_speaking()

    def toggle_speech(self) -> None:
        if self.is_speaking:
            self.stop_speaking()
        else:
            self.speak_error()

    def speak_error(self) -> bool:
        """Reads the displayed error aloud. Returns False when no error is displayed."""
        panel = self.displayed.error_panel
        if panel is None:
            return False

        self._speech_id += 1
        speech_id = self._speech_id
        self.is_speaking = True
        self.view.set_speaking(True)
        self.speaker.speak(narration(panel), on_end=lambda: self._on_speech_end(speech_id))
        return True

    def _on_speech_end(self, speech_id: int) -> None:
        # End of an earlier playback must not silence the current one.
        if speech_id != self._speech_id:
            return
        self._set_silent()

    def _set_silent(self) -> None:
        self.is_speaking = False
        self.view.set_speaking(False)

    def stop_speaking(self) -> None:
        self._speech_id += 1
        self.speaker.cancel()
        self._set_silent()

    def copy_corrected_code(self, destination: Union[str, Path]) -> bool:
        """Writes the displayed corrected code to ``destination``."""
        text = self.corrected_code
        if not text:
            return False

        path = Path(destination)
        try:
            path.write_text(text, encoding='utf-8')
        except OSError as e:
            logger.error(f"Could not write corrected code to {path}: {e}")
            self.set_status(COPY_FAILED_STATUS)
            return False

        self.set_status(f"Code copied to {path}!")
        return True
