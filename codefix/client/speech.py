import logging
import shutil
import subprocess
import threading
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Tried in order; the first one found on PATH is used. English voice where the tool supports it.
SPEECH_COMMANDS = [
    ["espeak-ng", "-v", "en"],
    ["espeak", "-v", "en"],
    ["spd-say", "--wait", "-l", "en"],
    ["say"],
]


class CommandSpeaker:
    """
    Reads text aloud through a command-line speech synthesizer.

    Playback runs in a child process; a daemon thread waits for it and calls
    ``on_end`` once it finishes on its own. A cancelled or superseded playback never calls
    ``on_end``.
    """

    def __init__(self, command: Optional[Sequence[str]] = None):
        self.command = list(command) if command else self._find_command()
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.RLock()

    @staticmethod
    def _find_command() -> Optional[List[str]]:
        for candidate in SPEECH_COMMANDS:
            if shutil.which(candidate[0]):
                return list(candidate)
        return None

    @property
    def available(self) -> bool:
        return self.command is not None

    def speak(self, text: str, on_end: Callable[[], None]) -> None:
        self.cancel()
        if not self.command:
            logger.warning("No speech synthesizer found on PATH (tried espeak-ng, espeak, spd-say, say).")
            on_end()
            return

        try:
            process = subprocess.Popen(
                self.command + [text],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.error(f"Could not start speech synthesizer {self.command[0]}: {e}")
            on_end()
            return

        with self._lock:
            self._process = process
        threading.Thread(target=self._watch, args=(process, on_end), daemon=True).start()

    def _watch(self, process: subprocess.Popen, on_end: Callable[[], None]) -> None:
        process.wait()
        # The callback runs under the lock so a new speak() cannot slip in before it.
        with self._lock:
            if self._process is not process:
                return
            self._process = None
            on_end()

    def cancel(self) -> None:
        with self._lock:
            process, self._process = self._process, None
        if process is not None and process.poll() is None:
            process.terminate()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Blocks until the current playback has finished."""
        with self._lock:
            process = self._process
        if process is not None:
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                self.cancel()
