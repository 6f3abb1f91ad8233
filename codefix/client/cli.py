import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from codefix.client.controller import (
    LANGUAGES,
    DEFAULT_LANGUAGE,
    AnalysisSession,
    ErrorFound,
    FAILED_PHASES,
    RenderModel,
    SessionView,
)
from codefix.client.relay_client import DEFAULT_RELAY_URL, RelayClient
from codefix.client.speech import CommandSpeaker

logger = logging.getLogger(__name__)

EXIT_NO_ERROR = 0
EXIT_ERROR_FOUND = 1
EXIT_FAILED = 2


class TerminalView(SessionView):
    """Prints the result area to stdout and status messages to stderr."""

    def __init__(self, out=None, err=None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def render(self, model: RenderModel) -> None:
        print("=========================================================", file=self.out)
        print(f"[{model.icon}] {model.title}", file=self.out)
        print(f"   {model.message}", file=self.out)
        if model.details:
            print(f"   Details: {model.details}", file=self.out)

        if model.error_panel:
            print("---------------------------------------------------------", file=self.out)
            print(f"   TYPE:   {model.error_panel.type_text}", file=self.out)
            print(f"   REASON: {model.error_panel.reason_text}", file=self.out)
            print(f"   LINE:   {model.error_panel.line_text}", file=self.out)

        if model.corrected_code:
            print("---------------------------------------------------------", file=self.out)
            print("   CORRECTED CODE:", file=self.out)
            print(model.corrected_code, file=self.out)
        print("=========================================================", file=self.out)

    def show_status(self, text: str, duration: float) -> None:
        if text:
            print(f"-> {text}", file=self.err)

    def show_language(self, display_name: str) -> None:
        print(f"Language: {display_name}", file=self.err)

    def set_speaking(self, speaking: bool) -> None:
        if speaking:
            print("Speaking explanation... (Ctrl+C to stop)", file=self.err)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='codefix',
        description='Find the most critical error in a piece of code and get a corrected version.',
    )
    parser.add_argument('file', nargs='?', default='-',
                        help='Source file to analyze (default: read from stdin)')
    parser.add_argument('-l', '--language', choices=sorted(LANGUAGES), default=DEFAULT_LANGUAGE,
                        help='Language of the code (default: python)')
    parser.add_argument('--server', default=os.environ.get('CODEFIX_SERVER', DEFAULT_RELAY_URL),
                        help='Base URL of the analysis server')
    parser.add_argument('--timeout', type=float, default=60.0,
                        help='Seconds to wait for the server')
    parser.add_argument('--speak', action='store_true',
                        help='Read the detected error aloud')
    parser.add_argument('-o', '--output',
                        help='Write the corrected code to this file')
    return parser


def _read_code(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        code = _read_code(args.file)
    except OSError as e:
        print(f"Could not read {args.file}: {e}", file=sys.stderr)
        return EXIT_FAILED

    speaker = CommandSpeaker()
    session = AnalysisSession(
        relay=RelayClient(args.server, timeout=args.timeout),
        speaker=speaker,
        view=TerminalView(),
        language=args.language,
    )
    session.set_code(code)
    phase = session.analyze()

    if isinstance(phase, ErrorFound):
        if args.output:
            session.copy_corrected_code(args.output)
        if args.speak and session.speak_error():
            try:
                speaker.wait()
            except KeyboardInterrupt:
                session.stop_speaking()
        return EXIT_ERROR_FOUND

    if isinstance(phase, FAILED_PHASES) or not code.strip():
        return EXIT_FAILED
    return EXIT_NO_ERROR


if __name__ == '__main__':
    sys.exit(main())
