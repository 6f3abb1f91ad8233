"""
Tests for the command-line speech synthesizer wrapper.
"""
import sys
import threading

from codefix.client.speech import CommandSpeaker


class TestCommandSpeaker:

    def test_without_synthesizer_ends_immediately(self):
        speaker = CommandSpeaker()
        speaker.command = None
        ended = []
        speaker.speak('Error detected.', on_end=lambda: ended.append(True))
        assert speaker.available is False
        assert ended == [True]

    def test_playback_end_is_reported(self):
        speaker = CommandSpeaker([sys.executable, '-c', 'import sys; sys.exit(0)'])
        done = threading.Event()
        speaker.speak('Error detected.', on_end=done.set)
        assert done.wait(timeout=10)

    def test_text_is_passed_as_last_argument(self, tmp_path):
        target = tmp_path / 'spoken.txt'
        script = f"import sys; open({str(target)!r}, 'w').write(sys.argv[-1])"
        speaker = CommandSpeaker([sys.executable, '-c', script])
        done = threading.Event()
        speaker.speak('Error detected. SyntaxError.', on_end=done.set)
        assert done.wait(timeout=10)
        assert target.read_text() == 'Error detected. SyntaxError.'

    def test_cancel_stops_playback_without_end_callback(self):
        speaker = CommandSpeaker([sys.executable, '-c', 'import time; time.sleep(30)'])
        ended = threading.Event()
        speaker.speak('Error detected.', on_end=ended.set)
        process = speaker._process

        speaker.cancel()

        assert process.wait(timeout=10) is not None
        assert not ended.wait(timeout=0.5)

    def test_cancel_when_idle_is_harmless(self):
        speaker = CommandSpeaker([sys.executable, '-c', 'pass'])
        speaker.cancel()
        speaker.wait()

    def test_new_playback_waits_for_pending_end_callback(self):
        speaker = CommandSpeaker([sys.executable, '-c', 'pass'])
        events = []
        in_callback = threading.Event()
        release = threading.Event()

        def first_end():
            in_callback.set()
            release.wait(timeout=10)
            events.append('first ended')

        def start_second():
            speaker.speak('second', on_end=lambda: None)
            events.append('second started')

        speaker.speak('first', on_end=first_end)
        assert in_callback.wait(timeout=10)

        starter = threading.Thread(target=start_second)
        starter.start()
        starter.join(timeout=0.5)
        assert events == []

        release.set()
        starter.join(timeout=10)
        assert events == ['first ended', 'second started']

    def test_superseded_playback_does_not_report_end(self):
        speaker = CommandSpeaker([sys.executable, '-c', 'import time; time.sleep(30)'])
        first_ended = threading.Event()
        speaker.speak('first', on_end=first_ended.set)
        first = speaker._process

        speaker.speak('second', on_end=lambda: None)

        assert first.wait(timeout=10) is not None
        assert not first_ended.wait(timeout=0.5)
        speaker.cancel()
