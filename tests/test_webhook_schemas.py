import unittest

from pydantic import ValidationError

from call_assistant.models.webhook_schemas import (
    CallStartEvent,
    CallStatusEvent,
    SpeechResultEvent,
)


class TestCallStartEvent(unittest.TestCase):

    def test_valid_event(self):
        event = CallStartEvent(
            CallSid="CA123", From="+15550001111", To="+15552223333", AccountSid="AC1"
        )

        self.assertEqual(event.call_id, "CA123")
        self.assertEqual(event.from_number, "+15550001111")
        self.assertEqual(event.to_number, "+15552223333")

    def test_missing_call_sid(self):
        with self.assertRaises(ValidationError):
            CallStartEvent(From="+15550001111")

    def test_blank_call_sid(self):
        with self.assertRaises(ValidationError):
            CallStartEvent(CallSid="   ")

    def test_populate_by_name(self):
        event = CallStartEvent(call_id="CA123")
        self.assertEqual(event.call_id, "CA123")
        self.assertIsNone(event.from_number)


class TestSpeechResultEvent(unittest.TestCase):

    def test_valid_event(self):
        event = SpeechResultEvent(
            CallSid="CA123", SpeechResult="Hello, how are you today?", Confidence="0.91"
        )

        self.assertEqual(event.utterance, "Hello, how are you today?")
        self.assertEqual(event.confidence, "0.91")

    def test_missing_speech_result(self):
        event = SpeechResultEvent(CallSid="CA123")

        self.assertIsNone(event.utterance)
        self.assertIsNone(event.confidence)

    def test_confidence_is_passed_through_unparsed(self):
        event = SpeechResultEvent(CallSid="CA123", Confidence="high")
        self.assertEqual(event.confidence, "high")


class TestCallStatusEvent(unittest.TestCase):

    def test_terminal_statuses(self):
        for status in ["completed", "failed", "busy", "no-answer", "canceled"]:
            event = CallStatusEvent(CallSid="CA123", CallStatus=status)
            self.assertTrue(event.is_terminal, status)

    def test_non_terminal_statuses(self):
        for status in ["ringing", "in-progress", "queued"]:
            event = CallStatusEvent(CallSid="CA123", CallStatus=status)
            self.assertFalse(event.is_terminal, status)

    def test_status_is_normalized(self):
        event = CallStatusEvent(CallSid="CA123", CallStatus=" Completed ")
        self.assertEqual(event.status, "completed")
        self.assertTrue(event.is_terminal)

    def test_unknown_status_is_accepted(self):
        with self.assertLogs("call_assistant", level="WARNING"):
            event = CallStatusEvent(CallSid="CA123", CallStatus="teleported")
        self.assertFalse(event.is_terminal)

    def test_duration(self):
        event = CallStatusEvent(CallSid="CA123", CallStatus="completed", CallDuration="42")
        self.assertEqual(event.duration_seconds, 42)

        event = CallStatusEvent(CallSid="CA123", CallStatus="completed", CallDuration="")
        self.assertIsNone(event.duration_seconds)

    def test_missing_status(self):
        with self.assertRaises(ValidationError):
            CallStatusEvent(CallSid="CA123")


if __name__ == "__main__":
    unittest.main()
