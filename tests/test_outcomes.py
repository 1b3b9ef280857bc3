import tempfile
import unittest
from pathlib import Path

from pdf_compress_api.engine.ghostscript import EngineResult
from pdf_compress_api.engine.outcomes import (
    REASON_PASSWORD_PROTECTED,
    REASON_UNSUPPORTED_IMAGES,
    EngineUnavailable,
    RecoverableContentError,
    Success,
    TimedOut,
    UnknownFailure,
    classify,
)


class TestClassify(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name)
        self.input_path = base / "input.pdf"
        self.output_path = base / "output.pdf"
        self.input_path.write_bytes(b"x" * 100)

    def tearDown(self):
        self._tmp.cleanup()

    def _classify(self, **kwargs):
        kwargs.setdefault("exit_succeeded", False)
        return classify(EngineResult(**kwargs), self.input_path, self.output_path)

    def test_start_failure_is_engine_unavailable(self):
        outcome = self._classify(process_start_failed=True, stderr="password")
        self.assertIsInstance(outcome, EngineUnavailable)

    def test_password_marker_wins_even_on_exit_zero(self):
        self.output_path.write_bytes(b"blank")
        outcome = self._classify(
            exit_succeeded=True,
            stderr="**** Warning: something odd\n   This file requires a PASSWORD for access.",
        )
        self.assertIsInstance(outcome, RecoverableContentError)
        self.assertEqual(outcome.reason, REASON_PASSWORD_PROTECTED)

    def test_password_marker_wins_on_failure_exit(self):
        outcome = self._classify(stderr="Error: file is encrypted", return_code=1)
        self.assertIsInstance(outcome, RecoverableContentError)
        self.assertEqual(outcome.reason, REASON_PASSWORD_PROTECTED)

    def test_downsample_failure_is_reported_instead_of_timeout(self):
        outcome = self._classify(timed_out=True, stderr="Failed to initialise downsample filter")
        self.assertIsInstance(outcome, RecoverableContentError)
        self.assertEqual(outcome.reason, REASON_UNSUPPORTED_IMAGES)

    def test_timeout(self):
        self.assertIsInstance(self._classify(timed_out=True), TimedOut)

    def test_failed_exit_is_unknown_failure_with_detail(self):
        outcome = self._classify(return_code=1, stderr="Error: /undefined in --run--")
        self.assertIsInstance(outcome, UnknownFailure)
        self.assertIn("/undefined", outcome.detail)
        self.assertIn("exit code 1", outcome.detail)

    def test_success_requires_output_file(self):
        outcome = self._classify(exit_succeeded=True, return_code=0)
        self.assertIsInstance(outcome, UnknownFailure)
        self.assertIn("not created", outcome.detail)

    def test_empty_output_is_not_success(self):
        self.output_path.write_bytes(b"")
        outcome = self._classify(exit_succeeded=True, return_code=0)
        self.assertIsInstance(outcome, UnknownFailure)

    def test_success_reports_sizes(self):
        self.output_path.write_bytes(b"y" * 40)
        outcome = self._classify(exit_succeeded=True, return_code=0, stderr="   **** Warning: font substituted")
        self.assertEqual(outcome, Success(output_path=self.output_path, original_size=100, compressed_size=40))
