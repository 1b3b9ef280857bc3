import unittest

from pdf_compress_api.core.exceptions import (
    CompressionFailedError,
    EncryptionError,
    EngineUnavailableError,
    InvalidUploadError,
    PDFCompressionError,
    ProcessingTimeoutError,
    RateLimitError,
    UnsupportedImageError,
)


class TestCompressionErrors(unittest.TestCase):
    def test_status_codes_and_types(self):
        cases = [
            (EncryptionError.for_file("a.pdf"), 422, "EncryptionError"),
            (UnsupportedImageError.for_file("a.pdf"), 422, "UnsupportedImageError"),
            (EngineUnavailableError.for_command("gs"), 503, "EngineUnavailableError"),
            (ProcessingTimeoutError.for_file("a.pdf", 120), 504, "ProcessingTimeoutError"),
            (CompressionFailedError.for_file("a.pdf"), 500, "CompressionFailedError"),
            (InvalidUploadError.missing_file(), 400, "InvalidUploadError"),
            (RateLimitError.for_window(5, 600, 30), 429, "RateLimitError"),
        ]
        for error, status, error_type in cases:
            with self.subTest(error_type=error_type):
                self.assertIsInstance(error, PDFCompressionError)
                self.assertEqual(error.status_code, status)
                self.assertEqual(error.error_type, error_type)
                self.assertEqual(str(error), error.message)

    def test_detail_is_carried_separately_from_message(self):
        error = CompressionFailedError.for_file("scan.pdf", detail="Ghostscript exit code 1: /undefined")
        self.assertNotIn("/undefined", error.message)
        self.assertEqual(error.detail, "Ghostscript exit code 1: /undefined")
        self.assertIsNone(EncryptionError.for_file("scan.pdf").detail)

    def test_messages_are_actionable(self):
        self.assertIn("password", EncryptionError.for_file("x.pdf").message)
        self.assertIn('"recommended"', UnsupportedImageError.for_file("x.pdf").message)
        self.assertIn("120 seconds", ProcessingTimeoutError.for_file("x.pdf", 120).message)
        self.assertIn("10 minutes", RateLimitError.for_window(5, 600, 30).message)
        self.assertEqual(RateLimitError.for_window(5, 600, 30).retry_after, 30)
