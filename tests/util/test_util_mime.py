import unittest

from drivevault.util.mime import (
    DEFAULT_UPLOAD_MIME,
    FOLDER_MIME,
    is_folder,
    upload_mime_type,
)


class TestUtilMime(unittest.TestCase):
    def test_is_folder(self) -> None:
        self.assertTrue(is_folder(FOLDER_MIME))
        self.assertFalse(is_folder("text/plain"))

    def test_upload_mime_type_prefers_declared(self) -> None:
        self.assertEqual(upload_mime_type("a.bin", "image/png"), "image/png")

    def test_upload_mime_type_guesses_from_extension(self) -> None:
        self.assertEqual(upload_mime_type("report.pdf"), "application/pdf")
        self.assertEqual(upload_mime_type("notes.txt", DEFAULT_UPLOAD_MIME), "text/plain")

    def test_upload_mime_type_falls_back_to_octet_stream(self) -> None:
        self.assertEqual(upload_mime_type("no-extension"), DEFAULT_UPLOAD_MIME)


if __name__ == "__main__":
    unittest.main()
