import io
import os

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings
from PIL import Image

from kafala.files import (
    compress_image,
    prepare_photo,
    private_storage,
    signed_file_url,
    validate_upload,
)


def noisy_png(size=(1600, 1600)) -> bytes:
    img = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class UploadValidationTests(SimpleTestCase):
    def test_rejects_unsupported_type(self):
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        with self.assertRaises(ValidationError):
            validate_upload(upload)

    def test_rejects_oversized_file(self):
        upload = SimpleUploadedFile("scan.pdf", b"x" * 2048, content_type="application/pdf")
        with self.assertRaises(ValidationError):
            validate_upload(upload, max_bytes=1024)

    def test_accepts_pdf(self):
        upload = SimpleUploadedFile("scan.pdf", b"%PDF-1.4", content_type="application/pdf")
        self.assertIs(validate_upload(upload), upload)


class CompressImageTests(SimpleTestCase):
    def test_large_image_is_downscaled_to_jpeg(self):
        upload = SimpleUploadedFile("kid.png", noisy_png(), content_type="image/png")
        result = compress_image(upload)
        self.assertEqual(result.name, "kid.jpg")
        img = Image.open(io.BytesIO(result.read()))
        self.assertEqual(img.format, "JPEG")
        self.assertLessEqual(max(img.size), 1200)

    def test_small_photo_passes_through(self):
        buf = io.BytesIO()
        Image.new("RGB", (50, 50), "red").save(buf, format="PNG")
        upload = SimpleUploadedFile("small.png", buf.getvalue(), content_type="image/png")
        self.assertIs(prepare_photo(upload), upload)

    @override_settings(UPLOAD_MAX_BYTES=1024)
    def test_photo_over_limit_is_compressed(self):
        upload = SimpleUploadedFile("big.png", noisy_png((300, 300)), content_type="image/png")
        result = prepare_photo(upload)
        self.assertIsInstance(result, ContentFile)
        self.assertTrue(result.name.endswith(".jpg"))

    def test_unreadable_image_is_validation_error(self):
        upload = SimpleUploadedFile("broken.png", b"not an image", content_type="image/png")
        with self.assertRaises(ValidationError):
            compress_image(upload)

    def test_photo_rejects_pdf(self):
        upload = SimpleUploadedFile("doc.pdf", b"%PDF", content_type="application/pdf")
        with self.assertRaises(ValidationError):
            prepare_photo(upload)


class PrivateFileViewTests(TestCase):
    def setUp(self):
        self.cash_name = private_storage.save("cash-receipts/test/receipt.pdf", ContentFile(b"%PDF-cash"))
        self.transfer_name = private_storage.save("transfer-receipts/test/transfer.pdf", ContentFile(b"%PDF-transfer"))

    def tearDown(self):
        private_storage.delete(self.cash_name)
        private_storage.delete(self.transfer_name)

    def test_cash_receipt_served_to_anyone_with_link(self):
        resp = self.client.get(signed_file_url(self.cash_name))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(b"".join(resp.streaming_content), b"%PDF-cash")

    def test_other_private_files_require_sign_in(self):
        url = signed_file_url(self.transfer_name)
        self.assertEqual(self.client.get(url).status_code, 404)

        self.client.force_login(User.objects.create_user("viewer", "v@example.com", "pw"))
        self.assertEqual(self.client.get(url).status_code, 200)

    def test_tampered_token_is_404(self):
        url = signed_file_url(self.cash_name)
        self.assertEqual(self.client.get(url[:-3] + "xx/").status_code, 404)
