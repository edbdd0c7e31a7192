"""
Tests for the Cloudinary client wrapper in core.media.

The Cloudinary SDK itself is patched; these tests check the options sent
and how SDK failures are translated.
"""

from unittest.mock import patch

import cloudinary.exceptions
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings

from core import media
from core.exceptions import MediaServiceError


@override_settings(
    CLOUDINARY_CLOUD_NAME='demo',
    CLOUDINARY_API_KEY='key',
    CLOUDINARY_API_SECRET='secret',
    CLOUDINARY_FOLDER='homie/properties',
)
class MediaClientTests(SimpleTestCase):

    def setUp(self):
        self.image = SimpleUploadedFile('front.jpg', b'jpeg-bytes', content_type='image/jpeg')

    @patch('core.media.cloudinary.uploader.upload')
    def test_upload_sends_folder_and_transformation(self, mock_upload):
        mock_upload.return_value = {
            'secure_url': 'https://res.cloudinary.com/demo/image/upload/homie/properties/abc.webp',
            'public_id': 'homie/properties/abc',
        }

        result = media.upload_image(self.image)

        self.assertEqual(result, {
            'url': 'https://res.cloudinary.com/demo/image/upload/homie/properties/abc.webp',
            'public_id': 'homie/properties/abc',
        })
        kwargs = mock_upload.call_args.kwargs
        self.assertEqual(kwargs['folder'], 'homie/properties')
        self.assertEqual(kwargs['format'], 'webp')
        self.assertEqual(kwargs['transformation'][0]['width'], 1200)
        self.assertEqual(kwargs['transformation'][0]['height'], 800)
        self.assertEqual(kwargs['transformation'][0]['crop'], 'fill')

    @patch('core.media.cloudinary.uploader.upload')
    def test_upload_error_becomes_media_service_error(self, mock_upload):
        mock_upload.side_effect = cloudinary.exceptions.Error('quota exceeded')

        with self.assertRaises(MediaServiceError):
            media.upload_image(self.image)

    @patch('core.media.cloudinary.uploader.destroy')
    def test_destroy_reports_success(self, mock_destroy):
        mock_destroy.return_value = {'result': 'ok'}

        self.assertTrue(media.destroy_image('homie/properties/abc'))
        mock_destroy.assert_called_once_with(
            'homie/properties/abc',
            resource_type='image',
            invalidate=True,
        )

    @patch('core.media.cloudinary.uploader.destroy')
    def test_destroy_not_found_is_logged_not_raised(self, mock_destroy):
        mock_destroy.return_value = {'result': 'not found'}

        with self.assertLogs('core.media', level='WARNING'):
            self.assertFalse(media.destroy_image('homie/properties/missing'))

    @patch('core.media.cloudinary.uploader.destroy')
    def test_destroy_error_is_logged_not_raised(self, mock_destroy):
        mock_destroy.side_effect = cloudinary.exceptions.Error('timeout')

        with self.assertLogs('core.media', level='ERROR'):
            self.assertFalse(media.destroy_image('homie/properties/abc'))

    @patch('core.media.destroy_image', return_value=True)
    @patch('core.media.upload_image')
    def test_upload_images_rolls_back_on_failure(self, mock_upload, mock_destroy):
        mock_upload.side_effect = [
            {'url': 'https://res.cloudinary.com/demo/1.webp', 'public_id': 'one'},
            {'url': 'https://res.cloudinary.com/demo/2.webp', 'public_id': 'two'},
            MediaServiceError(),
        ]

        with self.assertRaises(MediaServiceError):
            media.upload_images([self.image, self.image, self.image])

        self.assertEqual([c.args[0] for c in mock_destroy.call_args_list], ['one', 'two'])

    @patch('core.media.destroy_image', return_value=True)
    @patch('core.media.upload_image')
    def test_upload_images_rolls_back_on_unexpected_error(self, mock_upload, mock_destroy):
        mock_upload.side_effect = [
            {'url': 'https://res.cloudinary.com/demo/1.webp', 'public_id': 'one'},
            OSError('file closed while reading'),
        ]

        with self.assertRaises(OSError):
            media.upload_images([self.image, self.image])

        mock_destroy.assert_called_once_with('one')
