"""
Test suite for listing updates and deletion.

Images are released from the media service only after the database change
commits, so these tests wrap requests in ``captureOnCommitCallbacks``.

Test Coverage:
- Partial updates via PUT and PATCH
- Nested price updates and listing type switches
- Image replacement (new uploaded, old released exactly once)
- Ownership and role checks
- Deletion releases every stored image
"""

import json
from decimal import Decimal
from io import BytesIO
from unittest.mock import call, patch

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.exceptions import MediaServiceError
from core.models import Property, PropertyImage

User = get_user_model()


# ============================================================================
# Helper Functions
# ============================================================================

def create_test_user(email, role='tenant', **kwargs):
    """Create a test user with given parameters."""
    kwargs.setdefault('name', email.split('@')[0].title())
    return User.objects.create_user(
        email=email,
        password='SecurePass123!',
        role=role,
        **kwargs
    )


def get_jwt_token(user):
    """Generate JWT token for a user."""
    refresh = RefreshToken.for_user(user)
    return str(refresh.access_token)


def create_test_image(filename='test.jpg', size=(100, 100), format='JPEG'):
    """Create a test image file."""
    file = BytesIO()
    image = Image.new('RGB', size, color='blue')
    image.save(file, format)
    file.seek(0)
    return SimpleUploadedFile(
        filename,
        file.read(),
        content_type=f'image/{format.lower()}'
    )


def create_test_property(landlord, image_ids=('old-1', 'old-2'), **kwargs):
    """Create a listing with stored images, bypassing the media service."""
    defaults = {
        'title': 'Original Title',
        'description': 'Original description.',
        'listing_type': 'rent',
        'price_amount': Decimal('1200.00'),
        'price_frequency': 'monthly',
        'address': '1 Main Street',
        'city': 'Austin',
        'state': 'TX',
        'zip_code': '73301',
        'bedrooms': 2,
        'bathrooms': 1,
        'square_feet': 900,
        'property_type': 'apartment',
        'year_built': 2000,
    }
    defaults.update(kwargs)
    prop = Property.objects.create(landlord=landlord, **defaults)
    for order, public_id in enumerate(image_ids):
        PropertyImage.objects.create(
            property=prop,
            url=f'https://res.cloudinary.com/demo/{public_id}.webp',
            public_id=public_id,
            order=order,
        )
    return prop


# ============================================================================
# Listing Update Tests
# ============================================================================

class PropertyUpdateTests(TestCase):
    """Test suite for PUT/PATCH /api/properties/<id>/."""

    def setUp(self):
        self.client = APIClient()
        self.landlord = create_test_user('owner@test.com', role='landlord')
        self.other_landlord = create_test_user('other@test.com', role='landlord')
        self.tenant = create_test_user('tenant@test.com', role='tenant')
        self.prop = create_test_property(self.landlord)
        self.url = f'/api/properties/{self.prop.id}/'
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.landlord)}')

        upload_patcher = patch('core.media.upload_image')
        destroy_patcher = patch('core.media.destroy_image', return_value=True)
        self.mock_upload = upload_patcher.start()
        self.mock_destroy = destroy_patcher.start()
        self.addCleanup(upload_patcher.stop)
        self.addCleanup(destroy_patcher.stop)

    def test_patch_updates_only_given_fields(self):
        response = self.client.patch(self.url, {'title': 'Renovated Flat'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Renovated Flat')
        self.assertEqual(response.data['description'], 'Original description.')
        self.assertEqual(len(response.data['images']), 2)
        self.mock_upload.assert_not_called()
        self.mock_destroy.assert_not_called()

    def test_put_is_partial(self):
        response = self.client.put(self.url, {'description': 'Fresh paint.'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.description, 'Fresh paint.')
        self.assertEqual(self.prop.title, 'Original Title')

    def test_nested_price_update_keeps_frequency(self):
        response = self.client.patch(self.url, {'price': {'amount': 1350}})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.price_amount, Decimal('1350.00'))
        self.assertEqual(self.prop.price_frequency, 'monthly')

    def test_switch_to_sale_clears_frequency(self):
        response = self.client.patch(self.url, {
            'listingType': 'sale',
            'price': {'amount': 200000},
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['price']['frequency'])

    def test_switch_sale_to_rent_requires_frequency(self):
        sale = create_test_property(
            self.landlord,
            image_ids=('sale-1',),
            listing_type='sale',
            price_amount=Decimal('250000.00'),
        )
        response = self.client.patch(f'/api/properties/{sale.id}/', {'listingType': 'rent'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('frequency', response.data['errors']['price'])

    def test_amenities_replaced(self):
        response = self.client.patch(self.url, {'amenities': ['Balcony']})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amenities'], ['balcony'])

    def test_status_is_read_only(self):
        response = self.client.patch(self.url, {'status': 'sold'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.status, 'available')

    def test_new_images_replace_old_and_release_them_after_commit(self):
        self.mock_upload.side_effect = [
            {'url': 'https://res.cloudinary.com/demo/new-1.webp', 'public_id': 'new-1'},
        ]

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self.client.patch(
                self.url,
                {'images': [create_test_image('new.jpg')], 'title': 'With New Photos'},
                format='multipart'
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(callbacks), 1)
        self.assertEqual([image['publicId'] for image in response.data['images']], ['new-1'])
        self.assertEqual(self.mock_destroy.call_args_list, [call('old-1'), call('old-2')])
        self.assertEqual(
            list(PropertyImage.objects.filter(property=self.prop).values_list('public_id', flat=True)),
            ['new-1']
        )

    def test_failed_replacement_upload_keeps_existing_images(self):
        self.mock_upload.side_effect = MediaServiceError()

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                self.url,
                {'images': [create_test_image('new.jpg')]},
                format='multipart'
            )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(self.prop.images.count(), 2)
        self.mock_destroy.assert_not_called()

    def test_other_landlord_cannot_update(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.other_landlord)}')
        response = self.client.patch(self.url, {'title': 'Hijacked'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'message': 'Not authorized to update this property'})
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.title, 'Original Title')

    def test_ownership_checked_before_validation(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.other_landlord)}')
        response = self.client.patch(self.url, {'listingType': 'nonsense'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_tenant_cannot_update(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.tenant)}')
        response = self.client.patch(self.url, {'title': 'Nope'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_missing_property_returns_404(self):
        response = self.client.patch('/api/properties/999999/', {'title': 'Ghost'})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Property not found')

    def test_invalid_update_rejected(self):
        response = self.client.patch(self.url, {'features': json.dumps({'bedrooms': -3})})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('features', response.data['errors'])


# ============================================================================
# Listing Deletion Tests
# ============================================================================

class PropertyDeletionTests(TestCase):
    """Test suite for DELETE /api/properties/<id>/."""

    def setUp(self):
        self.client = APIClient()
        self.landlord = create_test_user('owner@test.com', role='landlord')
        self.other_landlord = create_test_user('other@test.com', role='landlord')
        self.prop = create_test_property(self.landlord)
        self.url = f'/api/properties/{self.prop.id}/'
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.landlord)}')

        destroy_patcher = patch('core.media.destroy_image', return_value=True)
        self.mock_destroy = destroy_patcher.start()
        self.addCleanup(destroy_patcher.stop)

    def test_delete_removes_listing_and_releases_images_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'message': 'Property deleted successfully'})
        self.assertFalse(Property.objects.filter(pk=self.prop.pk).exists())
        self.assertFalse(PropertyImage.objects.exists())
        self.assertEqual(self.mock_destroy.call_args_list, [call('old-1'), call('old-2')])

    def test_images_not_released_before_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.client.delete(self.url)

        self.assertEqual(len(callbacks), 1)
        self.mock_destroy.assert_not_called()

    def test_media_failure_does_not_undo_deletion(self):
        self.mock_destroy.return_value = False

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Property.objects.filter(pk=self.prop.pk).exists())

    def test_other_landlord_cannot_delete(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {get_jwt_token(self.other_landlord)}')

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'message': 'Not authorized to delete this property'})
        self.assertTrue(Property.objects.filter(pk=self.prop.pk).exists())
        self.mock_destroy.assert_not_called()

    def test_delete_missing_property_returns_404(self):
        response = self.client.delete('/api/properties/999999/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_cascades_to_applications_and_saves(self):
        tenant = create_test_user('tenant@test.com')
        tenant.saved_properties.add(self.prop)
        self.prop.applications.create(tenant=tenant)

        with self.captureOnCommitCallbacks(execute=True):
            self.client.delete(self.url)

        self.assertEqual(tenant.saved_properties.count(), 0)
        self.assertEqual(tenant.applications.count(), 0)
