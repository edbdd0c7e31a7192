"""
Test suite for public listing browsing.

Test Coverage:
- List endpoint is public and returns newest listings first
- Every filter (location, type, price range, frequency, rooms, property
  type, furnished, status, amenities)
- Invalid filter values
- Detail endpoint, including 404 handling
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.models import Amenity, Property, PropertyImage

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


def create_test_property(landlord, amenities=(), **kwargs):
    """Create a listing directly, bypassing the media service."""
    defaults = {
        'title': 'Test Property',
        'description': 'A test listing.',
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
    PropertyImage.objects.create(
        property=prop,
        url=f'https://res.cloudinary.com/demo/p{prop.id}.webp',
        public_id=f'homie/properties/p{prop.id}',
    )
    if amenities:
        prop.amenities.set([Amenity.objects.get_or_create(name=name)[0] for name in amenities])
    return prop


# ============================================================================
# Listing Browse Tests
# ============================================================================

class PropertyBrowsingTests(TestCase):
    """Test suite for GET /api/properties/."""

    def setUp(self):
        self.client = APIClient()
        self.url = '/api/properties/'
        self.landlord = create_test_user('landlord@test.com', role='landlord')

        self.austin_flat = create_test_property(
            self.landlord,
            title='Austin Flat',
            amenities=['pool', 'gym'],
            furnished=True,
        )
        self.dallas_house = create_test_property(
            self.landlord,
            title='Dallas House',
            city='Dallas',
            price_amount=Decimal('2500.00'),
            bedrooms=4,
            bathrooms=3,
            property_type='house',
            amenities=['pool'],
        )
        self.houston_sale = create_test_property(
            self.landlord,
            title='Houston Condo',
            city='Houston',
            listing_type='sale',
            price_amount=Decimal('300000.00'),
            property_type='condo',
        )
        self.yearly_rental = create_test_property(
            self.landlord,
            title='Yearly Loft',
            address='99 Congress Avenue',
            city='Austin',
            price_amount=Decimal('15000.00'),
            price_frequency='yearly',
            status='rented',
        )

    def titles(self, response):
        return [item['title'] for item in response.data]

    def test_list_is_public(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 4)

    def test_newest_listings_first(self):
        response = self.client.get(self.url)

        self.assertEqual(
            self.titles(response),
            ['Yearly Loft', 'Houston Condo', 'Dallas House', 'Austin Flat']
        )

    def test_listing_payload_shape(self):
        response = self.client.get(self.url)
        item = next(i for i in response.data if i['title'] == 'Austin Flat')

        self.assertEqual(item['listingType'], 'rent')
        self.assertEqual(item['price']['frequency'], 'monthly')
        self.assertEqual(item['location']['city'], 'Austin')
        self.assertEqual(item['features']['bedrooms'], 2)
        self.assertEqual(item['amenities'], ['gym', 'pool'])
        self.assertEqual(len(item['images']), 1)
        self.assertEqual(item['landlord']['email'], 'landlord@test.com')

    def test_filter_by_location_matches_city_state_or_address(self):
        response = self.client.get(self.url, {'location': 'austin'})
        self.assertCountEqual(self.titles(response), ['Austin Flat', 'Yearly Loft'])

        response = self.client.get(self.url, {'location': 'congress'})
        self.assertEqual(self.titles(response), ['Yearly Loft'])

    def test_filter_by_listing_type(self):
        response = self.client.get(self.url, {'listingType': 'sale'})

        self.assertEqual(self.titles(response), ['Houston Condo'])

    def test_filter_by_price_range(self):
        response = self.client.get(self.url, {'minPrice': '1000', 'maxPrice': '3000'})

        self.assertCountEqual(self.titles(response), ['Austin Flat', 'Dallas House'])

    def test_filter_by_price_frequency(self):
        response = self.client.get(self.url, {'priceFrequency': 'yearly'})

        self.assertEqual(self.titles(response), ['Yearly Loft'])

    def test_filter_by_rooms(self):
        response = self.client.get(self.url, {'bedrooms': 4, 'bathrooms': 3})

        self.assertEqual(self.titles(response), ['Dallas House'])

    def test_filter_by_property_type_is_case_insensitive(self):
        response = self.client.get(self.url, {'propertyType': 'Condo'})

        self.assertEqual(self.titles(response), ['Houston Condo'])

    def test_filter_by_furnished(self):
        response = self.client.get(self.url, {'furnished': 'true'})
        self.assertEqual(self.titles(response), ['Austin Flat'])

        response = self.client.get(self.url, {'furnished': 'false'})
        self.assertEqual(len(response.data), 3)

    def test_filter_by_status(self):
        response = self.client.get(self.url, {'status': 'rented'})

        self.assertEqual(self.titles(response), ['Yearly Loft'])

    def test_filter_by_amenities_requires_all(self):
        response = self.client.get(self.url, {'amenities': 'pool'})
        self.assertCountEqual(self.titles(response), ['Austin Flat', 'Dallas House'])

        response = self.client.get(self.url, {'amenities': 'pool,gym'})
        self.assertEqual(self.titles(response), ['Austin Flat'])

    def test_amenity_filter_does_not_duplicate_rows(self):
        response = self.client.get(self.url, {'amenities': 'Pool, GYM'})

        self.assertEqual(self.titles(response), ['Austin Flat'])

    def test_combined_filters(self):
        response = self.client.get(self.url, {
            'listingType': 'rent',
            'location': 'austin',
            'status': 'available',
        })

        self.assertEqual(self.titles(response), ['Austin Flat'])

    def test_invalid_filter_value_rejected(self):
        response = self.client.get(self.url, {'minPrice': 'cheap'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation Error')
        self.assertIn('minPrice', response.data['errors'])

    def test_unknown_listing_type_filter_rejected(self):
        response = self.client.get(self.url, {'listingType': 'swap'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_no_matches_returns_empty_list(self):
        response = self.client.get(self.url, {'location': 'Nowhere'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])


# ============================================================================
# Listing Detail Tests
# ============================================================================

class PropertyDetailTests(TestCase):
    """Test suite for GET /api/properties/<id>/."""

    def setUp(self):
        self.client = APIClient()
        self.landlord = create_test_user('landlord@test.com', role='landlord')
        self.prop = create_test_property(self.landlord, title='Detail Flat')

    def test_detail_is_public(self):
        response = self.client.get(f'/api/properties/{self.prop.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.prop.id)
        self.assertEqual(response.data['title'], 'Detail Flat')
        self.assertEqual(response.data['images'][0]['publicId'], f'homie/properties/p{self.prop.id}')

    def test_missing_property_returns_404(self):
        response = self.client.get('/api/properties/999999/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Property not found'})
