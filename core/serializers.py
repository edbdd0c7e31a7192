"""
Serializers for the Rental Marketplace API.

The API speaks camelCase JSON while the models use snake_case columns, so
most fields declare an explicit ``source``. Property payloads group their
flat columns into ``price``, ``location`` and ``features`` objects; when a
listing is created with multipart/form-data those objects (and the
``amenities`` list) arrive as JSON-encoded strings and are decoded here,
once, before validation.
"""

import json
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers
from rest_framework.fields import empty
from rest_framework.utils import html

from .exceptions import Conflict
from .models import (
    Application,
    MaintenanceRequest,
    Notification,
    Property,
    PropertyImage,
    Transaction,
)
from .validators import (
    MAX_IMAGES_PER_PROPERTY,
    validate_property_image,
    validate_year_built,
)

User = get_user_model()


# ============================================================================
# Users & Authentication
# ============================================================================

class UserSerializer(serializers.ModelSerializer):
    """
    Public profile of an account. Never exposes credentials or permissions.
    """

    profileImage = serializers.CharField(source='profile_image', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'profileImage', 'createdAt', 'updatedAt']
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user data embedded in listings, applications and requests."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for self-service registration.

    Fields:
    - email: Required, unique (case-insensitive)
    - password: Required, must pass Django's password validators
    - name: Required
    - role: 'tenant' or 'landlord'; administrators are created with
      ``manage.py createsuperuser``
    """

    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(
        choices=[('tenant', 'Tenant'), ('landlord', 'Landlord')],
        default='tenant'
    )

    class Meta:
        model = User
        fields = ['id', 'email', 'password', 'name', 'role']
        read_only_fields = ['id']
        extra_kwargs = {
            'email': {'required': True, 'validators': []},
            'name': {'required': True},
        }

    def validate_email(self, value):
        """
        Normalize the email and reject addresses already registered.

        Raises:
            Conflict: If the email is taken
        """
        value = value.strip().lower()

        if User.objects.filter(email__iexact=value).exists():
            raise Conflict('User already exists')

        return value

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Name cannot be empty.")
        return value.strip()

    def validate_password(self, value):
        """Validate password strength using Django's password validators."""
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def create(self, validated_data):
        """Create the account with a hashed password."""
        with transaction.atomic():
            user = User.objects.create_user(
                email=validated_data['email'],
                password=validated_data['password'],
                name=validated_data['name'],
                role=validated_data['role'],
            )
        return user


class LoginSerializer(serializers.Serializer):
    """
    Serializer for user login with email and password.

    Minimal validation to prevent user enumeration attacks.
    Actual authentication happens in the view.
    """
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields an account may change about itself."""

    profileImage = serializers.URLField(
        source='profile_image',
        required=False,
        allow_blank=True,
        max_length=500
    )

    class Meta:
        model = User
        fields = ['name', 'profileImage']

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Name cannot be empty.")
        return value.strip()


# ============================================================================
# Property payload helpers
# ============================================================================

class JSONObjectSerializerMixin:
    """
    Accept a nested object either as a mapping or as a JSON-encoded string.

    Multipart requests cannot carry nested objects, so clients send e.g.
    ``price='{"amount": 1200, "frequency": "monthly"}'`` next to the files.
    """

    def get_value(self, dictionary):
        if html.is_html_input(dictionary):
            if self.field_name in dictionary:
                return dictionary.get(self.field_name)
            return empty
        return super().get_value(dictionary)

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                raise serializers.ValidationError(
                    {'non_field_errors': ['Must be a valid JSON object.']}
                )
        return super().to_internal_value(data)


class PriceSerializer(JSONObjectSerializerMixin, serializers.Serializer):
    amount = serializers.DecimalField(
        source='price_amount',
        max_digits=12,
        decimal_places=2
    )
    frequency = serializers.ChoiceField(
        source='price_frequency',
        choices=Property.PRICE_FREQUENCY_CHOICES,
        required=False,
        allow_null=True
    )
    type = serializers.ChoiceField(
        source='price_type',
        choices=Property.PRICE_TYPE_CHOICES,
        required=False
    )

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError("Price must be greater than 0.")
        return value


class CoordinatesSerializer(JSONObjectSerializerMixin, serializers.Serializer):
    lat = serializers.FloatField(
        source='latitude',
        min_value=-90,
        max_value=90,
        required=False,
        allow_null=True
    )
    lng = serializers.FloatField(
        source='longitude',
        min_value=-180,
        max_value=180,
        required=False,
        allow_null=True
    )

    def _to_decimal(self, value):
        if value is None:
            return None
        return Decimal(str(round(value, 6)))

    def validate_lat(self, value):
        return self._to_decimal(value)

    def validate_lng(self, value):
        return self._to_decimal(value)


class LocationSerializer(JSONObjectSerializerMixin, serializers.Serializer):
    address = serializers.CharField(max_length=300)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zipCode = serializers.CharField(source='zip_code', max_length=20)
    coordinates = CoordinatesSerializer(source='*', required=False)


class FeaturesSerializer(JSONObjectSerializerMixin, serializers.Serializer):
    bedrooms = serializers.IntegerField(min_value=0)
    bathrooms = serializers.IntegerField(min_value=0)
    squareFeet = serializers.IntegerField(source='square_feet', min_value=0)
    propertyType = serializers.CharField(source='property_type', max_length=50)
    yearBuilt = serializers.IntegerField(
        source='year_built',
        validators=[validate_year_built]
    )
    parking = serializers.IntegerField(min_value=0, required=False)
    furnished = serializers.BooleanField(required=False)


class AmenityListField(serializers.Field):
    """
    List of amenity names.

    Accepts a JSON list, a JSON-encoded list string, a comma separated
    string, or a repeated multipart field. Names are trimmed, lowercased
    and de-duplicated.
    """

    default_error_messages = {
        'invalid': 'Amenities must be a list of strings.',
    }

    def get_value(self, dictionary):
        if html.is_html_input(dictionary):
            if self.field_name not in dictionary:
                return empty
            values = dictionary.getlist(self.field_name)
            return values[0] if len(values) == 1 else values
        return super().get_value(dictionary)

    def to_internal_value(self, data):
        if isinstance(data, str):
            stripped = data.strip()
            if stripped.startswith('['):
                try:
                    data = json.loads(stripped)
                except ValueError:
                    self.fail('invalid')
            else:
                data = stripped.split(',') if stripped else []

        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            self.fail('invalid')

        names = []
        for item in data:
            name = item.strip().lower()
            if name and name not in names:
                names.append(name)
        return names

    def to_representation(self, value):
        return [amenity.name for amenity in value.all()]


class PropertyImageSerializer(serializers.ModelSerializer):
    publicId = serializers.CharField(source='public_id', read_only=True)

    class Meta:
        model = PropertyImage
        fields = ['url', 'publicId']
        read_only_fields = fields


# ============================================================================
# Properties
# ============================================================================

class PropertySerializer(serializers.ModelSerializer):
    """
    Serializer for creating, updating and displaying property listings.

    Validation rules:
    - listingType is 'rent' or 'sale'
    - price.amount > 0; price.frequency required for rentals, cleared for sales
    - bedrooms, bathrooms, squareFeet and parking >= 0
    - yearBuilt between 1800 and the current year
    - 1-10 images (JPEG, PNG, WebP, max 5MB each) on create; optional on
      update, where supplying images replaces the stored ones

    The serializer only validates and renders; persistence and image
    hosting happen in ``core.services``.
    """

    listingType = serializers.ChoiceField(
        source='listing_type',
        choices=Property.LISTING_TYPE_CHOICES
    )
    price = PriceSerializer(source='*')
    location = LocationSerializer(source='*')
    features = FeaturesSerializer(source='*')
    amenities = AmenityListField(required=False)
    images = serializers.ListField(
        child=serializers.ImageField(),
        write_only=True,
        required=True,
        error_messages={'required': 'At least one image is required'},
        help_text='List of 1-10 image files (JPEG, PNG, WebP, max 5MB each)'
    )
    images_data = PropertyImageSerializer(source='images', many=True, read_only=True)
    landlord = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Property
        fields = [
            'id',
            'title',
            'description',
            'listingType',
            'price',
            'location',
            'features',
            'amenities',
            'images',
            'images_data',
            'status',
            'landlord',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = ['id', 'status', 'landlord', 'createdAt', 'updatedAt', 'images_data']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance is not None and 'images' in self.fields:
            self.fields['images'].required = False

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty.")
        return value.strip()

    def validate_description(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Description cannot be empty.")
        return value.strip()

    def validate_images(self, value):
        """
        Validate images list for count, format, and size.

        Raises:
            ValidationError: If validation fails
        """
        if not value:
            raise serializers.ValidationError("At least one image is required")

        if len(value) > MAX_IMAGES_PER_PROPERTY:
            raise serializers.ValidationError(
                f"Maximum {MAX_IMAGES_PER_PROPERTY} images allowed per listing."
            )

        for i, image in enumerate(value):
            try:
                validate_property_image(image, position=i + 1)
            except DjangoValidationError as e:
                raise serializers.ValidationError(list(e.messages))

        return value

    def validate(self, attrs):
        """
        Cross-field rules, evaluated against the stored listing on update.

        A rental must end up with a billing frequency even when only the
        listing type changes; a sale never keeps one.
        """
        listing_type = attrs.get('listing_type', getattr(self.instance, 'listing_type', None))

        if 'price_frequency' in attrs:
            frequency = attrs['price_frequency']
        else:
            frequency = getattr(self.instance, 'price_frequency', None)

        if listing_type == 'rent' and not frequency:
            raise serializers.ValidationError({
                'price': {'frequency': ['Price frequency is required for rental listings.']}
            })

        if listing_type == 'sale':
            attrs['price_frequency'] = None

        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data.pop('images', None)
        if 'images_data' in data:
            data['images'] = data.pop('images_data')
        return data


class PropertySummarySerializer(serializers.ModelSerializer):
    """Compact property reference for maintenance requests and transactions."""

    listingType = serializers.CharField(source='listing_type', read_only=True)

    class Meta:
        model = Property
        fields = ['id', 'title', 'listingType', 'address', 'city', 'state', 'status']
        read_only_fields = fields


class PropertyFilterSerializer(serializers.Serializer):
    """
    Query parameters accepted by the listing browse endpoint.

    Instantiate with ``partial=True`` so absent parameters stay absent
    instead of falling back to form defaults.
    """

    location = serializers.CharField(required=False, allow_blank=True)
    listingType = serializers.ChoiceField(
        source='listing_type',
        choices=Property.LISTING_TYPE_CHOICES,
        required=False
    )
    minPrice = serializers.DecimalField(
        source='min_price',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False
    )
    maxPrice = serializers.DecimalField(
        source='max_price',
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False
    )
    priceFrequency = serializers.ChoiceField(
        source='price_frequency',
        choices=Property.PRICE_FREQUENCY_CHOICES,
        required=False
    )
    bedrooms = serializers.IntegerField(min_value=0, required=False)
    bathrooms = serializers.IntegerField(min_value=0, required=False)
    propertyType = serializers.CharField(source='property_type', required=False)
    furnished = serializers.BooleanField(required=False)
    status = serializers.ChoiceField(choices=Property.STATUS_CHOICES, required=False)
    amenities = AmenityListField(required=False)


class SavedStatusSerializer(serializers.Serializer):
    isSaved = serializers.BooleanField()


# ============================================================================
# Applications
# ============================================================================

class ApplicationCreateSerializer(serializers.Serializer):
    """Tenant request body for a new application."""

    propertyId = serializers.IntegerField(min_value=1)


class ApplicationSerializer(serializers.ModelSerializer):
    """
    Application with its property populated. The tenant summary lets the
    landlord see who applied.
    """

    property = PropertySerializer(read_only=True)
    tenant = UserSummarySerializer(read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Application
        fields = ['id', 'property', 'tenant', 'status', 'submittedAt', 'createdAt', 'updatedAt']
        read_only_fields = fields


class ApplicationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Application.STATUS_CHOICES)


# ============================================================================
# Maintenance
# ============================================================================

class MaintenanceRequestCreateSerializer(serializers.Serializer):
    """Tenant request body for a new maintenance request."""

    propertyId = serializers.IntegerField(min_value=1)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField()
    priority = serializers.ChoiceField(
        choices=MaintenanceRequest.PRIORITY_CHOICES,
        default='low'
    )


class MaintenanceRequestSerializer(serializers.ModelSerializer):
    property = PropertySummarySerializer(read_only=True)
    tenant = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = MaintenanceRequest
        fields = [
            'id', 'property', 'tenant', 'title', 'description',
            'priority', 'status', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class MaintenanceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MaintenanceRequest.STATUS_CHOICES)


# ============================================================================
# Dashboards
# ============================================================================

class NotificationSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'message', 'read', 'createdAt']
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    property = PropertySummarySerializer(read_only=True)
    tenant = UserSummarySerializer(read_only=True)
    landlord = UserSummarySerializer(read_only=True)
    type = serializers.CharField(source='transaction_type', read_only=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'property', 'tenant', 'landlord', 'amount', 'type',
            'status', 'date', 'createdAt',
        ]
        read_only_fields = fields
