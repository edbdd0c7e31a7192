"""
Data models for the Rental Marketplace.
"""

from decimal import Decimal

from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """
    Manager for the email-identified User model.

    The inherited username column is kept in sync with the email address,
    so callers only ever supply an email.
    """

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set.')
        email = self.normalize_email(email).strip().lower()
        extra_fields.setdefault('username', email[:150])
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        extra_fields.setdefault('role', 'tenant')
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'admin')

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Additional fields:
    - email: Required, unique email address (login identifier)
    - name: Display name
    - role: One of 'tenant', 'landlord' or 'admin'
    - profile_image: Optional URL of a profile picture
    - saved_properties: Properties bookmarked by a tenant
    - created_at: Account creation timestamp
    - updated_at: Last update timestamp
    """

    ROLE_CHOICES = [
        ('tenant', 'Tenant'),
        ('landlord', 'Landlord'),
        ('admin', 'Administrator'),
    ]

    email = models.EmailField(
        _('email address'),
        unique=True,
        blank=False,
        null=False,
        error_messages={
            'unique': _('User already exists'),
        },
        help_text=_('Required. Used to log in.')
    )

    name = models.CharField(
        _('name'),
        max_length=150,
        blank=False,
        help_text=_('Display name shown to other users.')
    )

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=ROLE_CHOICES,
        default='tenant',
        help_text=_('Marketplace role of the account.')
    )

    profile_image = models.URLField(
        _('profile image'),
        max_length=500,
        blank=True,
        default='',
        help_text=_('Optional. URL of a profile picture.')
    )

    saved_properties = models.ManyToManyField(
        'Property',
        blank=True,
        related_name='saved_by',
        help_text=_('Properties this user has saved.')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the account was created.')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the account was last updated.')
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role'], name='user_role_idx'),
            models.Index(fields=['created_at'], name='user_created_idx'),
        ]

    def __str__(self):
        """Return email as string representation."""
        return self.email or self.username

    def is_tenant(self):
        """Return True if the account is a tenant."""
        return self.role == 'tenant'

    def is_landlord(self):
        """Return True if the account is a landlord."""
        return self.role == 'landlord'

    def is_admin_role(self):
        """Return True if the account is a marketplace administrator."""
        return self.role == 'admin'

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Email is provided and lowercase for case-insensitive uniqueness
        - Role is provided

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.email:
            self.email = self.email.strip().lower()

        if not self.email:
            raise ValidationError({
                'email': _('Email address is required.')
            })

        if not self.role:
            raise ValidationError({
                'role': _('Role is required.')
            })

    def save(self, *args, **kwargs):
        """Normalize the email and mirror it into the username column."""
        if self.email:
            self.email = self.email.strip().lower()
            if not self.username:
                self.username = self.email[:150]
        super().save(*args, **kwargs)


class Amenity(models.Model):
    """
    A named amenity that properties can offer (e.g. 'parking', 'pool').

    Names are matched case-insensitively and stored lowercase.
    """

    name = models.CharField(
        _('name'),
        max_length=100,
        unique=True,
        help_text=_('Amenity name')
    )

    class Meta:
        verbose_name = _('amenity')
        verbose_name_plural = _('amenities')
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.name = self.name.strip().lower()
        super().save(*args, **kwargs)


class Property(models.Model):
    """
    Property listing owned by a landlord.

    Fields:
    - landlord: Owning user (role must be 'landlord')
    - title / description: Listing text
    - listing_type: 'rent' or 'sale'
    - price_amount / price_frequency / price_type: Asking price
    - address / city / state / zip_code / latitude / longitude: Location
    - bedrooms / bathrooms / square_feet / property_type / year_built /
      parking / furnished: Features
    - amenities: Offered amenities
    - status: available, rented, sold or pending
    - created_at / updated_at: Timestamps
    """

    LISTING_TYPE_CHOICES = [
        ('rent', 'Rent'),
        ('sale', 'Sale'),
    ]

    PRICE_FREQUENCY_CHOICES = [
        ('monthly', 'Monthly'),
        ('yearly', 'Yearly'),
    ]

    PRICE_TYPE_CHOICES = [
        ('fixed', 'Fixed'),
        ('negotiable', 'Negotiable'),
    ]

    STATUS_CHOICES = [
        ('available', 'Available'),
        ('rented', 'Rented'),
        ('sold', 'Sold'),
        ('pending', 'Pending'),
    ]

    MIN_YEAR_BUILT = 1800

    landlord = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='properties',
        help_text=_('Landlord who owns this listing')
    )

    title = models.CharField(
        _('title'),
        max_length=200,
        help_text=_('Listing title')
    )

    description = models.TextField(
        _('description'),
        help_text=_('Detailed description of the property')
    )

    listing_type = models.CharField(
        _('listing type'),
        max_length=10,
        choices=LISTING_TYPE_CHOICES,
        help_text=_('Whether the property is for rent or for sale')
    )

    price_amount = models.DecimalField(
        _('price amount'),
        max_digits=12,
        decimal_places=2,
        help_text=_('Asking price (must be greater than 0)')
    )

    price_frequency = models.CharField(
        _('price frequency'),
        max_length=10,
        choices=PRICE_FREQUENCY_CHOICES,
        blank=True,
        null=True,
        help_text=_('Billing period for rentals; empty for sales')
    )

    price_type = models.CharField(
        _('price type'),
        max_length=12,
        choices=PRICE_TYPE_CHOICES,
        default='fixed',
        help_text=_('Whether the price is fixed or negotiable')
    )

    address = models.CharField(_('address'), max_length=300)
    city = models.CharField(_('city'), max_length=100)
    state = models.CharField(_('state'), max_length=100)
    zip_code = models.CharField(_('zip code'), max_length=20)

    latitude = models.DecimalField(
        _('latitude'),
        max_digits=9,
        decimal_places=6,
        blank=True,
        null=True
    )

    longitude = models.DecimalField(
        _('longitude'),
        max_digits=9,
        decimal_places=6,
        blank=True,
        null=True
    )

    bedrooms = models.PositiveIntegerField(_('bedrooms'))
    bathrooms = models.PositiveIntegerField(_('bathrooms'))
    square_feet = models.PositiveIntegerField(_('square feet'))

    property_type = models.CharField(
        _('property type'),
        max_length=50,
        help_text=_('e.g. apartment, house, condo')
    )

    year_built = models.PositiveIntegerField(
        _('year built'),
        validators=[MinValueValidator(MIN_YEAR_BUILT)]
    )

    parking = models.PositiveIntegerField(_('parking spaces'), default=0)
    furnished = models.BooleanField(_('furnished'), default=False)

    amenities = models.ManyToManyField(
        Amenity,
        blank=True,
        related_name='properties'
    )

    status = models.CharField(
        _('status'),
        max_length=10,
        choices=STATUS_CHOICES,
        default='available',
        help_text=_('Current availability of the listing')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('property')
        verbose_name_plural = _('properties')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['landlord'], name='property_landlord_idx'),
            models.Index(fields=['status'], name='property_status_idx'),
            models.Index(fields=['listing_type'], name='property_listing_type_idx'),
            models.Index(fields=['price_amount'], name='property_price_idx'),
            models.Index(fields=['city'], name='property_city_idx'),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Title and description are not blank
        - Price is greater than 0
        - Rentals carry a billing frequency, sales do not
        - Year built is not in the future

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if not self.title or not self.title.strip():
            raise ValidationError({'title': _('Title cannot be empty.')})

        if not self.description or not self.description.strip():
            raise ValidationError({'description': _('Description cannot be empty.')})

        if self.price_amount is not None and self.price_amount <= Decimal('0'):
            raise ValidationError({'price_amount': _('Price must be greater than 0.')})

        if self.listing_type == 'rent' and not self.price_frequency:
            raise ValidationError({
                'price_frequency': _('Price frequency is required for rental listings.')
            })

        if self.year_built is not None and self.year_built > timezone.now().year:
            raise ValidationError({
                'year_built': _('Year built cannot be in the future.')
            })

        if self.landlord_id and not self.landlord.is_landlord():
            raise ValidationError({
                'landlord': _('Only landlords can own property listings.')
            })

    def save(self, *args, **kwargs):
        """Clear the billing frequency of sale listings and validate."""
        if self.listing_type == 'sale':
            self.price_frequency = None
        self.full_clean()
        super().save(*args, **kwargs)

    def is_available(self):
        """Return True if the property accepts new applications."""
        return self.status == 'available'


class PropertyImage(models.Model):
    """
    Image hosted by the media service for a property (one-to-many).

    Fields:
    - property: Owning listing
    - url: Public URL returned by the media service
    - public_id: Identifier used to release the image later
    - order: Display order
    - uploaded_at: Upload timestamp
    """

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='images',
        help_text=_('Property this image belongs to')
    )

    url = models.URLField(_('url'), max_length=500)

    public_id = models.CharField(
        _('public id'),
        max_length=255,
        help_text=_('Media service identifier of the image')
    )

    order = models.PositiveIntegerField(_('order'), default=0)
    uploaded_at = models.DateTimeField(_('uploaded at'), auto_now_add=True)

    class Meta:
        verbose_name = _('property image')
        verbose_name_plural = _('property images')
        ordering = ['order', 'uploaded_at']

    def __str__(self):
        return f"Image {self.public_id}"


class Application(models.Model):
    """
    Rental application submitted by a tenant for a property.

    A tenant may apply to a given property at most once. Only pending
    applications can be decided; approved and rejected are terminal.
    """

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    VALID_TRANSITIONS = {
        'pending': ['approved', 'rejected'],
        'approved': [],
        'rejected': [],
    }

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='applications',
        help_text=_('Property being applied for')
    )

    tenant = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='applications',
        help_text=_('Tenant who submitted the application')
    )

    status = models.CharField(
        _('status'),
        max_length=10,
        choices=STATUS_CHOICES,
        default='pending'
    )

    submitted_at = models.DateTimeField(_('submitted at'), default=timezone.now)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('application')
        verbose_name_plural = _('applications')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='application_status_idx'),
            models.Index(fields=['tenant'], name='application_tenant_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['property', 'tenant'],
                name='unique_application_per_tenant_property',
                violation_error_message='You have already applied for this property',
            )
        ]

    def __str__(self):
        return f"Application by {self.tenant.email} for {self.property.title}"

    def clean(self):
        """
        Validate the applicant and the status transition.

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.tenant_id and not self.tenant.is_tenant():
            raise ValidationError({
                'tenant': _('Only tenants can submit applications.')
            })

        if self.pk is not None:
            try:
                old_status = Application.objects.values_list(
                    'status', flat=True
                ).get(pk=self.pk)
            except Application.DoesNotExist:
                old_status = None

            if old_status is not None and old_status != self.status:
                if self.status not in self.VALID_TRANSITIONS.get(old_status, []):
                    raise ValidationError({
                        'status': _(f'Cannot change an application from {old_status} to {self.status}.')
                    })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        """
        Validate if application can transition to new status.

        Valid transitions:
        - pending -> approved
        - pending -> rejected
        - approved / rejected -> (terminal)

        Args:
            new_status: Target status

        Returns:
            tuple: (is_valid: bool, error_message: str or None)
        """
        if new_status not in dict(self.STATUS_CHOICES):
            return False, f'Invalid status: {new_status}.'

        if self.status == new_status:
            return True, None

        if new_status in self.VALID_TRANSITIONS.get(self.status, []):
            return True, None

        if self.status in ('approved', 'rejected'):
            return False, f'Cannot modify an application that is already {self.status}.'

        return False, f'Invalid status transition from {self.status} to {new_status}.'


class MaintenanceRequest(models.Model):
    """
    Maintenance request filed by a tenant against a property.

    Status only moves forward: pending -> in_progress -> completed, or
    straight from pending to completed.
    """

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
    ]

    VALID_TRANSITIONS = {
        'pending': ['in_progress', 'completed'],
        'in_progress': ['completed'],
        'completed': [],
    }

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='maintenance_requests'
    )

    tenant = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='maintenance_requests'
    )

    title = models.CharField(_('title'), max_length=200)
    description = models.TextField(_('description'))

    priority = models.CharField(
        _('priority'),
        max_length=10,
        choices=PRIORITY_CHOICES,
        default='low'
    )

    status = models.CharField(
        _('status'),
        max_length=12,
        choices=STATUS_CHOICES,
        default='pending'
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('maintenance request')
        verbose_name_plural = _('maintenance requests')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='maintenance_status_idx'),
            models.Index(fields=['tenant'], name='maintenance_tenant_idx'),
            models.Index(fields=['property'], name='maintenance_property_idx'),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        super().clean()

        if not self.title or not self.title.strip():
            raise ValidationError({'title': _('Title cannot be empty.')})

        if not self.description or not self.description.strip():
            raise ValidationError({'description': _('Description cannot be empty.')})

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        """
        Check whether the request may move to ``new_status``.

        Returns:
            tuple: (is_valid: bool, error_message: str or None)
        """
        if new_status not in dict(self.STATUS_CHOICES):
            return False, f'Invalid status: {new_status}.'

        if self.status == new_status:
            return True, None

        if new_status in self.VALID_TRANSITIONS.get(self.status, []):
            return True, None

        if self.status == 'completed':
            return False, 'Cannot modify a completed maintenance request.'

        return False, f'Invalid status transition from {self.status} to {new_status}.'


class Transaction(models.Model):
    """
    Money movement between a tenant and a landlord for a property.

    Rows are recorded by staff through the admin site; the API only reads
    them for income and revenue dashboards.
    """

    TYPE_CHOICES = [
        ('rent', 'Rent'),
        ('deposit', 'Deposit'),
        ('fee', 'Fee'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='transactions'
    )

    tenant = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='tenant_transactions'
    )

    landlord = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='landlord_transactions'
    )

    amount = models.DecimalField(
        _('amount'),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    transaction_type = models.CharField(
        _('type'),
        max_length=10,
        choices=TYPE_CHOICES
    )

    status = models.CharField(
        _('status'),
        max_length=10,
        choices=STATUS_CHOICES,
        default='pending'
    )

    date = models.DateTimeField(_('date'), default=timezone.now)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('transaction')
        verbose_name_plural = _('transactions')
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['landlord'], name='transaction_landlord_idx'),
            models.Index(fields=['tenant'], name='transaction_tenant_idx'),
            models.Index(fields=['date'], name='transaction_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.amount} ({self.status})"


class Notification(models.Model):
    """In-app notification shown on the tenant dashboard."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications'
    )

    message = models.CharField(_('message'), max_length=500)
    read = models.BooleanField(_('read'), default=False)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('notification')
        verbose_name_plural = _('notifications')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return self.message
