"""
Django admin configuration for the Rental Marketplace.

Transactions have no API write path; staff record them here.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import (
    Amenity,
    Application,
    MaintenanceRequest,
    Notification,
    Property,
    PropertyImage,
    Transaction,
    User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Accounts are identified by email; the username column mirrors it.
    """

    list_display = [
        'email',
        'name',
        'role',
        'is_staff',
        'is_active',
        'created_at',
    ]

    list_filter = [
        'role',
        'is_staff',
        'is_superuser',
        'is_active',
        'created_at',
    ]

    search_fields = [
        'email',
        'name',
    ]

    ordering = ['-created_at']

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Profile'), {
            'fields': ('name', 'role', 'profile_image')
        }),
        (_('Permissions'), {
            'fields': (
                'is_active',
                'is_staff',
                'is_superuser',
                'groups',
                'user_permissions',
            ),
            'classes': ('collapse',),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email',
                'name',
                'role',
                'password1',
                'password2',
            ),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']

    date_hierarchy = 'created_at'

    list_per_page = 25

    filter_horizontal = ('groups', 'user_permissions')

    def get_readonly_fields(self, request, obj=None):
        if obj:  # Editing an existing object
            return self.readonly_fields
        return []


@admin.register(Amenity)
class AmenityAdmin(admin.ModelAdmin):
    list_display = ['name']
    search_fields = ['name']


class PropertyImageInline(admin.TabularInline):
    """Inline admin for property images."""
    model = PropertyImage
    extra = 0
    fields = ['url', 'public_id', 'order', 'uploaded_at']
    readonly_fields = ['uploaded_at']
    ordering = ['order']


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    """Admin interface for Property model."""

    list_display = [
        'title',
        'landlord',
        'listing_type',
        'price_amount',
        'price_frequency',
        'city',
        'status',
        'created_at',
    ]

    list_filter = [
        'status',
        'listing_type',
        'property_type',
        'furnished',
        'created_at',
    ]

    search_fields = [
        'title',
        'description',
        'address',
        'city',
        'state',
        'landlord__email',
    ]

    readonly_fields = ['created_at', 'updated_at']

    ordering = ['-created_at']

    date_hierarchy = 'created_at'

    list_per_page = 25

    inlines = [PropertyImageInline]

    filter_horizontal = ('amenities',)

    fieldsets = (
        (None, {
            'fields': ('landlord', 'title', 'description', 'listing_type', 'status')
        }),
        (_('Price'), {
            'fields': ('price_amount', 'price_frequency', 'price_type')
        }),
        (_('Location'), {
            'fields': ('address', 'city', 'state', 'zip_code', 'latitude', 'longitude')
        }),
        (_('Features'), {
            'fields': (
                'bedrooms',
                'bathrooms',
                'square_feet',
                'property_type',
                'year_built',
                'parking',
                'furnished',
                'amenities',
            )
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    """Admin interface for Application model."""

    list_display = ['id', 'property', 'tenant', 'status', 'submitted_at']
    list_filter = ['status', 'submitted_at']
    search_fields = ['property__title', 'tenant__email', 'tenant__name']
    readonly_fields = ['submitted_at', 'created_at', 'updated_at']
    ordering = ['-created_at']
    date_hierarchy = 'submitted_at'
    list_per_page = 25


@admin.register(MaintenanceRequest)
class MaintenanceRequestAdmin(admin.ModelAdmin):
    """Admin interface for MaintenanceRequest model."""

    list_display = ['id', 'title', 'property', 'tenant', 'priority', 'status', 'created_at']
    list_filter = ['status', 'priority', 'created_at']
    search_fields = ['title', 'description', 'property__title', 'tenant__email']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    list_per_page = 25


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin interface for Transaction model."""

    list_display = [
        'id',
        'property',
        'tenant',
        'landlord',
        'amount',
        'transaction_type',
        'status',
        'date',
    ]

    list_filter = ['transaction_type', 'status', 'date']

    search_fields = [
        'property__title',
        'tenant__email',
        'landlord__email',
    ]

    readonly_fields = ['created_at']
    ordering = ['-date']
    date_hierarchy = 'date'
    list_per_page = 25


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'message', 'read', 'created_at']
    list_filter = ['read', 'created_at']
    search_fields = ['user__email', 'message']
    readonly_fields = ['created_at']
    ordering = ['-created_at']
