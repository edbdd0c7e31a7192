"""
Business operations behind the API views.

Every operation receives the acting user explicitly (``landlord=``,
``tenant=`` or ``user=``) and raises REST framework exceptions that the
exception handler renders:

- NotFound (404) for missing properties, applications and requests
- PermissionDenied (403) when the actor does not own the property
- InvalidOperation / Conflict (400) for business rule violations

Multi-row changes run in ``transaction.atomic()`` with the property row
locked first. Images are released from the media service only after the
database change that made them obsolete has committed.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from . import media
from .exceptions import Conflict, InvalidOperation
from .models import (
    Amenity,
    Application,
    MaintenanceRequest,
    Notification,
    Property,
    PropertyImage,
)
from .signals import application_status_message

logger = logging.getLogger(__name__)


# ============================================================================
# Lookups & ownership
# ============================================================================

def property_queryset():
    """Properties with everything the listing serializer renders."""
    return (
        Property.objects
        .select_related('landlord')
        .prefetch_related('images', 'amenities')
    )


def get_property_or_404(property_id, lock=False):
    """
    Fetch a property by id.

    Args:
        property_id: Primary key
        lock: Take a row lock (only valid inside ``transaction.atomic``)

    Raises:
        NotFound: If the property does not exist
    """
    queryset = Property.objects.select_for_update() if lock else property_queryset()
    try:
        return queryset.get(pk=property_id)
    except Property.DoesNotExist:
        raise NotFound('Property not found')


def ensure_owner(prop, landlord, action):
    """
    Raise PermissionDenied unless ``landlord`` owns ``prop``.

    ``action`` completes the message, e.g. 'update' ->
    'Not authorized to update this property'.
    """
    if prop.landlord_id != landlord.id:
        logger.warning(
            f"Unauthorized attempt to {action} property {prop.id} "
            f"by user {landlord.id} ({landlord.email})"
        )
        raise PermissionDenied(f'Not authorized to {action} this property')


def _set_amenities(prop, names):
    amenities = []
    for name in names:
        amenity, _created = Amenity.objects.get_or_create(name=name)
        amenities.append(amenity)
    prop.amenities.set(amenities)


def _store_images(prop, uploaded):
    PropertyImage.objects.bulk_create([
        PropertyImage(
            property=prop,
            url=item['url'],
            public_id=item['public_id'],
            order=order,
        )
        for order, item in enumerate(uploaded)
    ])


def _release_after_commit(public_ids):
    public_ids = list(public_ids)
    if public_ids:
        transaction.on_commit(lambda: media.destroy_images(public_ids))


# ============================================================================
# Property catalog
# ============================================================================

def filter_properties(filters):
    """
    Browse listings, newest first.

    Args:
        filters: Validated data from PropertyFilterSerializer. Supported
            keys: location, listing_type, min_price, max_price,
            price_frequency, bedrooms, bathrooms, property_type, furnished,
            status, amenities (all listed names must be present)

    Returns:
        QuerySet of Property
    """
    queryset = property_queryset()

    location = filters.get('location')
    if location:
        queryset = queryset.filter(
            Q(address__icontains=location)
            | Q(city__icontains=location)
            | Q(state__icontains=location)
        )

    if filters.get('listing_type'):
        queryset = queryset.filter(listing_type=filters['listing_type'])

    if filters.get('min_price') is not None:
        queryset = queryset.filter(price_amount__gte=filters['min_price'])

    if filters.get('max_price') is not None:
        queryset = queryset.filter(price_amount__lte=filters['max_price'])

    if filters.get('price_frequency'):
        queryset = queryset.filter(price_frequency=filters['price_frequency'])

    if filters.get('bedrooms') is not None:
        queryset = queryset.filter(bedrooms=filters['bedrooms'])

    if filters.get('bathrooms') is not None:
        queryset = queryset.filter(bathrooms=filters['bathrooms'])

    if filters.get('property_type'):
        queryset = queryset.filter(property_type__iexact=filters['property_type'])

    if filters.get('furnished') is not None:
        queryset = queryset.filter(furnished=filters['furnished'])

    if filters.get('status'):
        queryset = queryset.filter(status=filters['status'])

    amenities = filters.get('amenities') or []
    for name in amenities:
        queryset = queryset.filter(amenities__name=name)
    if amenities:
        queryset = queryset.distinct()

    return queryset.order_by('-created_at', '-id')


def create_property(landlord, data):
    """
    Create a listing owned by ``landlord`` with status 'available'.

    Images are uploaded first; if the listing cannot be persisted the
    uploaded images are released again.

    Args:
        landlord: Authenticated landlord
        data: Validated data from PropertySerializer

    Returns:
        Property: The created listing
    """
    data = dict(data)
    images = data.pop('images')
    amenity_names = data.pop('amenities', [])

    uploaded = media.upload_images(images)

    try:
        with transaction.atomic():
            prop = Property(landlord=landlord, status='available', **data)
            prop.save()
            _set_amenities(prop, amenity_names)
            _store_images(prop, uploaded)
    except Exception:
        logger.error(
            f"Failed to persist property for landlord {landlord.id}; "
            f"releasing {len(uploaded)} uploaded images"
        )
        media.destroy_images(item['public_id'] for item in uploaded)
        raise

    logger.info(
        f"Property created. ID: {prop.id}, Landlord: {landlord.email} (ID: {landlord.id}), "
        f"Images: {len(uploaded)}"
    )
    return get_property_or_404(prop.pk)


def update_property(property_id, landlord, data):
    """
    Partially update a listing owned by ``landlord``.

    Supplying images replaces every stored image; the previous ones are
    released once the update commits.

    Raises:
        NotFound: If the property does not exist
        PermissionDenied: If ``landlord`` is not the owner
    """
    prop = get_property_or_404(property_id)
    ensure_owner(prop, landlord, 'update')

    data = dict(data)
    images = data.pop('images', None)
    amenity_names = data.pop('amenities', None)

    uploaded = media.upload_images(images) if images else None

    try:
        with transaction.atomic():
            prop = get_property_or_404(property_id, lock=True)
            for attr, value in data.items():
                setattr(prop, attr, value)
            prop.save()

            if amenity_names is not None:
                _set_amenities(prop, amenity_names)

            if uploaded is not None:
                old_public_ids = list(prop.images.values_list('public_id', flat=True))
                prop.images.all().delete()
                _store_images(prop, uploaded)
                _release_after_commit(old_public_ids)
    except Exception:
        if uploaded:
            media.destroy_images(item['public_id'] for item in uploaded)
        raise

    logger.info(
        f"Property updated. ID: {prop.id}, Landlord: {landlord.email} (ID: {landlord.id}), "
        f"Fields: {sorted(data)}, Images replaced: {uploaded is not None}"
    )
    return get_property_or_404(prop.pk)


def delete_property(property_id, landlord):
    """
    Delete a listing owned by ``landlord`` and release its images.

    Raises:
        NotFound: If the property does not exist
        PermissionDenied: If ``landlord`` is not the owner
    """
    with transaction.atomic():
        prop = get_property_or_404(property_id, lock=True)
        ensure_owner(prop, landlord, 'delete')

        public_ids = list(prop.images.values_list('public_id', flat=True))
        prop.delete()
        _release_after_commit(public_ids)

    logger.info(
        f"Property deleted. ID: {property_id}, Landlord: {landlord.email} (ID: {landlord.id})"
    )


def save_property(property_id, user):
    """
    Add a property to ``user``'s saved list.

    Raises:
        NotFound: If the property does not exist
        Conflict: If it is already saved
    """
    prop = get_property_or_404(property_id)
    if user.saved_properties.filter(pk=prop.pk).exists():
        raise Conflict('Property already saved')
    user.saved_properties.add(prop)
    return prop


def unsave_property(property_id, user):
    """
    Remove a property from ``user``'s saved list.

    Raises:
        NotFound: If the property does not exist
        InvalidOperation: If it was not saved
    """
    prop = get_property_or_404(property_id)
    if not user.saved_properties.filter(pk=prop.pk).exists():
        raise InvalidOperation('Property not saved')
    user.saved_properties.remove(prop)
    return prop


def is_property_saved(property_id, user):
    prop = get_property_or_404(property_id)
    return user.saved_properties.filter(pk=prop.pk).exists()


# ============================================================================
# Applications
# ============================================================================

def application_queryset():
    return (
        Application.objects
        .select_related('property__landlord', 'tenant')
        .prefetch_related('property__images', 'property__amenities')
        .order_by('-created_at', '-id')
    )


def submit_application(property_id, tenant):
    """
    Apply to rent a property.

    The property row is locked so that an approval in flight cannot rent
    the property between the availability check and the insert.

    Raises:
        NotFound: If the property does not exist
        InvalidOperation: If the property is not available
        Conflict: If ``tenant`` already applied for it
    """
    with transaction.atomic():
        prop = get_property_or_404(property_id, lock=True)

        if not prop.is_available():
            raise InvalidOperation('Property is not available for rent')

        if Application.objects.filter(property=prop, tenant=tenant).exists():
            raise Conflict('You have already applied for this property')

        try:
            with transaction.atomic():
                application = Application.objects.create(property=prop, tenant=tenant)
        except IntegrityError:
            raise Conflict('You have already applied for this property')

    logger.info(
        f"Application submitted. ID: {application.id}, Property: {prop.id}, "
        f"Tenant: {tenant.email} (ID: {tenant.id})"
    )
    return application_queryset().get(pk=application.pk)


def list_tenant_applications(tenant):
    return application_queryset().filter(tenant=tenant)


def list_landlord_applications(landlord):
    return application_queryset().filter(property__landlord=landlord)


def update_application_status(application_id, new_status, landlord):
    """
    Approve or reject a pending application.

    Approval rents the property and rejects every other pending
    application for it in the same transaction. The property row is locked
    before the application row, the same order ``submit_application`` uses.

    Raises:
        NotFound: If the application does not exist
        PermissionDenied: If ``landlord`` does not own the property
        InvalidOperation: If the transition is not allowed or the property
            is no longer available
    """
    try:
        application = Application.objects.select_related('property').get(pk=application_id)
    except Application.DoesNotExist:
        raise NotFound('Application not found')

    if application.property.landlord_id != landlord.id:
        logger.warning(
            f"Unauthorized application status update. Application: {application_id}, "
            f"User: {landlord.email} (ID: {landlord.id})"
        )
        raise PermissionDenied('Not authorized to update this application')

    with transaction.atomic():
        prop = get_property_or_404(application.property_id, lock=True)
        application = Application.objects.select_for_update().get(pk=application.pk)

        is_valid, error_message = application.can_transition_to(new_status)
        if not is_valid:
            raise InvalidOperation(error_message)

        old_status = application.status
        if old_status == new_status:
            return application_queryset().get(pk=application.pk)

        if new_status == 'approved':
            if not prop.is_available():
                raise InvalidOperation('Property is not available for rent')

            application.status = 'approved'
            application.save()

            prop.status = 'rented'
            prop.save()

            siblings = Application.objects.filter(
                property=prop,
                status='pending'
            ).exclude(pk=application.pk)
            rejected_tenant_ids = list(siblings.values_list('tenant_id', flat=True))
            siblings.update(status='rejected', updated_at=timezone.now())

            Notification.objects.bulk_create([
                Notification(
                    user_id=tenant_id,
                    message=application_status_message(prop.title, 'rejected'),
                )
                for tenant_id in rejected_tenant_ids
            ])

            logger.info(
                f"Application approved. ID: {application.id}, Property: {prop.id} now rented, "
                f"Rejected siblings: {len(rejected_tenant_ids)}"
            )
        else:
            application.status = new_status
            application.save()

    logger.info(
        f"Application status updated. ID: {application.id}, "
        f"Old Status: {old_status}, New Status: {new_status}, "
        f"Landlord: {landlord.email} (ID: {landlord.id})"
    )
    return application_queryset().get(pk=application.pk)


# ============================================================================
# Maintenance
# ============================================================================

def maintenance_queryset():
    return (
        MaintenanceRequest.objects
        .select_related('property', 'tenant')
        .order_by('-created_at', '-id')
    )


def create_maintenance_request(tenant, property_id, title, description, priority='low'):
    """
    File a maintenance request against a property.

    Raises:
        NotFound: If the property does not exist
    """
    prop = get_property_or_404(property_id)
    maintenance_request = MaintenanceRequest.objects.create(
        property=prop,
        tenant=tenant,
        title=title,
        description=description,
        priority=priority,
    )
    logger.info(
        f"Maintenance request created. ID: {maintenance_request.id}, Property: {prop.id}, "
        f"Tenant: {tenant.email} (ID: {tenant.id}), Priority: {priority}"
    )
    return maintenance_request


def list_tenant_maintenance_requests(tenant):
    return maintenance_queryset().filter(tenant=tenant)


def list_landlord_maintenance_requests(landlord):
    return maintenance_queryset().filter(property__landlord=landlord)


def update_maintenance_status(request_id, new_status, landlord):
    """
    Move a maintenance request forward.

    Raises:
        NotFound: If the request does not exist
        PermissionDenied: If ``landlord`` does not own the property
        InvalidOperation: If the transition would move backwards
    """
    with transaction.atomic():
        try:
            maintenance_request = (
                MaintenanceRequest.objects
                .select_for_update()
                .select_related('property')
                .get(pk=request_id)
            )
        except MaintenanceRequest.DoesNotExist:
            raise NotFound('Maintenance request not found')

        if maintenance_request.property.landlord_id != landlord.id:
            logger.warning(
                f"Unauthorized maintenance status update. Request: {request_id}, "
                f"User: {landlord.email} (ID: {landlord.id})"
            )
            raise PermissionDenied('Not authorized to update this request')

        is_valid, error_message = maintenance_request.can_transition_to(new_status)
        if not is_valid:
            raise InvalidOperation(error_message)

        old_status = maintenance_request.status
        if old_status != new_status:
            maintenance_request.status = new_status
            maintenance_request.save()

    logger.info(
        f"Maintenance request status updated. ID: {request_id}, "
        f"Old Status: {old_status}, New Status: {new_status}"
    )
    return maintenance_queryset().get(pk=request_id)
