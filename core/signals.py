"""
Django signals that notify tenants when their requests change status.

Application and maintenance request status changes made through ``save()``
produce one Notification for the tenant. Bulk updates (the rejection of
sibling applications when one is approved) bypass signals; the service
layer creates those notifications itself with ``application_status_message``.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Application, MaintenanceRequest, Notification

logger = logging.getLogger(__name__)


def application_status_message(property_title, status):
    """Notification text for an application decision."""
    return f'Your application for "{property_title}" was {status}.'


def maintenance_status_message(request_title, status):
    """Notification text for a maintenance request update."""
    label = dict(MaintenanceRequest.STATUS_CHOICES).get(status, status).lower()
    return f'Your maintenance request "{request_title}" is now {label}.'


def _previous_status(model, instance):
    if instance.pk is None:
        return None
    return model.objects.filter(pk=instance.pk).values_list('status', flat=True).first()


@receiver(pre_save, sender=Application)
def remember_application_status(sender, instance, raw=False, **kwargs):
    """Store the persisted status so post_save can detect a change."""
    if raw:
        return
    instance._previous_status = _previous_status(Application, instance)


@receiver(post_save, sender=Application)
def notify_tenant_on_application_status(sender, instance, created, raw=False, **kwargs):
    """
    Create a notification when an existing application changes status.

    This runs inside the same transaction as the save; if it fails the
    status change is rolled back with it.
    """
    if created or raw:
        return

    previous = getattr(instance, '_previous_status', None)
    if previous is None or previous == instance.status:
        return

    try:
        with transaction.atomic():
            Notification.objects.create(
                user_id=instance.tenant_id,
                message=application_status_message(instance.property.title, instance.status),
            )
        logger.info(
            f"Notified tenant {instance.tenant_id} of application {instance.id}: "
            f"{previous} -> {instance.status}"
        )
    except Exception as e:
        logger.error(
            f"Error creating notification for application {instance.id}: {str(e)}",
            exc_info=True
        )
        raise


@receiver(pre_save, sender=MaintenanceRequest)
def remember_maintenance_status(sender, instance, raw=False, **kwargs):
    if raw:
        return
    instance._previous_status = _previous_status(MaintenanceRequest, instance)


@receiver(post_save, sender=MaintenanceRequest)
def notify_tenant_on_maintenance_status(sender, instance, created, raw=False, **kwargs):
    """Create a notification when a maintenance request moves forward."""
    if created or raw:
        return

    previous = getattr(instance, '_previous_status', None)
    if previous is None or previous == instance.status:
        return

    try:
        with transaction.atomic():
            Notification.objects.create(
                user_id=instance.tenant_id,
                message=maintenance_status_message(instance.title, instance.status),
            )
        logger.info(
            f"Notified tenant {instance.tenant_id} of maintenance request {instance.id}: "
            f"{previous} -> {instance.status}"
        )
    except Exception as e:
        logger.error(
            f"Error creating notification for maintenance request {instance.id}: {str(e)}",
            exc_info=True
        )
        raise
