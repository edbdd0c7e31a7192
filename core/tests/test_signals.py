"""
Tests for the signals that notify tenants about status changes.
"""

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase

from core.models import Application, MaintenanceRequest, Notification, Property
from core.signals import application_status_message, maintenance_status_message

User = get_user_model()


class NotificationSignalTests(TestCase):
    """
    Status changes saved through the ORM create exactly one notification
    for the tenant; creation and unchanged saves create none.
    """

    def setUp(self):
        self.landlord = User.objects.create_user(
            email='landlord1@test.com',
            password='SecurePass123!',
            name='Landlord One',
            role='landlord'
        )
        self.tenant = User.objects.create_user(
            email='tenant1@test.com',
            password='SecurePass123!',
            name='Tenant One',
            role='tenant'
        )
        self.prop = Property.objects.create(
            landlord=self.landlord,
            title='Maple Duplex',
            description='Upper floor of a duplex',
            listing_type='rent',
            price_amount=Decimal('1300.00'),
            price_frequency='monthly',
            address='11 Maple Avenue',
            city='Madison',
            state='WI',
            zip_code='53703',
            bedrooms=2,
            bathrooms=1,
            square_feet=950,
            property_type='duplex',
            year_built=1965,
        )
        self.application = Application.objects.create(property=self.prop, tenant=self.tenant)
        self.maintenance = MaintenanceRequest.objects.create(
            property=self.prop,
            tenant=self.tenant,
            title='Dripping shower',
            description='Shower head drips all night',
        )

    def test_creation_does_not_notify(self):
        self.assertFalse(Notification.objects.exists())

    def test_application_decision_notifies_tenant(self):
        self.application.status = 'rejected'
        self.application.save()

        notification = Notification.objects.get(user=self.tenant)
        self.assertEqual(notification.message, 'Your application for "Maple Duplex" was rejected.')
        self.assertFalse(notification.read)

    def test_saving_without_status_change_does_not_notify(self):
        self.application.save()
        self.maintenance.priority = 'high'
        self.maintenance.save()

        self.assertFalse(Notification.objects.exists())

    def test_maintenance_progress_notifies_tenant(self):
        self.maintenance.status = 'in_progress'
        self.maintenance.save()

        self.assertEqual(
            Notification.objects.get(user=self.tenant).message,
            'Your maintenance request "Dripping shower" is now in progress.'
        )

    def test_invalid_application_transition_rejected_by_model(self):
        self.application.status = 'approved'
        self.application.save()

        self.application.status = 'pending'
        with self.assertRaises(ValidationError):
            self.application.save()

        self.assertEqual(Notification.objects.filter(user=self.tenant).count(), 1)

    def test_notification_failure_rolls_back_status_change(self):
        self.application.status = 'rejected'

        with patch('core.signals.Notification.objects.create', side_effect=RuntimeError('db down')):
            with self.assertRaises(RuntimeError):
                with transaction.atomic():
                    self.application.save()

        self.application.refresh_from_db()
        self.assertEqual(self.application.status, 'pending')

    def test_message_helpers(self):
        self.assertEqual(
            application_status_message('Loft', 'approved'),
            'Your application for "Loft" was approved.'
        )
        self.assertEqual(
            maintenance_status_message('Leak', 'completed'),
            'Your maintenance request "Leak" is now completed.'
        )
