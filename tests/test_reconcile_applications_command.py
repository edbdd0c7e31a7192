from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from core.models import Application, Notification, Property, User


class ReconcileApplicationsCommandTests(TestCase):
    def setUp(self):
        self.landlord = User.objects.create_user(
            email='landlord@test.com', password='SecurePass123!', name='Landlord', role='landlord'
        )
        self.tenants = [
            User.objects.create_user(
                email=f't{i}@test.com', password='SecurePass123!', name=f'Tenant {i}', role='tenant'
            )
            for i in range(3)
        ]

        self.rented = self.create_property('Stale Rental')
        self.available = self.create_property('Open Rental')

        self.approved = Application.objects.create(property=self.rented, tenant=self.tenants[0])
        self.stale = [
            Application.objects.create(property=self.rented, tenant=self.tenants[1]),
            Application.objects.create(property=self.rented, tenant=self.tenants[2]),
        ]
        self.open = Application.objects.create(property=self.available, tenant=self.tenants[1])

        # Older data: approved and rented without the sibling rejection
        Application.objects.filter(pk=self.approved.pk).update(status='approved')
        Property.objects.filter(pk=self.rented.pk).update(status='rented')

    def create_property(self, title):
        return Property.objects.create(
            landlord=self.landlord,
            title=title,
            description='Seeded listing',
            listing_type='rent',
            price_amount=Decimal('1100.00'),
            price_frequency='monthly',
            address='2 Pine Street',
            city='Chicago',
            state='IL',
            zip_code='60601',
            bedrooms=1,
            bathrooms=1,
            square_feet=500,
            property_type='apartment',
            year_built=1999,
        )

    def test_rejects_pending_applications_on_rented_property(self):
        out = StringIO()
        call_command('reconcile_applications', stdout=out)

        for application in self.stale:
            application.refresh_from_db()
            self.assertEqual(application.status, 'rejected')

        self.approved.refresh_from_db()
        self.open.refresh_from_db()
        self.assertEqual(self.approved.status, 'approved')
        self.assertEqual(self.open.status, 'pending')
        self.assertIn('2 stale applications', out.getvalue())
        self.assertIn('Reconciliation completed successfully.', out.getvalue())

    def test_rejected_tenants_are_notified(self):
        call_command('reconcile_applications', stdout=StringIO())

        for tenant in self.tenants[1:]:
            self.assertEqual(
                list(Notification.objects.filter(user=tenant).values_list('message', flat=True)),
                ['Your application for "Stale Rental" was rejected.']
            )
        self.assertFalse(Notification.objects.filter(user=self.tenants[0]).exists())

    def test_sold_properties_are_reconciled_too(self):
        Property.objects.filter(pk=self.rented.pk).update(status='sold')
        call_command('reconcile_applications', stdout=StringIO())

        self.assertEqual(
            Application.objects.filter(property=self.rented, status='pending').count(),
            0
        )

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('reconcile_applications', '--dry-run', stdout=out)

        self.assertEqual(
            Application.objects.filter(property=self.rented, status='pending').count(),
            2
        )
        self.assertFalse(Notification.objects.exists())
        self.assertIn('[DRY-RUN]', out.getvalue())
        self.assertIn('Dry run completed. No changes saved.', out.getvalue())

    def test_second_run_is_a_no_op(self):
        call_command('reconcile_applications', stdout=StringIO())
        out = StringIO()
        call_command('reconcile_applications', stdout=out)

        self.assertIn('Processed 0 properties total', out.getvalue())
        self.assertEqual(Notification.objects.count(), 2)

    def test_invalid_batch_size(self):
        with self.assertRaises(CommandError):
            call_command('reconcile_applications', '--batch-size', '0', stdout=StringIO())
