# Reconcile Applications Management Command
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from core.models import Application, Notification, Property
from core.signals import application_status_message


class Command(BaseCommand):
    help = 'Rejects pending applications that still point at rented or sold properties.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Run the command without saving changes to the database.',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=1000,
            help='Batch size for bulk processing.',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        batch_size = options['batch_size']

        if batch_size < 1:
            raise CommandError('--batch-size must be a positive integer.')

        self.stdout.write('Reconciling applications...')
        properties = (
            Property.objects
            .filter(status__in=['rented', 'sold'], applications__status='pending')
            .distinct()
            .order_by('id')
        )

        property_count = 0
        rejected_total = 0

        for prop in properties.iterator(chunk_size=batch_size):
            rejected_total += self.reconcile_property(prop, dry_run)
            property_count += 1
            if property_count % 100 == 0:
                self.stdout.write(f'Processed {property_count} properties...')

        self.stdout.write(
            f'Processed {property_count} properties total, '
            f'{rejected_total} stale applications.'
        )

        if dry_run:
            self.stdout.write(self.style.SUCCESS('Dry run completed. No changes saved.'))
        else:
            self.stdout.write(self.style.SUCCESS('Reconciliation completed successfully.'))

    def reconcile_property(self, prop, dry_run):
        with transaction.atomic():
            locked = Property.objects.select_for_update().get(pk=prop.pk)
            pending = Application.objects.filter(property=locked, status='pending')
            tenant_ids = list(pending.values_list('tenant_id', flat=True))

            if not tenant_ids or locked.status not in ('rented', 'sold'):
                return 0

            if dry_run:
                self.stdout.write(
                    f'  [DRY-RUN] Property {locked.id} ({locked.title}, {locked.status}): '
                    f'{len(tenant_ids)} pending -> rejected'
                )
                return len(tenant_ids)

            pending.update(status='rejected', updated_at=timezone.now())
            Notification.objects.bulk_create([
                Notification(
                    user_id=tenant_id,
                    message=application_status_message(locked.title, 'rejected'),
                )
                for tenant_id in tenant_ids
            ])

        return len(tenant_ids)
