"""
Read-only rollups behind the tenant, landlord and admin dashboards.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Application, Notification, Property, Transaction
from .services import property_queryset

User = get_user_model()

RECENT_TRANSACTIONS_LIMIT = 10


def _sum_amount(queryset):
    return queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0')


def transaction_queryset():
    return (
        Transaction.objects
        .select_related('property', 'tenant', 'landlord')
        .order_by('-date', '-created_at')
    )


# ============================================================================
# Tenant
# ============================================================================

def tenant_stats(tenant):
    """
    Counters for the tenant home screen.

    ``totalProperties`` is the number of listings the tenant saved;
    ``activeListings`` counts every available listing on the marketplace.
    """
    applications = Application.objects.filter(tenant=tenant)
    return {
        'totalProperties': tenant.saved_properties.count(),
        'activeListings': Property.objects.filter(status='available').count(),
        'totalApplications': applications.count(),
        'pendingApplications': applications.filter(status='pending').count(),
        'newNotifications': Notification.objects.filter(user=tenant, read=False).count(),
    }


def tenant_saved_properties(tenant):
    return property_queryset().filter(saved_by=tenant).order_by('-created_at', '-id')


def tenant_notifications(tenant):
    return Notification.objects.filter(user=tenant).order_by('-created_at', '-id')


# ============================================================================
# Landlord
# ============================================================================

def landlord_stats(landlord):
    """
    Portfolio counters for a landlord.

    ``occupancyRate`` is the rounded percentage of owned listings that are
    rented, 0 when the landlord owns nothing.
    """
    properties = Property.objects.filter(landlord=landlord)
    total_properties = properties.count()
    rented = properties.filter(status='rented').count()
    applications = Application.objects.filter(property__landlord=landlord)

    occupancy_rate = round(rented / total_properties * 100) if total_properties else 0

    return {
        'totalProperties': total_properties,
        'activeListings': properties.filter(status='available').count(),
        'totalIncome': _sum_amount(Transaction.objects.filter(landlord=landlord)),
        'occupancyRate': occupancy_rate,
        'totalApplications': applications.count(),
        'pendingApplications': applications.filter(status='pending').count(),
    }


def landlord_properties(landlord):
    return property_queryset().filter(landlord=landlord).order_by('-created_at', '-id')


def landlord_monthly_income(landlord):
    """
    Income grouped by calendar month of the transaction date, newest first.

    Returns:
        list[dict]: [{'month': 'YYYY-MM', 'amount': Decimal, 'transactions': int}]
    """
    rows = (
        Transaction.objects
        .filter(landlord=landlord)
        .annotate(month=TruncMonth('date'))
        .values('month')
        .annotate(amount=Sum('amount'), transactions=Count('id'))
        .order_by('-month')
    )
    return [
        {
            'month': row['month'].strftime('%Y-%m'),
            'amount': row['amount'] or Decimal('0'),
            'transactions': row['transactions'],
        }
        for row in rows
    ]


def landlord_recent_transactions(landlord, limit=RECENT_TRANSACTIONS_LIMIT):
    return transaction_queryset().filter(landlord=landlord)[:limit]


# ============================================================================
# Admin
# ============================================================================

def admin_stats():
    """Platform-wide counters. New users are counted from the first of the month."""
    now = timezone.now()
    first_day_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    return {
        'totalUsers': User.objects.count(),
        'newUsersThisMonth': User.objects.filter(created_at__gte=first_day_of_month).count(),
        'totalProperties': Property.objects.count(),
        'totalTransactions': Transaction.objects.count(),
        'revenue': _sum_amount(Transaction.objects.all()),
    }


def admin_users():
    return User.objects.order_by('-created_at', '-id')


def admin_properties():
    return property_queryset().order_by('-created_at', '-id')


def admin_transactions():
    return transaction_queryset()
