import os
import sys
import django
import random
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
from faker import Faker

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set up Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'rental_marketplace.settings')
django.setup()

from core.models import (
    User, Amenity, Property, PropertyImage,
    Application, MaintenanceRequest, Transaction
)
from core import services

fake = Faker()

AMENITY_NAMES = [
    'parking', 'pool', 'gym', 'laundry', 'balcony',
    'air conditioning', 'dishwasher', 'elevator', 'garden', 'pet friendly'
]

PROPERTY_TYPES = ['apartment', 'house', 'condo', 'townhouse', 'studio']


def create_users(num_tenants=10, num_landlords=5):
    print(f"Creating {num_tenants} tenants and {num_landlords} landlords...")

    tenants = []
    landlords = []

    for _ in range(num_tenants):
        user = User.objects.create_user(
            email=fake.unique.email(),
            password='password123',
            name=fake.name(),
            role='tenant'
        )
        tenants.append(user)

    for _ in range(num_landlords):
        user = User.objects.create_user(
            email=fake.unique.email(),
            password='password123',
            name=fake.name(),
            role='landlord'
        )
        landlords.append(user)

    print(f"Created {len(tenants)} tenants and {len(landlords)} landlords.")
    return tenants, landlords


def create_amenities():
    amenities = [Amenity.objects.get_or_create(name=name)[0] for name in AMENITY_NAMES]
    print(f"Ensured {len(amenities)} amenities.")
    return amenities


def create_properties(landlords, amenities):
    print("Creating properties...")
    properties = []

    for landlord in landlords:
        # Each landlord lists 1-4 properties
        for _ in range(random.randint(1, 4)):
            listing_type = random.choice(['rent', 'rent', 'sale'])
            if listing_type == 'rent':
                price = Decimal(random.uniform(500.0, 5000.0)).quantize(Decimal('0.01'))
            else:
                price = Decimal(random.uniform(80000.0, 900000.0)).quantize(Decimal('0.01'))

            prop = Property.objects.create(
                landlord=landlord,
                title=f"{random.choice(['Cozy', 'Spacious', 'Modern', 'Sunny'])} "
                      f"{random.choice(PROPERTY_TYPES).title()} in {fake.city()}",
                description=fake.paragraph(nb_sentences=5),
                listing_type=listing_type,
                price_amount=price,
                price_frequency=random.choice(['monthly', 'yearly']) if listing_type == 'rent' else None,
                price_type=random.choice(['fixed', 'negotiable']),
                address=fake.street_address(),
                city=fake.city(),
                state=fake.state(),
                zip_code=fake.postcode(),
                latitude=Decimal(str(fake.latitude())).quantize(Decimal('0.000001')),
                longitude=Decimal(str(fake.longitude())).quantize(Decimal('0.000001')),
                bedrooms=random.randint(1, 5),
                bathrooms=random.randint(1, 3),
                square_feet=random.randint(400, 3500),
                property_type=random.choice(PROPERTY_TYPES),
                year_built=random.randint(1950, timezone.now().year),
                parking=random.randint(0, 2),
                furnished=random.choice([True, False])
            )
            prop.amenities.set(random.sample(amenities, random.randint(0, 4)))

            # Placeholder images; seeding never talks to the media service
            for order in range(random.randint(1, 3)):
                PropertyImage.objects.create(
                    property=prop,
                    url=f"https://picsum.photos/seed/{prop.id}-{order}/1200/800",
                    public_id=f"seed/property-{prop.id}-{order}",
                    order=order
                )
            properties.append(prop)

    print(f"Created {len(properties)} properties.")
    return properties


def create_applications(tenants, properties):
    print("Creating applications...")
    applications = []

    rentals = [p for p in properties if p.listing_type == 'rent']

    for tenant in tenants:
        # Each tenant applies to 0-3 rentals
        for prop in random.sample(rentals, min(len(rentals), random.randint(0, 3))):
            applications.append(Application.objects.create(property=prop, tenant=tenant))

    # Approve one application on roughly a third of the rentals
    approved = 0
    for prop in rentals:
        pending = [a for a in applications if a.property_id == prop.id]
        if pending and random.random() < 0.35:
            services.update_application_status(random.choice(pending).id, 'approved', prop.landlord)
            approved += 1

    print(f"Created {len(applications)} applications, approved {approved}.")
    return applications


def create_maintenance_requests(properties):
    print("Creating maintenance requests...")
    requests = []

    issues = [
        "Leaking faucet", "Broken heater", "Clogged drain", "Faulty wiring",
        "Door lock stuck", "Mold in bathroom", "Dishwasher not draining"
    ]

    for prop in Property.objects.filter(status='rented'):
        approved = prop.applications.filter(status='approved').first()
        if approved is None:
            continue

        for _ in range(random.randint(0, 3)):
            request = MaintenanceRequest.objects.create(
                property=prop,
                tenant=approved.tenant,
                title=random.choice(issues),
                description=fake.paragraph(),
                priority=random.choice(['low', 'medium', 'high'])
            )
            target = random.choice(['pending', 'in_progress', 'completed'])
            if target != 'pending':
                services.update_maintenance_status(request.id, target, prop.landlord)
            requests.append(request)

    print(f"Created {len(requests)} maintenance requests.")
    return requests


def create_transactions():
    print("Creating transactions...")
    transactions = []

    for prop in Property.objects.filter(status='rented'):
        approved = prop.applications.filter(status='approved').first()
        if approved is None:
            continue

        transactions.append(Transaction.objects.create(
            property=prop,
            tenant=approved.tenant,
            landlord=prop.landlord,
            amount=prop.price_amount,
            transaction_type='deposit',
            status='completed',
            date=timezone.now() - timedelta(days=180)
        ))

        # Six months of rent
        for month in range(6):
            transactions.append(Transaction.objects.create(
                property=prop,
                tenant=approved.tenant,
                landlord=prop.landlord,
                amount=prop.price_amount,
                transaction_type='rent',
                status=random.choice(['completed', 'completed', 'pending', 'failed']),
                date=timezone.now() - timedelta(days=30 * month)
            ))

    print(f"Created {len(transactions)} transactions.")
    return transactions


def main():
    print("Starting database population...")

    tenants, landlords = create_users(num_tenants=20, num_landlords=8)

    amenities = create_amenities()

    properties = create_properties(landlords, amenities)

    create_applications(tenants, properties)

    create_maintenance_requests(properties)

    create_transactions()

    print("Database population completed successfully!")


if __name__ == '__main__':
    main()
