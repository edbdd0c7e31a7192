import core.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(error_messages={'unique': 'User already exists'}, help_text='Required. Used to log in.', max_length=254, unique=True, verbose_name='email address')),
                ('name', models.CharField(help_text='Display name shown to other users.', max_length=150, verbose_name='name')),
                ('role', models.CharField(choices=[('tenant', 'Tenant'), ('landlord', 'Landlord'), ('admin', 'Administrator')], default='tenant', help_text='Marketplace role of the account.', max_length=10, verbose_name='role')),
                ('profile_image', models.URLField(blank=True, default='', help_text='Optional. URL of a profile picture.', max_length=500, verbose_name='profile image')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the account was created.', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the account was last updated.', verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'ordering': ['-created_at'],
            },
            managers=[
                ('objects', core.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Amenity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Amenity name', max_length=100, unique=True, verbose_name='name')),
            ],
            options={
                'verbose_name': 'amenity',
                'verbose_name_plural': 'amenities',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Property',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(help_text='Listing title', max_length=200, verbose_name='title')),
                ('description', models.TextField(help_text='Detailed description of the property', verbose_name='description')),
                ('listing_type', models.CharField(choices=[('rent', 'Rent'), ('sale', 'Sale')], help_text='Whether the property is for rent or for sale', max_length=10, verbose_name='listing type')),
                ('price_amount', models.DecimalField(decimal_places=2, help_text='Asking price (must be greater than 0)', max_digits=12, verbose_name='price amount')),
                ('price_frequency', models.CharField(blank=True, choices=[('monthly', 'Monthly'), ('yearly', 'Yearly')], help_text='Billing period for rentals; empty for sales', max_length=10, null=True, verbose_name='price frequency')),
                ('price_type', models.CharField(choices=[('fixed', 'Fixed'), ('negotiable', 'Negotiable')], default='fixed', help_text='Whether the price is fixed or negotiable', max_length=12, verbose_name='price type')),
                ('address', models.CharField(max_length=300, verbose_name='address')),
                ('city', models.CharField(max_length=100, verbose_name='city')),
                ('state', models.CharField(max_length=100, verbose_name='state')),
                ('zip_code', models.CharField(max_length=20, verbose_name='zip code')),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='latitude')),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='longitude')),
                ('bedrooms', models.PositiveIntegerField(verbose_name='bedrooms')),
                ('bathrooms', models.PositiveIntegerField(verbose_name='bathrooms')),
                ('square_feet', models.PositiveIntegerField(verbose_name='square feet')),
                ('property_type', models.CharField(help_text='e.g. apartment, house, condo', max_length=50, verbose_name='property type')),
                ('year_built', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1800)], verbose_name='year built')),
                ('parking', models.PositiveIntegerField(default=0, verbose_name='parking spaces')),
                ('furnished', models.BooleanField(default=False, verbose_name='furnished')),
                ('status', models.CharField(choices=[('available', 'Available'), ('rented', 'Rented'), ('sold', 'Sold'), ('pending', 'Pending')], default='available', help_text='Current availability of the listing', max_length=10, verbose_name='status')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('amenities', models.ManyToManyField(blank=True, related_name='properties', to='core.amenity')),
                ('landlord', models.ForeignKey(help_text='Landlord who owns this listing', on_delete=django.db.models.deletion.CASCADE, related_name='properties', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'property',
                'verbose_name_plural': 'properties',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['landlord'], name='property_landlord_idx'),
                    models.Index(fields=['status'], name='property_status_idx'),
                    models.Index(fields=['listing_type'], name='property_listing_type_idx'),
                    models.Index(fields=['price_amount'], name='property_price_idx'),
                    models.Index(fields=['city'], name='property_city_idx'),
                ],
            },
        ),
        migrations.AddField(
            model_name='user',
            name='saved_properties',
            field=models.ManyToManyField(blank=True, help_text='Properties this user has saved.', related_name='saved_by', to='core.property'),
        ),
        migrations.AddIndex(
            model_name='user',
            index=models.Index(fields=['role'], name='user_role_idx'),
        ),
        migrations.AddIndex(
            model_name='user',
            index=models.Index(fields=['created_at'], name='user_created_idx'),
        ),
        migrations.CreateModel(
            name='PropertyImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(max_length=500, verbose_name='url')),
                ('public_id', models.CharField(help_text='Media service identifier of the image', max_length=255, verbose_name='public id')),
                ('order', models.PositiveIntegerField(default=0, verbose_name='order')),
                ('uploaded_at', models.DateTimeField(auto_now_add=True, verbose_name='uploaded at')),
                ('property', models.ForeignKey(help_text='Property this image belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='images', to='core.property')),
            ],
            options={
                'verbose_name': 'property image',
                'verbose_name_plural': 'property images',
                'ordering': ['order', 'uploaded_at'],
            },
        ),
        migrations.CreateModel(
            name='Application',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=10, verbose_name='status')),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='submitted at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('property', models.ForeignKey(help_text='Property being applied for', on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='core.property')),
                ('tenant', models.ForeignKey(help_text='Tenant who submitted the application', on_delete=django.db.models.deletion.CASCADE, related_name='applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'application',
                'verbose_name_plural': 'applications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='application_status_idx'),
                    models.Index(fields=['tenant'], name='application_tenant_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('property', 'tenant'), name='unique_application_per_tenant_property', violation_error_message='You have already applied for this property'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MaintenanceRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200, verbose_name='title')),
                ('description', models.TextField(verbose_name='description')),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='low', max_length=10, verbose_name='priority')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed')], default='pending', max_length=12, verbose_name='status')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('property', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='maintenance_requests', to='core.property')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='maintenance_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'maintenance request',
                'verbose_name_plural': 'maintenance requests',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='maintenance_status_idx'),
                    models.Index(fields=['tenant'], name='maintenance_tenant_idx'),
                    models.Index(fields=['property'], name='maintenance_property_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='amount')),
                ('transaction_type', models.CharField(choices=[('rent', 'Rent'), ('deposit', 'Deposit'), ('fee', 'Fee')], max_length=10, verbose_name='type')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed')], default='pending', max_length=10, verbose_name='status')),
                ('date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('landlord', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='landlord_transactions', to=settings.AUTH_USER_MODEL)),
                ('property', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to='core.property')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tenant_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'transaction',
                'verbose_name_plural': 'transactions',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['landlord'], name='transaction_landlord_idx'),
                    models.Index(fields=['tenant'], name='transaction_tenant_idx'),
                    models.Index(fields=['date'], name='transaction_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.CharField(max_length=500, verbose_name='message')),
                ('read', models.BooleanField(default=False, verbose_name='read')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'notification',
                'verbose_name_plural': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'read'], name='notification_user_read_idx'),
                ],
            },
        ),
    ]
