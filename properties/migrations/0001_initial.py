import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='RetailCategory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('major_group', models.CharField(
                    choices=[
                        ('anchors_majors', 'Anchors & Majors'),
                        ('inline_retail', 'Inline Retail'),
                        ('food_beverage', 'Food & Beverage'),
                        ('services', 'Services'),
                        ('entertainment_leisure', 'Entertainment / Leisure'),
                        ('other_nonretail', 'Other / Non-Retail'),
                        ('seasonal_popup', 'Seasonal / Pop-Up'),
                        ('vacant', 'Vacant'),
                    ],
                    default='other_nonretail',
                    help_text='High-level tenant categorization for tenant mix analysis',
                    max_length=50,
                )),
            ],
            options={
                'verbose_name_plural': 'Retail Categories',
                'db_table': 'retail_categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ShoppingCenter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_key', models.CharField(help_text='Normalized name used for deduplication', max_length=255, unique=True)),
                ('shopping_center_name', models.CharField(max_length=255)),
                ('center_type', models.CharField(blank=True, help_text='Canonical center type, or the raw value when unrecognized', max_length=100, null=True)),
                ('address_street', models.CharField(blank=True, max_length=255, null=True)),
                ('address_city', models.CharField(blank=True, max_length=100, null=True)),
                ('address_state', models.CharField(blank=True, max_length=50, null=True)),
                ('address_zip', models.CharField(blank=True, max_length=10, null=True)),
                ('county', models.CharField(blank=True, max_length=100, null=True)),
                ('municipality', models.CharField(blank=True, max_length=100, null=True)),
                ('latitude', models.DecimalField(blank=True, decimal_places=7, help_text='Decimal degrees, populated by geocoding service', max_digits=10, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=7, help_text='Decimal degrees, populated by geocoding service', max_digits=10, null=True)),
                ('google_place_id', models.CharField(blank=True, max_length=255, null=True)),
                ('total_gla', models.IntegerField(blank=True, help_text='Gross Leasable Area in square feet', null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('owner', models.CharField(blank=True, max_length=255, null=True)),
                ('property_manager', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Shopping Center',
                'verbose_name_plural': 'Shopping Centers',
                'db_table': 'shopping_centers',
                'ordering': ['shopping_center_name'],
                'indexes': [
                    models.Index(fields=['address_city', 'address_state'], name='sc_city_state_idx'),
                    models.Index(fields=['county'], name='sc_county_idx'),
                    models.Index(fields=['center_type'], name='sc_center_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Space',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('suite_number', models.CharField(blank=True, help_text='Suite/unit number within shopping center', max_length=50, null=True)),
                ('square_footage', models.IntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shopping_center', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='spaces', to='properties.shoppingcenter')),
            ],
            options={
                'db_table': 'spaces',
                'ordering': ['shopping_center', 'suite_number', 'id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('suite_number__isnull', False)),
                        fields=('shopping_center', 'suite_number'),
                        name='unique_suite_per_center',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_key', models.CharField(max_length=255, unique=True)),
                ('tenant_name', models.CharField(help_text='Business/brand name', max_length=255)),
                ('is_vacant', models.BooleanField(default=False)),
                ('is_national_chain', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='tenants', to='properties.retailcategory')),
            ],
            options={
                'db_table': 'tenants',
                'ordering': ['tenant_name'],
                'indexes': [
                    models.Index(fields=['is_vacant'], name='tenant_is_vacant_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Lease',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('base_rent', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('rent_per_area', models.DecimalField(blank=True, decimal_places=4, help_text='base_rent / square_footage', max_digits=14, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('space', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leases', to='properties.space')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='leases', to='properties.tenant')),
            ],
            options={
                'db_table': 'leases',
                'ordering': ['-created_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('is_active', True)),
                        fields=('space',),
                        name='one_active_lease_per_space',
                    ),
                ],
            },
        ),
    ]
