"""
Properties models for the CenterScope application.

This module implements the imported entity graph:
- ShoppingCenter: a retail property, identified by its normalized name
- Space: a leasable unit within a shopping center
- RetailCategory: global retail taxonomy entry
- Tenant: global occupant (or vacancy placeholder)
- Lease: links a Space to a Tenant; at most one active lease per space

Models store data only. Normalization, geocoding and lease supersession
are done by the import pipeline (imports.services, properties.storage).
"""

import logging

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, Sum

from services.classifiers import (
    DEFAULT_MAJOR_GROUP,
    MAJOR_GROUP_CHOICES,
    major_group_for_category,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SHOPPING CENTER MODEL
# =============================================================================

class ShoppingCenter(models.Model):
    """
    Represents a commercial retail property/shopping center.

    name_key is the lowercased, whitespace-collapsed name and is unique;
    shopping_center_name keeps the display name of the first sighting.
    """

    # Identification
    name_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Normalized name used for deduplication"
    )
    shopping_center_name = models.CharField(max_length=255)

    # Classification
    center_type = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Canonical center type, or the raw value when unrecognized"
    )

    # Location (Address Components)
    address_street = models.CharField(max_length=255, blank=True, null=True)
    address_city = models.CharField(max_length=100, blank=True, null=True)
    address_state = models.CharField(max_length=50, blank=True, null=True)
    address_zip = models.CharField(max_length=10, blank=True, null=True)
    county = models.CharField(max_length=100, blank=True, null=True)
    municipality = models.CharField(max_length=100, blank=True, null=True)

    # Geospatial
    latitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        blank=True,
        null=True,
        help_text="Decimal degrees, populated by geocoding service"
    )
    longitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        blank=True,
        null=True,
        help_text="Decimal degrees, populated by geocoding service"
    )
    google_place_id = models.CharField(max_length=255, blank=True, null=True)

    # Property Characteristics
    total_gla = models.IntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(0)],
        help_text="Gross Leasable Area in square feet"
    )

    # Key Parties
    owner = models.CharField(max_length=255, blank=True, null=True)
    property_manager = models.CharField(max_length=255, blank=True, null=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shopping_centers'
        ordering = ['shopping_center_name']
        verbose_name = 'Shopping Center'
        verbose_name_plural = 'Shopping Centers'

        indexes = [
            models.Index(fields=['address_city', 'address_state'], name='sc_city_state_idx'),
            models.Index(fields=['county'], name='sc_county_idx'),
            models.Index(fields=['center_type'], name='sc_center_type_idx'),
        ]

    def __str__(self):
        return self.shopping_center_name

    def __repr__(self):
        return f"<ShoppingCenter: {self.shopping_center_name}>"

    def get_full_address(self):
        """
        Returns formatted full address.

        Returns:
            str: Comma-separated full address or empty string if no components
        """
        parts = [
            self.address_street,
            self.address_city,
            self.address_state,
            self.address_zip
        ]
        return ", ".join(filter(None, parts))

    @property
    def has_coordinates(self):
        """Check if property has been geocoded."""
        return self.latitude is not None and self.longitude is not None

    def get_vacancy_stats(self):
        """
        Vacancy statistics over this center's spaces.

        A space is vacant when its active lease points at a vacant tenant or
        when it has no active lease at all.

        Returns:
            dict: counts, square footage and rates (percent, 1 decimal)
        """
        spaces = self.spaces.all()
        occupied = spaces.filter(
            leases__is_active=True,
            leases__tenant__is_vacant=False,
        )
        vacant = spaces.exclude(pk__in=occupied.values('pk'))

        total_spaces = spaces.count()
        vacant_spaces = vacant.count()
        total_sqft = spaces.aggregate(total=Sum('square_footage'))['total'] or 0
        vacant_sqft = vacant.aggregate(total=Sum('square_footage'))['total'] or 0

        return {
            'total_spaces': total_spaces,
            'vacant_spaces': vacant_spaces,
            'occupied_spaces': total_spaces - vacant_spaces,
            'vacancy_rate_by_count': _rate(vacant_spaces, total_spaces),
            'total_square_footage': total_sqft,
            'vacant_square_footage': vacant_sqft,
            'vacancy_rate_by_area': _rate(vacant_sqft, total_sqft),
        }


def _rate(part, whole):
    if not whole:
        return 0.0
    return round((part / whole) * 100, 1)


# =============================================================================
# SPACE MODEL
# =============================================================================

class Space(models.Model):
    """
    A leasable unit within a shopping center.

    Spaces with a suite number are unique per center. Rows without a suite
    number always create a new Space.
    """

    shopping_center = models.ForeignKey(
        ShoppingCenter,
        on_delete=models.CASCADE,
        related_name='spaces'
    )
    suite_number = models.CharField(
        max_length=50,
        blank=True,
        null=True,
        help_text="Suite/unit number within shopping center"
    )
    square_footage = models.IntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(0)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'spaces'
        ordering = ['shopping_center', 'suite_number', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['shopping_center', 'suite_number'],
                condition=Q(suite_number__isnull=False),
                name='unique_suite_per_center'
            ),
        ]

    def __str__(self):
        suite = self.suite_number or 'no suite'
        return f"{self.shopping_center.shopping_center_name} - {suite}"

    @property
    def active_lease(self):
        return self.leases.filter(is_active=True).select_related('tenant__category').first()


# =============================================================================
# RETAIL CATEGORY MODEL
# =============================================================================

class RetailCategory(models.Model):
    """Global retail category; major_group is derived from the taxonomy."""

    name = models.CharField(max_length=100, unique=True)
    major_group = models.CharField(
        max_length=50,
        choices=MAJOR_GROUP_CHOICES,
        default=DEFAULT_MAJOR_GROUP,
        help_text="High-level tenant categorization for tenant mix analysis"
    )

    class Meta:
        db_table = 'retail_categories'
        ordering = ['name']
        verbose_name_plural = 'Retail Categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Derive major_group on first save only
        if self._state.adding:
            self.major_group = major_group_for_category(self.name) or DEFAULT_MAJOR_GROUP
        super().save(*args, **kwargs)


# =============================================================================
# TENANT MODEL
# =============================================================================

class Tenant(models.Model):
    """
    Global tenant, shared across centers.

    Vacancy placeholders ("Vacant", "Vacant (Drive-Thru)", ...) are tenants
    too, flagged with is_vacant.
    """

    name_key = models.CharField(max_length=255, unique=True)
    tenant_name = models.CharField(max_length=255, help_text="Business/brand name")
    is_vacant = models.BooleanField(default=False)
    category = models.ForeignKey(
        RetailCategory,
        on_delete=models.PROTECT,
        related_name='tenants',
        blank=True,
        null=True
    )
    is_national_chain = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['tenant_name']
        indexes = [
            models.Index(fields=['is_vacant'], name='tenant_is_vacant_idx'),
        ]

    def __str__(self):
        return self.tenant_name

    def __repr__(self):
        return f"<Tenant: {self.tenant_name}>"


# =============================================================================
# LEASE MODEL
# =============================================================================

class Lease(models.Model):
    """
    Occupancy of a Space by a Tenant.

    Only one lease per space may be active; older leases are kept with
    is_active=False.
    """

    space = models.ForeignKey(
        Space,
        on_delete=models.CASCADE,
        related_name='leases'
    )
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name='leases'
    )
    base_rent = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[MinValueValidator(0)]
    )
    rent_per_area = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        blank=True,
        null=True,
        help_text="base_rent / square_footage"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'leases'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['space'],
                condition=Q(is_active=True),
                name='one_active_lease_per_space'
            ),
        ]

    def __str__(self):
        state = 'active' if self.is_active else 'inactive'
        return f"{self.tenant} @ {self.space} ({state})"
