"""
API Serializers for CenterScope properties.

- List views: summary data for maps and tables
- Detail views: complete shopping center information
- Tenant roster: one entry per space with its active lease
"""

from rest_framework import serializers

from .models import ShoppingCenter


# =============================================================================
# SHOPPING CENTER SERIALIZERS
# =============================================================================

class ShoppingCenterListSerializer(serializers.ModelSerializer):
    """Summary serializer for list views and map pins."""

    space_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = ShoppingCenter
        fields = [
            'id',
            'shopping_center_name',
            'center_type',
            'address_street',
            'address_city',
            'address_state',
            'address_zip',
            'county',
            'latitude',
            'longitude',
            'total_gla',
            'owner',
            'space_count',
        ]
        read_only_fields = fields


class ShoppingCenterDetailSerializer(serializers.ModelSerializer):
    """Full shopping center record."""

    full_address = serializers.CharField(source='get_full_address', read_only=True)
    has_coordinates = serializers.BooleanField(read_only=True)
    space_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = ShoppingCenter
        fields = [
            'id',
            'shopping_center_name',
            'center_type',
            'address_street',
            'address_city',
            'address_state',
            'address_zip',
            'full_address',
            'county',
            'municipality',
            'latitude',
            'longitude',
            'has_coordinates',
            'google_place_id',
            'total_gla',
            'owner',
            'property_manager',
            'space_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# TENANT ROSTER
# =============================================================================

class SpaceTenantSerializer(serializers.Serializer):
    """
    A space together with its active lease.

    Expects spaces prefetched with an ``active_leases`` list. A space without
    an active lease is reported as vacant with no tenant.
    """

    suite_number = serializers.CharField(allow_null=True)
    square_footage = serializers.IntegerField(allow_null=True)

    def to_representation(self, space):
        data = super().to_representation(space)
        leases = getattr(space, 'active_leases', None)
        if leases is None:
            lease = space.active_lease
        else:
            lease = leases[0] if leases else None

        if lease is None:
            data.update({
                'tenant_name': None,
                'category': None,
                'major_group': None,
                'base_rent': None,
                'rent_per_area': None,
                'is_vacant': True,
                'is_national_chain': False,
            })
            return data

        tenant = lease.tenant
        category = tenant.category
        data.update({
            'tenant_name': tenant.tenant_name,
            'category': category.name if category else None,
            'major_group': 'vacant' if tenant.is_vacant else (category.major_group if category else None),
            'base_rent': _decimal_str(lease.base_rent),
            'rent_per_area': _decimal_str(lease.rent_per_area),
            'is_vacant': tenant.is_vacant,
            'is_national_chain': tenant.is_national_chain,
        })
        return data


def _decimal_str(value):
    return None if value is None else str(value)
