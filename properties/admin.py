"""
Properties Admin - CenterScope Backend
Django admin configuration for shopping centers, spaces, tenants and leases.
"""

from django.contrib import admin
from django.db.models import Count
from django.urls import reverse
from django.utils.html import format_html

from .models import Lease, RetailCategory, ShoppingCenter, Space, Tenant


# =============================================================================
# INLINE ADMIN CLASSES
# =============================================================================

class SpaceInline(admin.TabularInline):
    """Spaces within a shopping center"""
    model = Space
    extra = 0
    fields = ['suite_number', 'square_footage', 'updated_at']
    readonly_fields = ['updated_at']
    show_change_link = True


class LeaseInline(admin.TabularInline):
    """Lease history of a space, newest first"""
    model = Lease
    extra = 0
    fields = ['tenant', 'base_rent', 'rent_per_area', 'is_active', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# =============================================================================
# MAIN ADMIN CLASSES
# =============================================================================

@admin.register(ShoppingCenter)
class ShoppingCenterAdmin(admin.ModelAdmin):
    """
    Admin interface for shopping centers.

    name_key is maintained by the importer and shown read-only.
    """

    list_display = [
        'shopping_center_name',
        'address_city',
        'address_state',
        'center_type',
        'total_gla',
        'space_count',
        'has_coordinates_display',
        'last_updated'
    ]

    list_filter = [
        'address_state',
        'center_type',
        'created_at',
    ]

    search_fields = [
        'shopping_center_name',
        'address_street',
        'address_city',
        'owner',
        'property_manager',
    ]

    readonly_fields = ['id', 'name_key', 'created_at', 'updated_at']

    fieldsets = (
        ('Identity', {
            'fields': ('id', 'shopping_center_name', 'name_key', 'center_type'),
            'classes': ('wide',)
        }),

        ('Address', {
            'fields': (
                'address_street',
                'address_city',
                'address_state',
                'address_zip',
                'county',
                'municipality',
            ),
            'classes': ('wide',)
        }),

        ('Geocoding', {
            'fields': ('latitude', 'longitude', 'google_place_id'),
        }),

        ('Property Details', {
            'fields': ('total_gla', 'owner', 'property_manager'),
        }),

        ('System Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    inlines = [SpaceInline]

    list_per_page = 25
    list_max_show_all = 100

    def space_count(self, obj):
        """Display count of spaces for this shopping center"""
        count = obj.space_count
        if count > 0:
            url = reverse('admin:properties_space_changelist') + f'?shopping_center__id__exact={obj.id}'
            return format_html('<a href="{}">{} spaces</a>', url, count)
        return '0 spaces'
    space_count.short_description = 'Spaces'
    space_count.admin_order_field = 'space_count'

    def has_coordinates_display(self, obj):
        """Display geocoding status"""
        if obj.has_coordinates:
            return format_html('<span style="color: green;">{}</span>', '✓')
        return format_html('<span style="color: red;">{}</span>', '✗')
    has_coordinates_display.short_description = 'Coords'

    def last_updated(self, obj):
        from django.utils.timesince import timesince
        return f"{timesince(obj.updated_at)} ago"
    last_updated.short_description = 'Last Updated'
    last_updated.admin_order_field = 'updated_at'

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(space_count=Count('spaces'))


@admin.register(Space)
class SpaceAdmin(admin.ModelAdmin):
    list_display = ['shopping_center', 'suite_number', 'square_footage', 'current_tenant']
    list_filter = ['shopping_center__address_state']
    search_fields = ['shopping_center__shopping_center_name', 'suite_number']
    list_select_related = ['shopping_center']
    inlines = [LeaseInline]

    def current_tenant(self, obj):
        lease = obj.active_lease
        return lease.tenant.tenant_name if lease else '-'
    current_tenant.short_description = 'Active Tenant'


@admin.register(RetailCategory)
class RetailCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'major_group', 'tenant_count']
    list_filter = ['major_group']
    search_fields = ['name']

    def tenant_count(self, obj):
        return obj.tenants.count()
    tenant_count.short_description = 'Tenants'


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    """Global tenants, including vacancy placeholders."""

    list_display = ['tenant_name', 'category', 'is_vacant', 'is_national_chain', 'active_lease_count']
    list_filter = ['is_vacant', 'is_national_chain', 'category__major_group']
    search_fields = ['tenant_name', 'name_key']
    readonly_fields = ['id', 'name_key', 'created_at', 'updated_at']
    list_select_related = ['category']

    def active_lease_count(self, obj):
        return obj.leases.filter(is_active=True).count()
    active_lease_count.short_description = 'Active Leases'


@admin.register(Lease)
class LeaseAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'space', 'rent_display', 'rent_per_area', 'is_active', 'created_at']
    list_filter = ['is_active', 'space__shopping_center__address_state']
    search_fields = ['tenant__tenant_name', 'space__shopping_center__shopping_center_name']
    list_select_related = ['tenant', 'space__shopping_center']
    readonly_fields = ['created_at']

    def rent_display(self, obj):
        """Display base rent formatted"""
        if obj.base_rent is not None:
            return f"${obj.base_rent:,.2f}"
        return '-'
    rent_display.short_description = 'Base Rent'
    rent_display.admin_order_field = 'base_rent'


# =============================================================================
# ADMIN SITE CUSTOMIZATION
# =============================================================================

admin.site.site_header = 'CenterScope Administration'
admin.site.site_title = 'CenterScope Admin'
admin.site.index_title = 'Shopping Center Data Management'
