# services/classifiers.py
"""
Closed-vocabulary classifiers for free-text CSV values.

- Shopping center types are mapped onto the nine ICSC-style center types
- Tenant names are normalized into "Vacant" variants or passed through
- Retail categories are mapped onto the eight tenant-mix major groups
"""

import logging
from typing import NamedTuple, Optional

from services.keys import collapse_whitespace

logger = logging.getLogger(__name__)


# =============================================================================
# SHOPPING CENTER TYPES
# =============================================================================

SUPER_REGIONAL_MALL = 'Super Regional Mall'
REGIONAL_MALL = 'Regional Mall'
COMMUNITY_CENTER = 'Community Center'
NEIGHBORHOOD_CENTER = 'Neighborhood Center'
STRIP_CONVENIENCE = 'Strip/Convenience'
POWER_CENTER = 'Power Center'
LIFESTYLE_CENTER = 'Lifestyle Center'
FACTORY_OUTLET = 'Factory Outlet'
THEME_FESTIVAL = 'Theme/Festival'

CENTER_TYPES = (
    SUPER_REGIONAL_MALL,
    REGIONAL_MALL,
    COMMUNITY_CENTER,
    NEIGHBORHOOD_CENTER,
    STRIP_CONVENIENCE,
    POWER_CENTER,
    LIFESTYLE_CENTER,
    FACTORY_OUTLET,
    THEME_FESTIVAL,
)

CENTER_TYPE_CHOICES = [(value, value) for value in CENTER_TYPES]

_CENTER_TYPES_BY_LOWER = {value.lower(): value for value in CENTER_TYPES}


def _match_center_type(text: str) -> Optional[str]:
    # Evaluated top to bottom; first hit wins.
    if 'strip' in text or 'convenience' in text:
        return STRIP_CONVENIENCE
    if 'power' in text:
        return POWER_CENTER
    if 'lifestyle' in text:
        return LIFESTYLE_CENTER
    if 'community' in text:
        return COMMUNITY_CENTER
    if 'neighborhood' in text or 'neighbourhood' in text:
        return NEIGHBORHOOD_CENTER
    if 'regional' in text and 'super' not in text:
        return REGIONAL_MALL
    if 'super' in text and 'regional' in text:
        return SUPER_REGIONAL_MALL
    if 'factory' in text or 'outlet' in text:
        return FACTORY_OUTLET
    if 'theme' in text or 'festival' in text:
        return THEME_FESTIVAL
    return None


def normalize_center_type(raw: Optional[str]) -> Optional[str]:
    """
    Map a free-text center type onto the canonical vocabulary.

    Returns None for blank input. Values no heuristic recognizes are
    returned unchanged so operators can review them.

    Example:
        normalize_center_type("strip mall") -> "Strip/Convenience"
        normalize_center_type("Bespoke Mixed-Use") -> "Bespoke Mixed-Use"
    """
    value = (raw or '').strip()
    if not value:
        return None

    lowered = collapse_whitespace(value).lower()
    if lowered in _CENTER_TYPES_BY_LOWER:
        return _CENTER_TYPES_BY_LOWER[lowered]

    matched = _match_center_type(lowered)
    if matched:
        return matched

    logger.warning(f"Unrecognized center type passed through: '{value}'")
    return value


def is_known_center_type(value: Optional[str]) -> bool:
    return value in CENTER_TYPES


# =============================================================================
# TENANT NAMES
# =============================================================================

VACANT = 'Vacant'

# (substring, qualifier) - first match wins
VACANCY_QUALIFIERS = (
    (('drive-thru', 'drive thru', 'drive-through', 'drive through'), 'Drive-Thru'),
    (('office',), 'Office'),
    (('2nd floor', '2nd-floor', 'second floor'), '2nd Floor'),
    (('restaurant',), 'Restaurant'),
    (('subdivide planned', 'subdivide-planned'), 'Subdivide Planned'),
    (('outparcel',), 'Outparcel'),
)


class TenantName(NamedTuple):
    name: str
    is_vacant: bool


def normalize_tenant_name(raw: Optional[str]) -> TenantName:
    """
    Normalize a tenant name, folding vacancy markers into "Vacant" variants.

    Blank names are treated as vacant. Names mentioning "vacant" or "empty"
    become "Vacant" plus an optional qualifier such as "Vacant (Drive-Thru)".
    """
    name = (raw or '').strip()
    if not name:
        return TenantName(VACANT, True)

    lowered = name.lower()
    if 'vacant' not in lowered and 'empty' not in lowered:
        return TenantName(name, False)

    for needles, qualifier in VACANCY_QUALIFIERS:
        if any(needle in lowered for needle in needles):
            return TenantName(f"{VACANT} ({qualifier})", True)
    return TenantName(VACANT, True)


# =============================================================================
# RETAIL CATEGORY TAXONOMY
# =============================================================================

MAJOR_GROUP_CHOICES = [
    ('anchors_majors', 'Anchors & Majors'),
    ('inline_retail', 'Inline Retail'),
    ('food_beverage', 'Food & Beverage'),
    ('services', 'Services'),
    ('entertainment_leisure', 'Entertainment / Leisure'),
    ('other_nonretail', 'Other / Non-Retail'),
    ('seasonal_popup', 'Seasonal / Pop-Up'),
    ('vacant', 'Vacant'),
]

DEFAULT_MAJOR_GROUP = 'other_nonretail'

RETAIL_CATEGORIES_BY_MAJOR_GROUP = {
    'anchors_majors': (
        'Big Box | Retail', 'Big Box | Home Improvement', 'Pharmacy | Anchor',
        'Department Store', 'Supermarket', 'Discount Store', 'Hypermarket',
        'Wholesale Club',
    ),
    'inline_retail': (
        'Apparel (Adult)', 'Apparel (Athletic)', 'Apparel (Activewear)',
        'Apparel (Childrens)', 'Apparel (Discounted)', 'Apparel (Family)',
        'Apparel (Maternity)', 'Apparel (Mens)', 'Apparel (Outlet)',
        'Apparel (Plus sizes)', 'Apparel (Uniforms)', 'Apparel (Upscale)',
        'Apparel (Womens)', 'Art Gallery', 'Art Supplies', 'Auto Parts',
        'Bagels', 'Bakery', 'Beauty Supplies', 'Beer Distributor', 'Bookstore',
        'Boutique', 'Butcher / Meat Products', 'Cannabis & CBD', 'Cabinetry',
        'Camera Store', 'Cards', 'Cigars and Cigarettes', 'Computers',
        'Consignment', 'Crafts', 'Electronics', 'Fabrics', 'Farming Supplies',
        'Florists', 'Flooring Materials', 'Food or Beverage Specialty',
        'Formalwear (Bridal)', 'Formalwear (Tuxedo)', 'Framing & Supplies',
        'Furniture', 'Gift Specialties', 'Health', 'Home Appliances',
        'Home Building', 'Home Furnishings', 'Housewares', 'Jewelry',
        'Leather Goods', 'Lingerie', 'Liquor & Wine', 'Martial Arts',
        'Mattress Store', 'Mobile Phone Sales', 'Music Store',
        'Musical Instruments', 'Paint Stores', 'Party Goods', 'Pawn Shop',
        'Pet Supplies', 'Pet Sales', 'Plants', 'Pools', 'Shoes',
        'Signs & Banners', 'Sporting Goods', 'Stationery', 'Sunglasses',
        'Surplus', 'Thrift Stores', 'Tobacco', 'Toys & Hobbies',
        'Variety Store', 'Upscale/Luxury',
    ),
    'food_beverage': (
        'Bar', 'Brewery', 'Coffee Shop', 'Craft Beer Bar', 'Craft Beer Sales',
        'Delicatessen', 'Desserts (Casual)', 'Ice Cream Shop',
        'Restaurant | Asian', 'Restaurant | Breakfast', 'Restaurant | Burger',
        'Restaurant | Chinese', 'Restaurant | Fast Casual',
        'Restaurant | Fast Food', 'Restaurant | Full Service',
        'Restaurant | Healthy', 'Restaurant | Indian', 'Restaurant | Italian',
        'Restaurant | Japanese', 'Restaurant | Mexican', 'Restaurant | Thai',
        'Restaurant | Vegan', 'Pizza (Casual)', 'Pizza (Full Service)',
        'Sports Bar',
    ),
    'services': (
        'Auto Body & Collision', 'Auto Retailers', 'Bank', 'Car Audio',
        'Car Care and Service', 'Car Rental', 'Car Wash', 'Check Cashing',
        'Cosmetic/Aesthetic Services', 'Delivery/Fulfillment Services',
        'Dentistry', 'Dry Cleaning', 'Education (Childcare)',
        'Education (Learning Centers)', 'Education (Schools)', 'Eye Care',
        'Eyewear', 'Eyelash Salon', 'Exercise Studio', 'Financial',
        'Flooring Installation (Carpet)', 'Gas Station', 'Gym',
        'Hair Salon (Womens)', 'Hair Salon (Mens)', 'Hair Salon (Childrens)',
        'Hair Salon (Unisex)', 'Insurance Agent/Broker', 'Laundromat',
        'Mail/Shipping Services', 'Massage', 'Medical Center',
        'Medical Practice', 'Nail Salon', 'Office Supplies', 'Other',
        'Physical Therapy', 'Printing', 'Real Estate Agency', 'Shipping',
        'Shoe Repair', 'Tailoring', 'Tax Services', 'Therapy Services',
        'Tires', 'Tutoring', 'Weight Control', 'Wellness Treatments',
    ),
    'entertainment_leisure': (
        'Amusement', 'Entertainment (Adult)', 'Entertainment (Family)',
        'Indoor Golf', 'Movie Theater', 'Theatre', 'Dance Studio',
        'Swim Schools', 'Music', 'Flea Markets',
    ),
    'other_nonretail': (
        'Campus Site', 'Convenience & Gas', 'Equipment Rental',
        'Funeral Home', 'Hotel Lobby', 'Hotel', 'Law Firm', 'Mixed Use',
        'Multitenant Unit', 'On-Site Property Manager',
        'Senior Care Facilities', 'Storage Facilities', 'Transit Terminal',
        'Travel Agency', 'Truck Stop',
    ),
    'seasonal_popup': ('Seasonal & Pop Up',),
    'vacant': ('Vacant',),
}

# Case-insensitive lookup: category name -> major group
_MAJOR_GROUP_BY_CATEGORY = {
    name.lower(): group
    for group, names in RETAIL_CATEGORIES_BY_MAJOR_GROUP.items()
    for name in names
}


def major_group_for_category(name: Optional[str]) -> Optional[str]:
    """
    Map a retail category name to its major group.

    Unmapped names fall back to 'other_nonretail' with a warning; a blank
    name has no group.
    """
    category = collapse_whitespace(name)
    if not category:
        return None

    group = _MAJOR_GROUP_BY_CATEGORY.get(category.lower())
    if group is None:
        logger.warning(
            f"Unmapped retail category '{category}'. "
            f"Defaulting to 'Other / Non-Retail'."
        )
        return DEFAULT_MAJOR_GROUP
    return group
