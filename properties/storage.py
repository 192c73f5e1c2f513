"""
Storage backends for the import reconciler.

The reconciler only talks to a BaseStorage. Two backends exist:

- DjangoStorage: the relational store (Django ORM models in this app).
  Supports transactions; database errors surface as StorageError.
- InMemoryStorage: plain dataclass records keyed by normalized keys, guarded
  by an RLock. No transactions: a failed row keeps its partial writes.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError, transaction

from properties.models import Lease, RetailCategory, ShoppingCenter, Space, Tenant
from services import StorageError
from services.classifiers import DEFAULT_MAJOR_GROUP, major_group_for_category
from services.keys import space_key

logger = logging.getLogger(__name__)


class BaseStorage(ABC):
    """
    Persistence interface consumed by the import reconciler.

    Records returned by a backend expose the same attribute names as the
    Django models (shopping_center_name, total_gla, category, ...).
    """

    supports_transactions = False

    def atomic(self):
        """Context manager around a whole import."""
        return nullcontext()

    def savepoint(self):
        """Context manager around a single row."""
        return nullcontext()

    @abstractmethod
    def get_center(self, key: str):
        pass

    @abstractmethod
    def create_center(self, key: str, fields: dict):
        pass

    @abstractmethod
    def update_center(self, center, changes: dict):
        pass

    @abstractmethod
    def get_space(self, center, suite_number: str):
        pass

    @abstractmethod
    def create_space(self, center, suite_number: Optional[str], square_footage: Optional[int]):
        pass

    @abstractmethod
    def update_space(self, space, square_footage: int):
        pass

    @abstractmethod
    def get_or_create_category(self, name: str) -> Tuple[object, bool]:
        pass

    @abstractmethod
    def get_tenant(self, key: str):
        pass

    @abstractmethod
    def create_tenant(self, key: str, fields: dict):
        pass

    @abstractmethod
    def update_tenant(self, tenant, changes: dict):
        pass

    @abstractmethod
    def supersede_lease(self, space, tenant, base_rent: Optional[Decimal], rent_per_area: Optional[Decimal]):
        """Deactivate the space's active leases and create a new active one."""
        pass


# =============================================================================
# RELATIONAL STORE
# =============================================================================

@contextmanager
def _storage_errors(operation):
    try:
        yield
    except DatabaseError as e:
        raise StorageError(f"{operation} failed: {str(e)}") from e


class DjangoStorage(BaseStorage):
    """Backend over the properties models."""

    supports_transactions = True

    def atomic(self):
        return transaction.atomic()

    def savepoint(self):
        # Nested atomic blocks are savepoints: a failed row rolls back alone.
        return transaction.atomic()

    def get_center(self, key):
        with _storage_errors("Loading shopping center"):
            return ShoppingCenter.objects.filter(name_key=key).first()

    def create_center(self, key, fields):
        with _storage_errors("Creating shopping center"):
            return ShoppingCenter.objects.create(name_key=key, **fields)

    def update_center(self, center, changes):
        if not changes:
            return center
        for name, value in changes.items():
            setattr(center, name, value)
        with _storage_errors("Updating shopping center"):
            center.save(update_fields=list(changes) + ['updated_at'])
        return center

    def get_space(self, center, suite_number):
        with _storage_errors("Loading space"):
            return Space.objects.filter(shopping_center=center, suite_number=suite_number).first()

    def create_space(self, center, suite_number, square_footage):
        with _storage_errors("Creating space"):
            return Space.objects.create(
                shopping_center=center,
                suite_number=suite_number,
                square_footage=square_footage,
            )

    def update_space(self, space, square_footage):
        space.square_footage = square_footage
        with _storage_errors("Updating space"):
            space.save(update_fields=['square_footage', 'updated_at'])
        return space

    def get_or_create_category(self, name):
        with _storage_errors("Resolving retail category"):
            return RetailCategory.objects.get_or_create(name=name)

    def get_tenant(self, key):
        with _storage_errors("Loading tenant"):
            return Tenant.objects.select_related('category').filter(name_key=key).first()

    def create_tenant(self, key, fields):
        with _storage_errors("Creating tenant"):
            return Tenant.objects.create(name_key=key, **fields)

    def update_tenant(self, tenant, changes):
        if not changes:
            return tenant
        for name, value in changes.items():
            setattr(tenant, name, value)
        with _storage_errors("Updating tenant"):
            tenant.save(update_fields=list(changes) + ['updated_at'])
        return tenant

    def supersede_lease(self, space, tenant, base_rent, rent_per_area):
        with _storage_errors("Superseding lease"), transaction.atomic():
            # Lock the space row so concurrent imports serialize per space
            Space.objects.select_for_update().filter(pk=space.pk).first()
            Lease.objects.filter(space=space, is_active=True).update(is_active=False)
            return Lease.objects.create(
                space=space,
                tenant=tenant,
                base_rent=base_rent,
                rent_per_area=rent_per_area,
                is_active=True,
            )


# =============================================================================
# IN-MEMORY STORE
# =============================================================================

@dataclass
class CenterRecord:
    id: int
    name_key: str
    shopping_center_name: str
    center_type: Optional[str] = None
    address_street: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zip: Optional[str] = None
    county: Optional[str] = None
    municipality: Optional[str] = None
    owner: Optional[str] = None
    property_manager: Optional[str] = None
    total_gla: Optional[int] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    google_place_id: Optional[str] = None


@dataclass
class SpaceRecord:
    id: int
    shopping_center: CenterRecord
    suite_number: Optional[str] = None
    square_footage: Optional[int] = None


@dataclass
class CategoryRecord:
    id: int
    name: str
    major_group: str = DEFAULT_MAJOR_GROUP


@dataclass
class TenantRecord:
    id: int
    name_key: str
    tenant_name: str
    is_vacant: bool = False
    category: Optional[CategoryRecord] = None
    is_national_chain: bool = False


@dataclass
class LeaseRecord:
    id: int
    space: SpaceRecord
    tenant: TenantRecord
    base_rent: Optional[Decimal] = None
    rent_per_area: Optional[Decimal] = None
    is_active: bool = True


class InMemoryStorage(BaseStorage):
    """Process-local store used for dry runs and tests."""

    supports_transactions = False

    def __init__(self):
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self.centers: Dict[str, CenterRecord] = {}
        self.spaces: List[SpaceRecord] = []
        self._spaces_by_key: Dict[str, SpaceRecord] = {}
        self.categories: Dict[str, CategoryRecord] = {}
        self.tenants: Dict[str, TenantRecord] = {}
        self.leases: List[LeaseRecord] = []

    def get_center(self, key):
        with self._lock:
            return self.centers.get(key)

    def create_center(self, key, fields):
        with self._lock:
            if key in self.centers:
                raise StorageError(f"Shopping center '{key}' already exists")
            center = CenterRecord(id=next(self._ids), name_key=key, **fields)
            self.centers[key] = center
            return center

    def update_center(self, center, changes):
        with self._lock:
            for name, value in changes.items():
                setattr(center, name, value)
            return center

    def get_space(self, center, suite_number):
        key = space_key(center.name_key, suite_number)
        if key is None:
            return None
        with self._lock:
            return self._spaces_by_key.get(key)

    def create_space(self, center, suite_number, square_footage):
        key = space_key(center.name_key, suite_number)
        with self._lock:
            if key is not None and key in self._spaces_by_key:
                raise StorageError(f"Space '{key}' already exists")
            space = SpaceRecord(
                id=next(self._ids),
                shopping_center=center,
                suite_number=suite_number,
                square_footage=square_footage,
            )
            self.spaces.append(space)
            if key is not None:
                self._spaces_by_key[key] = space
            return space

    def update_space(self, space, square_footage):
        with self._lock:
            space.square_footage = square_footage
            return space

    def get_or_create_category(self, name):
        with self._lock:
            category = self.categories.get(name)
            if category is not None:
                return category, False
            category = CategoryRecord(
                id=next(self._ids),
                name=name,
                major_group=major_group_for_category(name) or DEFAULT_MAJOR_GROUP,
            )
            self.categories[name] = category
            return category, True

    def get_tenant(self, key):
        with self._lock:
            return self.tenants.get(key)

    def create_tenant(self, key, fields):
        with self._lock:
            if key in self.tenants:
                raise StorageError(f"Tenant '{key}' already exists")
            tenant = TenantRecord(id=next(self._ids), name_key=key, **fields)
            self.tenants[key] = tenant
            return tenant

    def update_tenant(self, tenant, changes):
        with self._lock:
            for name, value in changes.items():
                setattr(tenant, name, value)
            return tenant

    def supersede_lease(self, space, tenant, base_rent, rent_per_area):
        with self._lock:
            for lease in self.leases:
                if lease.space is space and lease.is_active:
                    lease.is_active = False
            lease = LeaseRecord(
                id=next(self._ids),
                space=space,
                tenant=tenant,
                base_rent=base_rent,
                rent_per_area=rent_per_area,
            )
            self.leases.append(lease)
            return lease

    def active_leases(self, space) -> List[LeaseRecord]:
        with self._lock:
            return [lease for lease in self.leases if lease.space is space and lease.is_active]

    def summary(self) -> dict:
        with self._lock:
            return {
                'shopping_centers': len(self.centers),
                'spaces': len(self.spaces),
                'tenants': len(self.tenants),
                'retail_categories': len(self.categories),
                'leases': len(self.leases),
                'active_leases': sum(1 for lease in self.leases if lease.is_active),
            }


# =============================================================================
# BACKEND SELECTION
# =============================================================================

STORAGE_BACKENDS = ('database', 'memory')

_memory_storage = None
_memory_storage_lock = threading.Lock()


def get_storage(backend=None) -> BaseStorage:
    """
    Storage backend by name; defaults to IMPORT_STORAGE_BACKEND.

    The in-memory store is created once per process and shared.
    """
    global _memory_storage
    backend = backend or settings.IMPORT_STORAGE_BACKEND

    if backend == 'database':
        return DjangoStorage()
    if backend == 'memory':
        with _memory_storage_lock:
            if _memory_storage is None:
                _memory_storage = InMemoryStorage()
                logger.info("In-memory import storage initialized")
            return _memory_storage

    raise ValueError(f"Unknown storage backend '{backend}'. Expected one of {STORAGE_BACKENDS}")
