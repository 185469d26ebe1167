"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from storefront_assets.config import Settings
from storefront_assets.containers import AppContainer
from storefront_assets.domain.assets import ObjectInfo
from storefront_assets.domain.catalog import (
    AdvertisementDraft,
    AdvertisementRecord,
    CategoryDraft,
    CategoryRecord,
    ProductDraft,
    ProductRecord,
)
from storefront_assets.exceptions import ObjectStoreError
from storefront_assets.services.assets import ObjectStore, TempAssetManager
from storefront_assets.services.catalog import (
    AdvertisementRepository,
    CatalogService,
    CategoryRepository,
    ProductRepository,
)
from storefront_assets.services.registry import InMemorySessionRegistry
from storefront_assets.services.sweeper import SessionSweeper

BUCKET = "shop-bucket"
REGION = "ap-south-1"


def public_url(key: str) -> str:
    return f"https://{BUCKET}.s3.{REGION}.amazonaws.com/{key}"


@dataclass
class FakeClock:
    """Manually advanced clock."""

    current: datetime = field(
        default_factory=lambda: datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@dataclass
class InMemoryObjectStore(ObjectStore):
    """Dict-backed object store that can be told to fail."""

    objects: dict[str, dict[str, object]] = field(default_factory=dict)
    fail_put_code: str | None = None
    fail_copy: bool = False
    fail_delete_keys: set[str] = field(default_factory=set)
    copies: list[tuple[str, str]] = field(default_factory=list)
    on_copy: Callable[[str, str], None] | None = None
    on_delete: Callable[[str], None] | None = None
    crash_delete_keys: set[str] = field(default_factory=set)
    deleted: list[str] = field(default_factory=list)

    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        if self.fail_put_code:
            raise ObjectStoreError(self.fail_put_code, key)
        self.objects[key] = {
            "body": body,
            "content_type": content_type,
            "metadata": metadata or {},
            "acl": "public-read",
        }

    async def object_exists(self, key: str) -> bool:
        return key in self.objects

    async def head_object(self, key: str) -> ObjectInfo | None:
        stored = self.objects.get(key)
        if stored is None:
            return None
        return ObjectInfo(
            key=key,
            size=len(stored["body"]),
            content_type=stored["content_type"],
            last_modified=None,
            metadata=dict(stored["metadata"]),
        )

    async def copy_object(self, source_key: str, dest_key: str) -> None:
        if self.fail_copy:
            raise ObjectStoreError("InternalError", source_key)
        if self.on_copy is not None:
            self.on_copy(source_key, dest_key)
        self.objects[dest_key] = {**self.objects[source_key], "acl": "public-read"}
        self.copies.append((source_key, dest_key))

    async def delete_object(self, key: str) -> None:
        if self.on_delete is not None:
            self.on_delete(key)
        if key in self.fail_delete_keys:
            raise ObjectStoreError("InternalError", key)
        if key in self.crash_delete_keys:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.objects.pop(key, None)
        self.deleted.append(key)

    def public_url(self, key: str) -> str:
        return public_url(key)

    def put_sync(self, key: str, body: bytes = b"image") -> None:
        self.objects[key] = {
            "body": body,
            "content_type": "image/png",
            "metadata": {},
            "acl": "public-read",
        }


@dataclass
class InMemoryProductRepository(ProductRepository):
    """In-memory product repository for tests."""

    products: dict[str, ProductRecord] = field(default_factory=dict)
    fail_create: bool = False

    def create_product(self, draft: ProductDraft) -> ProductRecord:
        if self.fail_create:
            raise RuntimeError("Failed to create product")
        record = ProductRecord(id=str(uuid4()), **asdict_shallow(draft))
        self.products[record.id] = record
        return record

    def update_product(
        self, product_id: str, draft: ProductDraft
    ) -> ProductRecord | None:
        if product_id not in self.products:
            return None
        record = ProductRecord(id=product_id, **asdict_shallow(draft))
        self.products[product_id] = record
        return record

    def delete_product(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None

    def get_product(self, product_id: str) -> ProductRecord | None:
        return self.products.get(product_id)


@dataclass
class InMemoryAdvertisementRepository(AdvertisementRepository):
    """In-memory advertisement repository for tests."""

    advertisements: dict[str, AdvertisementRecord] = field(default_factory=dict)

    def create_advertisement(self, draft: AdvertisementDraft) -> AdvertisementRecord:
        record = AdvertisementRecord(id=str(uuid4()), **asdict(draft))
        self.advertisements[record.id] = record
        return record

    def update_advertisement(
        self, advertisement_id: str, draft: AdvertisementDraft
    ) -> AdvertisementRecord | None:
        if advertisement_id not in self.advertisements:
            return None
        record = AdvertisementRecord(id=advertisement_id, **asdict(draft))
        self.advertisements[advertisement_id] = record
        return record

    def delete_advertisement(self, advertisement_id: str) -> bool:
        return self.advertisements.pop(advertisement_id, None) is not None

    def get_advertisement(self, advertisement_id: str) -> AdvertisementRecord | None:
        return self.advertisements.get(advertisement_id)


@dataclass
class InMemoryCategoryRepository(CategoryRepository):
    """In-memory category repository for tests."""

    categories: dict[str, CategoryRecord] = field(default_factory=dict)

    def create_category(self, draft: CategoryDraft) -> CategoryRecord:
        record = CategoryRecord(id=str(uuid4()), **asdict(draft))
        self.categories[record.id] = record
        return record

    def update_category(
        self, category_id: str, draft: CategoryDraft
    ) -> CategoryRecord | None:
        if category_id not in self.categories:
            return None
        record = CategoryRecord(id=category_id, **asdict(draft))
        self.categories[category_id] = record
        return record

    def delete_category(self, category_id: str) -> bool:
        return self.categories.pop(category_id, None) is not None

    def get_category(self, category_id: str) -> CategoryRecord | None:
        return self.categories.get(category_id)


def asdict_shallow(draft: object) -> dict[str, object]:
    """Return dataclass fields without converting nested dataclasses."""
    return {name: getattr(draft, name) for name in draft.__dataclass_fields__}


@dataclass
class StorageLifecycle:
    """Records lifespan calls made against the object store."""

    checks: int = 0
    closed: bool = False

    async def check(self) -> bool:
        self.checks += 1
        return True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        aws_region=REGION,
        aws_s3_bucket=BUCKET,
        aws_access_key_id="test-access-key",
        aws_secret_access_key="test-secret-key",
        max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> InMemorySessionRegistry:
    return InMemorySessionRegistry(clock=clock)


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def asset_manager(
    object_store: InMemoryObjectStore, registry: InMemorySessionRegistry
) -> TempAssetManager:
    return TempAssetManager(store=object_store, registry=registry)


@pytest.fixture
def catalog_service(asset_manager: TempAssetManager) -> CatalogService:
    return CatalogService(
        asset_manager=asset_manager,
        product_repository=InMemoryProductRepository(),
        advertisement_repository=InMemoryAdvertisementRepository(),
        category_repository=InMemoryCategoryRepository(),
    )


@pytest.fixture
def storage_lifecycle() -> StorageLifecycle:
    return StorageLifecycle()


@pytest.fixture
def container(
    settings: Settings,
    asset_manager: TempAssetManager,
    catalog_service: CatalogService,
    storage_lifecycle: StorageLifecycle,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        asset_manager=asset_manager,
        catalog_service=catalog_service,
        sweeper=SessionSweeper(manager=asset_manager),
        check_storage=storage_lifecycle.check,
        close_resources=storage_lifecycle.close,
    )


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": "admin-token"}
