"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from storefront_assets.adapters.s3_object_store import Boto3ObjectStore
from storefront_assets.adapters.supabase_advertisement_repository import (
    SupabaseAdvertisementRepository,
)
from storefront_assets.adapters.supabase_category_repository import (
    SupabaseCategoryRepository,
)
from storefront_assets.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from storefront_assets.config import Settings, normalize_prefix
from storefront_assets.services.assets import TempAssetManager
from storefront_assets.services.catalog import CatalogService
from storefront_assets.services.registry import InMemorySessionRegistry
from storefront_assets.services.sweeper import SessionSweeper


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    asset_manager: TempAssetManager
    catalog_service: CatalogService
    sweeper: SessionSweeper
    check_storage: Callable[[], Awaitable[bool]]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    object_store = Boto3ObjectStore.create(
        bucket=resolved_settings.aws_s3_bucket,
        region=resolved_settings.aws_region,
        access_key_id=resolved_settings.aws_access_key_id,
        secret_access_key=resolved_settings.aws_secret_access_key,
        endpoint_url=resolved_settings.aws_endpoint_url,
    )
    asset_manager = TempAssetManager(
        store=object_store,
        registry=InMemorySessionRegistry(),
        temp_prefix=normalize_prefix(resolved_settings.temp_prefix),
    )
    catalog_service = CatalogService(
        asset_manager=asset_manager,
        product_repository=SupabaseProductRepository(supabase_client),
        advertisement_repository=SupabaseAdvertisementRepository(supabase_client),
        category_repository=SupabaseCategoryRepository(supabase_client),
    )
    sweeper = SessionSweeper(
        manager=asset_manager,
        interval_seconds=resolved_settings.sweep_interval_seconds,
        idle_timeout_seconds=resolved_settings.session_idle_seconds,
        asset_ttl_seconds=resolved_settings.temp_asset_ttl_seconds,
    )

    async def close_resources() -> None:
        await object_store.close()

    return AppContainer(
        settings=resolved_settings,
        asset_manager=asset_manager,
        catalog_service=catalog_service,
        sweeper=sweeper,
        check_storage=object_store.check_bucket,
        close_resources=close_resources,
    )
