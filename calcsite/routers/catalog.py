from fastapi import APIRouter

from .. import catalog
from ..config import settings
from ..schemas import CatalogResponse, SitemapResponse

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("", response_model=CatalogResponse)
def get_catalog():
    """Home page data: categories with their calculators, the featured ones and the info pages."""
    return {
        "categories": catalog.grouped(),
        "popular": [catalog.get_entry(slug).to_dict() for slug in catalog.POPULAR_SLUGS],
        "pages": catalog.INFO_PAGES,
    }


@router.get("/sitemap", response_model=SitemapResponse)
def get_sitemap():
    return {"urls": catalog.sitemap_entries(settings.SITE_URL)}
