# wrapntrack/storefront/catalog.py
import logging
import re

from pydantic import BaseModel

from wrapntrack.storefront.api_client import ApiClient, ApiError

logger = logging.getLogger(__name__)

# Matches the server's default `limit` on GET /api/inventory
INVENTORY_PAGE_SIZE = 200

CATEGORIES: list[str] = [
    "packaging",
    "beverages",
    "food",
    "kitchenware",
    "home decor",
    "face & body",
    "clothing",
    "customization",
    "others",
]

# Gift box styles and the content categories each one is built from
STYLE_CATEGORIES: dict[str, list[str]] = {
    "Modern Romantic": ["packaging", "beverages", "food"],
    "Boho Chic": ["packaging", "home decor", "face & body"],
    "Classic Elegance": ["packaging", "beverages", "kitchenware"],
    "Minimalist Modern": ["packaging", "food", "customization"],
}

# Product names used by older order forms, kept so those names still
# resolve when the live catalog has renamed or dropped them.
LEGACY_SKU_ALIASES: dict[str, str] = {
    "kraft box": "PKG-001",
    "rigid box": "PKG-002",
    "red wine": "BEV-001",
    "cold brew coffee": "BEV-002",
    "artisan cookies": "FOOD-001",
    "dark chocolate bar": "FOOD-002",
    "ceramic mug": "KIT-001",
    "scented candle": "DEC-001",
    "lip balm": "FB-001",
    "personalized letter card": "CUS-001",
}


def _key(value: str) -> str:
    return re.sub(r"[^a-z0-9&]+", " ", value.lower()).strip()


class Product(BaseModel):
    sku: str
    name: str
    category: str
    unit_price: float = 0.0


class Catalog:
    """
    The storefront's one view of what can be ordered.

    Holds the full inventory, the staff-curated available products per
    category, the style templates and the legacy name aliases. SKU
    lookups go through resolve_sku() and nowhere else.
    """

    def __init__(
        self,
        api: ApiClient,
        styles: dict[str, list[str]] | None = None,
        aliases: dict[str, str] | None = None,
        page_size: int = INVENTORY_PAGE_SIZE,
    ):
        self.api = api
        self.page_size = page_size
        self.styles = styles if styles is not None else STYLE_CATEGORIES
        self.aliases = {
            _key(k): v for k, v in (aliases if aliases is not None else LEGACY_SKU_ALIASES).items()
        }
        self.inventory: list[Product] = []
        self.available: dict[str, list[Product]] = {}
        self.loaded = False

    def _fetch_inventory(self) -> list[dict]:
        # The endpoint is paged; keep going until a short page comes back.
        items: list[dict] = []
        skip = 0
        while True:
            page = self.api.get(
                "/api/inventory", params={"skip": skip, "limit": self.page_size}
            )
            items.extend(page)
            if len(page) < self.page_size:
                return items
            skip += self.page_size

    def load(self) -> bool:
        """
        Fetch the whole inventory and the curated availability. On failure
        whatever was loaded before is kept and False is returned.
        """
        try:
            items = self._fetch_inventory()
            curated = self.api.get("/api/available-inventory")
        except ApiError as exc:
            logger.warning("Failed to load catalog: %s", exc)
            return False

        self.inventory = [
            Product(sku=i["sku"], name=i["name"], category=i["category"], unit_price=i["unit_price"])
            for i in items
        ]
        self.available = {
            _key(category): [
                Product(sku=p["sku"], name=p["name"], category=category, unit_price=p["unit_price"])
                for p in products
            ]
            for category, products in (curated.get("available") or {}).items()
        }
        self.loaded = True
        return True

    def style_categories(self, style: str) -> list[str]:
        wanted = _key(style)
        for name, categories in self.styles.items():
            if _key(name) == wanted:
                return categories
        return []

    def available_in(self, category: str) -> list[Product]:
        return self.available.get(_key(category), [])

    def get_style_products(self, style: str, per_category: int = 3) -> list[Product]:
        """
        Up to `per_category` curated products for each of the style's
        categories. Empty when the style is unknown or nothing is curated.
        """
        products: list[Product] = []
        for category in self.style_categories(style):
            products.extend(self.available_in(category)[:per_category])
        return products

    def resolve_sku(self, name_or_sku: str) -> str | None:
        """
        Live data first (exact SKU, then name in curated products, then
        name in the full inventory), legacy aliases last.
        """
        if not name_or_sku:
            return None
        raw = name_or_sku.strip()
        for product in self.inventory:
            if product.sku == raw:
                return product.sku

        wanted = _key(raw)
        for products in self.available.values():
            for product in products:
                if _key(product.name) == wanted:
                    return product.sku
        for product in self.inventory:
            if _key(product.name) == wanted:
                return product.sku
        return self.aliases.get(wanted)
