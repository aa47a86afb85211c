"""
Import catalog products from a JSON file into the database

The file is a list of products in the storefront's JSON shape (camelCase
keys such as inStock and totalStock). Existing products are updated in place,
matched by slug.

Usage:
    python -m storefront.scripts.import_catalog data/products.json --create-tables
"""
import argparse
import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import select

from storefront.core.database import create_tables, get_db_session
from storefront.core.logging import setup_logging
from storefront.database.models import Product

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "inStock": "in_stock",
    "totalStock": "total_stock",
}

COLUMNS = (
    "slug", "title", "description", "price", "currency", "collection", "images", "sizes", "colors",
    "tags", "fabric", "care", "shipping", "featured", "in_stock", "total_stock",
)


def parse_product(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize one JSON product into Product column values

    Raises:
        ValueError: if slug, title, collection or price is missing
    """
    values = {FIELD_MAP.get(key, key): value for key, value in data.items()}

    missing = [key for key in ("slug", "title", "collection", "price") if values.get(key) in (None, "")]
    if missing:
        raise ValueError(f"Product {data.get('slug', '?')} is missing {', '.join(missing)}")

    parsed = {key: values[key] for key in COLUMNS if key in values}
    parsed["price"] = int(parsed["price"])
    for key in ("images", "sizes", "colors", "tags"):
        parsed[key] = list(parsed.get(key) or [])
    for key in ("description", "fabric", "care", "shipping"):
        parsed[key] = parsed.get(key) or ""
    parsed["featured"] = bool(parsed.get("featured", False))
    parsed["in_stock"] = bool(parsed.get("in_stock", True))
    return parsed


def load_products(path: Path) -> List[Dict[str, Any]]:
    """Read and parse a catalog JSON file"""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of products")
    return [parse_product(item) for item in raw]


async def import_products(products: List[Dict[str, Any]]) -> Dict[str, int]:
    """Upsert products by slug"""
    stats = {"created": 0, "updated": 0}

    async with get_db_session() as session:
        for values in products:
            result = await session.execute(select(Product).where(Product.slug == values["slug"]))
            product = result.scalar_one_or_none()

            if product is None:
                session.add(Product(**values))
                stats["created"] += 1
                logger.info(f"Created product: {values['slug']}")
            else:
                for key, value in values.items():
                    setattr(product, key, value)
                product.updated_at = datetime.utcnow()
                stats["updated"] += 1
                logger.info(f"Updated product: {values['slug']}")

    return stats


async def run(path: Path, ensure_tables: bool) -> Dict[str, int]:
    if ensure_tables:
        await create_tables()
    products = load_products(path)
    logger.info(f"Loaded {len(products)} products from {path}")
    return await import_products(products)


def main():
    """Main import function"""
    parser = argparse.ArgumentParser(description="Import catalog products from JSON")
    parser.add_argument("file", type=Path, help="Path to the products JSON file")
    parser.add_argument("--create-tables", action="store_true", help="Create tables before importing")
    args = parser.parse_args()

    setup_logging()
    stats = asyncio.run(run(args.file, args.create_tables))
    logger.info(f"Import complete: {stats['created']} created, {stats['updated']} updated")


if __name__ == "__main__":
    main()
