"""Demo catalogue: a handful of brands, categories and instruments."""

import json

import structlog
from protean.utils.globals import current_domain

from mustore.catalogue.brand.brand import Brand, CreateBrand
from mustore.catalogue.category.category import CreateCategory
from mustore.catalogue.product.management import CreateProduct
from mustore.catalogue.product.product import Product

logger = structlog.get_logger(__name__)

BRANDS = [
    {"name": "Yamaha", "country": "Japan"},
    {"name": "Fender", "country": "USA"},
    {"name": "Gibson", "country": "USA"},
    {"name": "Roland", "country": "Japan"},
    {"name": "Pearl", "country": "Japan"},
]

CATEGORIES = [
    {"name": "Guitars", "slug": "guitars", "children": [("Acoustic", "acoustic"), ("Electric", "electric")]},
    {"name": "Keyboards", "slug": "keyboards", "children": [("Digital pianos", "digital-pianos")]},
    {"name": "Drums", "slug": "drums", "children": [("Drum kits", "drum-kits")]},
]

PRODUCTS = [
    {
        "sku": "YAM-F310",
        "name": "Yamaha F310",
        "brand": "Yamaha",
        "subcategory": "acoustic",
        "price": 15990,
        "old_price": 18990,
        "stock_quantity": 10,
        "description": "Dreadnought acoustic guitar with a bright, balanced voice.",
        "specifications": {"Top": "Spruce", "Back and sides": "Meranti", "Frets": "20"},
        "is_featured": True,
    },
    {
        "sku": "FEN-STRAT-PLR",
        "name": "Fender Player Stratocaster",
        "brand": "Fender",
        "subcategory": "electric",
        "price": 89990,
        "stock_quantity": 5,
        "description": "The classic Stratocaster sound in the Player series.",
        "specifications": {"Body": "Alder", "Neck": "Maple", "Frets": "22"},
        "is_featured": True,
        "is_new": True,
    },
    {
        "sku": "GIB-LP-STD",
        "name": "Gibson Les Paul Standard",
        "brand": "Gibson",
        "subcategory": "electric",
        "price": 249990,
        "stock_quantity": 2,
        "description": "Humbucker power and endless sustain.",
        "specifications": {"Body": "Mahogany", "Top": "Maple"},
    },
    {
        "sku": "ROL-FP30X",
        "name": "Roland FP-30X",
        "brand": "Roland",
        "subcategory": "digital-pianos",
        "price": 69990,
        "stock_quantity": 4,
        "description": "Portable digital piano with 88 weighted keys.",
        "specifications": {"Keys": "88", "Polyphony": "256"},
        "is_new": True,
    },
    {
        "sku": "PRL-EXPORT",
        "name": "Pearl Export EXX",
        "brand": "Pearl",
        "subcategory": "drum-kits",
        "price": 74990,
        "stock_quantity": 3,
        "description": "Five-piece drum kit with hardware.",
        "specifications": {"Pieces": "5", "Shells": "Poplar/Asian Mahogany"},
    },
]


def seed_catalogue() -> dict:
    """Create the demo catalogue unless products already exist. Returns counts."""
    if current_domain.repository_for(Product)._dao.query.all().items:
        logger.info("Catalogue already seeded, skipping")
        return {"brands": 0, "categories": 0, "products": 0}

    brand_ids = {
        brand["name"]: current_domain.process(CreateBrand(**brand), asynchronous=False) for brand in BRANDS
    }
    # Subcategory slug -> (parent id, subcategory id)
    categories = {}
    for category in CATEGORIES:
        parent_id = current_domain.process(
            CreateCategory(name=category["name"], slug=category["slug"]), asynchronous=False
        )
        for name, slug in category["children"]:
            child_id = current_domain.process(
                CreateCategory(name=name, slug=slug, parent_id=parent_id), asynchronous=False
            )
            categories[slug] = (parent_id, child_id)

    for product in PRODUCTS:
        data = dict(product)
        parent_id, child_id = categories[data.pop("subcategory")]
        current_domain.process(
            CreateProduct(
                brand_id=brand_ids[data.pop("brand")],
                category_id=parent_id,
                subcategory_id=child_id,
                specifications=json.dumps(data.pop("specifications"), ensure_ascii=False),
                **data,
            ),
            asynchronous=False,
        )

    counts = {
        "brands": len(current_domain.repository_for(Brand)._dao.query.all().items),
        "categories": sum(1 + len(c["children"]) for c in CATEGORIES),
        "products": len(PRODUCTS),
    }
    logger.info("Catalogue seeded", **counts)
    return counts
