"""Brand aggregate and its management commands."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text
from protean.utils.globals import current_domain

from mustore.catalogue.shared import slugify
from mustore.domain import mustore


@mustore.aggregate
class Brand:
    name = String(required=True, max_length=100, unique=True)
    slug = String(required=True, max_length=120)
    country = String(max_length=100)
    description = Text()
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, name, country=None, description=None, slug=None):
        return cls(
            name=name,
            slug=slug or slugify(name),
            country=country,
            description=description,
            is_active=True,
            created_at=datetime.now(UTC),
        )


@mustore.command(part_of="Brand")
class CreateBrand:
    name = String(required=True, max_length=100)
    slug = String(max_length=120)
    country = String(max_length=100)
    description = Text()


@mustore.command_handler(part_of=Brand)
class BrandHandler:
    @handle(CreateBrand)
    def create_brand(self, command):
        repo = current_domain.repository_for(Brand)
        if repo._dao.query.filter(name=command.name).all().items:
            raise ValidationError({"name": [f"Brand {command.name!r} already exists"]})

        brand = Brand.create(
            name=command.name,
            slug=command.slug,
            country=command.country,
            description=command.description,
        )
        repo.add(brand)
        return str(brand.id)


def list_brands():
    """Active brands ordered by name."""
    repo = current_domain.repository_for(Brand)
    return repo._dao.query.filter(is_active=True).order_by("name").all().items
