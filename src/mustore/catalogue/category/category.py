"""Category aggregate (with one level of subcategories) and its commands."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from mustore.catalogue.shared import slugify
from mustore.domain import mustore


@mustore.aggregate
class Category:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=120, unique=True)
    parent_id = Identifier()
    description = Text()
    sort_order = Integer(default=0)
    is_active = Boolean(default=True)

    @classmethod
    def create(cls, name, parent_id=None, description=None, sort_order=0, slug=None):
        return cls(
            name=name,
            slug=slug or slugify(name),
            parent_id=parent_id,
            description=description,
            sort_order=sort_order,
            is_active=True,
        )


@mustore.command(part_of="Category")
class CreateCategory:
    name = String(required=True, max_length=100)
    slug = String(max_length=120)
    parent_id = Identifier()
    description = Text()
    sort_order = Integer(default=0)


@mustore.command_handler(part_of=Category)
class CategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)

        if command.parent_id:
            parent = repo.get(command.parent_id)
            if parent.parent_id:
                raise ValidationError({"parent_id": ["Subcategories cannot be nested further"]})

        category = Category.create(
            name=command.name,
            slug=command.slug,
            parent_id=command.parent_id,
            description=command.description,
            sort_order=command.sort_order or 0,
        )
        if repo._dao.query.filter(slug=category.slug).all().items:
            raise ValidationError({"slug": [f"Category slug {category.slug!r} is already taken"]})

        repo.add(category)
        return str(category.id)


def get_category_by_slug(slug):
    results = current_domain.repository_for(Category)._dao.query.filter(slug=slug, is_active=True).all().items
    if not results:
        raise ObjectNotFoundError(f"Category {slug!r} does not exist")
    return results[0]


def category_tree():
    """Top-level categories, each with its active subcategories."""
    categories = (
        current_domain.repository_for(Category)._dao.query.filter(is_active=True).order_by("sort_order").all().items
    )
    children = {}
    for category in categories:
        if category.parent_id:
            children.setdefault(str(category.parent_id), []).append(category)

    return [
        {"category": category, "subcategories": children.get(str(category.id), [])}
        for category in categories
        if not category.parent_id
    ]


def get_category(slug):
    """One active category with its active subcategories."""
    category = get_category_by_slug(slug)
    subcategories = (
        current_domain.repository_for(Category)
        ._dao.query.filter(parent_id=str(category.id), is_active=True)
        .order_by("sort_order")
        .all()
        .items
    )
    return {"category": category, "subcategories": subcategories}
