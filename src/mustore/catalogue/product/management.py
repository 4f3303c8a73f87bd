"""Product management — commands and handler for catalogue maintenance."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from mustore.catalogue.brand.brand import Brand
from mustore.catalogue.category.category import Category
from mustore.catalogue.product.product import Product
from mustore.domain import mustore
from mustore.utils.locking import lock_rows


@mustore.command(part_of="Product")
class CreateProduct:
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.01)
    old_price = Float()
    stock_quantity = Integer(default=0, min_value=0)
    slug = String(max_length=300)
    brand_id = Identifier()
    category_id = Identifier()
    subcategory_id = Identifier()
    description = Text()
    specifications = Text()
    is_featured = Boolean(default=False)
    is_new = Boolean(default=False)


@mustore.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    specifications = Text()
    price = Float(min_value=0.01)
    old_price = Float()
    is_featured = Boolean()
    is_new = Boolean()


@mustore.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@mustore.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@mustore.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


def _locked_product(repo, product_id):
    # Reservations write the same row; an unlocked read would overwrite them
    lock_rows(Product, [product_id])
    return repo.get(product_id)


@mustore.command_handler(part_of=Product)
class ProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo._dao.query.filter(sku=command.sku).all().items:
            raise ValidationError({"sku": [f"Product with SKU {command.sku!r} already exists"]})

        # Referenced brand and categories must exist
        if command.brand_id:
            current_domain.repository_for(Brand).get(command.brand_id)
        for category_id in (command.category_id, command.subcategory_id):
            if category_id:
                current_domain.repository_for(Category).get(category_id)

        product = Product.create(
            sku=command.sku,
            name=command.name,
            price=command.price,
            old_price=command.old_price,
            stock_quantity=command.stock_quantity or 0,
            slug=command.slug,
            brand_id=command.brand_id,
            category_id=command.category_id,
            subcategory_id=command.subcategory_id,
            description=command.description,
            specifications=command.specifications,
            is_featured=bool(command.is_featured),
            is_new=bool(command.is_new),
        )
        if repo._dao.query.filter(slug=product.slug).all().items:
            raise ValidationError({"slug": [f"Product slug {product.slug!r} is already taken"]})

        repo.add(product)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        repo = current_domain.repository_for(Product)
        product = _locked_product(repo, command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            specifications=command.specifications,
            price=command.price,
            old_price=command.old_price,
            is_featured=command.is_featured,
            is_new=command.is_new,
        )
        repo.add(product)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _locked_product(repo, command.product_id)
        product.restock(command.quantity)
        repo.add(product)
        return product.stock_quantity

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _locked_product(repo, command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _locked_product(repo, command.product_id)
        product.activate()
        repo.add(product)
