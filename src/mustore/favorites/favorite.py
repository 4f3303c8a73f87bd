"""Favorite aggregate (a product a customer bookmarked) and its commands."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from mustore.catalogue.product.product import Product
from mustore.domain import mustore


@mustore.aggregate
class Favorite:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    created_at = DateTime()


@mustore.command(part_of="Favorite")
class AddFavorite:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@mustore.command(part_of="Favorite")
class RemoveFavorite:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


def _favorite_for(customer_id, product_id):
    dao = current_domain.repository_for(Favorite)._dao
    results = dao.query.filter(customer_id=customer_id, product_id=product_id).all().items
    return results[0] if results else None


@mustore.command_handler(part_of=Favorite)
class FavoriteHandler:
    @handle(AddFavorite)
    def add_favorite(self, command):
        current_domain.repository_for(Product).get(command.product_id)

        if _favorite_for(command.customer_id, command.product_id):
            raise ValidationError({"product_id": ["Product is already in favorites"]})

        favorite = Favorite(
            customer_id=command.customer_id,
            product_id=command.product_id,
            created_at=datetime.now(UTC),
        )
        current_domain.repository_for(Favorite).add(favorite)
        return str(favorite.id)

    @handle(RemoveFavorite)
    def remove_favorite(self, command):
        favorite = _favorite_for(command.customer_id, command.product_id)
        if favorite is None:
            raise ObjectNotFoundError("Product is not in favorites")
        current_domain.repository_for(Favorite)._dao.delete(favorite)


def favorites_for(customer_id):
    """The customer's favorites joined with their products, newest first."""
    favorites = current_domain.repository_for(Favorite)._dao.query.filter(customer_id=customer_id).all().items
    favorites = sorted(favorites, key=lambda f: f.created_at, reverse=True)

    products = current_domain.repository_for(Product)
    result = []
    for favorite in favorites:
        try:
            product = products.get(favorite.product_id)
        except ObjectNotFoundError:
            continue
        result.append({"favorite": favorite, "product": product})
    return result
