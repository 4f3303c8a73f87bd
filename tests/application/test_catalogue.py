"""Application tests for catalogue commands and product queries."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from mustore.catalogue.brand.brand import CreateBrand, list_brands
from mustore.catalogue.category.category import Category, CreateCategory, category_tree, get_category
from mustore.catalogue.product.management import (
    ActivateProduct,
    CreateProduct,
    DeactivateProduct,
    RestockProduct,
    UpdateProductDetails,
)
from mustore.catalogue.product.product import Product
from mustore.catalogue.product.queries import ProductFilter, get_product, list_products, similar_products


def _category(name, slug, parent_id=None):
    return current_domain.process(CreateCategory(name=name, slug=slug, parent_id=parent_id), asynchronous=False)


class TestBrands:
    def test_create_and_list(self):
        current_domain.process(CreateBrand(name="Yamaha"), asynchronous=False)
        current_domain.process(CreateBrand(name="Fender"), asynchronous=False)
        assert [b.name for b in list_brands()] == ["Fender", "Yamaha"]

    def test_duplicate_name_rejected(self):
        current_domain.process(CreateBrand(name="Yamaha"), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CreateBrand(name="Yamaha"), asynchronous=False)


class TestCategories:
    def test_tree(self):
        guitars = _category("Guitars", "guitars")
        _category("Electric", "electric", parent_id=guitars)
        _category("Drums", "drums")

        tree = category_tree()

        by_slug = {node["category"].slug: node for node in tree}
        assert set(by_slug) == {"guitars", "drums"}
        assert [c.slug for c in by_slug["guitars"]["subcategories"]] == ["electric"]

    def test_no_deep_nesting(self):
        guitars = _category("Guitars", "guitars")
        electric = _category("Electric", "electric", parent_id=guitars)
        with pytest.raises(ValidationError):
            _category("Seven string", "seven-string", parent_id=electric)

    def test_slug_must_be_unique(self):
        _category("Guitars", "guitars")
        with pytest.raises(ValidationError):
            _category("Guitars again", "guitars")

    def test_single_category_with_active_subcategories(self):
        guitars = _category("Guitars", "guitars")
        _category("Electric", "electric", parent_id=guitars)
        acoustic = _category("Acoustic", "acoustic", parent_id=guitars)
        _category("Drums", "drums")

        repo = current_domain.repository_for(Category)
        retired = repo.get(acoustic)
        retired.is_active = False
        repo.add(retired)

        node = get_category("guitars")

        assert node["category"].name == "Guitars"
        assert [c.slug for c in node["subcategories"]] == ["electric"]

    def test_unknown_category_slug(self):
        with pytest.raises(ObjectNotFoundError):
            get_category("harps")


class TestProductCommands:
    def test_create_product(self, make_product):
        product_id = make_product(sku="YAM-F310", name="Yamaha F310", price=15990, stock=10)
        product = current_domain.repository_for(Product).get(product_id)
        assert product.sku == "YAM-F310"
        assert product.stock_quantity == 10

    def test_duplicate_sku_rejected(self, make_product):
        make_product(sku="YAM-F310")
        with pytest.raises(ValidationError):
            make_product(sku="YAM-F310")

    def test_unknown_brand_rejected(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                CreateProduct(sku="ABC-1", name="Thing", price=10, brand_id="missing"), asynchronous=False
            )

    def test_restock_returns_new_stock(self, make_product):
        product_id = make_product(stock=2)
        stock = current_domain.process(RestockProduct(product_id=product_id, quantity=5), asynchronous=False)
        assert stock == 7

    def test_update_details(self, make_product):
        product_id = make_product(price=100)
        current_domain.process(
            UpdateProductDetails(product_id=product_id, price=120, old_price=150, is_featured=True),
            asynchronous=False,
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.price == 120
        assert product.old_price == 150
        assert product.is_featured is True

    def test_deactivate_and_activate(self, make_product):
        product_id = make_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).is_available is False
        current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).is_available is True


class TestProductQueries:
    def test_filters(self, make_product):
        guitars = _category("Guitars", "guitars")
        electric = _category("Electric", "electric", parent_id=guitars)
        strat = make_product(price=89990, name="Fender Stratocaster", category_id=guitars, subcategory_id=electric)
        make_product(price=15990, name="Yamaha F310", category_id=guitars)
        make_product(price=69990, name="Roland FP-30X", stock=0)

        assert list_products(ProductFilter(category="electric")).total == 1
        assert list_products(ProductFilter(category="guitars")).total == 2
        assert list_products(ProductFilter(in_stock=True)).total == 2
        assert list_products(ProductFilter(min_price=50000, max_price=90000)).total == 2
        assert [str(p.id) for p in list_products(ProductFilter(search="strat")).products] == [strat]

    def test_sorting_and_paging(self, make_product):
        for price in (300, 100, 200):
            make_product(price=price)

        page = list_products(ProductFilter(sort="price", order="ASC", limit=2))
        assert [p.price for p in page.products] == [100, 200]
        assert page.total == 3

        page = list_products(ProductFilter(sort="price", order="DESC", limit=2, offset=2))
        assert [p.price for p in page.products] == [100]

    def test_withdrawn_products_hidden(self, make_product):
        product_id = make_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert list_products().total == 0
        with pytest.raises(ObjectNotFoundError):
            get_product(product_id)

    @pytest.mark.parametrize(
        "criteria",
        [
            ProductFilter(sort="colour"),
            ProductFilter(order="SIDEWAYS"),
            ProductFilter(limit=0),
            ProductFilter(limit=101),
            ProductFilter(min_price=10, max_price=5),
        ],
    )
    def test_invalid_criteria(self, criteria):
        with pytest.raises(ValidationError):
            list_products(criteria)

    def test_unknown_category(self):
        with pytest.raises(ObjectNotFoundError):
            list_products(ProductFilter(category="harps"))

    def test_get_by_id_or_slug(self, make_product):
        product_id = make_product(name="Yamaha F310", sku="YAM-F310")
        assert str(get_product(product_id).id) == product_id
        assert str(get_product("yamaha-f310-yam-f310").id) == product_id

    def test_similar_products(self, make_product):
        guitars = _category("Guitars", "guitars")
        drums = _category("Drums", "drums")
        base = make_product(price=1000, category_id=guitars)
        close = make_product(price=1200, category_id=guitars)
        make_product(price=1400, category_id=guitars)  # more than 30% away
        make_product(price=1000, category_id=drums)

        assert [str(p.id) for p in similar_products(base)] == [close]
