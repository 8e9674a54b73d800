"""
Product Hooks
Catalog list with filters and single-product detail.
"""

from typing import Optional

from ..models import ProductsPage, normalize_product
from .base import ResourceHook


class ProductsHook(ResourceHook[ProductsPage]):
    error_message = "Failed to load products"

    def __init__(self, client, filters=None):
        super().__init__(client.get_products, filters)

    def transform(self, result) -> ProductsPage:
        return ProductsPage.from_dict(result)

    @property
    def products(self) -> list:
        return self.data.products if self.data else []


class ProductHook(ResourceHook[dict]):
    error_message = "Failed to load product details"

    def __init__(self, client, product_id: Optional[str]):
        super().__init__(client.get_product, product_id)
        self.product_id = product_id

    def refetch(self, filters=None):
        if not self.product_id:
            self.error = "Product id is not specified"
            self.is_loading = False
            return None
        return self._start(self.product_id)

    def transform(self, result) -> dict:
        return normalize_product(result)
