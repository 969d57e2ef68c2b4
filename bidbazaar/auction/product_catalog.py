"""
Product catalog: product records and their lifecycle status.
"""

import logging
import uuid
from typing import Dict, List, Optional

from .auction_event import Product, ProductStatus, ProductType
from .errors import InvalidAmountError, NotFoundError

logger = logging.getLogger(__name__)


class ProductCatalog:
    """Holds every product keyed by id, in creation order."""

    def __init__(self, products: Optional[Dict[str, Product]] = None):
        self.products: Dict[str, Product] = products if products is not None else {}

    def add_product(
        self,
        name: str,
        description: str,
        base_money_price: int,
        point_value: int,
        product_type: ProductType = ProductType.NORMAL,
        is_mystery: bool = False,
        image_url: Optional[str] = None
    ) -> Product:
        """
        Add a pending product to the catalog.

        Args:
            name: Display name
            description: Display description
            base_money_price: Informational price shown to viewers
            point_value: Points awarded to the winning team
            product_type: Reward routing on sale
            is_mystery: Hide identity until sold
            image_url: Reference to the uploaded image

        Returns:
            The new Product

        Raises:
            InvalidAmountError: If point_value is negative
        """
        if point_value < 0:
            raise InvalidAmountError(f"Point value must not be negative: {point_value}")

        product = Product(
            product_id=uuid.uuid4().hex,
            name=name,
            description=description,
            image_url=image_url,
            base_money_price=base_money_price,
            point_value=point_value,
            product_type=product_type,
            is_mystery=is_mystery
        )
        self.products[product.product_id] = product

        logger.info(
            f"Added product {product.name} [{product.product_type.value}] "
            f"worth {product.point_value} points"
        )
        return product

    def update_product(
        self,
        product_id: str,
        name: str,
        description: str,
        base_money_price: int,
        point_value: int,
        product_type: ProductType = ProductType.NORMAL,
        is_mystery: bool = False,
        image_url: Optional[str] = None
    ) -> Product:
        """
        Edit a product's details. Status and winner are not touched.

        The image is replaced only when a new image_url is given.
        """
        product = self.get_product(product_id)
        if point_value < 0:
            raise InvalidAmountError(f"Point value must not be negative: {point_value}")

        product.name = name
        product.description = description
        product.base_money_price = base_money_price
        product.point_value = point_value
        product.product_type = product_type
        product.is_mystery = is_mystery
        if image_url:
            product.image_url = image_url

        logger.info(f"Updated product {product_id} ({product.name})")
        return product

    def delete_product(self, product_id: str) -> Product:
        """Remove a product whatever its status."""
        product = self.get_product(product_id)
        del self.products[product_id]

        logger.info(f"Deleted product {product_id} ({product.name}, {product.status.value})")
        return product

    def get_product(self, product_id: str) -> Product:
        """
        Look up a product by id.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    def current_product(self) -> Optional[Product]:
        for product in self.products.values():
            if product.status == ProductStatus.CURRENT:
                return product
        return None

    def all_products(self) -> List[Product]:
        """All products in creation order."""
        return list(self.products.values())

    def __len__(self) -> int:
        return len(self.products)
