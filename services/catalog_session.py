"""
Catalog unit of work.

Reads go straight to Supabase and are cached in identity maps, so the
same barcode always resolves to the same Product object within one
session. Writes are staged in memory and sent in a single call to the
catalog commit function, which applies them in one transaction.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from supabase import Client

from config import get_supabase_client, settings
from models.catalog import Supplier, Category, Product, ProductPrice
from models.inventory_session import InventorySession
from exceptions import DatabaseError, ProductBarcodeExistsError
from utils.number_utils import to_decimal

logger = structlog.get_logger(__name__)

PRODUCT_SELECT = "*, suppliers(name), categories(name)"


def _decimal_json(value) -> Optional[str]:
    return str(value) if value is not None else None


def product_row(product: Product) -> dict:
    """Serialize a product for the commit payload."""
    return {
        "barcode": product.barcode,
        "item_number": product.item_number,
        "product_name": product.product_name,
        "second_product_name": product.second_product_name,
        "purchase_price": _decimal_json(product.purchase_price),
        "retail_price": _decimal_json(product.retail_price),
        "stock_quantity": _decimal_json(product.stock_quantity),
        "supplier_name": product.supplier.name if product.supplier else None,
        "category_name": product.category.name if product.category else None,
    }


def price_row(price: ProductPrice) -> dict:
    """Serialize a price history record for the commit payload."""
    return {
        "product_barcode": price.product_barcode,
        "price_type": price.price_type.value,
        "price": _decimal_json(price.price),
        "effective_at": price.effective_at.isoformat(),
        "source": price.source,
        "note": price.note,
        "created_at": price.created_at.isoformat(),
    }


def session_row(inventory: InventorySession) -> dict:
    """Serialize an inventory session for the commit payload."""
    return {
        "id": inventory.id,
        "title": inventory.title,
        "supplier": inventory.supplier,
        "category": inventory.category,
        "is_manual_entry": inventory.is_manual_entry,
        "data": inventory.data,
        "sync_status": inventory.sync_status.value,
        "was_exported": inventory.was_exported,
        "updated_at": inventory.updated_at.isoformat() if inventory.updated_at else None,
    }


class CatalogSession:
    """
    One unit of work against the catalog.

    Nothing is visible to other readers until commit() succeeds.
    After commit() or rollback() the session starts over empty.
    """

    def __init__(self, client: Optional[Client] = None):
        self.db = client if client is not None else get_supabase_client()
        self._clear()

    def _clear(self) -> None:
        self._products: dict[str, Product] = {}
        self._loaded_rows: dict[str, dict] = {}
        self._new_products: list[str] = []
        self._suppliers: dict[str, Supplier] = {}
        self._new_suppliers: list[str] = []
        self._categories: dict[str, Category] = {}
        self._new_categories: list[str] = []
        self._prices: list[ProductPrice] = []
        self._sessions: dict[str, InventorySession] = {}
        self._saved_sessions: list[str] = []

    # ===================
    # PRODUCTS
    # ===================

    def fetch_products(self) -> list[Product]:
        """
        Load the whole catalog.

        Returns:
            Products ordered by barcode, including products staged in
            this session and not yet committed.
        """
        logger.debug("fetching_products")

        try:
            result = (
                self.db.table("products")
                .select(PRODUCT_SELECT)
                .order("barcode")
                .execute()
            )
        except Exception as e:
            logger.error("fetch_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        for row in result.data:
            self._register_product(row)

        products = sorted(self._products.values(), key=lambda p: p.barcode)
        logger.debug("products_fetched", count=len(products))
        return products

    def get_product(self, barcode: str) -> Optional[Product]:
        """
        Look up one product by barcode.

        Returns:
            The session's Product for that barcode, or None
        """
        if barcode in self._products:
            return self._products[barcode]

        try:
            result = (
                self.db.table("products")
                .select(PRODUCT_SELECT)
                .eq("barcode", barcode)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_failed", barcode=barcode, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return self._register_product(result.data[0])

    def add_product(self, product: Product) -> Product:
        """Stage a new product for insertion."""
        if product.barcode in self._products:
            raise ProductBarcodeExistsError(product.barcode)

        self._products[product.barcode] = product
        self._new_products.append(product.barcode)
        return product

    def _register_product(self, row: dict) -> Product:
        barcode = row["barcode"]
        if barcode in self._products:
            return self._products[barcode]

        supplier = None
        if row.get("suppliers"):
            supplier = self._register_supplier(
                row["suppliers"]["name"], row.get("supplier_id")
            )

        category = None
        if row.get("categories"):
            category = self._register_category(
                row["categories"]["name"], row.get("category_id")
            )

        product = Product(
            id=row.get("id"),
            barcode=barcode,
            item_number=row.get("item_number"),
            product_name=row.get("product_name"),
            second_product_name=row.get("second_product_name"),
            purchase_price=to_decimal(row.get("purchase_price")),
            retail_price=to_decimal(row.get("retail_price")),
            stock_quantity=to_decimal(row.get("stock_quantity")),
            supplier=supplier,
            category=category,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
        self._products[barcode] = product
        self._loaded_rows[barcode] = product_row(product)
        return product

    # ===================
    # SUPPLIERS / CATEGORIES
    # ===================

    def find_supplier(self, name: str) -> Optional[Supplier]:
        """Exact, case-sensitive lookup by name."""
        if name in self._suppliers:
            return self._suppliers[name]

        row = self._find_by_name("suppliers", name)
        if row is None:
            return None
        return self._register_supplier(row["name"], row.get("id"))

    def add_supplier(self, supplier: Supplier) -> Supplier:
        """Stage a new supplier for insertion."""
        self._suppliers[supplier.name] = supplier
        self._new_suppliers.append(supplier.name)
        return supplier

    def find_category(self, name: str) -> Optional[Category]:
        """Exact, case-sensitive lookup by name."""
        if name in self._categories:
            return self._categories[name]

        row = self._find_by_name("categories", name)
        if row is None:
            return None
        return self._register_category(row["name"], row.get("id"))

    def add_category(self, category: Category) -> Category:
        """Stage a new category for insertion."""
        self._categories[category.name] = category
        self._new_categories.append(category.name)
        return category

    def _find_by_name(self, table: str, name: str) -> Optional[dict]:
        try:
            result = (
                self.db.table(table)
                .select("*")
                .eq("name", name)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("find_by_name_failed", table=table, name=name, error=str(e))
            raise DatabaseError("select", str(e))

        return result.data[0] if result.data else None

    def _register_supplier(self, name: str, supplier_id: Optional[str]) -> Supplier:
        if name not in self._suppliers:
            self._suppliers[name] = Supplier(id=supplier_id, name=name)
        return self._suppliers[name]

    def _register_category(self, name: str, category_id: Optional[str]) -> Category:
        if name not in self._categories:
            self._categories[name] = Category(id=category_id, name=name)
        return self._categories[name]

    # ===================
    # PRICE HISTORY
    # ===================

    def add_price(self, price: ProductPrice) -> ProductPrice:
        """Stage a price history record."""
        self._prices.append(price)
        return price

    def get_price_history(self, barcode: str) -> list[ProductPrice]:
        """Committed price records for a product, newest first."""
        try:
            result = (
                self.db.table("product_prices")
                .select("*")
                .eq("product_barcode", barcode)
                .order("effective_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_price_history_failed", barcode=barcode, error=str(e))
            raise DatabaseError("select", str(e))

        return [ProductPrice(**row) for row in result.data]

    # ===================
    # INVENTORY SESSIONS
    # ===================

    def get_inventory_session(self, session_id: str) -> Optional[InventorySession]:
        """Load an inventory session, or None if it does not exist."""
        if session_id in self._sessions:
            return self._sessions[session_id]

        try:
            result = (
                self.db.table("inventory_sessions")
                .select("*")
                .eq("id", session_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_inventory_session_failed", session_id=session_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None

        inventory = InventorySession(**result.data[0])
        self._sessions[session_id] = inventory
        return inventory

    def save_inventory_session(self, inventory: InventorySession) -> None:
        """Stage an inventory session to be written on commit."""
        inventory.updated_at = datetime.now(timezone.utc)
        self._sessions[inventory.id] = inventory
        if inventory.id not in self._saved_sessions:
            self._saved_sessions.append(inventory.id)

    # ===================
    # COMMIT / ROLLBACK
    # ===================

    def _dirty_products(self) -> list[Product]:
        return [
            product
            for barcode, product in self._products.items()
            if barcode in self._loaded_rows
            and product_row(product) != self._loaded_rows[barcode]
        ]

    def pending_changes(self) -> dict[str, int]:
        """Counts of staged writes by kind."""
        return {
            "suppliers": len(self._new_suppliers),
            "categories": len(self._new_categories),
            "products_created": len(self._new_products),
            "products_updated": len(self._dirty_products()),
            "prices": len(self._prices),
            "inventory_sessions": len(self._saved_sessions),
        }

    def build_payload(self) -> dict[str, list]:
        """Everything staged, in the shape the commit function expects."""
        return {
            "suppliers": [{"name": name} for name in self._new_suppliers],
            "categories": [{"name": name} for name in self._new_categories],
            "products": [
                product_row(self._products[barcode]) for barcode in self._new_products
            ] + [product_row(product) for product in self._dirty_products()],
            "prices": [price_row(price) for price in self._prices],
            "inventory_sessions": [
                session_row(self._sessions[session_id])
                for session_id in self._saved_sessions
            ],
        }

    def commit(self) -> None:
        """
        Write all staged changes atomically.

        Raises:
            DatabaseError: If the commit function fails; nothing is written
        """
        payload = self.build_payload()
        counts = {key: len(rows) for key, rows in payload.items()}

        if not any(counts.values()):
            logger.debug("commit_skipped_no_changes")
            self._clear()
            return

        logger.info("committing_catalog_changes", **counts)

        try:
            self.db.rpc(
                settings.catalog_commit_function,
                {"changes": payload}
            ).execute()
        except Exception as e:
            logger.error("commit_failed", error=str(e), **counts)
            self._clear()
            raise DatabaseError("commit", str(e))

        logger.info("catalog_changes_committed", **counts)
        self._clear()

    def rollback(self) -> None:
        """Discard everything staged since the last commit."""
        logger.info("catalog_session_rolled_back", **self.pending_changes())
        self._clear()

    def reset(self) -> None:
        """Forget everything loaded so the next read hits the database."""
        self._clear()
