"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
"""
from typing import List, Optional, Tuple
from product_service.domain.product import Product, ProductCreate, ProductUpdate
from product_service.core.database import get_db_connection_dict
from product_service.core.exceptions import InsufficientStockError


PRODUCT_COLUMNS = """
    id, name, description, price, stock_quantity, image_url,
    created_at, updated_at
"""

# Columns that may never be set to NULL by an update
NOT_NULL_UPDATE_FIELDS = {'name', 'price', 'stock_quantity'}
UPDATABLE_FIELDS = ['name', 'description', 'price', 'stock_quantity']


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map a database row to the Product domain model"""
        return Product(
            id=row['id'],
            name=row['name'],
            description=row.get('description'),
            price=row['price'],
            stock_quantity=row['stock_quantity'],
            image_url=row.get('image_url'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products, optionally filtered by a search term

        Args:
            search: Case-insensitive match on name or description
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if search:
                conditions.append("(name ILIKE %s OR description ILIKE %s)")
                search_term = f"%{search}%"
                params.extend([search_term, search_term])

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY id
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            rows = cursor.fetchall()
            products = [self._map_row_to_product(row) for row in rows]

            return products, total

        finally:
            cursor.close()
            conn.close()

    def create(self, data: ProductCreate) -> Product:
        """Insert a product and return it with its generated ID"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products (name, description, price, stock_quantity)
                VALUES (%s, %s, %s, %s)
                RETURNING {PRODUCT_COLUMNS}
            """, (data.name, data.description, data.price, data.stock_quantity))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, data: ProductUpdate) -> Optional[Product]:
        """
        Update only the fields present in the request

        Returns:
            Updated product, or None if it does not exist
        """
        changes = data.model_dump(exclude_unset=True)
        changes = {
            field: value for field, value in changes.items()
            if field in UPDATABLE_FIELDS
            and not (value is None and field in NOT_NULL_UPDATE_FIELDS)
        }

        if not changes:
            return self.find_by_id(product_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            set_clause = ", ".join(f"{field} = %s" for field in changes)
            params = list(changes.values()) + [product_id]

            cursor.execute(f"""
                UPDATE products
                SET {set_clause}, updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, params)

            row = cursor.fetchone()
            conn.commit()

            if not row:
                return None
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, product_id: int) -> bool:
        """Delete a product. Returns False if it did not exist."""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s RETURNING id", (product_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def deduct_stock(self, product_id: int, quantity: int) -> Optional[Product]:
        """
        Atomically decrement stock

        The UPDATE only matches while stock_quantity >= quantity, so two
        concurrent orders can never drive stock below zero.

        Returns:
            Updated product, or None if it does not exist

        Raises:
            InsufficientStockError: product exists but has too little stock
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET stock_quantity = stock_quantity - %s, updated_at = NOW()
                WHERE id = %s AND stock_quantity >= %s
                RETURNING {PRODUCT_COLUMNS}
            """, (quantity, product_id, quantity))

            row = cursor.fetchone()
            if row:
                conn.commit()
                return self._map_row_to_product(row)

            conn.rollback()

            cursor.execute("SELECT stock_quantity FROM products WHERE id = %s", (product_id,))
            current = cursor.fetchone()
            if not current:
                return None

            raise InsufficientStockError(product_id, quantity, current['stock_quantity'])

        finally:
            cursor.close()
            conn.close()

    def set_image_url(self, product_id: int, image_url: str) -> Optional[Product]:
        """Store the image URL of a product"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET image_url = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, (image_url, product_id))

            row = cursor.fetchone()
            conn.commit()

            if not row:
                return None
            return self._map_row_to_product(row)

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
