"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and their items.
Returns Order domain models with items attached.
"""
from typing import Any, Dict, List, Optional, Tuple
from decimal import Decimal

from order_service.domain.order import Order, OrderItem, OrderStatus
from order_service.core.database import get_db_connection_dict


ORDER_COLUMNS = """
    id, user_id, order_date, status, total_amount, shipping_address,
    created_at, updated_at
"""

ITEM_COLUMNS = """
    id, order_id, product_id, quantity, price_at_purchase, item_total
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    """

    def _load_items(self, cursor, order_ids: List[int]) -> Dict[int, List[OrderItem]]:
        """Fetch the items of several orders in one query, grouped by order_id"""
        if not order_ids:
            return {}

        cursor.execute(f"""
            SELECT {ITEM_COLUMNS}
            FROM order_items
            WHERE order_id = ANY(%s)
            ORDER BY order_id, id
        """, (order_ids,))

        items_by_order = {}
        for row in cursor.fetchall():
            items_by_order.setdefault(row['order_id'], []).append(OrderItem(**dict(row)))

        return items_by_order

    def create(
        self,
        user_id: int,
        shipping_address: Optional[str],
        lines: List[Dict[str, Any]],
        total_amount: Decimal,
        status: OrderStatus = OrderStatus.PENDING
    ) -> Order:
        """
        Insert an order and its items in one transaction

        Args:
            lines: dicts with product_id, quantity, price_at_purchase, item_total
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO orders (user_id, status, total_amount, shipping_address)
                VALUES (%s, %s, %s, %s)
                RETURNING {ORDER_COLUMNS}
            """, (user_id, status.value, total_amount, shipping_address))
            order_row = cursor.fetchone()

            items = []
            for line in lines:
                cursor.execute(f"""
                    INSERT INTO order_items (
                        order_id, product_id, quantity, price_at_purchase, item_total
                    ) VALUES (%s, %s, %s, %s, %s)
                    RETURNING {ITEM_COLUMNS}
                """, (
                    order_row['id'],
                    line['product_id'],
                    line['quantity'],
                    line['price_at_purchase'],
                    line['item_total']
                ))
                items.append(OrderItem(**dict(cursor.fetchone())))

            conn.commit()
            return Order(**{**dict(order_row), 'items': items})

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID, items included

        Returns:
            Order or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE id = %s
            """, (order_id,))

            row = cursor.fetchone()
            if not row:
                return None

            items = self._load_items(cursor, [row['id']])
            return Order(**{**dict(row), 'items': items.get(row['id'], [])})

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Items for the whole page are loaded with a single query.

        Returns:
            Tuple of (list of orders, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params = []

            if user_id is not None:
                conditions.append("user_id = %s")
                params.append(user_id)

            if status:
                conditions.append("status = %s")
                params.append(status)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE {where_clause}
                ORDER BY order_date DESC, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])
            order_rows = cursor.fetchall()

            items_by_order = self._load_items(cursor, [row['id'] for row in order_rows])

            orders = [
                Order(**{**dict(row), 'items': items_by_order.get(row['id'], [])})
                for row in order_rows
            ]
            return orders, total

        finally:
            cursor.close()
            conn.close()

    def find_items(self, order_id: int) -> Optional[List[OrderItem]]:
        """
        Items of one order

        Returns:
            List of items, or None if the order does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT id FROM orders WHERE id = %s", (order_id,))
            if not cursor.fetchone():
                return None

            return self._load_items(cursor, [order_id]).get(order_id, [])

        finally:
            cursor.close()
            conn.close()

    def update_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        """
        Change the status of an order

        Returns:
            Updated order, or None if it does not exist
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE orders
                SET status = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING {ORDER_COLUMNS}
            """, (status.value, order_id))

            row = cursor.fetchone()
            if not row:
                conn.rollback()
                return None

            items = self._load_items(cursor, [order_id])
            conn.commit()
            return Order(**{**dict(row), 'items': items.get(order_id, [])})

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, order_id: int) -> bool:
        """Delete an order; its items go with it (ON DELETE CASCADE)"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM orders WHERE id = %s RETURNING id", (order_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> Dict[str, Any]:
        """
        Order statistics

        Returns:
            Dict with totals and a breakdown by status
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            # Failed and cancelled orders bring no revenue
            cursor.execute("""
                SELECT
                    COUNT(*) as total_orders,
                    COALESCE(SUM(total_amount) FILTER (WHERE status NOT IN ('failed', 'cancelled')), 0) as total_revenue
                FROM orders
            """)
            totals = cursor.fetchone()

            cursor.execute("""
                SELECT status, COUNT(*) as count
                FROM orders
                GROUP BY status
                ORDER BY count DESC
            """)
            by_status = cursor.fetchall()

            return {
                'total_orders': totals['total_orders'],
                'total_revenue': float(totals['total_revenue']),
                'by_status': {row['status']: row['count'] for row in by_status}
            }

        finally:
            cursor.close()
            conn.close()
