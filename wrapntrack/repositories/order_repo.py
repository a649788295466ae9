# wrapntrack/repositories/order_repo.py
import uuid

from sqlmodel import Session, select

from wrapntrack.models.order import Order, OrderProduct


class OrderRepository:
    """
    Data access layer for orders and order_products.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: str) -> Order | None:
        return session.get(Order, order_id)

    def exists(self, session: Session, order_id: str) -> bool:
        return self.get_by_id(session, order_id) is not None

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Order lines ----

    def list_products_for_order(
        self,
        session: Session,
        order_id: str,
    ) -> list[OrderProduct]:
        stmt = (
            select(OrderProduct)
            .where(OrderProduct.order_id == order_id)
            .order_by(OrderProduct.line_id)
        )
        return session.exec(stmt).all()

    def create_products(
        self,
        session: Session,
        lines: list[OrderProduct],
    ) -> list[OrderProduct]:
        session.add_all(lines)
        session.flush()
        for line in lines:
            session.refresh(line)
        return lines
