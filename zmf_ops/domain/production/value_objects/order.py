"""Order line item reference carried by production tasks."""

from uuid import UUID

from ...shared.base import ValueObject


class OrderItemRef(ValueObject):
    """The imported order line a task produces. Only the title is parsed here."""

    id: UUID | None = None
    product_name: str = ""
    order_number: str | None = None
