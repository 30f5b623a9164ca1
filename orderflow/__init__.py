"""Order lifecycle service: order creation against inventory, status transitions and the order audit trail."""

__version__ = "1.0.0"
