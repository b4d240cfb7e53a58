"""Enum definitions for invoice states."""

from enum import Enum


class InvoiceStatus(str, Enum):
    """Payment state of a provider invoice."""

    PENDING = "PENDIENTE"
    PAID = "PAGADO"
