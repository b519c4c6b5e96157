from . import invoices

__all__ = ["invoices"]
