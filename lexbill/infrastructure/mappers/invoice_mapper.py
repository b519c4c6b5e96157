"""
Invoice mapper for converting between domain entities and database models.
"""

from lexbill.domain.models.invoice import Invoice, InvoiceItem, Payment, InvoiceStatus, PaymentMethod
from lexbill.infrastructure.db.models import InvoiceModel, InvoiceItemModel, PaymentModel


class InvoiceMapper:
    """Maps between Invoice domain entity and InvoiceModel database model."""

    def domain_to_model(self, invoice: Invoice) -> InvoiceModel:
        """Convert a new Invoice domain entity to InvoiceModel."""
        model = InvoiceModel(created_at=invoice.created_at)
        self.update_model(model, invoice)
        return model

    def update_model(self, model: InvoiceModel, invoice: Invoice) -> None:
        """
        Copy the aggregate onto an existing row.
        Items are replaced wholesale; payments are append-only, so only new
        ledger entries are added.
        """
        model.client_id = invoice.client_id
        model.case_id = invoice.case_id
        model.invoice_number = invoice.invoice_number
        model.status = invoice.status
        model.subtotal = invoice.subtotal
        model.tax_rate = invoice.tax_rate
        model.tax_amount = invoice.tax_amount
        model.discount = invoice.discount
        model.total = invoice.total
        model.amount_paid = invoice.amount_paid
        model.balance = invoice.balance
        model.issue_date = invoice.issue_date
        model.due_date = invoice.due_date
        model.sent_date = invoice.sent_date
        model.notes = invoice.notes
        model.terms = invoice.terms
        model.is_deleted = invoice.is_deleted
        model.created_by = invoice.created_by
        model.version = invoice.version
        model.updated_at = invoice.updated_at

        model.items = [
            self._item_domain_to_model(item, position)
            for position, item in enumerate(invoice.items)
        ]

        for position in range(len(model.payments), len(invoice.payments)):
            model.payments.append(self._payment_domain_to_model(invoice.payments[position], position))

    def model_to_domain(self, model: InvoiceModel) -> Invoice:
        """Convert InvoiceModel to Invoice domain entity."""
        invoice = Invoice(
            client_id=model.client_id,
            invoice_number=model.invoice_number,
            created_by=model.created_by,
            issue_date=model.issue_date,
            due_date=model.due_date,
            case_id=model.case_id,
            status=InvoiceStatus(model.status),
            id=model.id,
            version=model.version or 1
        )
        if model.created_at:
            invoice.created_at = model.created_at
        if model.updated_at:
            invoice.updated_at = model.updated_at

        invoice.sent_date = model.sent_date
        invoice.items = [self._item_model_to_domain(item) for item in model.items]
        invoice.payments = [self._payment_model_to_domain(payment) for payment in model.payments]
        invoice.subtotal = model.subtotal or 0.0
        invoice.tax_rate = model.tax_rate or 0.0
        invoice.tax_amount = model.tax_amount or 0.0
        invoice.discount = model.discount or 0.0
        invoice.total = model.total or 0.0
        invoice.amount_paid = model.amount_paid or 0.0
        invoice.balance = model.balance or 0.0
        invoice.notes = model.notes
        invoice.terms = model.terms
        invoice.is_deleted = bool(model.is_deleted)

        return invoice

    def _item_domain_to_model(self, item: InvoiceItem, position: int) -> InvoiceItemModel:
        return InvoiceItemModel(
            position=position,
            description=item.description,
            quantity=item.quantity,
            rate=item.rate,
            amount=item.amount,
            time_entry_id=item.time_entry_id,
            expense_id=item.expense_id,
            case_id=item.case_id,
            taxable=item.taxable,
            notes=item.notes
        )

    def _item_model_to_domain(self, model: InvoiceItemModel) -> InvoiceItem:
        """Convert line item model to domain."""
        return InvoiceItem(
            description=model.description,
            quantity=model.quantity,
            rate=model.rate,
            amount=model.amount,
            time_entry_id=model.time_entry_id,
            expense_id=model.expense_id,
            case_id=model.case_id,
            taxable=bool(model.taxable),
            notes=model.notes
        )

    def _payment_domain_to_model(self, payment: Payment, position: int) -> PaymentModel:
        return PaymentModel(
            position=position,
            amount=payment.amount,
            payment_date=payment.payment_date,
            method=payment.method,
            reference=payment.reference,
            notes=payment.notes,
            recorded_by=payment.recorded_by,
            recorded_at=payment.recorded_at
        )

    def _payment_model_to_domain(self, model: PaymentModel) -> Payment:
        """Convert payment model to domain."""
        return Payment(
            amount=model.amount,
            payment_date=model.payment_date,
            method=PaymentMethod(model.method),
            recorded_by=model.recorded_by,
            reference=model.reference,
            notes=model.notes,
            recorded_at=model.recorded_at
        )
