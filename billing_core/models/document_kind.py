"""Document kinds and their per-kind rules."""
import enum


class PartyRole(str, enum.Enum):
    """Which side of the trade the document is addressed to."""
    CUSTOMER = 'customer'
    VENDOR = 'vendor'


class DocumentKind(str, enum.Enum):
    """Documents built from priced line items."""
    INVOICE = 'invoice'
    DELIVERY_CHALLAN = 'delivery_challan'
    QUOTATION = 'quotation'
    PROFORMA = 'proforma'
    PURCHASE = 'purchase'
    PURCHASE_ORDER = 'purchase_order'
    CREDIT_NOTE = 'credit_note'
    DEBIT_NOTE = 'debit_note'


class KindRules:
    """Endpoint, party role and required metadata for one document kind."""

    def __init__(self, label, endpoint, party_role, required=(), default_dates=None, address_fields=()):
        self.label = label
        self.endpoint = endpoint
        self.party_role = party_role
        # (metadata key, error message) pairs checked before submission
        self.required = tuple(required)
        # metadata key -> name of the Config attribute holding the day offset
        self.default_dates = dict(default_dates or {})
        # metadata keys that hold Address variants
        self.address_fields = tuple(address_fields)

    @property
    def party_prefix(self):
        return self.party_role.value


KIND_RULES = {
    DocumentKind.INVOICE: KindRules(
        'invoice', '/api/invoices', PartyRole.CUSTOMER,
        default_dates={'dueDate': 'INVOICE_DUE_DAYS'},
    ),
    DocumentKind.DELIVERY_CHALLAN: KindRules(
        'delivery challan', '/api/delivery-challans', PartyRole.CUSTOMER,
        required=(
            ('deliveryAddress', 'Please enter delivery address'),
            ('deliveryDate', 'Please select a delivery date'),
        ),
        default_dates={'deliveryDate': 'CHALLAN_DELIVERY_DAYS'},
        address_fields=('deliveryAddress',),
    ),
    DocumentKind.QUOTATION: KindRules(
        'quotation', '/api/quotations', PartyRole.CUSTOMER,
        default_dates={'validUntil': 'QUOTE_VALID_DAYS'},
    ),
    DocumentKind.PROFORMA: KindRules(
        'proforma', '/api/proformas', PartyRole.CUSTOMER,
        default_dates={'validUntil': 'QUOTE_VALID_DAYS'},
    ),
    DocumentKind.PURCHASE: KindRules(
        'purchase', '/api/purchases', PartyRole.VENDOR,
    ),
    DocumentKind.PURCHASE_ORDER: KindRules(
        'purchase order', '/api/purchase-orders', PartyRole.VENDOR,
        required=(
            ('expectedDeliveryDate', 'Please select expected delivery date'),
        ),
    ),
    DocumentKind.CREDIT_NOTE: KindRules(
        'credit note', '/api/credit-notes', PartyRole.CUSTOMER,
        required=(
            ('originalInvoiceId', 'Please select an original invoice'),
            ('reason', 'Please select a reason for the credit note'),
        ),
    ),
    DocumentKind.DEBIT_NOTE: KindRules(
        'debit note', '/api/debit-notes', PartyRole.VENDOR,
        required=(
            ('originalPurchaseId', 'Please select an original purchase'),
            ('reason', 'Please select a reason for the debit note'),
        ),
    ),
}


def rules_for(kind) -> KindRules:
    """Look up rules by DocumentKind or its string value."""
    return KIND_RULES[DocumentKind(kind)]
