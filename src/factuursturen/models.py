"""Pydantic models shared across factuursturen.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`RequestConfig` and :class:`ClientConfig`.

**Resource models** -- records exchanged with the FactuurSturen API:
:class:`Product`, :class:`Invoice` and the records nested in an invoice
(:class:`InvoiceLine`, :class:`Reference`, :class:`TaxItem`,
:class:`HistoryItem`). Resource models accept unknown keys (``extra="allow"``)
so fields added by the service survive a read-modify-write round trip.

Wire names follow the service's lowercase spelling (``clientnr``,
``paymentperiod``); the Python attributes use snake case and both names are
accepted when validating.
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://www.factuursturen.nl/api/v1/"


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")


class ClientConfig(BaseModel):
    """Connection and caching settings for :class:`~factuursturen.client.FactuurSturenClient`.

    Loaded from ``~/.config/factuursturen/config.json`` by
    :func:`~factuursturen.config.load_config` and layered with environment
    variables and CLI flags by :func:`~factuursturen.config.resolve_config`.

    ``allow_response_caching`` is the default applied when an individual
    call passes ``allow_cache=None`` / ``store_in_cache=None``.
    """

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    username: Optional[str] = Field(default=None, description="Account user name")
    api_key_source: str = Field(
        default="env:FACTUURSTUREN_API_KEY",
        description="Credential source: env:VAR, file:/path, prompt, or a literal key",
    )
    allow_response_caching: bool = Field(
        default=True, description="Cache product responses unless a call says otherwise"
    )
    dedupe_cache: bool = Field(
        default=False,
        description="Overwrite a cached item with the same id instead of appending",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Products ---


class Product(BaseModel):
    """A product from the account's catalogue.

    ``id`` is assigned by the service; a new, unsaved product has ``id == 0``
    until :meth:`~factuursturen.client.FactuurSturenClient.create_product`
    fills it in.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    id: int = 0
    code: Optional[str] = None
    name: str = ""
    price: float = 0.0
    taxes: int = Field(default=0, description="Tax percentage")
    priceintax: Optional[float] = None


# --- Invoices ---


class InvoiceAction(str, enum.Enum):
    """What the service does with a newly posted invoice."""

    SEND = "send"
    SAVE = "save"
    REPEAT = "repeat"


class SendMethod(str, enum.Enum):
    """How an invoice is delivered. Required when the action is ``send``."""

    MAIL = "mail"
    EMAIL = "email"
    PRINTCENTER = "printcenter"


class Frequency(str, enum.Enum):
    """Recurrence of a repeating invoice, counted from its initial date."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALFYEARLY = "halfyearly"
    YEARLY = "yearly"
    BIWEEKLY = "biweekly"
    BIMONTHLY = "bimonthly"
    FOURWEEKLY = "fourweekly"


class RepeatType(str, enum.Enum):
    """Whether a repeating invoice is sent automatically when due."""

    AUTO = "auto"
    MANUAL = "manual"


class _Resource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Reference(_Resource):
    """Free-text reference lines printed on an invoice."""

    line1: Optional[str] = None
    line2: Optional[str] = None
    line3: Optional[str] = None


class InvoiceLine(_Resource):
    amount: float = 0.0
    amount_desc: Optional[str] = None
    description: str = ""
    tax_rate: float = 0.0
    price: float = 0.0
    discount_pct: float = 0.0
    linetotal: Optional[float] = None


class TaxItem(_Resource):
    rate: float = 0.0
    sum: float = 0.0
    sum_of: Optional[float] = None


class HistoryItem(_Resource):
    date: Optional[str] = None
    time: Optional[str] = None
    description: Optional[str] = None


class Invoice(_Resource):
    """An invoice as returned by the service.

    The block of fields from ``action`` down is only meaningful when posting
    a new invoice; ``initial_date`` through ``repeat_type`` apply when the
    action is :attr:`InvoiceAction.REPEAT`.
    """

    id: Optional[str] = None
    invoice_nr_full: Optional[str] = Field(default=None, alias="invoicenr_full")
    invoice_nr: Optional[str] = Field(default=None, alias="invoicenr")
    reference: Optional[Reference] = None
    lines: dict[str, InvoiceLine] = Field(default_factory=dict)
    profile: int = 0
    discount_type: Optional[str] = Field(default=None, alias="discounttype")
    discount: float = 0.0
    payment_condition: Optional[str] = Field(default=None, alias="paymentcondition")
    payment_period: int = Field(default=0, alias="paymentperiod")
    collection: bool = False
    tax: float = 0.0
    total_in_tax: float = Field(default=0.0, alias="totalintax")
    client_nr: int = Field(default=0, alias="clientnr")
    company: Optional[str] = None
    contact: Optional[str] = None
    address: Optional[str] = None
    zipcode: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    tax_number: Optional[str] = Field(default=None, alias="taxnumber")
    invoice_note: Optional[str] = Field(default=None, alias="invoicenote")
    sent: Optional[date] = None
    uncollectible: Optional[date] = None
    last_reminder: Optional[date] = Field(default=None, alias="lastreminder")
    open: float = 0.0
    paid_date: Optional[date] = Field(default=None, alias="paiddate")
    taxes: dict[str, TaxItem] = Field(default_factory=dict)
    payment_url: Optional[str] = None
    due_date: Optional[date] = Field(default=None, alias="duedate")
    history: dict[str, HistoryItem] = Field(default_factory=dict)

    action: Optional[InvoiceAction] = None
    send_method: Optional[SendMethod] = Field(default=None, alias="sendmethod")
    save_name: Optional[str] = Field(default=None, alias="savename")
    overwrite_if_exist: bool = False
    convert_prices_to_euro: bool = False
    initial_date: Optional[date] = Field(default=None, alias="initialdate")
    final_send_date: Optional[date] = Field(default=None, alias="finalsenddate")
    frequency: Optional[Frequency] = None
    repeat_type: Optional[RepeatType] = Field(default=None, alias="repeattype")

    @field_validator(
        "sent",
        "uncollectible",
        "last_reminder",
        "paid_date",
        "due_date",
        "initial_date",
        "final_send_date",
        mode="before",
    )
    @classmethod
    def _parse_service_date(cls, value: Any) -> Any:
        # The service sends "" or "0000-00-00" for unset dates and sometimes
        # appends a time part.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            value = value.strip()
            if not value or value.startswith("0000-00-00"):
                return None
            return value[:10]
        return value

    @field_validator("lines", "taxes", "history", mode="before")
    @classmethod
    def _empty_list_as_dict(cls, value: Any) -> Any:
        # PHP-style JSON encodes an empty map as [].
        if value is None or value == []:
            return {}
        return value
