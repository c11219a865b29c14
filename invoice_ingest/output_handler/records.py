"""
Persistent record types.

These mirror the rows of the clients, invoices and time_entries tables.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class Client:
    """A billed party (practice or duty service)."""
    name: str
    category: str = "Dagpraktijk"
    contact_person: Optional[str] = None
    address: str = ""
    postcode_city: str = ""
    hourly_rate: Decimal = Decimal("70.00")
    km_rate: Decimal = Decimal("0.23")
    return_distance: int = 0
    is_active: bool = True
    id: Optional[int] = None


@dataclass
class InvoiceRecord:
    """An imported invoice."""
    invoice_number: str
    invoice_date: date
    due_date: date
    status: str
    total_amount: Decimal
    client_id: Optional[int] = None
    notes: Optional[str] = None
    is_split: bool = False
    split_factor: Optional[Decimal] = None
    source_file: Optional[str] = None
    document_path: Optional[str] = None
    document_sha256: Optional[str] = None
    id: Optional[int] = None


@dataclass
class TimeEntryRecord:
    """A billable day linked to its invoice."""
    date: date
    activity_code: str
    description: str
    hours: Decimal
    hourly_rate: Decimal
    location: str = ""
    return_distance: int = 0
    km_rate: Decimal = Decimal("0.23")
    notes: Optional[str] = None
    is_billable: bool = True
    is_invoiced: bool = True
    is_standby: bool = False
    duty_code: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_id: Optional[int] = None
    client_id: Optional[int] = None
    id: Optional[int] = None
