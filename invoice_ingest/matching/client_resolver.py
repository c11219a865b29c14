"""
Client Resolver Module.

Matches the free-text client name of an invoice to the client registry.
Unknown clients are created provisionally with a category, rate and
distance taken from the lookup tables in settings.yaml; those values are
approximations meant to be reviewed, not authoritative data.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from config import get_config
from invoice_ingest.output_handler import Client, DatabaseHandler
from invoice_ingest.parsing import ParsedInvoice
from invoice_ingest.utils.logger import get_logger

logger = get_logger(__name__)

DAY_PRACTICE = "Dagpraktijk"
AFTER_HOURS = "ANW Dienst"


@dataclass
class ClientResolution:
    client: Optional[Client]
    created: bool = False


class ClientResolver:
    """
    Resolves parsed client names against the registry.

    Order: exact name, then case-insensitive containment either way, then
    a provisional client.

    Attributes:
        database: Persistence collaborator holding the registry
        after_hours_keywords: Name fragments marking an on-call service
        default_rates: Hourly rate per category
        known_distances: City -> round-trip km
    """

    def __init__(self, database: DatabaseHandler) -> None:
        self.database = database
        self.after_hours_keywords: List[str] = get_config(
            "clients.after_hours_keywords", ["dokter", "doktersdienst", "huisartsenpost", "anw"]
        )
        self.default_rates: Dict[str, Decimal] = {
            category: Decimal(str(rate))
            for category, rate in get_config(
                "clients.default_rates", {DAY_PRACTICE: "70.00", AFTER_HOURS: "124.00"}
            ).items()
        }
        self.default_km_rate = Decimal(str(get_config("clients.default_km_rate", "0.23")))
        self.known_distances: Dict[str, int] = get_config("clients.known_distances", {})

    def match(self, name: str, clients: List[Client]) -> Optional[Client]:
        """Find a registered client for name without creating anything."""
        for client in clients:
            if client.name == name:
                return client

        lowered = name.lower()
        for client in clients:
            candidate = client.name.lower()
            if candidate and (lowered in candidate or candidate in lowered):
                logger.debug(f"Client '{name}' matched to '{client.name}'")
                return client
        return None

    def resolve(self, parsed: ParsedInvoice) -> ClientResolution:
        """
        Resolve the client of a parsed invoice, creating it when unknown.

        Returns:
            ClientResolution; client is None when the invoice names no client.
        """
        name = parsed.client_name.strip()
        if not name:
            logger.warning(f"No client found on {parsed.invoice_number}")
            return ClientResolution(client=None)

        existing = self.match(name, self.database.list_clients())
        if existing is not None:
            return ClientResolution(client=existing)

        client = self.database.create_client(self.provisional_client(parsed))
        logger.info(f"Created provisional client '{client.name}' ({client.category})")
        return ClientResolution(client=client, created=True)

    def provisional_client(self, parsed: ParsedInvoice) -> Client:
        name = parsed.client_name.strip()
        category = self.infer_category(name)
        return Client(
            name=name,
            category=category,
            contact_person=parsed.client_contact or None,
            address=parsed.client_address,
            postcode_city=parsed.client_postcode,
            hourly_rate=self.default_rates.get(category, Decimal("0")),
            km_rate=self.default_km_rate,
            return_distance=self.estimate_distance(parsed.client_postcode or parsed.client_location),
        )

    def infer_category(self, name: str) -> str:
        lowered = name.lower()
        if any(keyword.lower() in lowered for keyword in self.after_hours_keywords):
            return AFTER_HOURS
        return DAY_PRACTICE

    def estimate_distance(self, place: str) -> int:
        """Round-trip km for the first known city in place, else 0."""
        lowered = (place or "").lower()
        for city, distance in self.known_distances.items():
            if city.lower() in lowered:
                return int(distance)
        return 0
