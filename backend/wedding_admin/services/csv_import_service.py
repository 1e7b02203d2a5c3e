"""
CSV import service: import kinds, templates and the line based CSV splitter.

Each import kind fixes a column order. Files carry a header line (ignored)
followed by comma separated data lines, with optional double quotes around
values that contain commas.
"""
import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Awaitable, Callable, List, Optional, Tuple

from ..config import get_settings
from .booking_service import create_booking
from .supabase_table_service import SupabaseTableService
from .table_rows import build_venue_row, build_service_package_row, build_booking_request

logger = logging.getLogger(__name__)
settings = get_settings()

# A comma is a delimiter only when an even number of quotes follow it on the line
_DELIMITER = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')
_WRAPPING_QUOTE = re.compile(r'^"|"$')


@dataclass(frozen=True)
class ImportKind:
    """
    Describes one kind of bulk import.

    Rows go to the edge function named by function_name, or else into the
    Supabase table named by table. builder turns a parsed row into the record
    to send (default: build_payload) and writer replaces the plain table
    insert for kinds that write more than one record.
    """
    name: str
    columns: Tuple[str, ...]
    template_filename: str
    template_row: str
    completed_message: str
    function_name: Optional[str] = None
    table: Optional[str] = None
    # Column -> payload key, for columns sent under another name
    payload_keys: Dict[str, str] = field(default_factory=dict)
    name_column: str = "name"
    email_column: Optional[str] = "email"
    builder: Optional[Callable[[Dict[str, Optional[str]]], Dict[str, Any]]] = None
    writer: Optional[Callable[[SupabaseTableService, Dict[str, Any]], Awaitable[Dict[str, Any]]]] = None

    @property
    def template(self) -> str:
        """Header plus one example row."""
        return ",".join(self.columns) + "\n" + self.template_row

    def payload_for(self, row: Dict[str, Optional[str]]) -> Dict[str, Any]:
        """Record to send for a row. May raise RowRejected."""
        if self.builder is not None:
            return self.builder(row)
        return build_payload(row, self)


COUPLE_COLUMNS = (
    "name", "email", "phone", "partner1_name", "partner2_name",
    "wedding_date", "budget", "vibe_tags", "venue_name", "guest_count",
    "venue_city", "venue_state",
)

VENDOR_COLUMNS = (
    "name", "profile_photo", "phone", "years_experience", "profile",
    "service_areas", "specialties", "stripe_account_id", "user_id",
)

VENUE_COLUMNS = (
    "name", "phone", "email", "street_address", "city", "state", "zip", "region",
)

SERVICE_PACKAGE_COLUMNS = (
    "service_type", "name", "description", "price", "features", "coverage",
    "status", "vendor_id", "hour_amount", "lookup_key", "event_type",
)

BOOKING_COLUMNS = (
    "couple_name", "vendor_name", "service_type", "amount", "status",
    "venue_name", "start_time", "end_time",
)

IMPORT_KINDS: Dict[str, ImportKind] = {
    "couples": ImportKind(
        name="couples",
        function_name=settings.create_couple_function,
        columns=COUPLE_COLUMNS,
        template_filename="couple_template.csv",
        template_row=(
            '"Smith & Johnson",couple@example.com,"(555) 123-4567",Alex,Taylor,'
            '2025-12-01,50000,"rustic,boho","Willow Creek Vineyard",150,Napa,CA'
        ),
        completed_message="Couples imported successfully!",
    ),
    "vendors": ImportKind(
        name="vendors",
        function_name=settings.create_vendor_function,
        columns=VENDOR_COLUMNS,
        template_filename="vendor_template.csv",
        template_row=(
            'John Doe,https://example.com/photo.jpg,,5,"Experienced vendor",'
            'Boston,Photography,acct_123,john@example.com'
        ),
        completed_message="Vendors imported successfully!",
        # The vendor login email lives in the user_id column
        payload_keys={"user_id": "email"},
        email_column="user_id",
    ),
    "venues": ImportKind(
        name="venues",
        table="venues",
        columns=VENUE_COLUMNS,
        template_filename="venue_template.csv",
        template_row=(
            '"Willow Creek Vineyard",555-123-4567,info@willowcreek.com,'
            '123 Vine St,Portland,MA,97205,West'
        ),
        completed_message="Venues imported successfully!",
        builder=build_venue_row,
    ),
    "service_packages": ImportKind(
        name="service_packages",
        table="service_packages",
        columns=SERVICE_PACKAGE_COLUMNS,
        template_filename="service_package_template.csv",
        template_row=(
            'Planning,Basic Package,Basic planning,100,Feature1\\nFeature2,'
            '"{"coverage": "basic"}",active,,2.0,key123,wedding\n'
            'Decor,Premium Package,Full decor,500,FeatureA\\nFeatureB,'
            '"{"coverage": "full"}",active,550e8400-e29b-41d4-a716-446655440000,5.5,key456,corporate'
        ),
        completed_message="Service packages imported successfully!",
        email_column=None,
        builder=build_service_package_row,
    ),
    "bookings": ImportKind(
        name="bookings",
        table="bookings",
        columns=BOOKING_COLUMNS,
        template_filename="booking_template.csv",
        template_row=(
            '"Smith & Johnson","Floral Co","Floral Arrangement",2750,confirmed,'
            'Willow Creek,2025-06-15T10:00:00,2025-06-15T12:00:00'
        ),
        completed_message="Bookings imported successfully!",
        name_column="couple_name",
        email_column=None,
        builder=build_booking_request,
        writer=create_booking,
    ),
}


def get_import_kind(name: str) -> Optional[ImportKind]:
    """Look up an import kind by name."""
    return IMPORT_KINDS.get(name)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line on commas outside double quoted spans.

    A single wrapping quote is stripped from each side of every field and
    surrounding whitespace is trimmed. Unquoted values that contain commas
    are split; that is a known limitation of the format.
    """
    return [
        _WRAPPING_QUOTE.sub("", value).strip()
        for value in _DELIMITER.split(line)
    ]


def parse_csv_line(line: str, columns: Tuple[str, ...]) -> Dict[str, Optional[str]]:
    """Map a CSV line positionally onto columns; missing trailing fields are None."""
    values = split_csv_line(line)
    return {
        column: values[i] if i < len(values) else None
        for i, column in enumerate(columns)
    }


def parse_csv_text(text: str, columns: Tuple[str, ...]) -> List[Dict[str, Optional[str]]]:
    """
    Parse full file text into row-records.

    The header line is discarded, as are blank lines. Field contents are not
    validated.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")[1:]]
    rows = [parse_csv_line(line, columns) for line in lines if line.strip()]
    logger.debug(f"Parsed {len(rows)} CSV rows")
    return rows


def decode_csv_content(content: bytes) -> str:
    """Decode uploaded bytes as UTF-8, tolerating a BOM."""
    return content.decode("utf-8-sig")


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def build_payload(row: Dict[str, Optional[str]], kind: ImportKind) -> Dict[str, Any]:
    """Build the edge function payload for a row; blank or missing fields are omitted."""
    payload: Dict[str, Any] = {}
    for column in kind.columns:
        value = row.get(column)
        if value is None:
            continue
        value = value.strip()
        if not value:
            continue
        payload[kind.payload_keys.get(column, column)] = value
    return payload
