"""
Ticket Store - Append-only in-memory incident records.

Tickets are numbered from a counter that starts at 1, only moves forward on
creation and is reset to 1 by clear().
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)

# Initial state of a ServiceNow incident ("New")
NEW_STATE = "1"


@dataclass(frozen=True)
class Ticket:
    """A created incident record."""
    sys_id: str
    number: str
    short_description: Any
    description: Any
    caller_id: Any
    assignment_group: Any
    impact: Any
    urgency: Any
    state: str
    created_on: str
    created_by: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)


# ServiceNow field name -> camelCase alias accepted on input
PAYLOAD_FIELDS = {
    "short_description": "shortDescription",
    "description": "description",
    "caller_id": "callerId",
    "assignment_group": "assignmentGroup",
    "impact": "impact",
    "urgency": "urgency",
}


def payload_value(payload: Dict[str, Any], field_name: str) -> Any:
    """Read a business field from the payload without interpreting it."""
    if field_name in payload:
        return payload[field_name]
    return payload.get(PAYLOAD_FIELDS[field_name])


class TicketStore:
    """Ordered, append-only sequence of tickets."""

    def __init__(self, prefix: str = "INC", number_width: int = 7, created_by: str = "azure_insight"):
        self.prefix = prefix
        self.number_width = number_width
        self.created_by = created_by
        self._tickets: List[Ticket] = []
        self._counter = 1

    @classmethod
    def from_config(cls, ticket_config: Optional[Dict[str, Any]] = None) -> "TicketStore":
        """Create a store from the `tickets` configuration section."""
        ticket_config = ticket_config or {}
        return cls(
            prefix=ticket_config.get("prefix", "INC"),
            number_width=int(ticket_config.get("number_width", 7)),
            created_by=ticket_config.get("created_by", "azure_insight"),
        )

    @property
    def next_number(self) -> str:
        """Identifier the next created ticket will receive."""
        return self.format_number(self._counter)

    def format_number(self, counter: int) -> str:
        return f"{self.prefix}{counter:0{self.number_width}d}"

    def create(self, payload: Dict[str, Any]) -> Ticket:
        """Create a ticket from caller-supplied fields and append it.

        Args:
            payload: Request body; business fields are passed through as-is.

        Returns:
            The created Ticket.
        """
        number = self.next_number
        ticket = Ticket(
            sys_id=number,
            number=number,
            short_description=payload_value(payload, "short_description"),
            description=payload_value(payload, "description"),
            caller_id=payload_value(payload, "caller_id"),
            assignment_group=payload_value(payload, "assignment_group"),
            impact=payload_value(payload, "impact"),
            urgency=payload_value(payload, "urgency"),
            state=NEW_STATE,
            created_on=datetime.now(timezone.utc).isoformat(),
            created_by=self.created_by,
        )
        self._tickets.append(ticket)
        self._counter += 1
        return ticket

    def get_tickets(self) -> List[Dict[str, Any]]:
        """Return all tickets in creation order."""
        return [ticket.to_dict() for ticket in self._tickets]

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> int:
        """Remove all tickets and reset numbering.

        Returns:
            Number of tickets removed.
        """
        cleared = len(self._tickets)
        self._tickets = []
        self._counter = 1
        return cleared
