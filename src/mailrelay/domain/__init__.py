"""Domain layer - pure business logic with no I/O or framework dependencies.

Contains the value objects and per-line rules that turn raw input into an
outbound message.

Contents:
    * :mod:`.address` - Address parsing and local-domain qualification
    * :mod:`.headers` - Header block model
    * :mod:`.ingest` - Line ingestion state machine
    * :mod:`.message` - Structured message and raw envelope models
    * :mod:`.enums` - Domain enumerations (TerminationPolicy, Endpoint, OutputFormat)
    * :mod:`.errors` - Domain exception types
"""

from __future__ import annotations

from .address import Address, apply_local_domain, apply_local_domain_all, parse_address, parse_address_list
from .enums import Endpoint, OutputFormat, TerminationPolicy
from .errors import (
    AddressParseError,
    AttachmentError,
    ConfigurationError,
    IngestError,
    InvocationError,
    MailRelayError,
    NoRecipientsError,
    TransportError,
)
from .headers import HeaderBlock, canonical_field_name
from .ingest import IngestedMessage, IngestState, LineIngestStateMachine, read_body, read_message
from .message import HeaderFields, Message, RawEnvelope, extract_header_fields

__all__ = [
    # Address
    "Address",
    "apply_local_domain",
    "apply_local_domain_all",
    "parse_address",
    "parse_address_list",
    # Enums
    "Endpoint",
    "OutputFormat",
    "TerminationPolicy",
    # Errors
    "AddressParseError",
    "AttachmentError",
    "ConfigurationError",
    "IngestError",
    "InvocationError",
    "MailRelayError",
    "NoRecipientsError",
    "TransportError",
    # Headers
    "HeaderBlock",
    "canonical_field_name",
    # Ingestion
    "IngestState",
    "IngestedMessage",
    "LineIngestStateMachine",
    "read_body",
    "read_message",
    # Message
    "HeaderFields",
    "Message",
    "RawEnvelope",
    "extract_header_fields",
]
