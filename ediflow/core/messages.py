"""SME common EDI message types and their XML root elements."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class MessageType(str, Enum):
    QUOTATION = "quotation"
    QUOTATION_RESPONSE = "quotation_response"
    ORDER = "order"
    ORDER_RESPONSE = "order_response"
    DESPATCH_ADVICE = "despatch_advice"
    RECEIVING_ADVICE = "receiving_advice"
    INVOICE = "invoice"
    CONSOLIDATED_INVOICE = "consolidated_invoice"
    SELF_INVOICE = "self_invoice"
    CONSOLIDATED_SELF_INVOICE = "consolidated_self_invoice"
    SELF_INVOICE_RESPONSE = "self_invoice_response"
    CONSOLIDATED_SELF_INVOICE_RESPONSE = "consolidated_self_invoice_response"
    REMITTANCE_ADVICE = "remittance_advice"
    DEMAND_FORECAST = "demand_forecast"
    SUPPLY_INSTRUCTION = "supply_instruction"


# Element names follow the published schema file names, spelling included.
ROOT_ELEMENTS: Dict[MessageType, str] = {
    MessageType.ORDER: "SMEOrder",
    MessageType.ORDER_RESPONSE: "SMEOrderResponse",
    MessageType.INVOICE: "SMEInvoice",
    MessageType.CONSOLIDATED_INVOICE: "SMEConsolidatedInvoice",
    MessageType.QUOTATION: "SMEQuotation",
    MessageType.QUOTATION_RESPONSE: "SMEQuotationResponse",
    MessageType.DESPATCH_ADVICE: "SMEDespatchAdvice",
    MessageType.RECEIVING_ADVICE: "SMEReceivingAdvice",
    MessageType.SELF_INVOICE: "SMESelfInvoice",
    MessageType.CONSOLIDATED_SELF_INVOICE: "SMEConsolidatedSelfInvoice",
    MessageType.SELF_INVOICE_RESPONSE: "SMESelfInvoiceResponse",
    MessageType.CONSOLIDATED_SELF_INVOICE_RESPONSE: "SMEConsolidatedSelfInvoiceResponse",
    MessageType.REMITTANCE_ADVICE: "SMERemittanceAdvaice",
    MessageType.DEMAND_FORECAST: "SMESchedulingDemandForcast",
    MessageType.SUPPLY_INSTRUCTION: "SMESchedulingSupplyInstruction",
}

DEFAULT_ROOT_ELEMENT = "CrossIndustryInvoice"


def parse_message_type(value: str | MessageType) -> MessageType:
    """Return the enum member for ``value``; raises ``ValueError`` when unknown."""

    if isinstance(value, MessageType):
        return value
    return MessageType(str(value).strip().lower())


def root_element_for(message_type: str | MessageType) -> str:
    try:
        return ROOT_ELEMENTS[parse_message_type(message_type)]
    except ValueError:
        return DEFAULT_ROOT_ELEMENT


def schema_file_for(message_type: str | MessageType) -> str:
    return f"{root_element_for(message_type)}.xsd"


__all__ = [
    "DEFAULT_ROOT_ELEMENT",
    "MessageType",
    "ROOT_ELEMENTS",
    "parse_message_type",
    "root_element_for",
    "schema_file_for",
]
