from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from simple_ksef.domain.token import TokenRule, TZnakowy2, TZnakowy512

# Nullable address lines: same length cap as TZnakowy512, but may be omitted.
OptionalToken512 = Annotated[Optional[str], TokenRule(min_length=0, max_length=512)]


class TaxpayerStatus(str, Enum):
    LIQUIDATION = "LIQUIDATION"
    RESTRUCTURING = "RESTRUCTURING"
    BANKRUPTCY = "BANKRUPTCY"
    INHERITANCE = "INHERITANCE"


class StrictBaseModel(BaseModel):
    # camelCase on the wire (identificationData, addressLine1), snake_case in Python
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class ContactInfo(StrictBaseModel):
    email: Optional[str] = Field(default=None, examples=["kontakt@przykladowy.pl"])
    phone: Optional[str] = None


class IdentificationData(StrictBaseModel):
    # TODO: strip separators and check the NIP checksum once business rules land
    nip_number: str = Field(min_length=1, examples=["123-456-32-18"])
    name: TZnakowy512 = Field(examples=["Firma XYZ Sp. z o.o."])


class Address(StrictBaseModel):
    address_line1: TZnakowy512 = Field(examples=["ul. Przykładowa 10"])
    address_line2: OptionalToken512 = Field(default=None, examples=["05-500 Warszawa"])
    global_location_number: OptionalToken512 = None
    contact_infos: Optional[List[ContactInfo]] = Field(default=None, max_length=3)


class CreateTaxpayerRequest(StrictBaseModel):
    eori_number: Optional[TZnakowy2] = Field(
        default=None,
        description="EORI number used for customs identification in the EU, if any.",
    )
    identification_data: IdentificationData
    address: Address
    correspondence_address: Optional[Address] = None
    status: Optional[TaxpayerStatus] = None


class CreateTaxpayerResponse(StrictBaseModel):
    id: UUID


class GetTaxpayerResponse(StrictBaseModel):
    id: UUID


class CreateInvoiceRequest(StrictBaseModel):
    number: str = Field(description="Invoice number assigned by the issuer.", examples=["FV/01/2026"])


class CreateInvoiceResponse(StrictBaseModel):
    id: str


REQUEST_MODELS = (CreateTaxpayerRequest, CreateInvoiceRequest)
