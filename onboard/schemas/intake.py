# onboard/schemas/intake.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    # snake_case in Python, camelCase op de wire (zoals het formulier post)
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class IntakeLinks(_WireModel):
    landing_pages: Optional[str] = Field(None, alias="landingPages")
    calendars: Optional[str] = None
    webinar_links: Optional[str] = Field(None, alias="webinarLinks")
    forms_surveys: Optional[str] = Field(None, alias="formsSurveys")
    other_assets: Optional[str] = Field(None, alias="otherAssets")


class UploadedFileSummary(_WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    field: str
    name: str
    size: int
    type: str = ""
    airtable_token_id: Optional[str] = Field(None, alias="airtableTokenId")


class AttachmentRef(_WireModel):
    url: str
    filename: Optional[str] = None


class IntakePayload(_WireModel):
    # Bedrijf / contact
    company_name: Optional[str] = Field(None, alias="companyName")
    contact_name: Optional[str] = Field(None, alias="contactName")
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    instagram: Optional[str] = None
    crm: Optional[str] = None
    email_platform: Optional[str] = Field(None, alias="emailPlatform")
    links: Optional[IntakeLinks] = None

    # Lange tekstvelden
    brand_voice: Optional[str] = Field(None, alias="brandVoice")
    sales_pitch: Optional[str] = Field(None, alias="salesPitch")
    offer_info: Optional[str] = Field(None, alias="offerInfo")
    brand_faq: Optional[str] = Field(None, alias="brandFAQ")
    product_faq: Optional[str] = Field(None, alias="productFAQ")
    sales_guide: Optional[str] = Field(None, alias="salesGuide")
    lead_qualification: Optional[str] = Field(None, alias="leadQualification")
    credentials: Optional[str] = None
    notes: Optional[str] = None
    loom_url: Optional[str] = Field(None, alias="loomUrl")

    # Bestanden
    uploaded_files: Optional[List[UploadedFileSummary]] = Field(None, alias="uploadedFiles")
    attachments: Optional[List[AttachmentRef]] = None

    def to_wire_json(self) -> str:
        """Compact camelCase JSON of the payload, absent keys omitted."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
