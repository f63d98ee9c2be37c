from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    html: Optional[str] = None
    text: Optional[str] = None
    template_id: Optional[str] = Field(default=None, alias="templateId")
    dynamic_template_data: Optional[Dict[str, Any]] = Field(default=None, alias="dynamicTemplateData")

    class Config:
        populate_by_name = True


class TransactionalEmailRequest(BaseModel):
    type: str
    to: Optional[str] = None
    name: Optional[str] = None
    verification_url: Optional[str] = Field(default=None, alias="verificationUrl")
    reset_url: Optional[str] = Field(default=None, alias="resetUrl")
    expiry_time: Optional[str] = Field(default=None, alias="expiryTime")
    support_email: Optional[str] = Field(default=None, alias="supportEmail")
    login_url: Optional[str] = Field(default=None, alias="loginUrl")

    class Config:
        populate_by_name = True


class SendEmailResponse(BaseModel):
    success: bool = True
    message: str = "Email sent successfully"
