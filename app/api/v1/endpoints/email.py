from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.exceptions import EmailDeliveryError, EmailValidationError
from app.schemas import email as schemas_email
from app.services import email_service, email_templates

router = APIRouter()

async def _deliver(request: schemas_email.SendEmailRequest):
    try:
        await email_service.send_email(request)
    except EmailValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except EmailDeliveryError as e:
        return JSONResponse(status_code=500, content={"error": "Failed to send email", "details": str(e)})
    return schemas_email.SendEmailResponse()

@router.post("/api/send-email", response_model=schemas_email.SendEmailResponse)
async def send_email(request: schemas_email.SendEmailRequest):
    return await _deliver(request)

@router.post("/send-email", response_model=schemas_email.SendEmailResponse, include_in_schema=False)
async def send_email_legacy(request: schemas_email.SendEmailRequest):
    return await _deliver(request)

@router.post("/api/send-email/transactional", response_model=schemas_email.SendEmailResponse)
async def send_transactional_email(request: schemas_email.TransactionalEmailRequest):
    try:
        rendered = email_templates.render_transactional_email(request)
    except EmailValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e), "success": False})
    return await _deliver(rendered)
