from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.dependencies import get_notification_service
from models.schemas import WebhookCreate, WebhookDto, WebhookTestResponse
from repositories.webhook_repo import WebhookRepository
from services.notification_service import NotificationService

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

@router.get("", response_model=list[WebhookDto])
async def list_webhooks(session: AsyncSession = Depends(get_db)):
    webhooks = await WebhookRepository(session).get_all()
    return [WebhookDto.from_orm_row(w) for w in webhooks]

@router.post("", response_model=WebhookDto, status_code=status.HTTP_201_CREATED)
async def create_webhook(body: WebhookCreate, session: AsyncSession = Depends(get_db)):
    webhook = await WebhookRepository(session).add(
        name=body.name,
        url=str(body.url),
        webhook_type=body.type,
        filters=body.filters,
        enabled=body.enabled,
    )
    return WebhookDto.from_orm_row(webhook)

@router.post("/{webhook_id}/toggle", response_model=WebhookDto)
async def toggle_webhook(webhook_id: int, session: AsyncSession = Depends(get_db)):
    webhook = await WebhookRepository(session).toggle_enabled(webhook_id)
    if webhook is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Webhook not found")
    return WebhookDto.from_orm_row(webhook)

@router.delete("/{webhook_id}")
async def delete_webhook(webhook_id: int, session: AsyncSession = Depends(get_db)):
    repo = WebhookRepository(session)
    if await repo.get_by_id(webhook_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Webhook not found")
    await repo.delete(webhook_id)
    return {"success": True}

@router.post("/{webhook_id}/test", response_model=WebhookTestResponse)
async def test_webhook(webhook_id: int,
                       session: AsyncSession = Depends(get_db),
                       notifier: NotificationService = Depends(get_notification_service)):
    webhook = await WebhookRepository(session).get_by_id(webhook_id)
    if webhook is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Webhook not found")
    return await notifier.send_test(webhook)
