"""
Webhook Log Service - Audit trail of inbound payment notifications
"""
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from teashop.models.integration import WebhookLog

logger = logging.getLogger(__name__)


def log_webhook(
    db: Session,
    provider: str,
    payment_id: Optional[str],
    payload: dict,
    ip_address: str = None,
) -> WebhookLog:
    """Log incoming webhook"""
    log = WebhookLog(
        provider=provider,
        payment_id=payment_id,
        payload=payload,
        ip_address=ip_address,
        processed=False,
    )
    
    db.add(log)
    db.commit()
    db.refresh(log)
    
    return log


def mark_webhook_processed(
    db: Session,
    log_id: UUID,
    result: str,
    error: str = None,
) -> Optional[WebhookLog]:
    """Mark webhook as processed"""
    log = db.query(WebhookLog).filter(WebhookLog.id == log_id).first()
    if not log:
        return None
    
    log.mark_processed(result, error)
    db.commit()
    db.refresh(log)
    
    return log


def get_webhook_logs(
    db: Session,
    payment_id: Optional[str] = None,
    unprocessed_only: bool = False,
    limit: int = 100,
) -> List[WebhookLog]:
    """Get webhook history, oldest first"""
    query = db.query(WebhookLog)
    
    if payment_id:
        query = query.filter(WebhookLog.payment_id == payment_id)
    if unprocessed_only:
        query = query.filter(WebhookLog.processed == False)
    
    return query.order_by(WebhookLog.received_at.asc()).limit(limit).all()
