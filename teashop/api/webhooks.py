"""
Webhook API Endpoints - Receive payment notifications from Mollie
"""
from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import logging

from teashop.core.database import get_db
from teashop.core.exceptions import TeashopError
from teashop.integrations import PaymentGateway
from teashop.services import webhook_log_service
from teashop.services.notification_service import NotificationService
from teashop.services.payment_reconciler import PaymentReconciler
from .deps import get_payment_gateway, get_notification_service

logger = logging.getLogger(__name__)

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _error_result(error: TeashopError) -> str:
    if error.status_code == 404:
        return "NOT_FOUND"
    if error.status_code < 500:
        return "REJECTED"
    return "FAILED"


# ========== Mollie Webhook ==========

@webhook_router.post("/mollie")
async def mollie_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: NotificationService = Depends(get_notification_service),
):
    """
    Receive payment status notifications from Mollie
    Body is form-encoded and only carries the payment id: id=tr_xxx
    4xx responses are final, 5xx asks Mollie to deliver again
    """
    form = await request.form()
    raw_id = form.get("id")
    # File parts are not payment ids
    payment_id = None
    if isinstance(raw_id, str):
        payment_id = raw_id.strip() or None
    
    webhook_log = await run_in_threadpool(
        webhook_log_service.log_webhook,
        db=db,
        provider="mollie",
        payment_id=payment_id,
        payload={key: str(value) for key, value in form.items()},
        ip_address=request.client.host if request.client else None,
    )
    
    reconciler = PaymentReconciler(db, gateway, notifier)
    
    try:
        outcome = await reconciler.reconcile(payment_id)
    except TeashopError as e:
        if e.retryable:
            logger.error(f"Mollie webhook {payment_id} failed, provider will retry: {e.message}")
        else:
            logger.warning(f"Mollie webhook {payment_id} rejected: {e.message}")
        
        await run_in_threadpool(webhook_log_service.mark_webhook_processed, db, webhook_log.id, _error_result(e), e.message)
        return JSONResponse(status_code=e.status_code, content={"error": e.message, "retryable": e.retryable})
    except Exception as e:
        logger.exception(f"Mollie webhook error: {e}")
        db.rollback()
        await run_in_threadpool(webhook_log_service.mark_webhook_processed, db, webhook_log.id, "FAILED", str(e))
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed", "retryable": True})
    
    await run_in_threadpool(webhook_log_service.mark_webhook_processed, db, webhook_log.id, outcome.result)
    logger.info(f"Mollie webhook processed: {payment_id} -> {outcome.result}")
    
    return {"received": True, "result": outcome.result}


# ========== Webhook Status ==========

@webhook_router.get("/status")
def webhook_status():
    """Check webhook endpoints status"""
    return {
        "status": "active",
        "endpoints": {
            "mollie": "/api/webhooks/mollie",
        }
    }
