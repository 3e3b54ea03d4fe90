"""
Integration Models - inbound payment webhook log
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, Uuid
from teashop.core.database import Base


class WebhookLog(Base):
    """
    Log incoming payment notifications for debugging and replay
    """
    __tablename__ = "webhook_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    provider = Column(String(30), nullable=False)  # mollie
    payment_id = Column(String(100), index=True)
    
    # Request data
    payload = Column(JSON)
    
    # Processing status
    processed = Column(Boolean, default=False)
    processed_at = Column(DateTime)
    process_result = Column(String(50))  # PAID, CANCELLED, IGNORED, DUPLICATE, NOT_FOUND, REJECTED, FAILED
    process_error = Column(Text)
    
    # Metadata
    received_at = Column(DateTime, default=datetime.utcnow)
    ip_address = Column(String(50))

    def __repr__(self):
        return f"<WebhookLog {self.provider} {self.payment_id} {self.received_at}>"
    
    def mark_processed(self, result: str, error: str = None):
        self.processed = True
        self.processed_at = datetime.utcnow()
        self.process_result = result
        self.process_error = error
