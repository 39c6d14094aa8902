import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        # The audited action already happened; losing its log entry must not fail the request
        db.rollback()
        logger.exception("Failed to write audit log %s/%s: %s", resource, action, e)

def client_ip(request) -> str:
    return request.client.host if request and request.client else None
