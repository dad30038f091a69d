from contextvars import ContextVar
from fastapi import Depends
from sqlalchemy.orm import Session
from logger import logger
from typing import Optional

from database.db import get_db

# defining the context variables to store different types of required data

context_db_session: ContextVar[Session] = ContextVar("db_session", default=None)
context_shop_data: ContextVar = ContextVar("shop_data", default=None)


# whenever an api is hit, define the context variables for it
async def build_request_context(db: Session = Depends(get_db)):
    context_db_session.set(db)
    logger.info(msg="REQUEST_INITIATED")


# get the same session everywhere
# the db session is stored in context at the time of the building request context
def get_db_session() -> Session:
    return context_db_session.get()


def get_shop_data():
    """
    The authenticated shop session for this request, or None when the
    request came through an open (unauthenticated) router.
    """
    shop_data = context_shop_data.get()
    if not shop_data or not hasattr(shop_data, "shop"):
        return None
    return shop_data


def get_current_shop() -> Optional[str]:
    shop_data = get_shop_data()
    return shop_data.shop if shop_data else None
