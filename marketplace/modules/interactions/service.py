from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from marketplace.core.exceptions import StorageError
from marketplace.db.models import Interaction as DBInteraction
from marketplace.models.interaction import InteractionAction
import logging

logger = logging.getLogger(__name__)


class InteractionLog:
    """Append-only log of user engagement with listings"""

    def __init__(self, db: Session):
        self.db = db

    async def record(self,
                     user_id: str,
                     action: InteractionAction,
                     property_id: Optional[str] = None,
                     search_query: Optional[str] = None) -> None:
        try:
            self.db.add(DBInteraction(
                user_id=str(user_id),
                property_id=property_id,
                action=InteractionAction(action).value,
                search_query=search_query,
            ))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record {action} interaction for user {user_id}: {e}")
            raise StorageError("Failed to record interaction") from e

    async def recent_property_ids(self,
                                  user_id: str,
                                  action: InteractionAction = InteractionAction.VIEW,
                                  limit: int = 10) -> List[str]:
        """Distinct property ids from the user's ``limit`` latest interactions"""
        try:
            rows = self.db.query(DBInteraction.property_id).filter(
                DBInteraction.user_id == str(user_id),
                DBInteraction.action == InteractionAction(action).value,
                DBInteraction.property_id.isnot(None)
            ).order_by(DBInteraction.timestamp.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load interactions for user {user_id}: {e}")
            raise StorageError("Failed to load interactions") from e

        property_ids = []
        for (property_id,) in rows:
            if property_id not in property_ids:
                property_ids.append(property_id)
        return property_ids
