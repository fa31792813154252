from pydantic import BaseModel, Field, ConfigDict
from typing import List
from datetime import datetime
from models.favorite import FavoriteType


class FavoriteCreate(BaseModel):
    """Payload for creating a favorite"""
    item_id: int = Field(..., description="ID of the product or activity")
    item_type: FavoriteType = Field(..., description="Type: 'product' or 'activity'")

    model_config = ConfigDict(use_enum_values=True)


class FavoriteResponse(BaseModel):
    """Schema for returning favorite data"""
    id: int
    user_id: int
    item_id: int
    item_type: FavoriteType
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FavoriteIdsSchema(BaseModel):
    """Light-weight favorites payload, grouped by item type"""
    products: List[int] = Field(default_factory=list)
    activities: List[int] = Field(default_factory=list)

    def ids_for(self, item_type: FavoriteType) -> List[int]:
        return getattr(self, FavoriteType(item_type).group)
