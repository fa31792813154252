from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class ProductSchema(BaseModel):
    """Schema for returning product data"""
    id: int
    name: str
    description: Optional[str] = ""
    price: float
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
