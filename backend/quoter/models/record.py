from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class QuoteRecord(SQLModel, table=True):
    __tablename__ = "quote"

    id: Optional[str] = Field(default=None, primary_key=True, max_length=32)
    mode: str = Field(index=True)
    name: str
    client: Optional[str] = None
    note: Optional[str] = None
    # line items are stored as JSON documents in the shape of LineItem
    items: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    target_margin: float = 0.0
    commission_percent: float = 0.0
    final_price: float = 0.0
    cost_total: float = 0.0
    created_at: Optional[datetime] = Field(default=None, index=True)
    updated_at: Optional[datetime] = None
