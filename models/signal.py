from sqlalchemy import Column, String
from .base import BaseModel


class SignalModel(BaseModel):
    __tablename__ = "signals"

    # e.g. "favorites_updated"
    key = Column(String(100), primary_key=True)
    # epoch milliseconds of the last write, as a string
    value = Column(String(50), nullable=False)
    # context id of the process that wrote it
    writer = Column(String(64), nullable=False)

    def __repr__(self):
        return f"<Signal(key={self.key}, value={self.value}, writer={self.writer})>"
