"""
SQLAlchemy Database Models

Stores the public key registry consulted before any gate command is relayed.
The trust flag is kept as a narrow integer column; callers see a boolean.
"""
from sqlalchemy import Column, Integer, Text, text
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


class PublicKey(Base):
    """
    Registered client public key.

    New keys are untrusted until an operator marks them trusted.
    """
    __tablename__ = "public_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(Text, nullable=False, unique=True)
    trusted = Column(Integer, nullable=False, default=0, server_default=text("0"))

    @property
    def is_trusted(self) -> bool:
        return bool(self.trusted)

    def __repr__(self):
        return f"<PublicKey(id={self.id}, trusted={self.is_trusted})>"
