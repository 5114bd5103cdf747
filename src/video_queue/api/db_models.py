from sqlalchemy import BigInteger, Column, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Video(Base):
    __tablename__ = "videos"
    id = Column(String, primary_key=True)
    path = Column(String, nullable=False, unique=True, index=True)  # dedup key
    resolution = Column(String, nullable=True)
    bitrate = Column(String, nullable=True)
    status = Column(String, nullable=False, index=True)  # not an Enum: foreign writers exist
    original_size = Column(BigInteger, nullable=False, default=0)
