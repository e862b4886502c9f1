"""SQLAlchemy ORM tables for stored Figma files and nodes."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class FigmaFileRow(Base):
    __tablename__ = "figma_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_key = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    thumbnail_url = Column(String(1024))
    created = Column(DateTime(timezone=True), nullable=False)
    modified = Column(DateTime(timezone=True), nullable=False)

    nodes = relationship(
        "FigmaNodeRow",
        back_populates="file",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class FigmaNodeRow(Base):
    __tablename__ = "figma_nodes"
    __table_args__ = (UniqueConstraint("figma_file_id", "node_id", name="uq_figma_nodes_file_node"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    figma_file_id = Column(Integer, ForeignKey("figma_files.id", ondelete="CASCADE"), nullable=False, index=True)
    node_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False, default="")
    type = Column(String(50), nullable=False, default="")
    raw_data = Column(JSON, nullable=False, default=dict)

    file = relationship("FigmaFileRow", back_populates="nodes")
