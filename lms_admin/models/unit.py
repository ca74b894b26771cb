"""
Model: Course unit
Ordered inside its category; `version` guards concurrent reorders
"""
from datetime import datetime
from ..db import db


class Unit(db.Model):
    __tablename__ = "units"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Position inside the category (0-based, contiguous after a reorder)
    order = db.Column(db.Integer, nullable=False, default=0)

    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Optimistic concurrency counter, bumped by SQLAlchemy on every UPDATE
    version = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", backref=db.backref("units", lazy=True))

    __mapper_args__ = {"version_id_col": version}

    def to_dict(self):
        return {
            "_id": self.id,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "order": self.order,
            "categoryId": self.category_id,
            "isActive": self.is_active,
            "version": self.version,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
