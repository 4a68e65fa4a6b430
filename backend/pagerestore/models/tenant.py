from pagerestore.extensions import db
from .base import BaseModel


class Tenant(BaseModel):
    """A site. ``created_at`` doubles as the site install time."""

    __tablename__ = "tenants"

    # Basic info
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    domain = db.Column(db.String(255), unique=True, nullable=True, index=True)
    is_active = db.Column(db.Boolean, default=True)

    # Feature toggles
    enable_cms = db.Column(db.Boolean, default=True)
    enable_edit_restore = db.Column(db.Boolean, default=True)
