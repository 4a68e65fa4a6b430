from pagerestore.extensions import db
from .base import BaseModel
from .tenant_mixin import TenantMixin


class Page(BaseModel, TenantMixin):
    __tablename__ = 'pages'

    # Fields exposed by the edit form, in render order
    FORM_FIELDS = ("title", "slug", "status", "body", "seo_title", "seo_description")

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)
    status = db.Column(db.String(50), default='draft', index=True)
    body = db.Column(db.Text, default="")
    seo_title = db.Column(db.String(200), default="")
    seo_description = db.Column(db.String(500), default="")

    __table_args__ = (
        db.UniqueConstraint("tenant_id", "slug", name="uq_page_slug_per_tenant"),
    )

    def slug_taken(self, slug) -> bool:
        """True when another page of the same site already uses ``slug``."""
        if slug == self.slug:
            return False
        return Page.query.filter(
            Page.tenant_id == self.tenant_id,
            Page.slug == slug,
            Page.id != self.id
        ).first() is not None

    def form_values(self) -> dict:
        return {
            field: "" if getattr(self, field) is None else str(getattr(self, field))
            for field in self.FORM_FIELDS
        }

    def apply_form_values(self, values: dict) -> list:
        """Copy editable fields from ``values``; returns the names that changed."""
        changed = []
        for field in self.FORM_FIELDS:
            if field in values and getattr(self, field) != values[field]:
                setattr(self, field, values[field])
                changed.append(field)
        return changed
