from pagerestore.extensions import db


class TenantMixin:
    tenant_id = db.Column(
        db.Integer,
        db.ForeignKey('tenants.id'),
        nullable=False,
        index=True
    )
