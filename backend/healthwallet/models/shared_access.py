"""
Shared access (grant) model.
"""
from datetime import datetime
from healthwallet import db

DEFAULT_ACCESS_TYPE = 'read'


class SharedAccess(db.Model):
    """
    Gives one user access to one report owned by someone else.
    At most one row exists per (report, grantee); re-sharing updates it.
    """
    __tablename__ = 'shared_access'
    __table_args__ = (
        db.UniqueConstraint('report_id', 'shared_with_id', name='uq_shared_access_report_grantee'),
    )

    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey('reports.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    # Copy of the report owner at grant time
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    shared_with_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    access_type = db.Column(db.String(20), nullable=False, default=DEFAULT_ACCESS_TYPE)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    report = db.relationship('Report', back_populates='shares')
    owner = db.relationship('User', foreign_keys=[owner_id])
    shared_with = db.relationship('User', foreign_keys=[shared_with_id])

    def to_dict(self):
        return {
            'id': self.id,
            'report_id': self.report_id,
            'owner_id': self.owner_id,
            'shared_with_id': self.shared_with_id,
            'access_type': self.access_type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'name': self.shared_with.name if self.shared_with else None,
            'email': self.shared_with.email if self.shared_with else None,
        }

    def __repr__(self):
        return f'<SharedAccess report={self.report_id} with={self.shared_with_id}>'
