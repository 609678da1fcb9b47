"""
Medical report model and its report-to-vital link table.
"""
from datetime import datetime
from healthwallet import db


class Report(db.Model):
    """
    An uploaded medical document. ``file_path`` is the opaque handle returned
    by the file store, never a URL.
    """
    __tablename__ = 'reports'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)

    file_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_type = db.Column(db.String(100), nullable=False)

    report_type = db.Column(db.String(100), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    owner = db.relationship('User', back_populates='reports')
    vital_links = db.relationship('ReportVital', back_populates='report',
                                  order_by='ReportVital.id',
                                  cascade='all, delete-orphan', passive_deletes=True)
    shares = db.relationship('SharedAccess', back_populates='report',
                             cascade='all, delete-orphan', passive_deletes=True)

    @property
    def linked_vitals(self):
        """Vitals in link insertion order. A vital linked twice appears twice."""
        return [link.vital for link in self.vital_links if link.vital is not None]

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'file_name': self.file_name,
            'file_type': self.file_type,
            'report_type': self.report_type,
            'date': self.date.isoformat() if self.date else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Report {self.id}: {self.report_type} {self.date}>'


class ReportVital(db.Model):
    """Many-to-many link. Deleting either side removes only the link row."""
    __tablename__ = 'report_vitals'

    id = db.Column(db.Integer, primary_key=True)
    report_id = db.Column(db.Integer, db.ForeignKey('reports.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    vital_id = db.Column(db.Integer, db.ForeignKey('vitals.id', ondelete='CASCADE'),
                         nullable=False, index=True)

    report = db.relationship('Report', back_populates='vital_links')
    vital = db.relationship('Vital', back_populates='report_links')

    def __repr__(self):
        return f'<ReportVital report={self.report_id} vital={self.vital_id}>'
