"""
Vital sign measurement model.
"""
from datetime import datetime
from healthwallet import db


class Vital(db.Model):
    """
    A single dated measurement. ``value`` is kept as text ("95", "120/80");
    numeric interpretation happens at read time.
    """
    __tablename__ = 'vitals'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)

    vital_type = db.Column(db.String(100), nullable=False, index=True)
    value = db.Column(db.String(100), nullable=False)
    unit = db.Column(db.String(50), nullable=True)

    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    owner = db.relationship('User', back_populates='vitals')
    report_links = db.relationship('ReportVital', back_populates='vital',
                                   cascade='all, delete-orphan', passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'vital_type': self.vital_type,
            'value': self.value,
            'unit': self.unit,
            'date': self.date.isoformat() if self.date else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Vital {self.id}: {self.vital_type}={self.value}>'
