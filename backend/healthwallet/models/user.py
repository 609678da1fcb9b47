"""
User model.
"""
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from healthwallet import db


class User(db.Model):
    """
    A registered account. Owns reports and vitals, and can be named as the
    grantee of reports shared by other users.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    # Stored as given at registration; lookups are exact-match
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='owner')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    reports = db.relationship('Report', back_populates='owner', lazy='dynamic',
                              cascade='all, delete-orphan', passive_deletes=True)
    vitals = db.relationship('Vital', back_populates='owner', lazy='dynamic',
                             cascade='all, delete-orphan', passive_deletes=True)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def find_by_email(email: str):
        """Find a user by the exact email they registered with."""
        return User.query.filter_by(email=email).first()

    def __repr__(self):
        return f'<User {self.id}>'
