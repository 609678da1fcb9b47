"""
Denylist of logged-out access tokens, keyed by the token's jti claim.
"""
from datetime import datetime
from healthwallet import db


class RevokedToken(db.Model):
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow)
    # Rows are useless once the token itself has expired
    expires_at = db.Column(db.DateTime, nullable=False)

    @classmethod
    def revoke(cls, jti, user_id, exp):
        """Record a token as revoked. ``exp`` is the token's exp claim (unix seconds)."""
        if cls.is_revoked(jti):
            return None
        entry = cls(jti=jti, user_id=user_id, expires_at=datetime.utcfromtimestamp(exp))
        db.session.add(entry)
        db.session.commit()
        return entry

    @classmethod
    def is_revoked(cls, jti):
        if not jti:
            return False
        return db.session.query(db.exists().where(cls.jti == jti)).scalar()

    @classmethod
    def purge_expired(cls, now=None):
        """Drop entries for tokens past their expiry. Returns the number removed."""
        now = now or datetime.utcnow()
        removed = cls.query.filter(cls.expires_at < now).delete(synchronize_session=False)
        db.session.commit()
        return removed

    def __repr__(self):
        return f'<RevokedToken {self.jti} user={self.user_id}>'
