"""
Seed script to populate a development database with demo accounts and vitals.
Run from backend/: python seed.py
"""
from datetime import date, timedelta

from healthwallet import create_app, db
from healthwallet.models import User, Vital

DEMO_USERS = [
    ('Alice Demo', 'alice.demo@example.com'),
    ('Bob Demo', 'bob.demo@example.com'),
]
DEMO_PASSWORD = 'changeme123'


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        for name, email in DEMO_USERS:
            if User.find_by_email(email):
                print(f"  User '{email}' already exists, skipping.")
                continue
            user = User(name=name, email=email)
            user.set_password(DEMO_PASSWORD)
            db.session.add(user)
            print(f"  Added user '{email}'")
        db.session.commit()

        alice = User.find_by_email(DEMO_USERS[0][1])
        if alice.vitals.count() == 0:
            today = date.today()
            for days_ago, sugar, bp in [(30, '102', '128/84'), (15, '97', '122/80'), (1, '95', '118/78')]:
                day = today - timedelta(days=days_ago)
                db.session.add(Vital(user_id=alice.id, vital_type='Sugar', value=sugar,
                                     unit='mg/dL', date=day))
                db.session.add(Vital(user_id=alice.id, vital_type='Blood Pressure', value=bp,
                                     unit='mmHg', date=day))
            db.session.commit()
            print(f"  Added demo vitals for '{alice.email}'")

        print(f"\nUsers: {User.query.count()} total. Password for demo users: {DEMO_PASSWORD}")


if __name__ == "__main__":
    seed()
