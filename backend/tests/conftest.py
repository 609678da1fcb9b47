import io
import json
from datetime import date

import pytest

from healthwallet import create_app, db
from healthwallet.models import User, Report, Vital, ReportVital, SharedAccess


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'JWT_SECRET_KEY': 'test-jwt-secret-key-with-enough-length',
        'DATABASE_URL': f"sqlite:///{tmp_path / 'test.db'}",
        'FILE_STORE_BACKEND': 'local',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upload_folder(app):
    return app.config['UPLOAD_FOLDER']


def register(client, name, email, password='secret123'):
    response = client.post('/api/auth/register', json={
        'name': name, 'email': email, 'password': password,
    })
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return body['user']['id'], {'Authorization': f"Bearer {body['token']}"}


@pytest.fixture
def alice(client):
    """(user_id, headers) for the first test user."""
    return register(client, 'Alice', 'alice@example.com')


@pytest.fixture
def bob(client):
    return register(client, 'Bob', 'bob@example.com')


@pytest.fixture
def carol(client):
    return register(client, 'Carol', 'carol@example.com')


def upload(client, headers, report_type='Blood Test', report_date='2024-01-10', vitals=None,
           filename='report.pdf', content=b'%PDF-1.4 test report', mimetype='application/pdf',
           path='/api/reports'):
    data = {}
    if filename is not None:
        data['file'] = (io.BytesIO(content), filename, mimetype)
    if report_type is not None:
        data['report_type'] = report_type
    if report_date is not None:
        data['date'] = report_date
    if vitals is not None:
        data['vitals'] = vitals if isinstance(vitals, str) else json.dumps(vitals)
    return client.post(path, data=data, headers=headers, content_type='multipart/form-data')


SUGAR_VITAL = {'vital_type': 'Sugar', 'value': '95', 'date': '2024-01-10', 'unit': 'mg/dL'}


# Direct model factories for service-level tests

def make_user(name, email):
    user = User(name=name, email=email)
    user.set_password('secret123')
    db.session.add(user)
    db.session.commit()
    return user


def make_report(owner, report_type='Blood Test', report_date=date(2024, 1, 10), file_path='file-1.pdf'):
    report = Report(user_id=owner.id, file_name='report.pdf', file_path=file_path,
                    file_type='application/pdf', report_type=report_type, date=report_date)
    db.session.add(report)
    db.session.commit()
    return report


def make_vital(owner, vital_type='Sugar', value='95', vital_date=date(2024, 1, 10), unit='mg/dL',
               report=None):
    vital = Vital(user_id=owner.id, vital_type=vital_type, value=value, unit=unit, date=vital_date)
    db.session.add(vital)
    if report is not None:
        db.session.add(ReportVital(report=report, vital=vital))
    db.session.commit()
    return vital


def make_grant(report, grantee, access_type='read'):
    grant = SharedAccess(report_id=report.id, owner_id=report.user_id,
                         shared_with_id=grantee.id, access_type=access_type)
    db.session.add(grant)
    db.session.commit()
    return grant
