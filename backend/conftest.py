from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("CRON_SECRET", None)
os.environ.pop("RESEND_API_KEY", None)

from compliancedb.database import Base  # noqa: E402
from compliancedb.apps.accounts import models as account_models  # noqa: E402
from compliancedb.apps.audit import models as audit_models  # noqa: E402
from compliancedb.apps.notifications import models as notification_models  # noqa: E402
from compliancedb.apps.training import models as training_models  # noqa: E402


ALL_TABLES = [
    account_models.Organization.__table__,
    account_models.OrgMember.__table__,
    audit_models.AuditEvent.__table__,
    notification_models.EmailLog.__table__,
    training_models.TrainingAssignment.__table__,
    training_models.TrainingSectionProgress.__table__,
    training_models.TrainingQuizAttempt.__table__,
    training_models.TrainingCertificate.__table__,
    training_models.TrainingCertNotification.__table__,
]


def make_sqlite_engine():
    """
    In-memory SQLite engine with working SAVEPOINTs: pysqlite's own
    transaction handling is switched off and BEGIN is emitted explicitly.
    """
    engine = create_engine("sqlite+pysqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture()
def db_session():
    engine = make_sqlite_engine()
    Base.metadata.create_all(bind=engine, tables=ALL_TABLES)
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
