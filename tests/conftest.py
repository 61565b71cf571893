# tests/conftest.py
from __future__ import annotations

import base64
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from exposure_export.db.session import Base
from exposure_export.models import Exposure, ExposureExportFile
from exposure_export.schemas.records import SignatureInfoConfig
from exposure_export.services.config import ExportConfig
from exposure_export.services.errors import StorageError

TEST_DB_URL = "sqlite://"
NOW = datetime(2026, 10, 19, 12, 30, 15, 250000, tzinfo=UTC)

_KEY_COUNTER = count(1)


class FakeObjectStore:
    """In-memory stand-in for the S3 bundle bucket."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.puts: list[tuple[str, str, str]] = []
        self.deletes: list[str] = []
        self.fail_on: set[str] = set()
        self.fail_puts = False

    def put(self, key: str, body: bytes, content_type: str, acl: str = "private") -> None:
        if self.fail_puts:
            raise StorageError(f"Upload of {key} failed", key=key)
        self.objects[key] = body
        self.puts.append((key, content_type, acl))

    def delete(self, key: str) -> None:
        if key in self.fail_on:
            raise StorageError(f"Delete of {key} failed", key=key)
        self.deletes.append(key)
        self.objects.pop(key, None)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def signing_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture()
def signature_info() -> SignatureInfoConfig:
    return SignatureInfoConfig(
        app_bundle_id="com.example.covidtracker",
        android_package="com.example.covidtracker",
        verification_key_version="v1",
        verification_key_id="272",
    )


@pytest.fixture()
def export_config(signing_key, signature_info) -> ExportConfig:
    return ExportConfig(
        signing_key=signing_key,
        signature_info=signature_info,
        default_region="IE",
        native_regions=frozenset({"IE"}),
    )


@pytest.fixture()
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return lambda: NOW


def make_key_data(length: int = 16, seed: int | None = None) -> str:
    """Return base64 key material of ``length`` bytes."""
    seed = next(_KEY_COUNTER) if seed is None else seed
    raw = bytes((seed + offset) % 256 for offset in range(length))
    return base64.b64encode(raw).decode()


@pytest.fixture()
def add_exposure(db_session: Session) -> Callable[..., Exposure]:
    def _add(
        *,
        regions: list[str] | None = None,
        created_at: datetime | None = None,
        key_data: str | None = None,
        rolling_start_number: int = 2_700_000,
        rolling_period: int = 144,
        transmission_risk_level: int = 3,
    ) -> Exposure:
        exposure = Exposure(
            created_at=created_at or NOW - timedelta(hours=1),
            key_data=key_data or make_key_data(),
            rolling_start_number=rolling_start_number,
            rolling_period=rolling_period,
            transmission_risk_level=transmission_risk_level,
            regions=regions or ["IE"],
        )
        db_session.add(exposure)
        db_session.commit()
        return exposure

    return _add


@pytest.fixture()
def add_export_file(db_session: Session) -> Callable[..., ExposureExportFile]:
    def _add(
        *,
        since_exposure_id: int,
        last_exposure_id: int,
        region: str = "IE",
        created_at: datetime | None = None,
        path: str | None = None,
    ) -> ExposureExportFile:
        record = ExposureExportFile(
            path=path or f"exposures/{region.lower()}/{last_exposure_id}.zip",
            exposure_count=1,
            since_exposure_id=since_exposure_id,
            last_exposure_id=last_exposure_id,
            first_exposure_created_at=NOW - timedelta(days=1),
            region=region,
            created_at=created_at or NOW - timedelta(hours=2),
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _add
