from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
import logging

from .yardimcilar import turkce_kucuk_harf

logger = logging.getLogger(__name__)

# Deklaratif taban sınıfı
# SQLAlchemy tabloları (sigorta_api/semalar.py) bu Base sınıfını kullanır.
Base = declarative_base()


def engine_olustur(database_url: str) -> Engine:
    """
    Verilen adres için SQLAlchemy motorunu oluşturur.
    SQLite kullanılıyorsa yabancı anahtar denetimi her bağlantıda açılır.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI senkron rotaları iş parçacığı havuzunda çalıştırır.
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()
            # Aramalarda "İ/ı/Ş/Ç..." harflerinin büyük/küçük eşleşmesi için
            dbapi_connection.create_function("turkce_kucuk_harf", 1, turkce_kucuk_harf, deterministic=True)

    logger.info(f"Veritabanı motoru oluşturuldu: {engine.url.render_as_string(hide_password=True)}")
    return engine


def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def tablolari_olustur(engine: Engine) -> None:
    # Tabloların kayıtlı olması için semalar içe aktarılmalı
    from . import semalar  # noqa: F401
    Base.metadata.create_all(bind=engine)


# Veritabanı oturumu almak için bağımlılık fonksiyonu
# Motor ve oturum fabrikası uygulama başlarken app.state üzerine yerleştirilir (bkz. api_ana.lifespan).
def get_db(request: Request):
    db: Session = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()
