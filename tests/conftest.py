"""Shared pytest fixtures for sigorta_api tests."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from sigorta_api import modeller
from sigorta_api.api_ana import create_app
from sigorta_api.depolar import MusteriDeposu, MuhasebeDeposu, PoliceDeposu, PoliceDosyaDeposu
from sigorta_api.dosya_deposu import DosyaDeposu
from sigorta_api.veritabani import engine_olustur, session_factory, tablolari_olustur


@pytest.fixture
def database_url(tmp_path):
    """Temporary SQLite file database address."""
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def engine(database_url):
    """Create the engine and the four tables on the temporary database."""
    engine = engine_olustur(database_url)
    tablolari_olustur(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def musteri_deposu(db):
    return MusteriDeposu(db)


@pytest.fixture
def police_deposu(db):
    return PoliceDeposu(db)


@pytest.fixture
def muhasebe_deposu(db):
    return MuhasebeDeposu(db)


@pytest.fixture
def police_dosya_deposu(db):
    return PoliceDosyaDeposu(db)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def yedek_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def dosya_deposu(upload_dir):
    return DosyaDeposu(str(upload_dir), "/uploads", max_boyut=1024)


@pytest.fixture
def client(engine, database_url, upload_dir, yedek_dir):
    """TestClient over an app wired to the temporary database and directories."""
    app = create_app(database_url=database_url, upload_dir=str(upload_dir), yedek_dir=str(yedek_dir))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def musteri_ekle(musteri_deposu):
    """Factory that stores a customer through the repository."""
    def _ekle(ad="Ahmet Yılmaz", **alanlar):
        return musteri_deposu.create(modeller.MusteriCreate(ad=ad, **alanlar))
    return _ekle


@pytest.fixture
def police_ekle(police_deposu):
    """Factory that stores a policy through the repository."""
    def _ekle(musteri_id, police_no=None, baslangic=date(2025, 1, 1), bitis=date(2025, 12, 31),
              prim=1000.0, police_turu="Kasko", durum="Aktif", yil=None, **alanlar):
        veri = modeller.PoliceCreate(
            police_no=police_no,
            musteri_id=musteri_id,
            baslangic_tarihi=baslangic,
            bitis_tarihi=bitis,
            prim=prim,
            police_turu=police_turu,
            durum=durum,
            **alanlar,
        )
        return police_deposu.create(veri, yil=yil)
    return _ekle


@pytest.fixture
def kayit_ekle(muhasebe_deposu):
    """Factory that stores an accounting record through the repository."""
    def _ekle(musteri_id, tutar, tip="Gelir", islem_tarihi=date(2025, 1, 10), **alanlar):
        veri = modeller.MuhasebeCreate(
            musteri_id=musteri_id,
            tutar=tutar,
            tip=tip,
            islem_tarihi=islem_tarihi,
            **alanlar,
        )
        return muhasebe_deposu.create(veri)
    return _ekle


@pytest.fixture
def ahmet_ve_ayse(musteri_ekle, kayit_ekle):
    """Ahmet Yılmaz: +1000 / -500, Ayşe Demir: -3000."""
    ahmet = musteri_ekle("Ahmet Yılmaz", tc_kimlik_no="12345678901", telefon="05551234567")
    ayse = musteri_ekle("Ayşe Demir", tc_kimlik_no="23456789012", telefon="05552345678")
    kayit_ekle(ahmet.id, 1000, "Gelir", date(2025, 1, 5), aciklama="Kasko ödemesi")
    kayit_ekle(ahmet.id, 500, "Gider", date(2025, 2, 10), aciklama="Hasar ödemesi")
    kayit_ekle(ayse.id, 3000, "Gider", date(2025, 3, 1), aciklama="Prim borcu")
    return ahmet, ayse
