# create_tables.py
"""
Veritabanında eksik tabloları oluşturur ve istenirse örnek veri ekler.

    python create_tables.py               # yalnızca tablolar
    python create_tables.py --ornek-veri  # tablolar + örnek müşteri/poliçe/muhasebe kayıtları
"""
import argparse
import logging
from datetime import date

from sqlalchemy import inspect

from sigorta_api import config
from sigorta_api.semalar import Musteri, Police, MuhasebeKaydi, PoliceTuruEnum, PoliceDurumEnum, MuhasebeTipEnum
from sigorta_api.veritabani import engine_olustur, session_factory, tablolari_olustur

# Loglama ayarları
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

ORNEK_MUSTERILER = [
    {"ad": "Ahmet Yılmaz", "tc_kimlik_no": "12345678901", "email": "ahmet.yilmaz@email.com",
     "telefon": "05551234567", "adres": "Atatürk Cad. No:123 Kadıköy/İstanbul"},
    {"ad": "Ayşe Demir", "tc_kimlik_no": "23456789012", "email": "ayse.demir@email.com",
     "telefon": "05552345678", "adres": "Bağdat Cad. No:456 Maltepe/İstanbul"},
    {"ad": "Mehmet Kaya", "tc_kimlik_no": "34567890123", "email": "mehmet.kaya@email.com",
     "telefon": "05553456789", "adres": "İstiklal Cad. No:789 Beyoğlu/İstanbul"},
]


def ornek_veri_ekle(db) -> None:
    """Müşteri tablosu boşsa örnek kayıtları ekler."""
    if db.query(Musteri).count() > 0:
        logger.info("Müşteri tablosu boş değil, örnek veri eklenmedi.")
        return

    ahmet, ayse, mehmet = [Musteri(**veri) for veri in ORNEK_MUSTERILER]
    db.add_all([ahmet, ayse, mehmet])
    db.flush()

    policeler = [
        Police(police_no="POL-2024-001", musteri_id=ahmet.id, musteri_adi=ahmet.ad, tc_kimlik_no=ahmet.tc_kimlik_no,
               plaka_no="34ABC123", baslangic_tarihi=date(2024, 1, 1), bitis_tarihi=date(2025, 1, 1), prim=5000,
               police_turu=PoliceTuruEnum.KASKO, durum=PoliceDurumEnum.AKTIF, aciklama="Toyota Corolla 2020 Model"),
        Police(police_no="POL-2024-002", musteri_id=ayse.id, musteri_adi=ayse.ad, tc_kimlik_no=ayse.tc_kimlik_no,
               plaka_no="34DEF456", baslangic_tarihi=date(2024, 2, 1), bitis_tarihi=date(2025, 2, 1), prim=3000,
               police_turu=PoliceTuruEnum.TRAFIK, durum=PoliceDurumEnum.AKTIF, aciklama="Honda Civic 2021 Model"),
        Police(police_no="POL-2024-003", musteri_id=mehmet.id, musteri_adi=mehmet.ad, tc_kimlik_no=mehmet.tc_kimlik_no,
               baslangic_tarihi=date(2024, 3, 1), bitis_tarihi=date(2025, 3, 1), prim=7500,
               police_turu=PoliceTuruEnum.KONUT, durum=PoliceDurumEnum.AKTIF, aciklama="Kadıköy daire"),
    ]
    db.add_all(policeler)
    db.flush()

    db.add_all([
        MuhasebeKaydi(musteri_id=ahmet.id, police_id=policeler[0].id, plaka_no="34ABC123", islem_tarihi=date(2024, 1, 1),
                      tutar=1000, tip=MuhasebeTipEnum.GELIR, aciklama="Kasko poliçe ödemesi"),
        MuhasebeKaydi(musteri_id=ahmet.id, police_id=policeler[0].id, plaka_no="34ABC123", islem_tarihi=date(2024, 1, 15),
                      tutar=500, tip=MuhasebeTipEnum.GIDER, aciklama="Hasar ödemesi"),
        MuhasebeKaydi(musteri_id=ayse.id, police_id=policeler[1].id, plaka_no="34DEF456", islem_tarihi=date(2024, 2, 1),
                      tutar=3000, tip=MuhasebeTipEnum.GIDER, aciklama="Trafik poliçesi prim borcu"),
        MuhasebeKaydi(musteri_id=mehmet.id, police_id=policeler[2].id, islem_tarihi=date(2024, 3, 1),
                      tutar=7500, tip=MuhasebeTipEnum.GELIR, aciklama="Konut poliçe ödemesi"),
    ])
    logger.info("Örnek veriler eklendi.")


def create_tables(database_url: str = None, ornek_veri: bool = False) -> None:
    engine = engine_olustur(database_url or config.DATABASE_URL)
    db = session_factory(engine)()
    try:
        mevcut_tablolar = set(inspect(engine).get_table_names())
        logger.info(f"Mevcut tablolar: {sorted(mevcut_tablolar) or 'yok'}")

        # Tüm tabloları oluştur, sadece eksik olanları ekler.
        tablolari_olustur(engine)
        logger.info("Tablo kontrolü tamamlandı.")

        if ornek_veri:
            ornek_veri_ekle(db)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Tablolar oluşturulurken hata: {e}", exc_info=True)
        raise
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sigorta veritabanı tablolarını oluşturur")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy bağlantı adresi (varsayılan: DATABASE_URL)")
    parser.add_argument("--ornek-veri", action="store_true", help="Boş veritabanına örnek kayıtlar ekle")
    args = parser.parse_args()
    create_tables(args.database_url, args.ornek_veri)
