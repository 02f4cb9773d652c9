# eski_veritabani_aktar.py
"""
Eski (camelCase sütunlu) sigorta veritabanını yeni şemaya aktarır.

Eski muhasebe tablosu iki biçimde bulunabilir:
  - poliçe bazlı: policyId, transactionDate, amount, type, description
  - müşteri bazlı: customerId, plateNumber, transactionDate, amount, type, description
Poliçe bazlı kayıtlar poliçenin müşterisine ve plakasına bağlanır, police_id bağlantısı korunur.
Poliçesi bulunamayan kayıtlar atlanır ve loglanır.

    python eski_veritabani_aktar.py eski/insurance.db --database-url sqlite:///./sigorta.db
"""
import argparse
import logging
import re
from datetime import date, datetime
from typing import Dict, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError

from sigorta_api import config
from sigorta_api.semalar import (
    Musteri, Police, MuhasebeKaydi, PoliceDosyasi, PoliceTuruEnum, PoliceDurumEnum, MuhasebeTipEnum
)
from sigorta_api.veritabani import engine_olustur, session_factory, tablolari_olustur

logger = logging.getLogger(__name__)

TC_DESENI = re.compile(r"^[0-9]{11}$")


class AktarimHatasi(Exception):
    pass


def _ilk(satir: Dict, *adlar, varsayilan=None):
    """Eski tablolarda aynı bilgi farklı sütun adlarıyla tutulmuş olabilir."""
    for ad in adlar:
        if ad in satir and satir[ad] is not None:
            return satir[ad]
    return varsayilan


def _tarih(deger) -> Optional[date]:
    if deger is None or deger == "":
        return None
    if isinstance(deger, datetime):
        return deger.date()
    if isinstance(deger, date):
        return deger
    # "2024-01-01T00:00:00.000Z" ve "2024-01-01" biçimleri
    return date.fromisoformat(str(deger)[:10])


def _zaman(deger) -> Optional[datetime]:
    if deger is None or deger == "":
        return None
    if isinstance(deger, datetime):
        return deger
    try:
        return datetime.fromisoformat(str(deger)[:19].replace(" ", "T"))
    except ValueError:
        logger.warning(f"Okunamayan zaman damgası atlandı: {deger!r}")
        return None


def _tc(deger, kaynak: str) -> Optional[str]:
    if not deger:
        return None
    deger = str(deger).strip()
    if not TC_DESENI.match(deger):
        logger.warning(f"{kaynak}: geçersiz TC kimlik no ({deger!r}) boş bırakıldı")
        return None
    return deger


def _enum(enum_sinifi, deger, varsayilan, kaynak: str):
    try:
        return enum_sinifi(deger)
    except ValueError:
        logger.warning(f"{kaynak}: bilinmeyen değer {deger!r}, {varsayilan.value} olarak aktarıldı")
        return varsayilan


def _satirlar(baglanti, tablo: str):
    return [dict(satir) for satir in baglanti.execute(text(f'SELECT * FROM "{tablo}" ORDER BY id')).mappings()]


def aktar(eski_url: str, yeni_url: str = None) -> Dict[str, int]:
    """Eski veritabanını okur, yeni veritabanına tek işlemde yazar ve aktarılan kayıt sayılarını döndürür."""
    eski_engine = create_engine(eski_url)
    yeni_engine = engine_olustur(yeni_url or config.DATABASE_URL)
    tablolari_olustur(yeni_engine)
    db = session_factory(yeni_engine)()

    sayilar = {"musteriler": 0, "policeler": 0, "muhasebe": 0, "police_dosyalari": 0, "atlanan_muhasebe": 0}
    try:
        if db.query(Musteri).count() > 0:
            raise AktarimHatasi("Hedef veritabanı boş değil; aktarım yalnızca boş veritabanına yapılabilir")

        eski_tablolar = set(inspect(eski_engine).get_table_names())
        for gerekli in ("customers", "policies"):
            if gerekli not in eski_tablolar:
                raise AktarimHatasi(f"Eski veritabanında '{gerekli}' tablosu yok")

        with eski_engine.connect() as baglanti:
            musteriler = _satirlar(baglanti, "customers")
            policeler = _satirlar(baglanti, "policies")
            muhasebe = _satirlar(baglanti, "accounting") if "accounting" in eski_tablolar else []
            dosyalar = _satirlar(baglanti, "policy_files") if "policy_files" in eski_tablolar else []

        musteri_adlari = {}
        for m in musteriler:
            kaynak = f"Müşteri {m['id']}"
            musteri = Musteri(
                id=m["id"],
                ad=_ilk(m, "name", varsayilan=f"Müşteri {m['id']}"),
                tc_kimlik_no=_tc(_ilk(m, "tcNumber", "tc_kimlik_no"), kaynak),
                email=_ilk(m, "email") or None,
                telefon=_ilk(m, "phone") or None,
                adres=_ilk(m, "address") or None,
                olusturma_tarihi=_zaman(_ilk(m, "createdAt")),
                guncelleme_tarihi=_zaman(_ilk(m, "updatedAt", "createdAt")),
            )
            musteri_adlari[musteri.id] = musteri
            db.add(musteri)
        db.flush()
        sayilar["musteriler"] = len(musteriler)

        police_bilgileri = {}
        kullanilan_numaralar = set()
        for p in policeler:
            kaynak = f"Poliçe {p['id']}"
            musteri = musteri_adlari.get(p["customerId"])
            if musteri is None:
                raise AktarimHatasi(f"{kaynak}: müşteri {p['customerId']} bulunamadı")

            police_no = _ilk(p, "policyNumber")
            if police_no in kullanilan_numaralar:
                yeni_no = f"{police_no}-{p['id']}"
                logger.warning(f"{kaynak}: {police_no} numarası tekrar ediyor, {yeni_no} olarak aktarıldı")
                police_no = yeni_no
            kullanilan_numaralar.add(police_no)

            plaka_no = _ilk(p, "plateNumber") or None
            db.add(Police(
                id=p["id"],
                police_no=police_no,
                musteri_id=musteri.id,
                musteri_adi=musteri.ad,
                tc_kimlik_no=musteri.tc_kimlik_no or _tc(_ilk(p, "tcNumber"), kaynak),
                plaka_no=plaka_no,
                baslangic_tarihi=_tarih(p["startDate"]),
                bitis_tarihi=_tarih(p["endDate"]),
                prim=float(_ilk(p, "premium", varsayilan=0.0)),
                police_turu=_enum(PoliceTuruEnum, _ilk(p, "policyType", "type"), PoliceTuruEnum.DIGER, kaynak),
                durum=_enum(PoliceDurumEnum, _ilk(p, "status"), PoliceDurumEnum.PASIF, kaynak),
                aciklama=_ilk(p, "description"),
                olusturma_tarihi=_zaman(_ilk(p, "createdAt")),
            ))
            police_bilgileri[p["id"]] = (musteri.id, plaka_no)
        db.flush()
        sayilar["policeler"] = len(policeler)

        for k in muhasebe:
            kaynak = f"Muhasebe kaydı {k['id']}"
            police_id = _ilk(k, "policyId")
            if police_id is not None:
                if police_id not in police_bilgileri:
                    logger.warning(f"{kaynak}: poliçe {police_id} bulunamadı, kayıt atlandı")
                    sayilar["atlanan_muhasebe"] += 1
                    continue
                musteri_id, plaka_no = police_bilgileri[police_id]
            else:
                musteri_id, plaka_no = _ilk(k, "customerId"), _ilk(k, "plateNumber") or None
                if musteri_id not in musteri_adlari:
                    logger.warning(f"{kaynak}: müşteri {musteri_id} bulunamadı, kayıt atlandı")
                    sayilar["atlanan_muhasebe"] += 1
                    continue

            db.add(MuhasebeKaydi(
                id=k["id"],
                musteri_id=musteri_id,
                police_id=police_id,
                plaka_no=plaka_no,
                islem_tarihi=_tarih(k["transactionDate"]),
                tutar=abs(float(k["amount"])),
                tip=MuhasebeTipEnum(k["type"]),
                aciklama=_ilk(k, "description"),
                olusturma_tarihi=_zaman(_ilk(k, "createdAt")),
            ))
            sayilar["muhasebe"] += 1

        for d in dosyalar:
            if d["policyId"] not in police_bilgileri:
                logger.warning(f"Dosya {d['id']}: poliçe {d['policyId']} bulunamadı, atlandı")
                continue
            db.add(PoliceDosyasi(
                id=d["id"],
                police_id=d["policyId"],
                ad=_ilk(d, "name", "fileName"),
                url=_ilk(d, "url", "fileUrl"),
                mime_tipi=_ilk(d, "type", "fileType", varsayilan="application/octet-stream"),
                boyut=int(_ilk(d, "size", "fileSize", varsayilan=0)),
                olusturma_tarihi=_zaman(_ilk(d, "createdAt", "uploadDate")),
            ))
            sayilar["police_dosyalari"] += 1

        db.commit()
    except (AktarimHatasi, SQLAlchemyError, ValueError):
        db.rollback()
        logger.error("Aktarım başarısız, hiçbir kayıt yazılmadı.", exc_info=True)
        raise
    finally:
        db.close()
        eski_engine.dispose()
        yeni_engine.dispose()

    logger.info(f"Aktarım tamamlandı: {sayilar}")
    return sayilar


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    parser = argparse.ArgumentParser(description="Eski sigorta veritabanını yeni şemaya aktarır")
    parser.add_argument("eski_veritabani", help="Eski SQLite dosyasının yolu (ör. insurance.db)")
    parser.add_argument("--database-url", default=None, help="Hedef SQLAlchemy adresi (varsayılan: DATABASE_URL)")
    args = parser.parse_args()
    aktar(f"sqlite:///{args.eski_veritabani}", args.database_url)
