from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import modeller
from ..api_servisler import MusteriBakiyeService
from ..depolar import MusteriDeposu
from ..veritabani import get_db
from ..yardimcilar import tarih_araligini_dogrula

router = APIRouter(prefix="/musteriler", tags=["Müşteriler"])


@router.get("/", response_model=modeller.VeriYaniti[modeller.ListeYaniti[modeller.MusteriRead]])
def read_musteriler(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    arama: Optional[str] = None
):
    musteriler, total_count = MusteriDeposu(db).list(arama=arama, skip=skip, limit=limit)

    # Sayfadaki müşterilerin bakiyeleri tek sorguda hesaplanır
    bakiyeler = MusteriBakiyeService(db).toplu_net_bakiyeler([m.id for m in musteriler])
    musteriler_with_balance = []
    for musteri in musteriler:
        musteri_read = modeller.MusteriRead.model_validate(musteri)
        musteri_read.net_bakiye = bakiyeler.get(musteri.id, 0.0)
        musteriler_with_balance.append(musteri_read)

    return {"data": {"items": musteriler_with_balance, "total": total_count}}


@router.post("/", response_model=modeller.VeriYaniti[modeller.MusteriRead], status_code=status.HTTP_201_CREATED)
def create_musteri(musteri: modeller.MusteriCreate, db: Session = Depends(get_db)):
    db_musteri = MusteriDeposu(db).create(musteri)
    return {"data": modeller.MusteriRead.model_validate(db_musteri)}


@router.get("/{musteri_id}", response_model=modeller.VeriYaniti[modeller.MusteriDetay])
def read_musteri(musteri_id: int, db: Session = Depends(get_db)):
    depo = MusteriDeposu(db)
    musteri = depo.get(musteri_id)

    musteri_detay = modeller.MusteriDetay.model_validate(
        {
            **modeller.MusteriRead.model_validate(musteri).model_dump(),
            "net_bakiye": MusteriBakiyeService(db).calculate_net_bakiye(musteri_id),
            "policeler": [modeller.PoliceRead.model_validate(p) for p in depo.policeler(musteri_id)],
        }
    )
    return {"data": musteri_detay}


@router.put("/{musteri_id}", response_model=modeller.VeriYaniti[modeller.MusteriRead])
def update_musteri(musteri_id: int, musteri: modeller.MusteriUpdate, db: Session = Depends(get_db)):
    db_musteri = MusteriDeposu(db).update(musteri_id, musteri)
    musteri_read = modeller.MusteriRead.model_validate(db_musteri)
    musteri_read.net_bakiye = MusteriBakiyeService(db).calculate_net_bakiye(musteri_id)
    return {"data": musteri_read}


@router.delete("/{musteri_id}", response_model=modeller.VeriYaniti[modeller.SilmeYaniti])
def delete_musteri(musteri_id: int, db: Session = Depends(get_db)):
    MusteriDeposu(db).delete(musteri_id)
    return {"data": {"id": musteri_id, "mesaj": "Müşteri silindi"}}


@router.get("/{musteri_id}/bakiye", response_model=modeller.VeriYaniti[modeller.BakiyeYaniti])
def get_bakiye_endpoint(
    musteri_id: int,
    baslangic_tarihi: Optional[date] = Query(None, description="Başlangıç tarihi (YYYY-MM-DD)"),
    bitis_tarihi: Optional[date] = Query(None, description="Bitiş tarihi (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    tarih_araligini_dogrula(baslangic_tarihi, bitis_tarihi)
    MusteriDeposu(db).get(musteri_id)
    gelir, gider = MusteriBakiyeService(db).calculate_gelir_gider(musteri_id, baslangic_tarihi, bitis_tarihi)
    return {
        "data": {
            "musteri_id": musteri_id,
            "toplam_gelir": gelir,
            "toplam_gider": gider,
            "net_bakiye": gelir - gider,
            "baslangic_tarihi": baslangic_tarihi,
            "bitis_tarihi": bitis_tarihi,
        }
    }


@router.get("/{musteri_id}/hesap_ekstresi", response_model=modeller.VeriYaniti[modeller.HesapEkstresiYaniti])
def get_hesap_ekstresi_endpoint(
    musteri_id: int,
    baslangic_tarihi: Optional[date] = Query(None, description="Başlangıç tarihi (YYYY-MM-DD)"),
    bitis_tarihi: Optional[date] = Query(None, description="Bitiş tarihi (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    tarih_araligini_dogrula(baslangic_tarihi, bitis_tarihi)
    musteri = MusteriDeposu(db).get(musteri_id)
    devreden_bakiye, hareketler = MusteriBakiyeService(db).hesap_ekstresi(musteri_id, baslangic_tarihi, bitis_tarihi)

    items = [
        modeller.HesapEkstresiSatiri(
            islem_id=kayit.id,
            islem_tarihi=kayit.islem_tarihi,
            tip=kayit.tip,
            tutar=kayit.tutar,
            aciklama=kayit.aciklama,
            plaka_no=kayit.plaka_no,
            police_id=kayit.police_id,
            guncel_bakiye=bakiye,
        )
        for kayit, bakiye in hareketler
    ]
    son_bakiye = items[-1].guncel_bakiye if items else devreden_bakiye
    return {
        "data": {
            "musteri_id": musteri.id,
            "musteri_adi": musteri.ad,
            "devreden_bakiye": devreden_bakiye,
            "son_bakiye": son_bakiye,
            "items": items,
        }
    }
