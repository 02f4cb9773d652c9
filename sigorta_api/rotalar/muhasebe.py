from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import modeller, semalar
from ..depolar import MuhasebeDeposu
from ..veritabani import get_db

router = APIRouter(prefix="/muhasebe", tags=["Muhasebe"])


@router.get("/", response_model=modeller.VeriYaniti[modeller.ListeYaniti[modeller.MuhasebeRead]])
def read_muhasebe_kayitlari(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    musteri_id: Optional[int] = None,
    police_id: Optional[int] = None,
    plaka_no: Optional[str] = None,
    tip: Optional[semalar.MuhasebeTipEnum] = None,
    baslangic_tarihi: Optional[date] = Query(None, description="Başlangıç tarihi (YYYY-MM-DD)"),
    bitis_tarihi: Optional[date] = Query(None, description="Bitiş tarihi (YYYY-MM-DD)"),
    arama: Optional[str] = Query(None, description="Açıklama, müşteri adı, TC kimlik no veya plaka")
):
    kayitlar, total_count = MuhasebeDeposu(db).list(
        musteri_id=musteri_id,
        police_id=police_id,
        plaka_no=plaka_no,
        tip=tip,
        baslangic_tarihi=baslangic_tarihi,
        bitis_tarihi=bitis_tarihi,
        arama=arama,
        skip=skip,
        limit=limit,
    )
    return {"data": {"items": [modeller.MuhasebeRead.model_validate(k) for k in kayitlar], "total": total_count}}


@router.post("/", response_model=modeller.VeriYaniti[modeller.MuhasebeRead], status_code=status.HTTP_201_CREATED)
def create_muhasebe_kaydi(kayit: modeller.MuhasebeCreate, db: Session = Depends(get_db)):
    db_kayit = MuhasebeDeposu(db).create(kayit)
    return {"data": modeller.MuhasebeRead.model_validate(db_kayit)}


@router.get("/{kayit_id}", response_model=modeller.VeriYaniti[modeller.MuhasebeRead])
def read_muhasebe_kaydi(kayit_id: int, db: Session = Depends(get_db)):
    return {"data": modeller.MuhasebeRead.model_validate(MuhasebeDeposu(db).get(kayit_id))}


@router.put("/{kayit_id}", response_model=modeller.VeriYaniti[modeller.MuhasebeRead])
def update_muhasebe_kaydi(kayit_id: int, kayit: modeller.MuhasebeUpdate, db: Session = Depends(get_db)):
    db_kayit = MuhasebeDeposu(db).update(kayit_id, kayit)
    return {"data": modeller.MuhasebeRead.model_validate(db_kayit)}


@router.delete("/{kayit_id}", response_model=modeller.VeriYaniti[modeller.SilmeYaniti])
def delete_muhasebe_kaydi(kayit_id: int, db: Session = Depends(get_db)):
    MuhasebeDeposu(db).delete(kayit_id)
    return {"data": {"id": kayit_id, "mesaj": "Kayıt silindi"}}
