from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import modeller
from ..rapor_servisi import RaporService
from ..veritabani import get_db

router = APIRouter(prefix="/raporlar", tags=["Raporlar"])


@router.get("/{tur}", response_model=modeller.VeriYaniti[modeller.RaporYaniti])
def get_rapor_endpoint(
    tur: modeller.RaporTuruEnum,
    baslangic_tarihi: Optional[date] = Query(None, description="Başlangıç tarihi (YYYY-MM-DD)"),
    bitis_tarihi: Optional[date] = Query(None, description="Bitiş tarihi (YYYY-MM-DD)"),
    musteri_id: Optional[int] = Query(None, description="Opsiyonel müşteri ID"),
    gun: Optional[int] = Query(None, ge=1, description="Süresi dolacak poliçeler için gün sayısı (varsayılan 30)"),
    db: Session = Depends(get_db)
):
    params = modeller.RaporParametreleri(
        baslangic_tarihi=baslangic_tarihi,
        bitis_tarihi=bitis_tarihi,
        musteri_id=musteri_id,
        gun=gun,
    )
    return {"data": RaporService(db).rapor_olustur(tur, params)}
