from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from .. import modeller, semalar
from ..api_servisler import PoliceNumarasiService
from ..depolar import PoliceDeposu, PoliceDosyaDeposu
from ..dosya_deposu import DosyaDeposu, get_dosya_deposu
from ..hatalar import SigortaHatasi
from ..veritabani import get_db

router = APIRouter(prefix="/policeler", tags=["Poliçeler"])


@router.get("/", response_model=modeller.VeriYaniti[modeller.ListeYaniti[modeller.PoliceRead]])
def read_policeler(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    arama: Optional[str] = Query(None, description="Poliçe no, müşteri adı, TC kimlik no veya plaka"),
    durum: Optional[semalar.PoliceDurumEnum] = None,
    police_turu: Optional[semalar.PoliceTuruEnum] = None,
    musteri_id: Optional[int] = None,
    baslangic_tarihi: Optional[date] = Query(None, description="Başlangıç tarihi (YYYY-MM-DD)"),
    bitis_tarihi: Optional[date] = Query(None, description="Bitiş tarihi (YYYY-MM-DD)")
):
    policeler, total_count = PoliceDeposu(db).list(
        arama=arama,
        durum=durum,
        police_turu=police_turu,
        musteri_id=musteri_id,
        baslangic_tarihi=baslangic_tarihi,
        bitis_tarihi=bitis_tarihi,
        skip=skip,
        limit=limit,
    )
    return {"data": {"items": [modeller.PoliceRead.model_validate(p) for p in policeler], "total": total_count}}


@router.get("/yeni", response_model=modeller.VeriYaniti[modeller.YeniPoliceVarsayilanlari])
def get_yeni_police_varsayilanlari(db: Session = Depends(get_db)):
    bugun = date.today()
    return {
        "data": {
            "police_no": PoliceNumarasiService(db).generate_police_no(bugun.year),
            "baslangic_tarihi": bugun,
            "bitis_tarihi": bugun + timedelta(days=365),
            "prim": 0.0,
            "durum": semalar.PoliceDurumEnum.AKTIF,
        }
    }


@router.post("/", response_model=modeller.VeriYaniti[modeller.PoliceRead], status_code=status.HTTP_201_CREATED)
def create_police(police: modeller.PoliceCreate, db: Session = Depends(get_db)):
    db_police = PoliceDeposu(db).create(police)
    return {"data": modeller.PoliceRead.model_validate(db_police)}


@router.get("/{police_id}", response_model=modeller.VeriYaniti[modeller.PoliceDetay])
def read_police(police_id: int, db: Session = Depends(get_db)):
    depo = PoliceDeposu(db)
    police = depo.get(police_id)
    police_detay = modeller.PoliceDetay.model_validate(
        {
            **modeller.PoliceRead.model_validate(police).model_dump(),
            "dosyalar": [modeller.PoliceDosyasiRead.model_validate(d) for d in police.dosyalar],
            "muhasebe_kayitlari": [modeller.MuhasebeRead.model_validate(k) for k in depo.muhasebe_kayitlari(police_id)],
        }
    )
    return {"data": police_detay}


@router.put("/{police_id}", response_model=modeller.VeriYaniti[modeller.PoliceRead])
def update_police(
    police_id: int,
    police: modeller.PoliceUpdate,
    db: Session = Depends(get_db),
    dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)
):
    db_police, kaldirilan_urller = PoliceDeposu(db).update(police_id, police)
    # Diskteki dosyalar ancak veritabanı işlemi tamamlandıktan sonra silinir
    dosya_deposu.toplu_sil(kaldirilan_urller)
    return {"data": modeller.PoliceRead.model_validate(db_police)}


@router.delete("/{police_id}", response_model=modeller.VeriYaniti[modeller.SilmeYaniti])
def delete_police(
    police_id: int,
    db: Session = Depends(get_db),
    dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)
):
    urller = PoliceDeposu(db).delete(police_id)
    dosya_deposu.toplu_sil(urller)
    return {"data": {"id": police_id, "mesaj": "Poliçe silindi"}}


@router.get("/{police_id}/dosyalar", response_model=modeller.VeriYaniti[modeller.ListeYaniti[modeller.PoliceDosyasiRead]])
def read_police_dosyalari(police_id: int, db: Session = Depends(get_db)):
    dosyalar = PoliceDosyaDeposu(db).list(police_id)
    return {"data": {"items": [modeller.PoliceDosyasiRead.model_validate(d) for d in dosyalar], "total": len(dosyalar)}}


@router.post(
    "/{police_id}/dosyalar",
    response_model=modeller.VeriYaniti[modeller.PoliceDosyasiRead],
    status_code=status.HTTP_201_CREATED
)
def create_police_dosyasi(
    police_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)
):
    depo = PoliceDosyaDeposu(db)
    depo.list(police_id)  # poliçe yoksa dosya diske yazılmadan 404 döner

    # Sınırın bir bayt fazlası okunur; fazlası varsa kaydet() reddeder
    icerik = file.file.read(dosya_deposu.max_boyut + 1)
    yuklenen = dosya_deposu.kaydet(file.filename, icerik, file.content_type)
    try:
        db_dosya = depo.create(police_id, modeller.PoliceDosyasiCreate(**yuklenen))
    except SigortaHatasi:
        dosya_deposu.toplu_sil([yuklenen["url"]])
        raise
    return {"data": modeller.PoliceDosyasiRead.model_validate(db_dosya)}


@router.delete("/{police_id}/dosyalar/{dosya_id}", response_model=modeller.VeriYaniti[modeller.SilmeYaniti])
def delete_police_dosyasi(
    police_id: int,
    dosya_id: int,
    db: Session = Depends(get_db),
    dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)
):
    url = PoliceDosyaDeposu(db).delete(police_id, dosya_id)
    dosya_deposu.toplu_sil([url])
    return {"data": {"id": dosya_id, "mesaj": "Dosya silindi"}}
