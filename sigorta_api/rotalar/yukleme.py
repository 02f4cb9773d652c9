from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from .. import modeller
from ..depolar import PoliceDosyaDeposu
from ..dosya_deposu import DosyaDeposu, get_dosya_deposu
from ..hatalar import CakismaHatasi
from ..veritabani import get_db

router = APIRouter(prefix="/upload", tags=["Dosya Yükleme"])


@router.post("", response_model=modeller.VeriYaniti[modeller.YuklenenDosya])
def upload_dosya(file: UploadFile = File(...), dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)):
    icerik = file.file.read(dosya_deposu.max_boyut + 1)
    return {"data": dosya_deposu.kaydet(file.filename, icerik, file.content_type)}


@router.delete("", response_model=modeller.VeriYaniti[modeller.MesajYaniti])
def delete_yuklenen_dosya(
    url: str = Query(..., description="Silinecek dosyanın adresi, örn. /uploads/1700000000000-ab12cd34-police.pdf"),
    db: Session = Depends(get_db),
    dosya_deposu: DosyaDeposu = Depends(get_dosya_deposu)
):
    if PoliceDosyaDeposu(db).url_kullaniliyor(url):
        raise CakismaHatasi("Bu dosya bir poliçeye bağlı. Önce poliçeden kaldırılmalıdır.")
    dosya_deposu.sil(url)
    return {"data": {"mesaj": "Dosya başarıyla silindi"}}
