from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import modeller
from ..rapor_servisi import PanoService
from ..veritabani import get_db

router = APIRouter(prefix="/pano", tags=["Pano"])


@router.get("/", response_model=modeller.VeriYaniti[modeller.PanoYaniti])
def get_pano_ozet_endpoint(db: Session = Depends(get_db)):
    ozet = PanoService(db).ozet()
    ozet["son_policeler"] = [modeller.PoliceRead.model_validate(p) for p in ozet["son_policeler"]]
    ozet["son_islemler"] = [modeller.MuhasebeRead.model_validate(k) for k in ozet["son_islemler"]]
    return {"data": ozet}
