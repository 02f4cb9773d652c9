from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import modeller
from ..veritabani import get_db
from ..yedekleme_servisi import YedeklemeService

router = APIRouter(prefix="/yedekleme", tags=["Yedekleme"])


@router.get("/", response_model=modeller.VeriYaniti[modeller.YedekYaniti])
def yedek_al_endpoint(request: Request, db: Session = Depends(get_db)):
    return {"data": YedeklemeService(db, request.app.state.yedek_dir).yedek_al()}


@router.post("/geri_yukle", response_model=modeller.VeriYaniti[modeller.YedekYaniti])
def geri_yukle_endpoint(veri: modeller.YedekVerisi, request: Request, db: Session = Depends(get_db)):
    return {"data": YedeklemeService(db, request.app.state.yedek_dir).geri_yukle(veri)}
