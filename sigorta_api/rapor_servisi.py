# sigorta_api/rapor_servisi.py
"""
Rapor ve pano (dashboard) sorguları.

Her rapor {"tur", "satirlar", "ozet"} sözlüğü döndürür. Satırlar modeller.py içindeki
*RaporSatiri modelleriyle biçimlenir; özet yalnızca ilgili alanları içerir.
"""
import itertools
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import case, extract, func
from sqlalchemy.orm import Session

from . import config, modeller, semalar
from .api_servisler import MusteriBakiyeService, guncel_bakiyeler
from .hatalar import DogrulamaHatasi
from .yardimcilar import tarih_araligini_dogrula

logger = logging.getLogger(__name__)

MK = semalar.MuhasebeKaydi


def _gelir_sutunu():
    return func.coalesce(func.sum(case((MK.tip == semalar.MuhasebeTipEnum.GELIR, MK.tutar), else_=0)), 0)


def _gider_sutunu():
    return func.coalesce(func.sum(case((MK.tip == semalar.MuhasebeTipEnum.GIDER, MK.tutar), else_=0)), 0)


def _ozet(**alanlar) -> Dict:
    return modeller.RaporOzeti(**alanlar).model_dump(exclude_none=True)


class RaporService:
    def __init__(self, db: Session, bugun: Optional[date] = None):
        self.db = db
        self.bugun = bugun or date.today()

    def _islem_tarihi_filtreleri(self, query, params: modeller.RaporParametreleri):
        if params.baslangic_tarihi:
            query = query.filter(MK.islem_tarihi >= params.baslangic_tarihi)
        if params.bitis_tarihi:
            query = query.filter(MK.islem_tarihi <= params.bitis_tarihi)
        return query

    def rapor_olustur(self, tur: modeller.RaporTuruEnum, params: modeller.RaporParametreleri) -> Dict:
        tarih_araligini_dogrula(params.baslangic_tarihi, params.bitis_tarihi)
        islemler = {
            modeller.RaporTuruEnum.AYLIK: lambda: self.donem_raporu(params, aylik=True),
            modeller.RaporTuruEnum.YILLIK: lambda: self.donem_raporu(params, aylik=False),
            modeller.RaporTuruEnum.POLICE_TURU: lambda: self.police_turu_raporu(params),
            modeller.RaporTuruEnum.MUSTERI: lambda: self.musteri_raporu(params),
            modeller.RaporTuruEnum.ODENMEMIS: lambda: self.odenmemis_raporu(params),
            modeller.RaporTuruEnum.AKTIF_POLICELER: lambda: self.aktif_policeler_raporu(),
            modeller.RaporTuruEnum.SURESI_DOLACAK: lambda: self.suresi_dolacak_raporu(params),
            modeller.RaporTuruEnum.MUSTERI_POLICELERI: lambda: self.musteri_policeleri_raporu(params),
            modeller.RaporTuruEnum.MUSTERI_MUHASEBE: lambda: self.musteri_muhasebe_raporu(params),
        }
        islem = islemler.get(tur)
        if islem is None:
            raise DogrulamaHatasi("Geçersiz rapor türü")
        satirlar, ozet = islem()
        logger.info(f"Rapor oluşturuldu: {tur.value} ({len(satirlar)} satır)")
        return {"tur": tur, "satirlar": satirlar, "ozet": ozet}

    def donem_raporu(self, params: modeller.RaporParametreleri, aylik: bool = True):
        yil = extract('year', MK.islem_tarihi)
        ay = extract('month', MK.islem_tarihi)
        gruplar = [yil, ay] if aylik else [yil]

        query = self.db.query(
            yil.label('yil'),
            *([ay.label('ay')] if aylik else []),
            _gelir_sutunu().label('gelir'),
            _gider_sutunu().label('gider'),
            func.count(MK.id).label('islem_sayisi'),
            func.count(func.distinct(MK.musteri_id)).label('musteri_sayisi')
        )
        query = self._islem_tarihi_filtreleri(query, params)
        sonuclar = query.group_by(*gruplar).order_by(*[g.desc() for g in gruplar]).all()

        satirlar = []
        for r in sonuclar:
            donem = f"{int(r.yil):04d}-{int(r.ay):02d}" if aylik else f"{int(r.yil):04d}"
            gelir, gider = float(r.gelir), float(r.gider)
            satirlar.append(modeller.DonemRaporSatiri(
                donem=donem, gelir=gelir, gider=gider, net_tutar=gelir - gider,
                islem_sayisi=r.islem_sayisi, musteri_sayisi=r.musteri_sayisi
            ).model_dump())

        toplam_gelir = sum(s["gelir"] for s in satirlar)
        toplam_gider = sum(s["gider"] for s in satirlar)
        return satirlar, _ozet(
            toplam_gelir=toplam_gelir,
            toplam_gider=toplam_gider,
            net_tutar=toplam_gelir - toplam_gider,
            islem_sayisi=sum(s["islem_sayisi"] for s in satirlar)
        )

    def police_turu_raporu(self, params: modeller.RaporParametreleri):
        query = self.db.query(
            semalar.Police.police_turu,
            func.count(semalar.Police.id).label('police_sayisi'),
            func.sum(case((semalar.Police.durum == semalar.PoliceDurumEnum.AKTIF, 1), else_=0)).label('aktif_police_sayisi'),
            func.coalesce(func.sum(semalar.Police.prim), 0).label('toplam_prim')
        )
        if params.baslangic_tarihi:
            query = query.filter(semalar.Police.baslangic_tarihi >= params.baslangic_tarihi)
        if params.bitis_tarihi:
            query = query.filter(semalar.Police.baslangic_tarihi <= params.bitis_tarihi)
        sonuclar = query.group_by(semalar.Police.police_turu).all()

        satirlar = [
            modeller.PoliceTuruRaporSatiri(
                police_turu=r.police_turu,
                police_sayisi=r.police_sayisi,
                aktif_police_sayisi=int(r.aktif_police_sayisi or 0),
                toplam_prim=float(r.toplam_prim)
            ).model_dump()
            for r in sonuclar
        ]
        satirlar.sort(key=lambda s: (-s["toplam_prim"], s["police_turu"].value))
        return satirlar, _ozet(
            toplam_police=sum(s["police_sayisi"] for s in satirlar),
            toplam_prim=sum(s["toplam_prim"] for s in satirlar)
        )

    def musteri_raporu(self, params: modeller.RaporParametreleri):
        hareket_query = self.db.query(
            MK.musteri_id,
            _gelir_sutunu().label('gelir'),
            _gider_sutunu().label('gider'),
            func.count(MK.id).label('islem_sayisi')
        )
        hareket_query = self._islem_tarihi_filtreleri(hareket_query, params)
        police_query = self.db.query(semalar.Police.musteri_id, func.count(semalar.Police.id).label('police_sayisi'))
        if params.baslangic_tarihi:
            police_query = police_query.filter(semalar.Police.baslangic_tarihi >= params.baslangic_tarihi)
        if params.bitis_tarihi:
            police_query = police_query.filter(semalar.Police.baslangic_tarihi <= params.bitis_tarihi)
        musteri_query = self.db.query(semalar.Musteri)
        if params.musteri_id is not None:
            hareket_query = hareket_query.filter(MK.musteri_id == params.musteri_id)
            police_query = police_query.filter(semalar.Police.musteri_id == params.musteri_id)
            musteri_query = musteri_query.filter(semalar.Musteri.id == params.musteri_id)

        hareketler = {r.musteri_id: r for r in hareket_query.group_by(MK.musteri_id).all()}
        police_sayilari = {r.musteri_id: r.police_sayisi for r in police_query.group_by(semalar.Police.musteri_id).all()}

        satirlar = []
        for musteri in musteri_query.all():
            hareket = hareketler.get(musteri.id)
            police_sayisi = police_sayilari.get(musteri.id, 0)
            # Dönemde hareketi ve hiç poliçesi olmayan müşteri rapora girmez
            if hareket is None and not police_sayisi:
                continue
            gelir = float(hareket.gelir) if hareket else 0.0
            gider = float(hareket.gider) if hareket else 0.0
            satirlar.append(modeller.MusteriRaporSatiri(
                musteri_id=musteri.id,
                musteri_adi=musteri.ad,
                gelir=gelir,
                gider=gider,
                net_tutar=gelir - gider,
                islem_sayisi=hareket.islem_sayisi if hareket else 0,
                police_sayisi=police_sayisi
            ).model_dump())

        satirlar.sort(key=lambda s: (-s["net_tutar"], s["musteri_id"]))
        toplam_gelir = sum(s["gelir"] for s in satirlar)
        toplam_gider = sum(s["gider"] for s in satirlar)
        return satirlar, _ozet(
            toplam_musteri=len(satirlar),
            toplam_gelir=toplam_gelir,
            toplam_gider=toplam_gider,
            net_tutar=toplam_gelir - toplam_gider
        )

    def odenmemis_raporu(self, params: modeller.RaporParametreleri):
        """Ömür boyu bakiyesi eksiye düşmüş müşteriler; gecikme son işlem tarihinden bugüne sayılır."""
        musteri_idler = [params.musteri_id] if params.musteri_id is not None else None
        bakiyeler = MusteriBakiyeService(self.db).toplu_net_bakiyeler(musteri_idler)
        borclular = [musteri_id for musteri_id, bakiye in bakiyeler.items() if bakiye < 0]
        if not borclular:
            return [], _ozet(toplam_musteri=0, odenmemis_tutar=0.0)

        son_tarihler = dict(
            self.db.query(MK.musteri_id, func.max(MK.islem_tarihi))
            .filter(MK.musteri_id.in_(borclular))
            .group_by(MK.musteri_id)
            .all()
        )
        musteriler = self.db.query(semalar.Musteri).filter(semalar.Musteri.id.in_(borclular)).all()

        satirlar = []
        for musteri in musteriler:
            son_islem_tarihi = son_tarihler[musteri.id]
            satirlar.append(modeller.OdenmemisRaporSatiri(
                musteri_id=musteri.id,
                musteri_adi=musteri.ad,
                tc_kimlik_no=musteri.tc_kimlik_no,
                telefon=musteri.telefon,
                tutar=abs(bakiyeler[musteri.id]),
                son_islem_tarihi=son_islem_tarihi,
                gecikme_gun=max(0, (self.bugun - son_islem_tarihi).days)
            ).model_dump())

        satirlar.sort(key=lambda s: (-s["gecikme_gun"], -s["tutar"], s["musteri_id"]))
        return satirlar, _ozet(
            toplam_musteri=len(satirlar),
            odenmemis_tutar=sum(s["tutar"] for s in satirlar)
        )

    def _aktif_police_query(self):
        return self.db.query(semalar.Police).filter(
            semalar.Police.durum == semalar.PoliceDurumEnum.AKTIF,
            semalar.Police.bitis_tarihi >= self.bugun
        )

    def aktif_policeler_raporu(self):
        policeler = self._aktif_police_query().order_by(
            semalar.Police.bitis_tarihi.asc(), semalar.Police.id.asc()
        ).all()
        satirlar = [
            modeller.AktifPoliceRaporSatiri(
                id=p.id, police_no=p.police_no, musteri_adi=p.musteri_adi,
                baslangic_tarihi=p.baslangic_tarihi, bitis_tarihi=p.bitis_tarihi,
                prim=p.prim, police_turu=p.police_turu, durum=p.durum
            ).model_dump()
            for p in policeler
        ]
        return satirlar, _ozet(toplam_police=len(satirlar), toplam_prim=sum(s["prim"] for s in satirlar))

    def suresi_dolacak_raporu(self, params: modeller.RaporParametreleri):
        gun = params.gun or config.SURESI_DOLACAK_GUN
        son_tarih = self.bugun + timedelta(days=gun)
        policeler = self._aktif_police_query().filter(
            semalar.Police.bitis_tarihi <= son_tarih
        ).order_by(semalar.Police.bitis_tarihi.asc(), semalar.Police.id.asc()).all()

        satirlar = [
            modeller.SuresiDolacakRaporSatiri(
                id=p.id, police_no=p.police_no, musteri_adi=p.musteri_adi,
                bitis_tarihi=p.bitis_tarihi, kalan_gun=(p.bitis_tarihi - self.bugun).days,
                prim=p.prim, police_turu=p.police_turu
            ).model_dump()
            for p in policeler
        ]
        return satirlar, _ozet(toplam_police=len(satirlar), toplam_prim=sum(s["prim"] for s in satirlar))

    def musteri_policeleri_raporu(self, params: modeller.RaporParametreleri):
        aktif_sayisi = func.sum(case((semalar.Police.durum == semalar.PoliceDurumEnum.AKTIF, 1), else_=0))
        query = self.db.query(
            semalar.Musteri.id.label('musteri_id'),
            semalar.Musteri.ad.label('musteri_adi'),
            aktif_sayisi.label('aktif_police_sayisi'),
            func.coalesce(func.sum(semalar.Police.prim), 0).label('toplam_prim'),
            func.max(semalar.Police.baslangic_tarihi).label('son_police_tarihi')
        ).join(semalar.Police, semalar.Police.musteri_id == semalar.Musteri.id)
        if params.musteri_id is not None:
            query = query.filter(semalar.Musteri.id == params.musteri_id)
        sonuclar = query.group_by(semalar.Musteri.id, semalar.Musteri.ad).having(aktif_sayisi > 0).all()

        satirlar = [
            modeller.MusteriPoliceRaporSatiri(
                musteri_id=r.musteri_id,
                musteri_adi=r.musteri_adi,
                aktif_police_sayisi=int(r.aktif_police_sayisi),
                toplam_prim=float(r.toplam_prim),
                son_police_tarihi=r.son_police_tarihi
            ).model_dump()
            for r in sonuclar
        ]
        satirlar.sort(key=lambda s: (-s["aktif_police_sayisi"], -s["toplam_prim"], s["musteri_id"]))
        return satirlar, _ozet(
            toplam_musteri=len(satirlar),
            toplam_police=sum(s["aktif_police_sayisi"] for s in satirlar),
            toplam_prim=sum(s["toplam_prim"] for s in satirlar)
        )

    def musteri_muhasebe_raporu(self, params: modeller.RaporParametreleri):
        """Her müşterinin hareketleri, müşteri bazında biriken bakiye ile (hesap ekstresi)."""
        devredenler: Dict[int, float] = {}
        if params.baslangic_tarihi:
            devir_query = self.db.query(
                MK.musteri_id, _gelir_sutunu().label('gelir'), _gider_sutunu().label('gider')
            ).filter(MK.islem_tarihi < params.baslangic_tarihi)
            if params.musteri_id is not None:
                devir_query = devir_query.filter(MK.musteri_id == params.musteri_id)
            devredenler = {
                r.musteri_id: float(r.gelir) - float(r.gider)
                for r in devir_query.group_by(MK.musteri_id).all()
            }

        query = self.db.query(MK, semalar.Musteri, semalar.Police.police_no).join(
            semalar.Musteri, MK.musteri_id == semalar.Musteri.id
        ).outerjoin(semalar.Police, MK.police_id == semalar.Police.id)
        if params.musteri_id is not None:
            query = query.filter(MK.musteri_id == params.musteri_id)
        query = self._islem_tarihi_filtreleri(query, params)
        sonuclar = query.order_by(MK.musteri_id.asc(), MK.islem_tarihi.asc(), MK.id.asc()).all()

        satirlar: List[Dict] = []
        toplam_devreden = 0.0
        for musteri_id, grup in itertools.groupby(sonuclar, key=lambda r: r[0].musteri_id):
            grup = list(grup)
            devreden = devredenler.get(musteri_id, 0.0)
            toplam_devreden += devreden
            police_nolari = {kayit.id: police_no for kayit, _, police_no in grup}
            musteri = grup[0][1]
            for kayit, bakiye in guncel_bakiyeler([r[0] for r in grup], devreden):
                satirlar.append(modeller.MusteriMuhasebeRaporSatiri(
                    musteri_id=musteri.id,
                    musteri_adi=musteri.ad,
                    tc_kimlik_no=musteri.tc_kimlik_no,
                    islem_id=kayit.id,
                    islem_tarihi=kayit.islem_tarihi,
                    tutar=kayit.tutar,
                    tip=kayit.tip,
                    aciklama=kayit.aciklama,
                    plaka_no=kayit.plaka_no,
                    police_no=police_nolari.get(kayit.id),
                    guncel_bakiye=bakiye
                ).model_dump())

        toplam_gelir = sum(s["tutar"] for s in satirlar if s["tip"] == semalar.MuhasebeTipEnum.GELIR)
        toplam_gider = sum(s["tutar"] for s in satirlar if s["tip"] == semalar.MuhasebeTipEnum.GIDER)
        return satirlar, _ozet(
            toplam_musteri=len({s["musteri_id"] for s in satirlar}),
            toplam_gelir=toplam_gelir,
            toplam_gider=toplam_gider,
            net_tutar=toplam_gelir - toplam_gider,
            islem_sayisi=len(satirlar),
            devreden_bakiye=toplam_devreden
        )


class PanoService:
    """Ana sayfa özet bilgileri."""

    def __init__(self, db: Session, bugun: Optional[date] = None):
        self.db = db
        self.bugun = bugun or date.today()

    def ozet(self) -> Dict:
        son_policeler = self.db.query(semalar.Police).order_by(semalar.Police.id.desc()).limit(5).all()

        aktif_police_sayisi = self.db.query(func.count(semalar.Police.id)).filter(
            semalar.Police.durum == semalar.PoliceDurumEnum.AKTIF
        ).scalar() or 0

        suresi_dolacak_police_sayisi = self.db.query(func.count(semalar.Police.id)).filter(
            semalar.Police.durum == semalar.PoliceDurumEnum.AKTIF,
            semalar.Police.bitis_tarihi >= self.bugun,
            semalar.Police.bitis_tarihi <= self.bugun + timedelta(days=config.SURESI_DOLACAK_GUN)
        ).scalar() or 0

        son_islemler = self.db.query(MK).order_by(MK.islem_tarihi.desc(), MK.id.desc()).limit(5).all()

        toplam_gelir, toplam_gider = self.db.query(_gelir_sutunu(), _gider_sutunu()).one()

        ay_basi = self.bugun.replace(day=1)
        sonraki_ay_basi = (ay_basi + timedelta(days=32)).replace(day=1)
        aylik_gelir, aylik_gider = self.db.query(_gelir_sutunu(), _gider_sutunu()).filter(
            MK.islem_tarihi >= ay_basi,
            MK.islem_tarihi < sonraki_ay_basi
        ).one()

        return {
            "son_policeler": son_policeler,
            "aktif_police_sayisi": aktif_police_sayisi,
            "suresi_dolacak_police_sayisi": suresi_dolacak_police_sayisi,
            "son_islemler": son_islemler,
            "toplam_gelir": float(toplam_gelir),
            "toplam_gider": float(toplam_gider),
            "aylik_gelir": float(aylik_gelir),
            "aylik_gider": float(aylik_gider),
        }
