from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from sqlalchemy.orm import Session
from sqlalchemy import func, case
from . import semalar

POLICE_NO_ONEKI = "POL"


def police_no_bicimle(yil: int, sayac: int) -> str:
    # 999'dan sonra sıra numarası 3 haneyi aşarak büyümeye devam eder (POL-2025-1000).
    return f"{POLICE_NO_ONEKI}-{yil}-{sayac:03d}"


def isaretli_tutar(kayit: semalar.MuhasebeKaydi) -> float:
    """Gelir pozitif, gider negatif."""
    if kayit.tip == semalar.MuhasebeTipEnum.GELIR:
        return kayit.tutar
    return -kayit.tutar


def guncel_bakiyeler(
    kayitlar: Iterable[semalar.MuhasebeKaydi], devreden_bakiye: float = 0.0
) -> Iterator[Tuple[semalar.MuhasebeKaydi, float]]:
    """Sıralı kayıtlar için her kayda kadar (dahil) biriken bakiyeyi üretir."""
    bakiye = devreden_bakiye
    for kayit in kayitlar:
        bakiye += isaretli_tutar(kayit)
        yield kayit, bakiye


class PoliceNumarasiService:
    """
    Yıl bazlı POL-<yıl>-<sıra> poliçe numaralarını üretir.

    Burada yapılan okuma yalnızca aday seçimi içindir; benzersizliği policies.police_no
    üzerindeki UNIQUE kısıtı garanti eder. Eşzamanlı iki kayıt aynı adayı seçerse
    ikincisi kısıt hatası alır ve PoliceDeposu yeni bir adayla yeniden dener.
    """

    def __init__(self, db: Session):
        self.db = db

    def kullanilan_numaralar(self, yil: int) -> Set[str]:
        satirlar = self.db.query(semalar.Police.police_no).filter(
            semalar.Police.police_no.like(f"{POLICE_NO_ONEKI}-{yil}-%")
        ).all()
        return {satir.police_no for satir in satirlar}

    def aday_numaralar(self, yil: int) -> Iterator[str]:
        """1'den başlayarak henüz kullanılmamış numaraları sırayla verir."""
        kullanilan = self.kullanilan_numaralar(yil)
        sayac = 1
        while True:
            aday = police_no_bicimle(yil, sayac)
            if aday not in kullanilan:
                yield aday
            sayac += 1

    def generate_police_no(self, yil: Optional[int] = None) -> str:
        if yil is None:
            yil = date.today().year
        return next(self.aday_numaralar(yil))


class MusteriBakiyeService:
    def __init__(self, db: Session):
        self.db = db

    def _tarih_filtreleri(self, query, baslangic_tarihi: Optional[date], bitis_tarihi: Optional[date]):
        if baslangic_tarihi:
            query = query.filter(semalar.MuhasebeKaydi.islem_tarihi >= baslangic_tarihi)
        if bitis_tarihi:
            query = query.filter(semalar.MuhasebeKaydi.islem_tarihi <= bitis_tarihi)
        return query

    def calculate_gelir_gider(
        self,
        musteri_id: int,
        baslangic_tarihi: Optional[date] = None,
        bitis_tarihi: Optional[date] = None,
    ) -> Tuple[float, float]:
        """
        Müşterinin gelir ve gider toplamlarını tek bir sorguda hesaplar.
        Kaydı olmayan müşteri için (0.0, 0.0) döner.
        """
        query = self.db.query(
            func.coalesce(func.sum(case((semalar.MuhasebeKaydi.tip == semalar.MuhasebeTipEnum.GELIR, semalar.MuhasebeKaydi.tutar), else_=0)), 0).label('toplam_gelir'),
            func.coalesce(func.sum(case((semalar.MuhasebeKaydi.tip == semalar.MuhasebeTipEnum.GIDER, semalar.MuhasebeKaydi.tutar), else_=0)), 0).label('toplam_gider')
        ).filter(semalar.MuhasebeKaydi.musteri_id == musteri_id)
        result = self._tarih_filtreleri(query, baslangic_tarihi, bitis_tarihi).one()
        return float(result.toplam_gelir), float(result.toplam_gider)

    def calculate_net_bakiye(
        self,
        musteri_id: int,
        baslangic_tarihi: Optional[date] = None,
        bitis_tarihi: Optional[date] = None,
    ) -> float:
        gelir, gider = self.calculate_gelir_gider(musteri_id, baslangic_tarihi, bitis_tarihi)
        return gelir - gider

    def toplu_net_bakiyeler(self, musteri_idler: Optional[List[int]] = None) -> Dict[int, float]:
        """Birden çok müşterinin ömür boyu net bakiyesini tek sorguda döndürür. Kaydı olmayanlar listede yer almaz."""
        query = self.db.query(
            semalar.MuhasebeKaydi.musteri_id,
            func.sum(case(
                (semalar.MuhasebeKaydi.tip == semalar.MuhasebeTipEnum.GELIR, semalar.MuhasebeKaydi.tutar),
                else_=-semalar.MuhasebeKaydi.tutar,
            )).label('net_bakiye')
        )
        if musteri_idler is not None:
            if not musteri_idler:
                return {}
            query = query.filter(semalar.MuhasebeKaydi.musteri_id.in_(musteri_idler))
        satirlar = query.group_by(semalar.MuhasebeKaydi.musteri_id).all()
        return {satir.musteri_id: float(satir.net_bakiye or 0.0) for satir in satirlar}

    def hesap_ekstresi(
        self,
        musteri_id: int,
        baslangic_tarihi: Optional[date] = None,
        bitis_tarihi: Optional[date] = None,
    ) -> Tuple[float, List[Tuple[semalar.MuhasebeKaydi, float]]]:
        """
        Müşterinin kayıtlarını işlem tarihine göre artan sırada, her kayda kadar biriken
        bakiye ile birlikte döndürür. Aynı tarihli kayıtlar id sırasına göre dizilir.
        Başlangıç tarihi verilirse öncesindeki kayıtların toplamı devreden bakiye olarak eklenir.
        """
        devreden_bakiye = 0.0
        if baslangic_tarihi:
            gelir, gider = self.db.query(
                func.coalesce(func.sum(case((semalar.MuhasebeKaydi.tip == semalar.MuhasebeTipEnum.GELIR, semalar.MuhasebeKaydi.tutar), else_=0)), 0),
                func.coalesce(func.sum(case((semalar.MuhasebeKaydi.tip == semalar.MuhasebeTipEnum.GIDER, semalar.MuhasebeKaydi.tutar), else_=0)), 0)
            ).filter(
                semalar.MuhasebeKaydi.musteri_id == musteri_id,
                semalar.MuhasebeKaydi.islem_tarihi < baslangic_tarihi
            ).one()
            devreden_bakiye = float(gelir) - float(gider)

        query = self.db.query(semalar.MuhasebeKaydi).filter(semalar.MuhasebeKaydi.musteri_id == musteri_id)
        kayitlar = self._tarih_filtreleri(query, baslangic_tarihi, bitis_tarihi).order_by(
            semalar.MuhasebeKaydi.islem_tarihi.asc(), semalar.MuhasebeKaydi.id.asc()
        ).all()

        return devreden_bakiye, list(guncel_bakiyeler(kayitlar, devreden_bakiye))
