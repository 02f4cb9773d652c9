# sigorta_api/depolar.py
"""
Müşteri, poliçe, poliçe dosyası ve muhasebe kayıtları için veritabanı işlemleri.

Depolar HTTP'den habersizdir; hata durumlarında hatalar.py içindeki sınıfları fırlatır.
Birden fazla adımdan oluşan işlemler (poliçe + dosyaları gibi) tek bir commit ile yazılır.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from . import config, modeller, semalar
from .api_servisler import PoliceNumarasiService
from .hatalar import BulunamadiHatasi, CakismaHatasi, DepolamaHatasi, DogrulamaHatasi
from .yardimcilar import tarih_araligini_dogrula, turkce_kucuk_harf, turkce_siralama_anahtari

logger = logging.getLogger(__name__)


class _TemelDepo:
    def __init__(self, db: Session):
        self.db = db

    def _kaydet(self, islem: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{islem} sırasında veritabanı hatası: {e}", exc_info=True)
            raise DepolamaHatasi(f"{islem} sırasında bir hata oluştu") from e

    def _musteri_getir(self, musteri_id: int) -> semalar.Musteri:
        musteri = self.db.get(semalar.Musteri, musteri_id)
        if not musteri:
            raise BulunamadiHatasi("Müşteri bulunamadı")
        return musteri

    def _police_getir(self, police_id: int) -> semalar.Police:
        police = self.db.get(semalar.Police, police_id)
        if not police:
            raise BulunamadiHatasi("Poliçe bulunamadı")
        return police

    def _arama_filtresi(self, arama: str, *kolonlar):
        # SQLite ILIKE yalnızca ASCII harfleri katlar; Türkçe karşılaştırma için bkz. veritabani.engine_olustur
        if self.db.get_bind().dialect.name == "sqlite":
            desen = f"%{turkce_kucuk_harf(arama)}%"
            return or_(*(func.turkce_kucuk_harf(kolon).like(desen) for kolon in kolonlar))
        return or_(*(kolon.ilike(f"%{arama}%") for kolon in kolonlar))

    @staticmethod
    def _sayfala(items: list, skip: int, limit: Optional[int]) -> list:
        if limit is None:
            return items[skip:]
        return items[skip:skip + limit]


class MusteriDeposu(_TemelDepo):

    def get(self, musteri_id: int) -> semalar.Musteri:
        return self._musteri_getir(musteri_id)

    def list(self, arama: Optional[str] = None, skip: int = 0, limit: Optional[int] = None) -> Tuple[List[semalar.Musteri], int]:
        query = self.db.query(semalar.Musteri)
        if arama:
            query = query.filter(self._arama_filtresi(
                arama,
                semalar.Musteri.ad,
                semalar.Musteri.tc_kimlik_no,
                semalar.Musteri.email,
                semalar.Musteri.telefon,
            ))
        # SQLite ikili karşılaştırma yapar; Türkçe alfabetik sıra Python tarafında uygulanır.
        musteriler = sorted(query.all(), key=lambda m: (turkce_siralama_anahtari(m.ad), m.id))
        return self._sayfala(musteriler, skip, limit), len(musteriler)

    def policeler(self, musteri_id: int) -> List[semalar.Police]:
        return self.db.query(semalar.Police).filter(semalar.Police.musteri_id == musteri_id).order_by(
            semalar.Police.baslangic_tarihi.desc(), semalar.Police.id.desc()
        ).all()

    def create(self, veri: modeller.MusteriCreate) -> semalar.Musteri:
        db_musteri = semalar.Musteri(**veri.model_dump())
        self.db.add(db_musteri)
        self._kaydet("Müşteri oluşturma")
        self.db.refresh(db_musteri)
        logger.info(f"Müşteri oluşturuldu: ID {db_musteri.id} ({db_musteri.ad})")
        return db_musteri

    def update(self, musteri_id: int, veri: modeller.MusteriUpdate) -> semalar.Musteri:
        db_musteri = self._musteri_getir(musteri_id)
        for key, value in veri.model_dump().items():
            setattr(db_musteri, key, value)

        # Poliçelerdeki müşteri adı / TC kopyaları aynı işlemde yenilenir
        self.db.query(semalar.Police).filter(semalar.Police.musteri_id == musteri_id).update(
            {semalar.Police.musteri_adi: db_musteri.ad, semalar.Police.tc_kimlik_no: db_musteri.tc_kimlik_no},
            synchronize_session=False,
        )
        self._kaydet("Müşteri güncelleme")
        self.db.refresh(db_musteri)
        return db_musteri

    def delete(self, musteri_id: int) -> None:
        db_musteri = self._musteri_getir(musteri_id)

        police_sayisi = self.db.query(func.count(semalar.Police.id)).filter(
            semalar.Police.musteri_id == musteri_id
        ).scalar()
        if police_sayisi:
            raise CakismaHatasi("Bu müşteriye bağlı poliçeler var. Önce poliçeleri silmelisiniz.")

        kayit_sayisi = self.db.query(func.count(semalar.MuhasebeKaydi.id)).filter(
            semalar.MuhasebeKaydi.musteri_id == musteri_id
        ).scalar()
        if kayit_sayisi:
            raise CakismaHatasi("Bu müşteriye ait muhasebe kayıtları bulunmaktadır. Önce muhasebe kayıtlarını silmelisiniz.")

        self.db.delete(db_musteri)
        self._kaydet("Müşteri silme")
        logger.info(f"Müşteri silindi: ID {musteri_id}")


class PoliceDeposu(_TemelDepo):

    def __init__(self, db: Session, deneme_sayisi: int = config.POLICE_NO_DENEME_SAYISI):
        super().__init__(db)
        self.deneme_sayisi = deneme_sayisi

    def get(self, police_id: int) -> semalar.Police:
        return self._police_getir(police_id)

    def list(
        self,
        arama: Optional[str] = None,
        durum: Optional[semalar.PoliceDurumEnum] = None,
        police_turu: Optional[semalar.PoliceTuruEnum] = None,
        musteri_id: Optional[int] = None,
        baslangic_tarihi: Optional[date] = None,
        bitis_tarihi: Optional[date] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[semalar.Police], int]:
        tarih_araligini_dogrula(baslangic_tarihi, bitis_tarihi)
        query = self.db.query(semalar.Police)

        if durum:
            query = query.filter(semalar.Police.durum == durum)
        if police_turu:
            query = query.filter(semalar.Police.police_turu == police_turu)
        if musteri_id is not None:
            query = query.filter(semalar.Police.musteri_id == musteri_id)
        if baslangic_tarihi:
            query = query.filter(semalar.Police.baslangic_tarihi >= baslangic_tarihi)
        if bitis_tarihi:
            query = query.filter(semalar.Police.baslangic_tarihi <= bitis_tarihi)
        if arama:
            query = query.filter(self._arama_filtresi(
                arama,
                semalar.Police.police_no,
                semalar.Police.musteri_adi,
                semalar.Police.tc_kimlik_no,
                semalar.Police.plaka_no,
            ))

        total_count = query.count()
        query = query.order_by(semalar.Police.baslangic_tarihi.desc(), semalar.Police.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total_count

    def muhasebe_kayitlari(self, police_id: int) -> List[semalar.MuhasebeKaydi]:
        return self.db.query(semalar.MuhasebeKaydi).options(joinedload(semalar.MuhasebeKaydi.musteri)).filter(
            semalar.MuhasebeKaydi.police_id == police_id
        ).order_by(semalar.MuhasebeKaydi.islem_tarihi.desc(), semalar.MuhasebeKaydi.id.desc()).all()

    def _police_no_kullanan(self, police_no: str) -> Optional[int]:
        satir = self.db.query(semalar.Police.id).filter(semalar.Police.police_no == police_no).first()
        return satir.id if satir else None

    def _police_ekle(self, veri: modeller.PoliceCreate, police_no: str) -> semalar.Police:
        """Poliçeyi ve eklenen dosyaları tek commit ile yazar. UNIQUE ihlalinde IntegrityError yükselir."""
        musteri = self._musteri_getir(veri.musteri_id)
        db_police = semalar.Police(
            **veri.model_dump(exclude={"police_no", "dosyalar"}),
            police_no=police_no,
            musteri_adi=musteri.ad,
            tc_kimlik_no=musteri.tc_kimlik_no,
        )
        for dosya in veri.dosyalar or []:
            db_police.dosyalar.append(semalar.PoliceDosyasi(**dosya.model_dump()))
        self.db.add(db_police)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Poliçe eklenirken veritabanı hatası: {e}", exc_info=True)
            raise DepolamaHatasi("Poliçe eklenirken bir hata oluştu") from e
        self.db.refresh(db_police)
        return db_police

    def create(self, veri: modeller.PoliceCreate, yil: Optional[int] = None) -> semalar.Police:
        if veri.police_no:
            try:
                db_police = self._police_ekle(veri, veri.police_no)
            except IntegrityError as e:
                if self._police_no_kullanan(veri.police_no) is not None:
                    raise CakismaHatasi("Bu poliçe numarası zaten kullanılıyor") from e
                logger.error(f"Poliçe eklenirken bütünlük hatası: {e}", exc_info=True)
                raise DepolamaHatasi("Poliçe eklenirken bir hata oluştu") from e
            logger.info(f"Poliçe oluşturuldu: {db_police.police_no} (ID {db_police.id})")
            return db_police

        if yil is None:
            yil = date.today().year
        numara_servisi = PoliceNumarasiService(self.db)
        for deneme in range(1, self.deneme_sayisi + 1):
            police_no = numara_servisi.generate_police_no(yil)
            try:
                db_police = self._police_ekle(veri, police_no)
            except IntegrityError as e:
                if self._police_no_kullanan(police_no) is None:
                    logger.error(f"Poliçe eklenirken bütünlük hatası: {e}", exc_info=True)
                    raise DepolamaHatasi("Poliçe eklenirken bir hata oluştu") from e
                logger.warning(f"{police_no} numarası eşzamanlı olarak alındı, yeniden deneniyor ({deneme}/{self.deneme_sayisi})")
                continue
            logger.info(f"Poliçe oluşturuldu: {db_police.police_no} (ID {db_police.id})")
            return db_police

        raise CakismaHatasi("Benzersiz poliçe numarası üretilemedi, lütfen tekrar deneyin")

    def update(self, police_id: int, veri: modeller.PoliceUpdate) -> Tuple[semalar.Police, List[str]]:
        """
        Poliçeyi tamamen günceller. veri.dosyalar verilmişse dosya listesi tek işlemde
        yenisiyle değiştirilir. Artık kullanılmayan dosya URL'leri döndürülür.
        """
        db_police = self._police_getir(police_id)
        musteri = self._musteri_getir(veri.musteri_id)

        if db_police.musteri_id != veri.musteri_id:
            bagli_kayit = self.db.query(func.count(semalar.MuhasebeKaydi.id)).filter(
                semalar.MuhasebeKaydi.police_id == police_id
            ).scalar()
            if bagli_kayit:
                raise CakismaHatasi("Bu poliçeye bağlı muhasebe kayıtları varken poliçenin müşterisi değiştirilemez")

        for key, value in veri.model_dump(exclude={"police_no", "dosyalar"}).items():
            setattr(db_police, key, value)
        if veri.police_no:
            db_police.police_no = veri.police_no
        db_police.musteri_adi = musteri.ad
        db_police.tc_kimlik_no = musteri.tc_kimlik_no

        kaldirilan_urller: List[str] = []
        if veri.dosyalar is not None:
            eski_urller = {dosya.url for dosya in db_police.dosyalar}
            yeni_urller = {dosya.url for dosya in veri.dosyalar}
            # delete-orphan sayesinde eski satırlar aynı commit içinde silinir
            db_police.dosyalar = [semalar.PoliceDosyasi(**dosya.model_dump()) for dosya in veri.dosyalar]
            kaldirilan_urller = sorted(eski_urller - yeni_urller)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            kullanan = self._police_no_kullanan(veri.police_no) if veri.police_no else None
            if kullanan is not None and kullanan != police_id:
                raise CakismaHatasi("Bu poliçe numarası zaten kullanılıyor") from e
            logger.error(f"Poliçe güncellenirken bütünlük hatası: {e}", exc_info=True)
            raise DepolamaHatasi("Poliçe güncellenirken bir hata oluştu") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Poliçe güncellenirken veritabanı hatası: {e}", exc_info=True)
            raise DepolamaHatasi("Poliçe güncellenirken bir hata oluştu") from e

        self.db.refresh(db_police)
        return db_police, kaldirilan_urller

    def delete(self, police_id: int) -> List[str]:
        """Poliçeyi ve dosya satırlarını siler; diskten silinecek dosya URL'lerini döndürür."""
        db_police = self._police_getir(police_id)

        kayit_sayisi = self.db.query(func.count(semalar.MuhasebeKaydi.id)).filter(
            semalar.MuhasebeKaydi.police_id == police_id
        ).scalar()
        if kayit_sayisi:
            raise CakismaHatasi("Bu poliçeye ait muhasebe kayıtları bulunmaktadır. Önce muhasebe kayıtlarını silmelisiniz.")

        urller = [dosya.url for dosya in db_police.dosyalar]
        self.db.delete(db_police)
        self._kaydet("Poliçe silme")
        logger.info(f"Poliçe silindi: ID {police_id}")
        return urller


class PoliceDosyaDeposu(_TemelDepo):

    def list(self, police_id: int) -> List[semalar.PoliceDosyasi]:
        self._police_getir(police_id)
        return self.db.query(semalar.PoliceDosyasi).filter(semalar.PoliceDosyasi.police_id == police_id).order_by(
            semalar.PoliceDosyasi.olusturma_tarihi.desc(), semalar.PoliceDosyasi.id.desc()
        ).all()

    def url_kullaniliyor(self, url: str) -> bool:
        return self.db.query(semalar.PoliceDosyasi.id).filter(semalar.PoliceDosyasi.url == url).first() is not None

    def create(self, police_id: int, veri: modeller.PoliceDosyasiCreate) -> semalar.PoliceDosyasi:
        self._police_getir(police_id)
        db_dosya = semalar.PoliceDosyasi(police_id=police_id, **veri.model_dump())
        self.db.add(db_dosya)
        self._kaydet("Poliçe dosyası ekleme")
        self.db.refresh(db_dosya)
        return db_dosya

    def delete(self, police_id: int, dosya_id: int) -> str:
        db_dosya = self.db.query(semalar.PoliceDosyasi).filter(
            semalar.PoliceDosyasi.id == dosya_id,
            semalar.PoliceDosyasi.police_id == police_id
        ).first()
        if not db_dosya:
            raise BulunamadiHatasi("Dosya bulunamadı")
        url = db_dosya.url
        self.db.delete(db_dosya)
        self._kaydet("Poliçe dosyası silme")
        return url


class MuhasebeDeposu(_TemelDepo):

    def get(self, kayit_id: int) -> semalar.MuhasebeKaydi:
        db_kayit = self.db.get(semalar.MuhasebeKaydi, kayit_id)
        if not db_kayit:
            raise BulunamadiHatasi("Kayıt bulunamadı")
        return db_kayit

    def list(
        self,
        musteri_id: Optional[int] = None,
        police_id: Optional[int] = None,
        plaka_no: Optional[str] = None,
        tip: Optional[semalar.MuhasebeTipEnum] = None,
        baslangic_tarihi: Optional[date] = None,
        bitis_tarihi: Optional[date] = None,
        arama: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[semalar.MuhasebeKaydi], int]:
        tarih_araligini_dogrula(baslangic_tarihi, bitis_tarihi)
        query = self.db.query(semalar.MuhasebeKaydi).outerjoin(
            semalar.Musteri, semalar.MuhasebeKaydi.musteri_id == semalar.Musteri.id
        ).options(joinedload(semalar.MuhasebeKaydi.musteri))

        if musteri_id is not None:
            query = query.filter(semalar.MuhasebeKaydi.musteri_id == musteri_id)
        if police_id is not None:
            query = query.filter(semalar.MuhasebeKaydi.police_id == police_id)
        if plaka_no:
            query = query.filter(semalar.MuhasebeKaydi.plaka_no == plaka_no)
        if tip:
            query = query.filter(semalar.MuhasebeKaydi.tip == tip)
        if baslangic_tarihi:
            query = query.filter(semalar.MuhasebeKaydi.islem_tarihi >= baslangic_tarihi)
        if bitis_tarihi:
            query = query.filter(semalar.MuhasebeKaydi.islem_tarihi <= bitis_tarihi)
        if arama:
            query = query.filter(self._arama_filtresi(
                arama,
                semalar.MuhasebeKaydi.aciklama,
                semalar.Musteri.ad,
                semalar.Musteri.tc_kimlik_no,
                semalar.MuhasebeKaydi.plaka_no,
            ))

        total_count = query.count()
        query = query.order_by(semalar.MuhasebeKaydi.islem_tarihi.desc(), semalar.MuhasebeKaydi.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total_count

    def _iliskileri_dogrula(self, veri: modeller.MuhasebeCreate) -> Optional[str]:
        """Müşteri ve (varsa) poliçe bağlantısını doğrular, kullanılacak plaka numarasını döndürür."""
        self._musteri_getir(veri.musteri_id)
        plaka_no = veri.plaka_no
        if veri.police_id is not None:
            police = self._police_getir(veri.police_id)
            if police.musteri_id != veri.musteri_id:
                raise DogrulamaHatasi("Seçilen poliçe bu müşteriye ait değil")
            if not plaka_no:
                plaka_no = police.plaka_no
        return plaka_no

    def create(self, veri: modeller.MuhasebeCreate) -> semalar.MuhasebeKaydi:
        plaka_no = self._iliskileri_dogrula(veri)
        db_kayit = semalar.MuhasebeKaydi(**veri.model_dump(exclude={"plaka_no"}), plaka_no=plaka_no)
        self.db.add(db_kayit)
        self._kaydet("Muhasebe kaydı oluşturma")
        self.db.refresh(db_kayit)
        logger.info(f"Muhasebe kaydı oluşturuldu: ID {db_kayit.id} ({db_kayit.tip.value} {db_kayit.tutar})")
        return db_kayit

    def update(self, kayit_id: int, veri: modeller.MuhasebeUpdate) -> semalar.MuhasebeKaydi:
        db_kayit = self.get(kayit_id)
        plaka_no = self._iliskileri_dogrula(veri)
        for key, value in veri.model_dump(exclude={"plaka_no"}).items():
            setattr(db_kayit, key, value)
        db_kayit.plaka_no = plaka_no
        self._kaydet("Muhasebe kaydı güncelleme")
        self.db.refresh(db_kayit)
        return db_kayit

    def delete(self, kayit_id: int) -> None:
        db_kayit = self.get(kayit_id)
        self.db.delete(db_kayit)
        self._kaydet("Muhasebe kaydı silme")
        logger.info(f"Muhasebe kaydı silindi: ID {kayit_id}")
