# sigorta_api/yedekleme_servisi.py
import logging
import os
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import modeller, semalar
from .hatalar import DepolamaHatasi, DogrulamaHatasi

logger = logging.getLogger(__name__)


class YedeklemeService:
    """Dört tablonun JSON anlık görüntüsünü alır ve geri yükler."""

    def __init__(self, db: Session, yedek_dir: str):
        self.db = db
        self.yedek_dir = yedek_dir

    def anlik_goruntu(self) -> modeller.YedekVerisi:
        return modeller.YedekVerisi(
            musteriler=[modeller.MusteriRead.model_validate(m) for m in self.db.query(semalar.Musteri).order_by(semalar.Musteri.id).all()],
            policeler=[modeller.PoliceRead.model_validate(p) for p in self.db.query(semalar.Police).order_by(semalar.Police.id).all()],
            muhasebe=[modeller.MuhasebeRead.model_validate(k) for k in self.db.query(semalar.MuhasebeKaydi).order_by(semalar.MuhasebeKaydi.id).all()],
            police_dosyalari=[modeller.PoliceDosyasiRead.model_validate(d) for d in self.db.query(semalar.PoliceDosyasi).order_by(semalar.PoliceDosyasi.id).all()],
            zaman=datetime.now().isoformat(),
        )

    def yedek_al(self) -> dict:
        veri = self.anlik_goruntu()
        dosya_adi = f"backup_{veri.zaman.replace(':', '-').replace('.', '-')}.json"
        dosya_yolu = os.path.join(self.yedek_dir, dosya_adi)
        try:
            os.makedirs(self.yedek_dir, exist_ok=True)
            with open(dosya_yolu, "w", encoding="utf-8") as f:
                f.write(veri.model_dump_json(indent=2))
        except OSError as e:
            logger.error(f"Yedek dosyası yazılamadı: {e}", exc_info=True)
            raise DepolamaHatasi("Yedekleme sırasında bir hata oluştu") from e

        logger.info(f"Yedek alındı: {dosya_yolu}")
        return {"mesaj": "Yedekleme başarıyla tamamlandı", "dosya": dosya_yolu, "zaman": veri.zaman}

    def geri_yukle(self, veri: modeller.YedekVerisi) -> dict:
        """Tüm tabloları yedekteki kayıtlarla değiştirir. Kimlikler korunur; hata olursa hiçbir şey değişmez."""
        try:
            self.db.query(semalar.PoliceDosyasi).delete(synchronize_session=False)
            self.db.query(semalar.MuhasebeKaydi).delete(synchronize_session=False)
            self.db.query(semalar.Police).delete(synchronize_session=False)
            self.db.query(semalar.Musteri).delete(synchronize_session=False)

            self.db.add_all(semalar.Musteri(**m.model_dump(exclude={"net_bakiye"})) for m in veri.musteriler)
            self.db.flush()
            self.db.add_all(semalar.Police(**p.model_dump()) for p in veri.policeler)
            self.db.flush()
            self.db.add_all(
                semalar.MuhasebeKaydi(**k.model_dump(exclude={"musteri_adi", "tc_kimlik_no"})) for k in veri.muhasebe
            )
            self.db.add_all(semalar.PoliceDosyasi(**d.model_dump()) for d in veri.police_dosyalari)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Yedek geri yüklenemedi, veri tutarsız: {e}")
            raise DogrulamaHatasi("Yedek verisi tutarsız: kayıtlar arasındaki bağlantılar eksik veya yinelenen kayıt var") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Yedek geri yüklenirken veritabanı hatası: {e}", exc_info=True)
            raise DepolamaHatasi("Yedek geri yüklenemedi") from e

        self.db.expire_all()
        logger.info(
            f"Yedek geri yüklendi: {len(veri.musteriler)} müşteri, {len(veri.policeler)} poliçe, "
            f"{len(veri.muhasebe)} muhasebe kaydı, {len(veri.police_dosyalari)} dosya"
        )
        return {"mesaj": "Yedek başarıyla geri yüklendi", "dosya": None, "zaman": datetime.now().isoformat()}
