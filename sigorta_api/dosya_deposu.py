# sigorta_api/dosya_deposu.py
import logging
import os
import secrets
import time
from typing import Dict, List

from fastapi import Request

from .hatalar import BulunamadiHatasi, DepolamaHatasi, DogrulamaHatasi

logger = logging.getLogger(__name__)


class DosyaDeposu:
    """
    Yüklenen poliçe dosyalarını yerel diskte saklar.
    Dosyalar <epoch-ms>-<rastgele>-<ad> adıyla upload_dir altına yazılır ve
    url_oneki + "/" + saklanan ad adresinden sunulur.
    """

    def __init__(self, upload_dir: str, url_oneki: str = "/uploads", max_boyut: int = 10 * 1024 * 1024):
        self.upload_dir = upload_dir
        self.url_oneki = url_oneki.rstrip("/")
        self.max_boyut = max_boyut

    @staticmethod
    def _guvenli_ad(ad: str) -> str:
        # Tarayıcıdan gelen "C:\\klasor\\dosya.pdf" gibi yollar da kırpılır
        return os.path.basename((ad or "").replace("\\", "/")).strip()

    def kaydet(self, ad: str, icerik: bytes, mime_tipi: str = None) -> Dict:
        temiz_ad = self._guvenli_ad(ad)
        if not temiz_ad:
            raise DogrulamaHatasi("Dosya bulunamadı")
        if len(icerik) > self.max_boyut:
            raise DogrulamaHatasi(f"Dosya boyutu en fazla {self.max_boyut} bayt olabilir")

        saklanan_ad = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{temiz_ad}"
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with open(os.path.join(self.upload_dir, saklanan_ad), "wb") as f:
                f.write(icerik)
        except OSError as e:
            logger.error(f"Dosya kaydedilirken hata: {e}", exc_info=True)
            raise DepolamaHatasi("Dosya yüklenirken bir hata oluştu") from e

        logger.info(f"Dosya kaydedildi: {saklanan_ad} ({len(icerik)} bayt)")
        return {
            "ad": temiz_ad,
            "boyut": len(icerik),
            "mime_tipi": mime_tipi or "application/octet-stream",
            "url": f"{self.url_oneki}/{saklanan_ad}",
        }

    def _yol(self, url: str) -> str:
        onek = self.url_oneki + "/"
        if not url or not url.startswith(onek):
            raise DogrulamaHatasi("Geçersiz dosya URL'i")
        saklanan_ad = url[len(onek):]
        if not saklanan_ad or saklanan_ad != os.path.basename(saklanan_ad) or saklanan_ad in (".", ".."):
            raise DogrulamaHatasi("Geçersiz dosya URL'i")
        return os.path.join(self.upload_dir, saklanan_ad)

    def sil(self, url: str, eksikse_hata: bool = True) -> None:
        yol = self._yol(url)
        try:
            os.remove(yol)
        except FileNotFoundError:
            if eksikse_hata:
                raise BulunamadiHatasi("Dosya bulunamadı")
            logger.warning(f"Silinecek dosya diskte yok: {url}")
            return
        except OSError as e:
            logger.error(f"Dosya silinirken hata: {e}", exc_info=True)
            raise DepolamaHatasi("Dosya silinirken bir hata oluştu") from e
        logger.info(f"Dosya silindi: {url}")

    def toplu_sil(self, urller: List[str]) -> None:
        """Veritabanı işlemi tamamlandıktan sonra artık kullanılmayan dosyaları temizler."""
        for url in urller:
            try:
                self.sil(url, eksikse_hata=False)
            except DogrulamaHatasi:
                logger.warning(f"Yükleme klasörü dışındaki dosya atlandı: {url}")
            except DepolamaHatasi:
                # Kayıt zaten silindi; diskte kalan dosya işlemi geri almaz.
                logger.warning(f"Dosya temizlenemedi: {url}")


# Dosya deposu uygulama başlarken app.state üzerine yerleştirilir (bkz. api_ana.create_app).
def get_dosya_deposu(request: Request) -> DosyaDeposu:
    return request.app.state.dosya_deposu
