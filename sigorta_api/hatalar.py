# sigorta_api/hatalar.py
"""
Depo ve servis katmanının fırlattığı hata sınıfları.

Her hata kendi HTTP durum kodunu taşır; api_ana.py içindeki hata yakalayıcı
bunları {"error": "..."} gövdesine çevirir.
"""
from fastapi import status


class SigortaHatasi(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, mesaj: str):
        super().__init__(mesaj)
        self.mesaj = mesaj


class DogrulamaHatasi(SigortaHatasi):
    """Eksik veya hatalı alan."""
    status_code = status.HTTP_400_BAD_REQUEST


class BulunamadiHatasi(SigortaHatasi):
    status_code = status.HTTP_404_NOT_FOUND


class CakismaHatasi(SigortaHatasi):
    """Benzersizlik ihlali ya da bağlı kayıtlar yüzünden engellenen silme."""
    status_code = status.HTTP_400_BAD_REQUEST


class DepolamaHatasi(SigortaHatasi):
    """Veritabanı veya dosya sistemi hatası. Kullanıcıya genel bir mesaj döner."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
