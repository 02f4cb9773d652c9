# sigorta_api/yardimcilar.py
from datetime import date
from typing import Optional

from .hatalar import DogrulamaHatasi

# q, w, x Türk alfabesinde yok; komşu harflerin arasına yerleştirildi.
TURKCE_ALFABE = "abcçdefgğhıijklmnoöpqrsştuüvwxyz"
_HARF_SIRASI = {harf: sira for sira, harf in enumerate(TURKCE_ALFABE)}


def turkce_kucuk_harf(text):
    """
    Türkçe büyük/küçük harf kurallarına göre küçük harfe çevirir.
    Örn: 'IŞIK' -> 'ışık', 'İSTANBUL' -> 'istanbul'
    """
    if not isinstance(text, str):
        return text
    return text.replace("I", "ı").replace("İ", "i").lower()


def turkce_siralama_anahtari(text):
    """
    Metni Türk alfabesi sırasına göre karşılaştırmak için bir anahtara dönüştürür.
    Harf dışı ASCII karakterler (boşluk, rakam) harflerden önce gelir.
    """
    if not isinstance(text, str):
        return ()
    anahtar = []
    for karakter in turkce_kucuk_harf(text):
        sira = _HARF_SIRASI.get(karakter)
        if sira is not None:
            anahtar.append(1000 + sira)
        elif ord(karakter) < 128:
            anahtar.append(ord(karakter))
        else:
            anahtar.append(2000 + ord(karakter))
    return tuple(anahtar)


def tarih_araligini_dogrula(baslangic_tarihi: Optional[date], bitis_tarihi: Optional[date]) -> None:
    if baslangic_tarihi and bitis_tarihi and baslangic_tarihi > bitis_tarihi:
        raise DogrulamaHatasi("Başlangıç tarihi bitiş tarihinden sonra olamaz")
