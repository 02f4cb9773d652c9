from __future__ import annotations # Model referans sorunlarını çözmek için

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator, model_validator
from datetime import date, datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar
import enum

# Enumların string değerlerini kullanmak için
from .semalar import PoliceTuruEnum, PoliceDurumEnum, MuhasebeTipEnum

T = TypeVar("T")

TC_KIMLIK_DESENI = r"^[0-9]{11}$"


# Ortak Temel Modeller
class BaseOrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class IstekModeli(BaseModel):
    # Bilinmeyen alanlar reddedilir; metin alanlarının başındaki/sonundaki boşluklar atılır.
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class VeriYaniti(BaseModel, Generic[T]):
    """Tüm başarılı yanıtların zarfı: {"data": ...}"""
    data: T


class ListeYaniti(BaseModel, Generic[T]):
    items: List[T]
    total: int


class HataYaniti(BaseModel):
    error: str


class SilmeYaniti(BaseModel):
    id: int
    mesaj: Optional[str] = None


class MesajYaniti(BaseModel):
    mesaj: str


def _bos_metni_none_yap(deger: Any) -> Any:
    if isinstance(deger, str) and not deger.strip():
        return None
    return deger


# Müşteri Modelleri
class MusteriCreate(IstekModeli):
    ad: str = Field(..., min_length=1, description="Müşteri adı soyadı")
    tc_kimlik_no: Optional[str] = Field(None, pattern=TC_KIMLIK_DESENI, description="11 haneli TC kimlik numarası")
    email: Optional[EmailStr] = None
    telefon: Optional[str] = None
    adres: Optional[str] = None

    @field_validator("tc_kimlik_no", "email", "telefon", "adres", mode="before")
    @classmethod
    def _bos_alanlar(cls, deger):
        return _bos_metni_none_yap(deger)


class MusteriUpdate(MusteriCreate):
    # PUT tam kayıt güncellemesidir; alanlar oluşturma ile aynıdır.
    pass


class MusteriRead(BaseOrmModel):
    id: int
    ad: str
    tc_kimlik_no: Optional[str] = None
    email: Optional[str] = None
    telefon: Optional[str] = None
    adres: Optional[str] = None
    olusturma_tarihi: Optional[datetime] = None
    guncelleme_tarihi: Optional[datetime] = None
    net_bakiye: Optional[float] = Field(0.0, description="Müşterinin net bakiyesi (gelir - gider)")


class MusteriDetay(MusteriRead):
    policeler: List[PoliceRead] = []


class BakiyeYaniti(BaseModel):
    musteri_id: int
    toplam_gelir: float
    toplam_gider: float
    net_bakiye: float
    baslangic_tarihi: Optional[date] = None
    bitis_tarihi: Optional[date] = None


class HesapEkstresiSatiri(BaseModel):
    islem_id: int
    islem_tarihi: date
    tip: MuhasebeTipEnum
    tutar: float
    aciklama: Optional[str] = None
    plaka_no: Optional[str] = None
    police_id: Optional[int] = None
    guncel_bakiye: float


class HesapEkstresiYaniti(BaseModel):
    musteri_id: int
    musteri_adi: str
    devreden_bakiye: float
    son_bakiye: float
    items: List[HesapEkstresiSatiri]


# Poliçe Dosyası Modelleri
class PoliceDosyasiCreate(IstekModeli):
    ad: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    mime_tipi: str = "application/octet-stream"
    boyut: int = Field(0, ge=0)


class PoliceDosyasiRead(BaseOrmModel):
    id: int
    police_id: int
    ad: str
    url: str
    mime_tipi: str
    boyut: int
    olusturma_tarihi: Optional[datetime] = None


class YuklenenDosya(BaseModel):
    ad: str
    boyut: int
    mime_tipi: str
    url: str


# Poliçe Modelleri
class PoliceCreate(IstekModeli):
    police_no: Optional[str] = Field(None, description="Boş bırakılırsa POL-<yıl>-<sıra> biçiminde üretilir")
    musteri_id: int
    plaka_no: Optional[str] = None
    baslangic_tarihi: date
    bitis_tarihi: date
    prim: float = Field(..., ge=0)
    police_turu: PoliceTuruEnum
    durum: PoliceDurumEnum = PoliceDurumEnum.AKTIF
    aciklama: Optional[str] = None
    dosyalar: Optional[List[PoliceDosyasiCreate]] = None

    @field_validator("police_no", "plaka_no", mode="before")
    @classmethod
    def _bos_alanlar(cls, deger):
        return _bos_metni_none_yap(deger)

    @model_validator(mode="after")
    def _tarih_araligi(self):
        if self.bitis_tarihi < self.baslangic_tarihi:
            raise ValueError("Bitiş tarihi başlangıç tarihinden önce olamaz")
        return self


class PoliceUpdate(PoliceCreate):
    # police_no boşsa mevcut numara korunur; dosyalar verilirse dosya listesi tamamen değiştirilir.
    pass


class PoliceRead(BaseOrmModel):
    id: int
    police_no: str
    musteri_id: int
    musteri_adi: Optional[str] = None
    tc_kimlik_no: Optional[str] = None
    plaka_no: Optional[str] = None
    baslangic_tarihi: date
    bitis_tarihi: date
    prim: float
    police_turu: PoliceTuruEnum
    durum: PoliceDurumEnum
    aciklama: Optional[str] = None
    olusturma_tarihi: Optional[datetime] = None


class PoliceDetay(PoliceRead):
    dosyalar: List[PoliceDosyasiRead] = []
    muhasebe_kayitlari: List[MuhasebeRead] = []


class YeniPoliceVarsayilanlari(BaseModel):
    police_no: str
    musteri_id: Optional[int] = None
    baslangic_tarihi: date
    bitis_tarihi: date
    prim: float = 0.0
    police_turu: Optional[PoliceTuruEnum] = None
    durum: PoliceDurumEnum = PoliceDurumEnum.AKTIF
    aciklama: str = ""


# Muhasebe Modelleri
class MuhasebeCreate(IstekModeli):
    musteri_id: int
    police_id: Optional[int] = None
    plaka_no: Optional[str] = None
    islem_tarihi: date
    tutar: float = Field(..., ge=0)
    tip: MuhasebeTipEnum
    aciklama: Optional[str] = None

    @field_validator("plaka_no", mode="before")
    @classmethod
    def _bos_plaka(cls, deger):
        return _bos_metni_none_yap(deger)


class MuhasebeUpdate(MuhasebeCreate):
    pass


class MuhasebeRead(BaseOrmModel):
    id: int
    musteri_id: int
    police_id: Optional[int] = None
    plaka_no: Optional[str] = None
    islem_tarihi: date
    tutar: float
    tip: MuhasebeTipEnum
    aciklama: Optional[str] = None
    olusturma_tarihi: Optional[datetime] = None
    musteri_adi: Optional[str] = None
    tc_kimlik_no: Optional[str] = None


# Rapor Modelleri
class RaporTuruEnum(str, enum.Enum):
    AYLIK = "monthly"
    YILLIK = "yearly"
    POLICE_TURU = "policy-type"
    MUSTERI = "customer"
    ODENMEMIS = "unpaid-payments"
    AKTIF_POLICELER = "active-policies"
    SURESI_DOLACAK = "expiring-policies"
    MUSTERI_POLICELERI = "customer-policies"
    MUSTERI_MUHASEBE = "customer-accounting"


class RaporParametreleri(BaseModel):
    baslangic_tarihi: Optional[date] = None
    bitis_tarihi: Optional[date] = None
    musteri_id: Optional[int] = None
    gun: Optional[int] = Field(None, ge=1)


class DonemRaporSatiri(BaseModel):
    donem: str
    gelir: float
    gider: float
    net_tutar: float
    islem_sayisi: int
    musteri_sayisi: int


class PoliceTuruRaporSatiri(BaseModel):
    police_turu: PoliceTuruEnum
    police_sayisi: int
    aktif_police_sayisi: int
    toplam_prim: float


class MusteriRaporSatiri(BaseModel):
    musteri_id: int
    musteri_adi: str
    gelir: float
    gider: float
    net_tutar: float
    islem_sayisi: int
    police_sayisi: int


class OdenmemisRaporSatiri(BaseModel):
    musteri_id: int
    musteri_adi: str
    tc_kimlik_no: Optional[str] = None
    telefon: Optional[str] = None
    tutar: float
    son_islem_tarihi: date
    gecikme_gun: int


class AktifPoliceRaporSatiri(BaseModel):
    id: int
    police_no: str
    musteri_adi: Optional[str] = None
    baslangic_tarihi: date
    bitis_tarihi: date
    prim: float
    police_turu: PoliceTuruEnum
    durum: PoliceDurumEnum


class SuresiDolacakRaporSatiri(BaseModel):
    id: int
    police_no: str
    musteri_adi: Optional[str] = None
    bitis_tarihi: date
    kalan_gun: int
    prim: float
    police_turu: PoliceTuruEnum


class MusteriPoliceRaporSatiri(BaseModel):
    musteri_id: int
    musteri_adi: str
    aktif_police_sayisi: int
    toplam_prim: float
    son_police_tarihi: Optional[date] = None


class MusteriMuhasebeRaporSatiri(BaseModel):
    musteri_id: int
    musteri_adi: str
    tc_kimlik_no: Optional[str] = None
    islem_id: int
    islem_tarihi: date
    tutar: float
    tip: MuhasebeTipEnum
    aciklama: Optional[str] = None
    plaka_no: Optional[str] = None
    police_no: Optional[str] = None
    guncel_bakiye: float


class RaporOzeti(BaseModel):
    # Her rapor türü yalnızca kendisiyle ilgili alanları doldurur; boş alanlar yanıtta yer almaz.
    toplam_musteri: Optional[int] = None
    toplam_police: Optional[int] = None
    toplam_prim: Optional[float] = None
    toplam_gelir: Optional[float] = None
    toplam_gider: Optional[float] = None
    net_tutar: Optional[float] = None
    islem_sayisi: Optional[int] = None
    odenmemis_tutar: Optional[float] = None
    devreden_bakiye: Optional[float] = None


class RaporYaniti(BaseModel):
    tur: RaporTuruEnum
    satirlar: List[Dict[str, Any]]
    ozet: Optional[Dict[str, Any]] = None


# Pano (Dashboard) Modeli
class PanoYaniti(BaseModel):
    son_policeler: List[PoliceRead]
    aktif_police_sayisi: int
    suresi_dolacak_police_sayisi: int
    son_islemler: List[MuhasebeRead]
    toplam_gelir: float
    toplam_gider: float
    aylik_gelir: float
    aylik_gider: float


# Yedekleme Modelleri
class YedekVerisi(BaseModel):
    # Geri yükleme gövdesi: bilinmeyen üst düzey alanlar reddedilir
    model_config = ConfigDict(extra="forbid")

    musteriler: List[MusteriRead] = []
    policeler: List[PoliceRead] = []
    muhasebe: List[MuhasebeRead] = []
    police_dosyalari: List[PoliceDosyasiRead] = []
    zaman: Optional[str] = None


class YedekYaniti(BaseModel):
    mesaj: str
    dosya: Optional[str] = None
    zaman: str


MusteriDetay.model_rebuild()
PoliceDetay.model_rebuild()
