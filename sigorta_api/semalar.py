# sigorta_api/semalar.py
from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Enum
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from .veritabani import Base


# Enum tanımları
class PoliceTuruEnum(str, enum.Enum):
    KASKO = "Kasko"
    TRAFIK = "Trafik"
    KONUT = "Konut"
    SAGLIK = "Sağlık"
    HAYAT = "Hayat"
    DIGER = "Diğer"


class PoliceDurumEnum(str, enum.Enum):
    AKTIF = "Aktif"
    PASIF = "Pasif"
    IPTAL = "İptal"


class MuhasebeTipEnum(str, enum.Enum):
    GELIR = "Gelir"
    GIDER = "Gider"


def _enum_kolonu(enum_sinifi):
    # Veritabanında enum üye adı yerine değeri ("Kasko", "İptal" ...) saklanır.
    return Enum(
        enum_sinifi,
        values_callable=lambda e: [uye.value for uye in e],
        native_enum=False,
        validate_strings=True,
        length=20,
    )


# Tablo Modelleri
class Musteri(Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True, index=True)
    ad = Column(String, nullable=False, index=True)
    tc_kimlik_no = Column(String(11), nullable=True, index=True)
    email = Column(String, nullable=True)
    telefon = Column(String, nullable=True)
    adres = Column(Text, nullable=True)
    olusturma_tarihi = Column(DateTime, default=datetime.now)
    guncelleme_tarihi = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    policeler = relationship("Police", back_populates="musteri")
    muhasebe_kayitlari = relationship("MuhasebeKaydi", back_populates="musteri")


class Police(Base):
    __tablename__ = 'policies'

    id = Column(Integer, primary_key=True, index=True)
    # Benzersizlik veritabanı seviyesinde korunur; otomatik numara üretimi çakışmada yeniden dener.
    police_no = Column(String, nullable=False, unique=True, index=True)
    musteri_id = Column(Integer, ForeignKey('customers.id'), nullable=False, index=True)
    # Müşteri adı ve TC no kopyaları; müşteri güncellendiğinde yenilenir
    musteri_adi = Column(String, nullable=True)
    tc_kimlik_no = Column(String(11), nullable=True)
    plaka_no = Column(String, nullable=True, index=True)
    baslangic_tarihi = Column(Date, nullable=False)
    bitis_tarihi = Column(Date, nullable=False)
    prim = Column(Float, nullable=False, default=0.0)
    police_turu = Column(_enum_kolonu(PoliceTuruEnum), nullable=False)
    durum = Column(_enum_kolonu(PoliceDurumEnum), nullable=False, default=PoliceDurumEnum.AKTIF)
    aciklama = Column(Text, nullable=True)
    olusturma_tarihi = Column(DateTime, default=datetime.now)

    musteri = relationship("Musteri", back_populates="policeler")
    dosyalar = relationship(
        "PoliceDosyasi",
        back_populates="police",
        cascade="all, delete-orphan",
        order_by="PoliceDosyasi.id.desc()",
    )
    muhasebe_kayitlari = relationship("MuhasebeKaydi", back_populates="police")


class MuhasebeKaydi(Base):
    __tablename__ = 'accounting'

    id = Column(Integer, primary_key=True, index=True)
    musteri_id = Column(Integer, ForeignKey('customers.id'), nullable=False, index=True)
    # Eski poliçe bazlı kayıtlarla uyum için isteğe bağlı poliçe bağlantısı
    police_id = Column(Integer, ForeignKey('policies.id'), nullable=True, index=True)
    plaka_no = Column(String, nullable=True, index=True)
    islem_tarihi = Column(Date, nullable=False, index=True)
    tutar = Column(Float, nullable=False)
    tip = Column(_enum_kolonu(MuhasebeTipEnum), nullable=False)
    aciklama = Column(Text, nullable=True)
    olusturma_tarihi = Column(DateTime, default=datetime.now)

    musteri = relationship("Musteri", back_populates="muhasebe_kayitlari")
    police = relationship("Police", back_populates="muhasebe_kayitlari")

    # Liste yanıtlarında müşteri bilgisi kaydın yanında döner (MuhasebeRead)
    @property
    def musteri_adi(self):
        return self.musteri.ad if self.musteri else None

    @property
    def tc_kimlik_no(self):
        return self.musteri.tc_kimlik_no if self.musteri else None


class PoliceDosyasi(Base):
    __tablename__ = 'policy_files'

    id = Column(Integer, primary_key=True, index=True)
    police_id = Column(Integer, ForeignKey('policies.id'), nullable=False, index=True)
    ad = Column(String, nullable=False)
    url = Column(String, nullable=False)
    mime_tipi = Column(String, nullable=False, default="application/octet-stream")
    boyut = Column(Integer, nullable=False, default=0)
    olusturma_tarihi = Column(DateTime, default=datetime.now)

    police = relationship("Police", back_populates="dosyalar")
