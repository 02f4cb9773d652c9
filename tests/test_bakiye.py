"""Tests for customer balance and running balance calculations."""

from datetime import date

from sigorta_api import semalar
from sigorta_api.api_servisler import MusteriBakiyeService, guncel_bakiyeler, isaretli_tutar


def test_isaretli_tutar():
    assert isaretli_tutar(semalar.MuhasebeKaydi(tip=semalar.MuhasebeTipEnum.GELIR, tutar=250.0)) == 250.0
    assert isaretli_tutar(semalar.MuhasebeKaydi(tip=semalar.MuhasebeTipEnum.GIDER, tutar=250.0)) == -250.0


def test_guncel_bakiyeler_devreden_ile():
    kayitlar = [
        semalar.MuhasebeKaydi(tip=semalar.MuhasebeTipEnum.GELIR, tutar=100.0),
        semalar.MuhasebeKaydi(tip=semalar.MuhasebeTipEnum.GIDER, tutar=30.0),
    ]
    assert [b for _, b in guncel_bakiyeler(kayitlar, devreden_bakiye=50.0)] == [150.0, 120.0]


def test_kaydi_olmayan_musteri_sifir(db, musteri_ekle):
    musteri = musteri_ekle()
    servis = MusteriBakiyeService(db)

    assert servis.calculate_net_bakiye(musteri.id) == 0.0
    assert servis.calculate_gelir_gider(musteri.id) == (0.0, 0.0)
    assert servis.hesap_ekstresi(musteri.id) == (0.0, [])


def test_ahmet_ve_ayse_bakiyeleri(db, ahmet_ve_ayse):
    ahmet, ayse = ahmet_ve_ayse
    servis = MusteriBakiyeService(db)

    assert servis.calculate_gelir_gider(ahmet.id) == (1000.0, 500.0)
    assert servis.calculate_net_bakiye(ahmet.id) == 500.0
    assert servis.calculate_net_bakiye(ayse.id) == -3000.0


def test_tarih_araligi_bakiyesi(db, ahmet_ve_ayse):
    ahmet, _ = ahmet_ve_ayse
    servis = MusteriBakiyeService(db)

    assert servis.calculate_net_bakiye(ahmet.id, bitis_tarihi=date(2025, 1, 31)) == 1000.0
    assert servis.calculate_net_bakiye(ahmet.id, baslangic_tarihi=date(2025, 2, 1)) == -500.0


def test_son_guncel_bakiye_toplam_bakiyeye_esit(db, musteri_ekle, kayit_ekle):
    musteri = musteri_ekle()
    kayit_ekle(musteri.id, 300, "Gelir", date(2025, 3, 1))
    kayit_ekle(musteri.id, 1000, "Gelir", date(2025, 1, 1))
    kayit_ekle(musteri.id, 200, "Gider", date(2025, 2, 1))
    servis = MusteriBakiyeService(db)

    devreden, hareketler = servis.hesap_ekstresi(musteri.id)

    assert devreden == 0.0
    assert [k.islem_tarihi for k, _ in hareketler] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
    assert [b for _, b in hareketler] == [1000.0, 800.0, 1100.0]
    assert hareketler[-1][1] == servis.calculate_net_bakiye(musteri.id)


def test_ayni_gun_kayitlari_id_sirasiyla(db, musteri_ekle, kayit_ekle):
    musteri = musteri_ekle()
    ilk = kayit_ekle(musteri.id, 100, "Gider", date(2025, 5, 5))
    ikinci = kayit_ekle(musteri.id, 400, "Gelir", date(2025, 5, 5))

    _, hareketler = MusteriBakiyeService(db).hesap_ekstresi(musteri.id)

    assert [k.id for k, _ in hareketler] == [ilk.id, ikinci.id]
    assert [b for _, b in hareketler] == [-100.0, 300.0]


def test_baslangic_tarihi_devreden_bakiyeyi_ekler(db, ahmet_ve_ayse):
    ahmet, _ = ahmet_ve_ayse

    devreden, hareketler = MusteriBakiyeService(db).hesap_ekstresi(ahmet.id, baslangic_tarihi=date(2025, 2, 1))

    assert devreden == 1000.0
    assert len(hareketler) == 1
    assert hareketler[0][1] == 500.0


def test_toplu_net_bakiyeler(db, ahmet_ve_ayse, musteri_ekle):
    ahmet, ayse = ahmet_ve_ayse
    kayitsiz = musteri_ekle("Mehmet Kaya")
    servis = MusteriBakiyeService(db)

    bakiyeler = servis.toplu_net_bakiyeler()
    assert bakiyeler == {ahmet.id: 500.0, ayse.id: -3000.0}
    assert servis.toplu_net_bakiyeler([kayitsiz.id]) == {}
    assert servis.toplu_net_bakiyeler([]) == {}
