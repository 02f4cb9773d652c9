"""Tests for the customer repository and /musteriler endpoints."""

from datetime import date

import pytest

from sigorta_api import modeller, semalar
from sigorta_api.hatalar import BulunamadiHatasi, CakismaHatasi


def test_turkce_alfabetik_siralama(musteri_deposu, musteri_ekle):
    for ad in ["Zeynep Ak", "Çetin Er", "Cem Öz", "İbrahim Tan", "Işıl Kar", "Ahmet Yılmaz"]:
        musteri_ekle(ad)

    musteriler, total = musteri_deposu.list()

    assert total == 6
    assert [m.ad for m in musteriler] == ["Ahmet Yılmaz", "Cem Öz", "Çetin Er", "Işıl Kar", "İbrahim Tan", "Zeynep Ak"]


def test_arama_ve_sayfalama(musteri_deposu, musteri_ekle):
    musteri_ekle("Ahmet Yılmaz", tc_kimlik_no="12345678901")
    musteri_ekle("Ayşe Demir", email="ayse.demir@email.com")
    musteri_ekle("Mehmet Kaya", telefon="05553456789")

    assert [m.ad for m in musteri_deposu.list(arama="1234567")[0]] == ["Ahmet Yılmaz"]
    assert [m.ad for m in musteri_deposu.list(arama="demir@")[0]] == ["Ayşe Demir"]
    assert [m.ad for m in musteri_deposu.list(arama="0555345")[0]] == ["Mehmet Kaya"]

    sayfa, total = musteri_deposu.list(skip=1, limit=1)
    assert total == 3
    assert [m.ad for m in sayfa] == ["Ayşe Demir"]


def test_arama_turkce_buyuk_kucuk_harf(musteri_deposu, musteri_ekle):
    musteri_ekle("Ayşe Demir")
    musteri_ekle("Işıl Kar")
    musteri_ekle("İbrahim Tan")

    assert [m.ad for m in musteri_deposu.list(arama="AYŞE")[0]] == ["Ayşe Demir"]
    assert [m.ad for m in musteri_deposu.list(arama="IŞIL")[0]] == ["Işıl Kar"]
    assert [m.ad for m in musteri_deposu.list(arama="ibrahim")[0]] == ["İbrahim Tan"]


def test_olmayan_musteri(musteri_deposu):
    with pytest.raises(BulunamadiHatasi):
        musteri_deposu.get(999)


def test_guncelleme_policelerdeki_kopyalari_yeniler(db, musteri_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle("Ahmet Yılmaz", tc_kimlik_no="12345678901")
    police = police_ekle(musteri.id)

    musteri_deposu.update(musteri.id, modeller.MusteriUpdate(ad="Ahmet Yılmazer", tc_kimlik_no="10987654321"))

    db.expire_all()
    guncel = db.get(semalar.Police, police.id)
    assert guncel.musteri_adi == "Ahmet Yılmazer"
    assert guncel.tc_kimlik_no == "10987654321"


def test_policesi_olan_musteri_silinemez(musteri_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police_ekle(musteri.id)

    with pytest.raises(CakismaHatasi):
        musteri_deposu.delete(musteri.id)
    assert musteri_deposu.get(musteri.id).id == musteri.id


def test_muhasebe_kaydi_olan_musteri_silinemez(db, musteri_deposu, musteri_ekle, kayit_ekle):
    musteri = musteri_ekle()
    kayit_ekle(musteri.id, 3000, "Gider")

    with pytest.raises(CakismaHatasi):
        musteri_deposu.delete(musteri.id)

    assert musteri_deposu.get(musteri.id).id == musteri.id
    assert db.query(semalar.MuhasebeKaydi).count() == 1


def test_kaydi_ve_policesi_olmayan_musteri_silinir(musteri_deposu, musteri_ekle):
    musteri = musteri_ekle()

    musteri_deposu.delete(musteri.id)

    with pytest.raises(BulunamadiHatasi):
        musteri_deposu.get(musteri.id)


# HTTP

def test_musteri_olustur_api(client):
    response = client.post("/musteriler/", json={
        "ad": "Ahmet Yılmaz",
        "tc_kimlik_no": "12345678901",
        "email": "ahmet.yilmaz@email.com",
        "telefon": "05551234567",
        "adres": "Atatürk Cad. No:123 Kadıköy/İstanbul"
    })

    assert response.status_code == 201
    veri = response.json()["data"]
    assert veri["id"] > 0
    assert veri["ad"] == "Ahmet Yılmaz"
    assert veri["net_bakiye"] == 0.0


@pytest.mark.parametrize("govde", [
    {"ad": "Ahmet", "tc_kimlik_no": "12345"},
    {"ad": "Ahmet", "tc_kimlik_no": "1234567890a"},
    {"ad": "Ahmet", "email": "gecersiz"},
    {"ad": ""},
    {"tc_kimlik_no": "12345678901"},
    {"ad": "Ahmet", "bilinmeyen_alan": 1},
])
def test_gecersiz_musteri_400(client, govde):
    response = client.post("/musteriler/", json=govde)

    assert response.status_code == 400
    assert "error" in response.json()


def test_bos_opsiyonel_alanlar_none_olur(client):
    response = client.post("/musteriler/", json={"ad": "Ayşe Demir", "tc_kimlik_no": "", "email": ""})

    assert response.status_code == 201
    assert response.json()["data"]["tc_kimlik_no"] is None
    assert response.json()["data"]["email"] is None


def test_musteri_listesi_bakiye_ile(client, ahmet_ve_ayse):
    response = client.get("/musteriler/")

    assert response.status_code == 200
    veri = response.json()["data"]
    assert veri["total"] == 2
    bakiyeler = {m["ad"]: m["net_bakiye"] for m in veri["items"]}
    assert bakiyeler == {"Ahmet Yılmaz": 500.0, "Ayşe Demir": -3000.0}


def test_musteri_detayi_policeler_ile(client, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police_ekle(musteri.id, police_no="POL-2024-001", baslangic=date(2024, 1, 1), bitis=date(2024, 12, 31))
    police_ekle(musteri.id, police_no="POL-2025-001")

    response = client.get(f"/musteriler/{musteri.id}")

    assert response.status_code == 200
    assert [p["police_no"] for p in response.json()["data"]["policeler"]] == ["POL-2025-001", "POL-2024-001"]


def test_olmayan_musteri_404(client):
    response = client.get("/musteriler/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Müşteri bulunamadı"}


def test_musteri_guncelle_api(client, musteri_ekle):
    musteri = musteri_ekle()

    response = client.put(f"/musteriler/{musteri.id}", json={"ad": "Ahmet Yılmaz", "telefon": "05550000000"})

    assert response.status_code == 200
    assert response.json()["data"]["telefon"] == "05550000000"


def test_musteri_sil_api(client, musteri_ekle, police_ekle):
    policeli = musteri_ekle("Ahmet Yılmaz")
    police_ekle(policeli.id)
    policesiz = musteri_ekle("Ayşe Demir")

    engellenen = client.delete(f"/musteriler/{policeli.id}")
    assert engellenen.status_code == 400
    assert "poliçe" in engellenen.json()["error"]

    silinen = client.delete(f"/musteriler/{policesiz.id}")
    assert silinen.status_code == 200
    assert silinen.json()["data"]["id"] == policesiz.id
    assert client.get(f"/musteriler/{policesiz.id}").status_code == 404


def test_muhasebe_kaydi_olan_musteri_sil_api_400(client, musteri_ekle, kayit_ekle):
    musteri = musteri_ekle()
    kayit_ekle(musteri.id, 3000, "Gider")

    response = client.delete(f"/musteriler/{musteri.id}")

    assert response.status_code == 400
    assert "muhasebe" in response.json()["error"]
    assert client.get(f"/musteriler/{musteri.id}").status_code == 200


def test_bakiye_api(client, ahmet_ve_ayse):
    ahmet, _ = ahmet_ve_ayse

    response = client.get(f"/musteriler/{ahmet.id}/bakiye")

    assert response.status_code == 200
    veri = response.json()["data"]
    assert veri["toplam_gelir"] == 1000.0
    assert veri["toplam_gider"] == 500.0
    assert veri["net_bakiye"] == 500.0


def test_bakiye_ters_tarih_araligi_400(client, ahmet_ve_ayse):
    ahmet, _ = ahmet_ve_ayse

    response = client.get(f"/musteriler/{ahmet.id}/bakiye", params={
        "baslangic_tarihi": "2025-03-01", "bitis_tarihi": "2025-01-01"
    })

    assert response.status_code == 400


def test_hesap_ekstresi_api(client, ahmet_ve_ayse):
    ahmet, _ = ahmet_ve_ayse

    response = client.get(f"/musteriler/{ahmet.id}/hesap_ekstresi")

    assert response.status_code == 200
    veri = response.json()["data"]
    assert veri["devreden_bakiye"] == 0.0
    assert [s["guncel_bakiye"] for s in veri["items"]] == [1000.0, 500.0]
    assert veri["son_bakiye"] == 500.0
