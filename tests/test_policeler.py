"""Tests for the policy repository and /policeler endpoints."""

from datetime import date, timedelta

import pytest

from sigorta_api import modeller, semalar
from sigorta_api.hatalar import BulunamadiHatasi, CakismaHatasi


def police_govdesi(musteri_id, **alanlar):
    govde = {
        "musteri_id": musteri_id,
        "plaka_no": "34ABC123",
        "baslangic_tarihi": "2025-01-01",
        "bitis_tarihi": "2025-12-31",
        "prim": 5000,
        "police_turu": "Kasko",
        "aciklama": "Toyota Corolla 2020 Model",
    }
    govde.update(alanlar)
    return govde


def dosya_yukle(client, ad="police.pdf", icerik=b"%PDF-1.4 test"):
    response = client.post("/upload", files={"file": (ad, icerik, "application/pdf")})
    assert response.status_code == 200
    return response.json()["data"]


def test_acik_numara_aynen_saklanir(police_ekle, musteri_ekle):
    musteri = musteri_ekle()

    police = police_ekle(musteri.id, police_no="ÖZEL-2025/42")

    assert police.police_no == "ÖZEL-2025/42"
    assert police.musteri_adi == "Ahmet Yılmaz"


def test_var_olan_acik_numara_cakisir(police_ekle, musteri_ekle):
    musteri = musteri_ekle()
    police_ekle(musteri.id, police_no="POL-2025-001")

    with pytest.raises(CakismaHatasi):
        police_ekle(musteri.id, police_no="POL-2025-001")


def test_olmayan_musteriye_police_eklenemez(police_ekle):
    with pytest.raises(BulunamadiHatasi):
        police_ekle(999)


def test_liste_baslangic_tarihine_gore_azalan(police_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    eski = police_ekle(musteri.id, police_no="P-1", baslangic=date(2024, 1, 1), bitis=date(2024, 12, 31))
    yeni = police_ekle(musteri.id, police_no="P-2", baslangic=date(2025, 3, 1), bitis=date(2026, 3, 1))
    orta = police_ekle(musteri.id, police_no="P-3", baslangic=date(2024, 6, 1), bitis=date(2025, 6, 1))

    policeler, total = police_deposu.list()

    assert total == 3
    assert [p.id for p in policeler] == [yeni.id, orta.id, eski.id]


def test_liste_filtreleri(police_deposu, musteri_ekle, police_ekle):
    ahmet = musteri_ekle("Ahmet Yılmaz")
    ayse = musteri_ekle("Ayşe Demir")
    police_ekle(ahmet.id, police_no="P-1", police_turu="Kasko", plaka_no="34ABC123")
    police_ekle(ayse.id, police_no="P-2", police_turu="Trafik", durum="Pasif", plaka_no="06XYZ789")
    police_ekle(ayse.id, police_no="P-3", police_turu="Konut", baslangic=date(2024, 2, 1), bitis=date(2025, 2, 1))

    assert [p.police_no for p in police_deposu.list(police_turu="Trafik")[0]] == ["P-2"]
    assert [p.police_no for p in police_deposu.list(durum="Pasif")[0]] == ["P-2"]
    assert [p.police_no for p in police_deposu.list(arama="34ABC")[0]] == ["P-1"]
    assert {p.police_no for p in police_deposu.list(arama="Ayşe")[0]} == {"P-2", "P-3"}
    assert [p.police_no for p in police_deposu.list(musteri_id=ahmet.id)[0]] == ["P-1"]
    assert [p.police_no for p in police_deposu.list(bitis_tarihi=date(2024, 12, 31))[0]] == ["P-3"]


def test_muhasebe_kaydi_olan_police_silinemez(police_deposu, musteri_ekle, police_ekle, kayit_ekle):
    musteri = musteri_ekle()
    police = police_ekle(musteri.id)
    kayit_ekle(musteri.id, 500, police_id=police.id)

    with pytest.raises(CakismaHatasi):
        police_deposu.delete(police.id)
    assert police_deposu.get(police.id).id == police.id


def test_police_silme_dosya_urllerini_dondurur(police_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police = police_ekle(musteri.id, dosyalar=[
        modeller.PoliceDosyasiCreate(ad="a.pdf", url="/uploads/1-a-a.pdf", mime_tipi="application/pdf", boyut=10)
    ])

    assert police_deposu.delete(police.id) == ["/uploads/1-a-a.pdf"]
    with pytest.raises(BulunamadiHatasi):
        police_deposu.get(police.id)


def test_guncelleme_dosya_listesini_degistirir(police_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police = police_ekle(musteri.id, police_no="POL-2025-001", dosyalar=[
        modeller.PoliceDosyasiCreate(ad="a.pdf", url="/uploads/1-a-a.pdf"),
        modeller.PoliceDosyasiCreate(ad="b.pdf", url="/uploads/2-b-b.pdf"),
    ])

    veri = modeller.PoliceUpdate(
        musteri_id=musteri.id,
        baslangic_tarihi=date(2025, 1, 1),
        bitis_tarihi=date(2025, 12, 31),
        prim=2000,
        police_turu="Kasko",
        dosyalar=[
            modeller.PoliceDosyasiCreate(ad="b.pdf", url="/uploads/2-b-b.pdf"),
            modeller.PoliceDosyasiCreate(ad="c.pdf", url="/uploads/3-c-c.pdf"),
        ],
    )
    guncel, kaldirilan = police_deposu.update(police.id, veri)

    assert kaldirilan == ["/uploads/1-a-a.pdf"]
    assert guncel.police_no == "POL-2025-001"
    assert guncel.prim == 2000
    assert sorted(d.url for d in guncel.dosyalar) == ["/uploads/2-b-b.pdf", "/uploads/3-c-c.pdf"]


def test_guncellemede_baska_policenin_numarasi_cakisir(police_deposu, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police_ekle(musteri.id, police_no="POL-2025-001")
    ikinci = police_ekle(musteri.id, police_no="POL-2025-002")

    veri = modeller.PoliceUpdate(
        police_no="POL-2025-001",
        musteri_id=musteri.id,
        baslangic_tarihi=date(2025, 1, 1),
        bitis_tarihi=date(2025, 12, 31),
        prim=100,
        police_turu="Trafik",
    )
    with pytest.raises(CakismaHatasi):
        police_deposu.update(ikinci.id, veri)


def _musteri_degistiren_guncelleme(musteri_id):
    return modeller.PoliceUpdate(
        musteri_id=musteri_id,
        baslangic_tarihi=date(2025, 1, 1),
        bitis_tarihi=date(2025, 12, 31),
        prim=1000,
        police_turu="Kasko",
    )


def test_muhasebe_kaydi_olan_policenin_musterisi_degistirilemez(db, police_deposu, musteri_ekle, police_ekle, kayit_ekle):
    ahmet = musteri_ekle("Ahmet Yılmaz")
    ayse = musteri_ekle("Ayşe Demir")
    police = police_ekle(ahmet.id)
    kayit = kayit_ekle(ahmet.id, 250, police_id=police.id)

    with pytest.raises(CakismaHatasi):
        police_deposu.update(police.id, _musteri_degistiren_guncelleme(ayse.id))

    db.expire_all()
    assert police_deposu.get(police.id).musteri_id == ahmet.id
    assert db.get(semalar.MuhasebeKaydi, kayit.id).musteri_id == ahmet.id


def test_kaydi_olmayan_policenin_musterisi_degistirilir(police_deposu, musteri_ekle, police_ekle):
    ahmet = musteri_ekle("Ahmet Yılmaz")
    ayse = musteri_ekle("Ayşe Demir", tc_kimlik_no="23456789012")
    police = police_ekle(ahmet.id)

    guncel, _ = police_deposu.update(police.id, _musteri_degistiren_guncelleme(ayse.id))

    assert guncel.musteri_id == ayse.id
    assert guncel.musteri_adi == "Ayşe Demir"
    assert guncel.tc_kimlik_no == "23456789012"


def test_arama_turkce_buyuk_harf(police_deposu, musteri_ekle, police_ekle):
    ahmet = musteri_ekle("Ahmet Yılmaz")
    ayse = musteri_ekle("Ayşe Demir")
    police_ekle(ahmet.id, police_no="P-1")
    police_ekle(ayse.id, police_no="P-2")

    assert [p.police_no for p in police_deposu.list(arama="YILMAZ")[0]] == ["P-1"]
    assert [p.police_no for p in police_deposu.list(arama="AYŞE")[0]] == ["P-2"]


# HTTP

def test_numarasiz_police_olusturma_api(client, musteri_ekle):
    musteri = musteri_ekle()
    yil = date.today().year

    ilk = client.post("/policeler/", json=police_govdesi(musteri.id))
    ikinci = client.post("/policeler/", json=police_govdesi(musteri.id, police_no=""))

    assert ilk.status_code == 201
    assert ilk.json()["data"]["police_no"] == f"POL-{yil}-001"
    assert ikinci.json()["data"]["police_no"] == f"POL-{yil}-002"
    assert ilk.json()["data"]["durum"] == "Aktif"
    assert ilk.json()["data"]["musteri_adi"] == "Ahmet Yılmaz"


def test_yinelenen_numara_400(client, musteri_ekle):
    musteri = musteri_ekle()
    client.post("/policeler/", json=police_govdesi(musteri.id, police_no="POL-2025-001"))

    response = client.post("/policeler/", json=police_govdesi(musteri.id, police_no="POL-2025-001"))

    assert response.status_code == 400
    assert response.json() == {"error": "Bu poliçe numarası zaten kullanılıyor"}


@pytest.mark.parametrize("alanlar", [
    {"bitis_tarihi": "2024-12-31"},
    {"prim": -1},
    {"police_turu": "Kasa"},
    {"durum": "Silindi"},
    {"baslangic_tarihi": "01.01.2025"},
])
def test_gecersiz_police_400(client, musteri_ekle, alanlar):
    musteri = musteri_ekle()

    response = client.post("/policeler/", json=police_govdesi(musteri.id, **alanlar))

    assert response.status_code == 400
    assert "error" in response.json()


def test_olmayan_musteri_404(client):
    response = client.post("/policeler/", json=police_govdesi(999))

    assert response.status_code == 404


def test_yeni_police_varsayilanlari(client, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    yil = date.today().year
    police_ekle(musteri.id, police_no=f"POL-{yil}-001")

    response = client.get("/policeler/yeni")

    assert response.status_code == 200
    veri = response.json()["data"]
    assert veri["police_no"] == f"POL-{yil}-002"
    assert veri["baslangic_tarihi"] == date.today().isoformat()
    assert veri["bitis_tarihi"] == (date.today() + timedelta(days=365)).isoformat()
    assert veri["durum"] == "Aktif"


def test_police_detayi_dosya_ve_muhasebe_ile(client, musteri_ekle):
    musteri = musteri_ekle()
    dosya = dosya_yukle(client)
    olusan = client.post("/policeler/", json=police_govdesi(musteri.id, dosyalar=[dosya])).json()["data"]
    client.post("/muhasebe/", json={
        "musteri_id": musteri.id, "police_id": olusan["id"], "islem_tarihi": "2025-01-02",
        "tutar": 5000, "tip": "Gelir"
    })

    response = client.get(f"/policeler/{olusan['id']}")

    assert response.status_code == 200
    veri = response.json()["data"]
    assert [d["url"] for d in veri["dosyalar"]] == [dosya["url"]]
    assert len(veri["muhasebe_kayitlari"]) == 1
    assert veri["muhasebe_kayitlari"][0]["musteri_adi"] == "Ahmet Yılmaz"


def test_police_listesi_api(client, musteri_ekle, police_ekle):
    musteri = musteri_ekle()
    police_ekle(musteri.id, police_no="P-1", police_turu="Kasko")
    police_ekle(musteri.id, police_no="P-2", police_turu="Trafik")

    response = client.get("/policeler/", params={"police_turu": "Trafik"})

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 1
    assert response.json()["data"]["items"][0]["police_no"] == "P-2"


def test_guncellemede_kaldirilan_dosya_diskten_silinir(client, musteri_ekle, upload_dir):
    musteri = musteri_ekle()
    eski = dosya_yukle(client, "eski.pdf")
    kalan = dosya_yukle(client, "kalan.pdf")
    police = client.post("/policeler/", json=police_govdesi(musteri.id, dosyalar=[eski, kalan])).json()["data"]

    response = client.put(f"/policeler/{police['id']}", json=police_govdesi(musteri.id, dosyalar=[kalan]))

    assert response.status_code == 200
    assert not (upload_dir / eski["url"].rsplit("/", 1)[1]).exists()
    assert (upload_dir / kalan["url"].rsplit("/", 1)[1]).exists()
    dosyalar = client.get(f"/policeler/{police['id']}/dosyalar").json()["data"]["items"]
    assert [d["url"] for d in dosyalar] == [kalan["url"]]


def test_dosyalar_verilmezse_dosya_listesi_korunur(client, musteri_ekle):
    musteri = musteri_ekle()
    dosya = dosya_yukle(client)
    police = client.post("/policeler/", json=police_govdesi(musteri.id, dosyalar=[dosya])).json()["data"]

    client.put(f"/policeler/{police['id']}", json=police_govdesi(musteri.id, prim=7000))

    dosyalar = client.get(f"/policeler/{police['id']}/dosyalar").json()["data"]["items"]
    assert len(dosyalar) == 1


def test_police_silme_api(client, musteri_ekle, upload_dir):
    musteri = musteri_ekle()
    dosya = dosya_yukle(client)
    police = client.post("/policeler/", json=police_govdesi(musteri.id, dosyalar=[dosya])).json()["data"]

    response = client.delete(f"/policeler/{police['id']}")

    assert response.status_code == 200
    assert client.get(f"/policeler/{police['id']}").status_code == 404
    assert not (upload_dir / dosya["url"].rsplit("/", 1)[1]).exists()


def test_muhasebe_kaydi_olan_police_silme_400(client, musteri_ekle):
    musteri = musteri_ekle()
    police = client.post("/policeler/", json=police_govdesi(musteri.id)).json()["data"]
    client.post("/muhasebe/", json={
        "musteri_id": musteri.id, "police_id": police["id"], "islem_tarihi": "2025-01-02",
        "tutar": 100, "tip": "Gelir"
    })

    response = client.delete(f"/policeler/{police['id']}")

    assert response.status_code == 400
    assert "muhasebe" in response.json()["error"]


def test_police_dosyasi_ekle_listele_sil(client, musteri_ekle, upload_dir):
    musteri = musteri_ekle()
    police = client.post("/policeler/", json=police_govdesi(musteri.id)).json()["data"]

    eklenen = client.post(
        f"/policeler/{police['id']}/dosyalar",
        files={"file": ("ruhsat.jpg", b"\xff\xd8\xff", "image/jpeg")}
    )
    assert eklenen.status_code == 201
    dosya = eklenen.json()["data"]
    assert dosya["ad"] == "ruhsat.jpg"
    assert dosya["boyut"] == 3
    assert dosya["mime_tipi"] == "image/jpeg"

    liste = client.get(f"/policeler/{police['id']}/dosyalar").json()["data"]
    assert liste["total"] == 1

    silinen = client.delete(f"/policeler/{police['id']}/dosyalar/{dosya['id']}")
    assert silinen.status_code == 200
    assert client.get(f"/policeler/{police['id']}/dosyalar").json()["data"]["total"] == 0
    assert list(upload_dir.iterdir()) == []


def test_olmayan_policeye_dosya_404(client):
    response = client.post("/policeler/999/dosyalar", files={"file": ("a.txt", b"abc", "text/plain")})

    assert response.status_code == 404
