import os
from dotenv import load_dotenv

# Projenin kök dizininde .env dosyasını yükleyin
load_dotenv()

# SQLAlchemy bağlantı adresi. Varsayılan olarak proje dizinindeki tek dosyalık SQLite veritabanı.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sigorta.db")

# Yüklenen poliçe dosyalarının diskte tutulduğu klasör ve herkese açık URL öneki
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join("public", "uploads"))
UPLOAD_URL_ONEKI = os.getenv("UPLOAD_URL_ONEKI", "/uploads")

# JSON yedeklerinin yazıldığı klasör
YEDEK_DIR = os.getenv("YEDEK_DIR", "backups")

# Tek bir yüklemenin en fazla boyutu (bayt)
MAX_DOSYA_BOYUTU = int(os.getenv("MAX_DOSYA_BOYUTU", str(10 * 1024 * 1024)))

# "Süresi yaklaşan poliçeler" raporunun varsayılan gün penceresi
SURESI_DOLACAK_GUN = int(os.getenv("SURESI_DOLACAK_GUN", "30"))

# Otomatik poliçe numarası üretilirken UNIQUE çakışmasında yapılacak en fazla deneme
POLICE_NO_DENEME_SAYISI = int(os.getenv("POLICE_NO_DENEME_SAYISI", "10"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
